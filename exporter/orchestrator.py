"""
Fetch Orchestrator

지갑 RPC 조회를 단계별로 실행하여 TransactionStore에 누적하고
시간순 스냅샷을 반환.

단계:
1. 기능 확인 (Omni 계층 지원 여부)
2. 결제 내역 조회 → add_payment
3. 결제별 주소 조회 (fan-out) → add_addresses
4. Omni 트랜잭션 조회 → add_token_info
5. MetaDEX 거래 주소 추출
6. 주소별 거래 내역 조회 (fan-out)
7. 매칭별 시간 조회 (fan-out)
8. 매칭 레코드 병합 → add_match
9. 합류 후 스냅샷

3번 분기와 4~7번 분기는 동시에 실행.
1, 2, 4번 실패는 치명적, 3/6/7번은 항목 단위로 실패를 흡수.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable

from adapters.interfaces import IWalletRpcClient
from adapters.models import TokenTxInfo, TradeInfo, TradeMatch
from adapters.omnicore.errors import RpcResponseError, RpcTransportError, WalletRpcError
from core.constants import Defaults
from core.types import Ecosystem, TokenTxType
from exporter.records import MatchedTrade, TransactionRecord
from exporter.store import TransactionStore

logger = logging.getLogger(__name__)


@dataclass
class FetchStats:
    """조회 통계 (로그/진단용)"""

    payments: int = 0
    token_transactions: int = 0
    skipped_token_transactions: int = 0
    trading_addresses: int = 0
    matches: int = 0
    address_failures: int = 0
    trade_history_failures: int = 0
    match_time_failures: int = 0


class FetchOrchestrator:
    """지갑 조회 오케스트레이터

    Args:
        client: 지갑 RPC 클라이언트 (IWalletRpcClient)
        min_confirmations: 최소 컨펌 수
        max_concurrency: 동시 RPC 호출 최대 개수
        call_timeout: RPC 호출당 제한 시간 (초)
        list_limit: 목록 조회 최대 건수
    """

    def __init__(
        self,
        client: IWalletRpcClient,
        min_confirmations: int = Defaults.MIN_CONFIRMATIONS,
        max_concurrency: int = Defaults.MAX_CONCURRENCY,
        call_timeout: float = Defaults.CALL_TIMEOUT_SEC,
        list_limit: int = Defaults.LIST_LIMIT,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency는 1 이상이어야 합니다")

        self.client = client
        self.min_confirmations = min_confirmations
        self.max_concurrency = max_concurrency
        self.call_timeout = call_timeout
        self.list_limit = list_limit

        self.stats = FetchStats()
        self._semaphore: asyncio.Semaphore | None = None

    async def fetch(self) -> list[TransactionRecord]:
        """전체 조회 실행

        Returns:
            시간순 TransactionRecord 목록

        Raises:
            WalletRpcError: 기능 확인 전송 실패, 결제 내역/Omni 트랜잭션 조회 실패
        """
        self.stats = FetchStats()
        self._semaphore = asyncio.Semaphore(self.max_concurrency)
        store = TransactionStore()

        token_layer = await self._check_token_layer()
        await self._fetch_payments(store)

        branches: list[asyncio.Task[Any]] = [
            asyncio.create_task(self._fetch_addresses(store), name="fetch-addresses"),
        ]
        if token_layer:
            branches.append(
                asyncio.create_task(self._fetch_token_branch(store), name="fetch-token-layer")
            )
        results = await self._join(branches)

        # 주소 조회가 끝난 뒤 병합 (주소 조회 중 결제 레코드가 매칭으로 대체되지 않도록)
        matches: list[MatchedTrade] = results[1] if token_layer else []
        for matched in matches:
            await store.add_match(matched)

        records = await store.snapshot()
        logger.info(
            "지갑 조회 완료",
            extra={
                "records": len(records),
                "payments": self.stats.payments,
                "token_transactions": self.stats.token_transactions,
                "matches": self.stats.matches,
                "address_failures": self.stats.address_failures,
                "trade_history_failures": self.stats.trade_history_failures,
                "match_time_failures": self.stats.match_time_failures,
            },
        )
        return records

    # -------------------------------------------------------------------------
    # 공통
    # -------------------------------------------------------------------------

    async def _call(self, func: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        """동시성 제한 + 호출별 타임아웃 적용

        Raises:
            RpcTransportError: 제한 시간 초과
        """
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_concurrency)

        async with self._semaphore:
            try:
                return await asyncio.wait_for(func(*args), timeout=self.call_timeout)
            except asyncio.TimeoutError as e:
                method = getattr(func, "__name__", "call")
                raise RpcTransportError(method, f"{self.call_timeout}초 내 응답 없음") from e

    @staticmethod
    async def _join(tasks: list[asyncio.Task[Any]]) -> list[Any]:
        """모든 분기 완료 대기

        한 분기가 치명적으로 실패하면 나머지 분기를 취소하고 예외 전파.
        """
        try:
            return await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    def _is_confirmed(self, confirmations: int) -> bool:
        return confirmations >= self.min_confirmations

    # -------------------------------------------------------------------------
    # 1. 기능 확인
    # -------------------------------------------------------------------------

    async def _check_token_layer(self) -> bool:
        """Omni 계층 지원 여부

        RPC 에러 응답은 미지원으로 처리, 전송 실패는 전파.
        """
        try:
            supported = bool(await self._call(self.client.supports_token_layer))
        except RpcResponseError as e:
            logger.warning(
                "Omni 계층 확인 실패, 미지원으로 처리",
                extra={"code": e.code, "error": e.message},
            )
            return False

        if not supported:
            logger.info("Omni 계층 미지원, 기본 계층 결제만 조회")
        return supported

    # -------------------------------------------------------------------------
    # 2. 결제 내역
    # -------------------------------------------------------------------------

    async def _fetch_payments(self, store: TransactionStore) -> None:
        payments = await self._call(
            self.client.list_payments, Defaults.LABEL_FILTER, self.list_limit
        )
        confirmed = [p for p in payments if self._is_confirmed(p.confirmations)]
        for payment in confirmed:
            await store.add_payment(payment)

        self.stats.payments = len(confirmed)
        logger.info(
            "결제 내역 조회 완료",
            extra={"total": len(payments), "confirmed": len(confirmed), "txids": len(store)},
        )

    # -------------------------------------------------------------------------
    # 3. 주소 조회 (fan-out)
    # -------------------------------------------------------------------------

    async def _fetch_addresses(self, store: TransactionStore) -> None:
        txids = store.keys()
        await asyncio.gather(*(self._fetch_addresses_for(store, txid) for txid in txids))

    async def _fetch_addresses_for(self, store: TransactionStore, txid: str) -> None:
        try:
            detail = await self._call(self.client.get_payment_detail, txid)
        except WalletRpcError as e:
            self.stats.address_failures += 1
            logger.warning(
                "주소 조회 실패, 주소 없이 진행",
                extra={"txid": txid, "error": str(e)},
            )
            return

        await store.add_addresses(txid, list(detail.addresses))

    # -------------------------------------------------------------------------
    # 4~7. Omni 계층
    # -------------------------------------------------------------------------

    async def _fetch_token_branch(self, store: TransactionStore) -> list[MatchedTrade]:
        token_txs = await self._fetch_token_transactions(store)
        addresses = self.trading_addresses(token_txs)
        self.stats.trading_addresses = len(addresses)

        trades = await self._fetch_trade_histories(addresses)
        matches = await self._fetch_match_times(trades)
        self.stats.matches = len(matches)
        return matches

    async def _fetch_token_transactions(self, store: TransactionStore) -> list[TokenTxInfo]:
        token_txs = await self._call(
            self.client.list_token_transactions, Defaults.ADDRESS_FILTER, self.list_limit
        )
        confirmed = [t for t in token_txs if self._is_confirmed(t.confirmations)]

        for token_tx in confirmed:
            # 결제 조회 이후 컨펌된 트랜잭션은 결제 레코드가 없음
            if token_tx.txid not in store:
                self.stats.skipped_token_transactions += 1
                logger.warning(
                    "결제 내역이 없는 Omni 트랜잭션, 건너뜀",
                    extra={"txid": token_tx.txid, "type_int": token_tx.type_int},
                )
                continue
            await store.add_token_info(token_tx)
            self.stats.token_transactions += 1

        logger.info(
            "Omni 트랜잭션 조회 완료",
            extra={"total": len(token_txs), "attached": self.stats.token_transactions},
        )
        return confirmed

    @staticmethod
    def trading_addresses(token_txs: Iterable[TokenTxInfo]) -> list[str]:
        """MetaDEX trade 트랜잭션의 보낸 주소 (중복 제거, 순서 유지)"""
        return list(dict.fromkeys(
            t.sending_address
            for t in token_txs
            if t.type_int == TokenTxType.METADEX_TRADE and t.sending_address
        ))

    async def _fetch_trade_histories(self, addresses: list[str]) -> list[TradeInfo]:
        results = await asyncio.gather(*(self._fetch_trades_for(a) for a in addresses))
        return [trade for trades in results for trade in trades]

    async def _fetch_trades_for(self, address: str) -> list[TradeInfo]:
        try:
            trades = await self._call(self.client.get_trade_history, address, self.list_limit)
        except WalletRpcError as e:
            self.stats.trade_history_failures += 1
            logger.warning(
                "거래 내역 조회 실패, 빈 결과로 처리",
                extra={"address": address, "error": str(e)},
            )
            return []

        return [t for t in trades if t.valid and t.ecosystem != Ecosystem.TEST]

    async def _fetch_match_times(self, trades: list[TradeInfo]) -> list[MatchedTrade]:
        pairs = [(trade, match) for trade in trades for match in trade.matches]
        results = await asyncio.gather(*(self._fetch_match_time(t, m) for t, m in pairs))
        return [matched for matched in results if matched is not None]

    async def _fetch_match_time(self, trade: TradeInfo, match: TradeMatch) -> MatchedTrade | None:
        try:
            tx_time = await self._call(self.client.get_raw_transaction_time, match.txid)
        except WalletRpcError as e:
            self.stats.match_time_failures += 1
            logger.warning(
                "매칭 시간 조회 실패, 매칭 제외",
                extra={"txid": match.txid, "error": str(e)},
            )
            return None

        return MatchedTrade(txid=match.txid, time=tx_time, trade=trade, match=match)
