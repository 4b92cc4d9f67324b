"""
Mock 지갑 RPC 클라이언트

테스트용 메모리 내 지갑/노드 클라이언트.
IWalletRpcClient Protocol 준수.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from adapters.models import PaymentDetail, PaymentInfo, TokenTxInfo, TradeInfo
from adapters.omnicore.errors import RpcResponseError, RpcTransportError
from core.constants import Defaults


# 토큰 계층 전용 메서드 (기능 게이트 검증용)
TOKEN_LAYER_METHODS: frozenset[str] = frozenset({
    "list_token_transactions",
    "get_trade_history",
})


@dataclass
class MockWalletState:
    """Mock 상태 (메모리 내 저장)"""

    # Omni Core 여부
    token_layer: bool = True

    # listtransactions 결과
    payments: list[PaymentInfo] = field(default_factory=list)

    # omni_listtransactions 결과
    token_transactions: list[TokenTxInfo] = field(default_factory=list)

    # txid -> 주소 목록
    payment_details: dict[str, PaymentDetail] = field(default_factory=dict)

    # 주소 -> MetaDEX 거래 내역
    trade_history: dict[str, list[TradeInfo]] = field(default_factory=dict)

    # txid -> 트랜잭션 시간
    transaction_times: dict[str, datetime] = field(default_factory=dict)

    # 실패 시뮬레이션: (method, key) -> 예외 (key None이면 해당 메서드 전체)
    failures: dict[tuple[str, str | None], Exception] = field(default_factory=dict)

    # 호출 기록: (method, args)
    calls: list[tuple[str, tuple[Any, ...]]] = field(default_factory=list)

    # 응답 지연 (동시성 테스트용)
    latency: float = 0.0

    # 동시 실행 추적
    in_flight: int = 0
    max_in_flight: int = 0


class MockWalletRpcClient:
    """Mock 지갑 RPC 클라이언트

    IWalletRpcClient Protocol 구현.
    메모리 내 상태 관리로 테스트 시나리오 지원.

    사용 예시:
    ```python
    client = MockWalletRpcClient()
    client.add_payment(payment)
    client.set_failure("get_trade_history", key="1Abc...")

    records = await FetchOrchestrator(client).fetch()
    ```
    """

    def __init__(self, state: MockWalletState | None = None):
        self.state = state or MockWalletState()
        self.closed = False

    # -------------------------------------------------------------------------
    # 상태 조작 메서드 (테스트용)
    # -------------------------------------------------------------------------

    def add_payment(self, payment: PaymentInfo) -> None:
        """listtransactions 항목 추가"""
        self.state.payments.append(payment)

    def add_token_transaction(self, token_tx: TokenTxInfo) -> None:
        """omni_listtransactions 항목 추가"""
        self.state.token_transactions.append(token_tx)

    def set_payment_addresses(self, txid: str, addresses: list[str]) -> None:
        """gettransaction 주소 목록 설정"""
        self.state.payment_details[txid] = PaymentDetail(txid=txid, addresses=tuple(addresses))

    def add_trade(self, address: str, trade: TradeInfo) -> None:
        """주소의 MetaDEX 거래 내역 추가"""
        self.state.trade_history.setdefault(address, []).append(trade)

    def set_transaction_time(self, txid: str, time: datetime) -> None:
        """getrawtransaction 시간 설정"""
        self.state.transaction_times[txid] = time

    def set_failure(
        self,
        method: str,
        key: str | None = None,
        error: Exception | None = None,
    ) -> None:
        """메서드 호출 실패 설정

        Args:
            method: 메서드 이름 (예: "get_trade_history")
            key: 특정 txid/주소만 실패 (None이면 전체)
            error: 발생시킬 예외 (기본: RpcTransportError)
        """
        self.state.failures[(method, key)] = error or RpcTransportError(method, "mock failure")

    def calls_to(self, method: str) -> list[tuple[Any, ...]]:
        """특정 메서드의 호출 인자 목록"""
        return [args for name, args in self.state.calls if name == method]

    @property
    def token_layer_calls(self) -> list[str]:
        """토큰 계층 전용 메서드 호출 기록"""
        return [name for name, _ in self.state.calls if name in TOKEN_LAYER_METHODS]

    async def _enter(self, method: str, *args: Any) -> None:
        """호출 기록, 지연, 실패 시뮬레이션"""
        self.state.calls.append((method, args))
        self.state.in_flight += 1
        self.state.max_in_flight = max(self.state.max_in_flight, self.state.in_flight)
        try:
            if self.state.latency:
                await asyncio.sleep(self.state.latency)
        finally:
            self.state.in_flight -= 1

        key = str(args[0]) if args else None
        error = self.state.failures.get((method, key)) or self.state.failures.get((method, None))
        if error is not None:
            raise error

    # -------------------------------------------------------------------------
    # IWalletRpcClient 구현
    # -------------------------------------------------------------------------

    async def supports_token_layer(self) -> bool:
        await self._enter("supports_token_layer")
        return self.state.token_layer

    async def list_payments(
        self,
        label_filter: str = Defaults.LABEL_FILTER,
        limit: int = Defaults.LIST_LIMIT,
    ) -> list[PaymentInfo]:
        await self._enter("list_payments", label_filter, limit)
        return list(self.state.payments[:limit])

    async def get_payment_detail(self, txid: str) -> PaymentDetail:
        await self._enter("get_payment_detail", txid)
        return self.state.payment_details.get(txid, PaymentDetail(txid=txid))

    async def get_raw_transaction_time(self, txid: str) -> datetime:
        await self._enter("get_raw_transaction_time", txid)
        if txid not in self.state.transaction_times:
            raise RpcResponseError(
                "getrawtransaction",
                RpcResponseError.INVALID_ADDRESS_OR_KEY,
                "No such mempool or blockchain transaction",
            )
        return self.state.transaction_times[txid]

    async def list_token_transactions(
        self,
        address_filter: str = Defaults.ADDRESS_FILTER,
        limit: int = Defaults.LIST_LIMIT,
    ) -> list[TokenTxInfo]:
        await self._enter("list_token_transactions", address_filter, limit)
        return list(self.state.token_transactions[:limit])

    async def get_trade_history(
        self,
        address: str,
        limit: int = Defaults.LIST_LIMIT,
    ) -> list[TradeInfo]:
        await self._enter("get_trade_history", address, limit)
        return list(self.state.trade_history.get(address, [])[:limit])

    async def close(self) -> None:
        self.closed = True
