"""
Bitcoin Core / Omni Core JSON-RPC 클라이언트

HTTP Basic 인증, 전송 실패 재시도, Decimal 금액 디코딩.
IWalletRpcClient Protocol 준수.
"""

import asyncio
import contextlib
import json
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterator

import httpx

from adapters.models import PaymentDetail, PaymentInfo, TokenTxInfo, TradeInfo
from adapters.omnicore.errors import (
    RpcDecodeError,
    RpcResponseError,
    RpcTransportError,
    WalletRpcError,
)
from adapters.omnicore.models import (
    parse_payment,
    parse_payment_detail,
    parse_raw_transaction_time,
    parse_token_tx,
    parse_trade,
)
from core.constants import Defaults

logger = logging.getLogger(__name__)

# 응답 모델 변환 중 발생할 수 있는 예외 (필드 누락, 잘못된 숫자/타입)
DECODE_ERRORS = (KeyError, ValueError, TypeError, AttributeError, ArithmeticError)


@contextlib.contextmanager
def _decoding(method: str) -> Iterator[None]:
    """모델 변환 예외 → RpcDecodeError"""
    try:
        yield
    except DECODE_ERRORS as e:
        raise RpcDecodeError(method, f"{type(e).__name__}: {e}") from e


class OmniCoreRpcClient:
    """Bitcoin Core / Omni Core JSON-RPC 클라이언트

    IWalletRpcClient Protocol 구현.
    모든 금액은 Decimal 타입으로 반환.

    Args:
        url: JSON-RPC 엔드포인트 (멀티 지갑이면 /wallet/<name> 포함)
        username: rpcuser
        password: rpcpassword
        timeout: 요청 타임아웃 (초)
        max_retries: 최대 시도 횟수 (전송 실패 시)
        retry_backoff: 재시도 대기 간격 (초, 시도마다 선형 증가)
    """

    def __init__(
        self,
        url: str,
        username: str | None = None,
        password: str | None = None,
        timeout: float = Defaults.RPC_TIMEOUT_SEC,
        max_retries: int = Defaults.RPC_MAX_RETRIES,
        retry_backoff: float = 1.0,
    ):
        self.url = url
        self.username = username
        self.password = password
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_backoff = retry_backoff

        self._client: httpx.AsyncClient | None = None
        self._request_id: int = 0

    async def _get_client(self) -> httpx.AsyncClient:
        """HTTP 클라이언트 가져오기 (lazy initialization)"""
        if self._client is None or self._client.is_closed:
            auth = None
            if self.username:
                auth = httpx.BasicAuth(self.username, self.password or "")
            self._client = httpx.AsyncClient(timeout=self.timeout, auth=auth)
        return self._client

    async def close(self) -> None:
        """HTTP 클라이언트 종료"""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "OmniCoreRpcClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @staticmethod
    def _decode_body(response: Any) -> dict[str, Any] | None:
        """응답 본문 JSON 디코딩 (float은 Decimal로), JSON이 아니면 None"""
        try:
            body = json.loads(response.text, parse_float=Decimal)
        except (ValueError, TypeError):
            return None
        return body if isinstance(body, dict) else None

    async def call(self, method: str, *params: Any) -> Any:
        """JSON-RPC 메서드 호출

        Args:
            method: RPC 메서드 이름
            *params: 위치 인자

        Returns:
            응답의 result 값

        Raises:
            RpcResponseError: 서버가 error 객체를 반환한 경우 (재시도 없음)
            RpcTransportError: 연결 실패/타임아웃이 재시도 후에도 계속되거나 HTTP 에러인 경우
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "1.0",
            "id": self._request_id,
            "method": method,
            "params": list(params),
        }
        client = await self._get_client()

        # 재시도 로직
        for attempt in range(self.max_retries):
            try:
                response = await client.post(self.url, json=payload)

            except httpx.TimeoutException as e:
                logger.warning(
                    "RPC 요청 타임아웃",
                    extra={"method": method, "attempt": attempt + 1},
                )
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_backoff * (attempt + 1))
                    continue
                raise RpcTransportError(method, f"timeout: {e}") from e

            except httpx.RequestError as e:
                logger.warning(
                    "RPC 요청 실패",
                    extra={"method": method, "error": str(e), "attempt": attempt + 1},
                )
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_backoff * (attempt + 1))
                    continue
                raise RpcTransportError(method, str(e)) from e

            body = self._decode_body(response)

            # bitcoind는 RPC 에러를 HTTP 404/500 + JSON 본문으로 반환
            if body is not None and body.get("error"):
                error = body["error"]
                raise RpcResponseError(
                    method,
                    int(error.get("code", -1)),
                    str(error.get("message", "")),
                )

            if response.status_code == 401:
                raise RpcTransportError(method, "인증 실패 (HTTP 401)")

            if response.status_code >= 500 and body is None:
                logger.warning(
                    "RPC 서버 에러, 재시도",
                    extra={"method": method, "status": response.status_code, "attempt": attempt + 1},
                )
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_backoff * (attempt + 1))
                    continue

            if response.status_code >= 400:
                raise RpcTransportError(
                    method,
                    f"HTTP {response.status_code}: {str(response.text)[:200]}",
                )

            if body is None:
                raise RpcTransportError(method, "JSON-RPC 응답이 아닙니다")

            return body.get("result")

        # 모든 재시도 실패
        raise RpcTransportError(method, "All retries failed")

    # -------------------------------------------------------------------------
    # 기능 확인
    # -------------------------------------------------------------------------

    async def supports_token_layer(self) -> bool:
        """Omni Core 여부 확인 (omni_getinfo)

        RPC 에러(메서드 없음 등)는 미지원으로 간주.
        전송 실패는 그대로 전파.
        """
        try:
            info = await self.call("omni_getinfo")
        except RpcResponseError as e:
            if e.is_method_not_found:
                logger.info("Omni 계층 미지원 서버 (omni_getinfo 없음)")
            else:
                logger.warning(
                    "omni_getinfo 에러 응답, 미지원으로 처리",
                    extra={"code": e.code, "error": e.message},
                )
            return False

        logger.debug(
            "Omni Core 감지",
            extra={"omnicoreversion": info.get("omnicoreversion") if isinstance(info, dict) else None},
        )
        return True

    # -------------------------------------------------------------------------
    # 기본 계층
    # -------------------------------------------------------------------------

    async def list_payments(
        self,
        label_filter: str = Defaults.LABEL_FILTER,
        limit: int = Defaults.LIST_LIMIT,
    ) -> list[PaymentInfo]:
        """지갑 결제 내역 조회 (watch-only 포함)"""
        result = await self.call("listtransactions", label_filter, limit, 0, True)
        with _decoding("listtransactions"):
            return [parse_payment(item) for item in result or ()]

    async def get_payment_detail(self, txid: str) -> PaymentDetail:
        """지갑 트랜잭션 상세의 주소 목록"""
        result = await self.call("gettransaction", txid, True)
        with _decoding("gettransaction"):
            return parse_payment_detail(txid, result or {})

    async def get_raw_transaction_time(self, txid: str) -> datetime:
        """트랜잭션 시간 조회

        Raises:
            WalletRpcError: 응답에 시간 정보가 없는 경우 (미확정)
        """
        result = await self.call("getrawtransaction", txid, True)
        with _decoding("getrawtransaction"):
            tx_time = parse_raw_transaction_time(result or {})
        if tx_time is None:
            raise WalletRpcError(f"트랜잭션 시간 정보가 없습니다: {txid}")
        return tx_time

    # -------------------------------------------------------------------------
    # 토큰 계층
    # -------------------------------------------------------------------------

    async def list_token_transactions(
        self,
        address_filter: str = Defaults.ADDRESS_FILTER,
        limit: int = Defaults.LIST_LIMIT,
    ) -> list[TokenTxInfo]:
        """지갑 관련 Omni 트랜잭션 조회"""
        result = await self.call("omni_listtransactions", address_filter, limit)
        with _decoding("omni_listtransactions"):
            return [parse_token_tx(item) for item in result or ()]

    async def get_trade_history(
        self,
        address: str,
        limit: int = Defaults.LIST_LIMIT,
    ) -> list[TradeInfo]:
        """주소의 MetaDEX 거래 내역"""
        result = await self.call("omni_gettradehistoryforaddress", address, limit)
        with _decoding("omni_gettradehistoryforaddress"):
            return [parse_trade(item) for item in result or ()]
