"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
"""

from datetime import datetime
from typing import Protocol, runtime_checkable

from adapters.models import PaymentDetail, PaymentInfo, TokenTxInfo, TradeInfo


@runtime_checkable
class IWalletRpcClient(Protocol):
    """지갑/노드 RPC 클라이언트 인터페이스

    Bitcoin Core(기본 계층) + Omni Core(토큰 계층) 조회 기능.
    금액은 반드시 Decimal 타입 사용.
    응답을 모델로 변환하지 못하면 RpcDecodeError (WalletRpcError 하위) 발생.
    """

    # -------------------------------------------------------------------------
    # 기능 확인
    # -------------------------------------------------------------------------

    async def supports_token_layer(self) -> bool:
        """토큰 계층(Omni) 조회 지원 여부

        Returns:
            서버가 Omni 전용 메서드를 지원하면 True

        Raises:
            RpcTransportError: 서버에 연결할 수 없는 경우
        """
        ...

    # -------------------------------------------------------------------------
    # 기본 계층 (Bitcoin Core)
    # -------------------------------------------------------------------------

    async def list_payments(self, label_filter: str, limit: int) -> list[PaymentInfo]:
        """지갑 결제 내역 조회 (listtransactions)

        Args:
            label_filter: 라벨 필터 ("*"이면 전체)
            limit: 최대 조회 건수

        Returns:
            결제 내역 목록 (출력 단위)
        """
        ...

    async def get_payment_detail(self, txid: str) -> PaymentDetail:
        """지갑 트랜잭션 상세의 주소 목록 (gettransaction)"""
        ...

    async def get_raw_transaction_time(self, txid: str) -> datetime:
        """임의 트랜잭션의 시간 (getrawtransaction, txindex 필요)"""
        ...

    # -------------------------------------------------------------------------
    # 토큰 계층 (Omni Core)
    # -------------------------------------------------------------------------

    async def list_token_transactions(
        self,
        address_filter: str,
        limit: int,
    ) -> list[TokenTxInfo]:
        """지갑 관련 Omni 트랜잭션 조회 (omni_listtransactions)"""
        ...

    async def get_trade_history(self, address: str, limit: int) -> list[TradeInfo]:
        """주소의 MetaDEX 거래 내역 (omni_gettradehistoryforaddress)"""
        ...

    async def close(self) -> None:
        """연결 종료"""
        ...
