"""
TransactionRecord 정의

txid 단위로 누적되는 조회 결과.
- PaymentRecord: 지갑 결제 내역 (Omni 정보가 붙으면 토큰 결제로 취급)
- MatchedTrade: MetaDEX 매칭 (매칭 상대의 txid로 저장)
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Union

from adapters.models import PaymentInfo, TokenTxInfo, TradeInfo, TradeMatch


class RecordKind(str, Enum):
    """TransactionRecord 변형(variant) 태그"""

    PLAIN_PAYMENT = "PLAIN_PAYMENT"
    TOKEN_PAYMENT = "TOKEN_PAYMENT"
    MATCHED_TRADE = "MATCHED_TRADE"


@dataclass
class PaymentRecord:
    """지갑 결제 레코드

    같은 txid의 listtransactions 항목(출력 단위)을 모두 모은 것.
    시간은 첫 번째 항목 기준.

    Attributes:
        txid: 트랜잭션 ID
        time: 트랜잭션 시간 (첫 항목)
        payments: 결제 항목 목록 (도착 순서)
        addresses: gettransaction 상세에서 얻은 주소 목록
        token_info: Omni 트랜잭션 정보 (없으면 기본 계층 결제)
    """

    txid: str
    time: datetime
    payments: list[PaymentInfo]
    addresses: list[str] = field(default_factory=list)
    token_info: TokenTxInfo | None = None

    @classmethod
    def from_payment(cls, payment: PaymentInfo) -> "PaymentRecord":
        """첫 결제 항목으로 레코드 생성"""
        return cls(txid=payment.txid, time=payment.time, payments=[payment])

    @property
    def kind(self) -> RecordKind:
        if self.token_info is not None:
            return RecordKind.TOKEN_PAYMENT
        return RecordKind.PLAIN_PAYMENT

    def copy(self) -> "PaymentRecord":
        """목록 필드까지 복사한 사본 (스냅샷용)"""
        return replace(self, payments=list(self.payments), addresses=list(self.addresses))


@dataclass(frozen=True)
class MatchedTrade:
    """MetaDEX 매칭 레코드

    txid는 매칭 상대 트랜잭션 ID (지갑 소유 txid와 다를 수 있음).
    """

    txid: str
    time: datetime
    trade: TradeInfo
    match: TradeMatch

    @property
    def kind(self) -> RecordKind:
        return RecordKind.MATCHED_TRADE

    @property
    def amount_sold(self) -> Decimal:
        return self.match.amount_sold

    @property
    def amount_received(self) -> Decimal:
        return self.match.amount_received

    @property
    def property_id_sold(self) -> int:
        return self.trade.property_id_for_sale

    @property
    def property_id_received(self) -> int:
        return self.trade.property_id_desired

    @property
    def counterparty_address(self) -> str:
        return self.match.address

    def copy(self) -> "MatchedTrade":
        return self


TransactionRecord = Union[PaymentRecord, MatchedTrade]
