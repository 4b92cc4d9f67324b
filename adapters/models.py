"""
어댑터 공통 데이터 모델

지갑/노드 RPC 응답을 표준화한 도메인 모델.
모든 금액은 Decimal 타입 사용.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from core.types import Ecosystem, PaymentCategory, ecosystem_of


@dataclass(frozen=True)
class PaymentInfo:
    """지갑 결제 내역 (listtransactions 항목 1건)

    하나의 트랜잭션이 여러 출력(vout)을 가지면 같은 txid로 여러 건이 반환됨.
    보내기(send)는 amount, fee 모두 음수.

    Attributes:
        txid: 트랜잭션 ID
        time: 트랜잭션 시간 (UTC)
        confirmations: 컨펌 수
        category: send / receive / generate ...
        amount: 금액 (BTC)
        fee: 수수료 (send만 존재, 음수)
        address: 출력 주소 (멀티시그 등 주소가 없으면 None)
        label: 주소 라벨
        comment: 지갑 코멘트
        vout: 출력 인덱스
        abandoned: 포기된 트랜잭션 여부
        wallet_conflicts: 충돌 트랜잭션 ID 목록
    """

    txid: str
    time: datetime
    confirmations: int
    category: str
    amount: Decimal
    fee: Decimal | None = None
    address: str | None = None
    label: str = ""
    comment: str | None = None
    vout: int = 0
    abandoned: bool = False
    wallet_conflicts: tuple[str, ...] = ()

    @property
    def is_send(self) -> bool:
        """보내기 여부"""
        return self.category == PaymentCategory.SEND.value


@dataclass(frozen=True)
class TokenTxInfo:
    """Omni 트랜잭션 정보 (omni_listtransactions 항목 1건)

    Attributes:
        txid: 트랜잭션 ID
        confirmations: 컨펌 수
        type_int: 타입 코드 (0 = Simple Send, 25 = MetaDEX trade ...)
        type_name: 타입 이름 (예: "Simple Send")
        sending_address: 보낸 주소
        reference_address: 참조(수신) 주소
        property_id: 대상 property ID (trade면 판매 property)
        property_id_desired: 희망 property ID (trade 전용)
        amount: 토큰 수량
        valid: 프로토콜상 유효 여부
        ecosystem: main / test
    """

    txid: str
    confirmations: int
    type_int: int
    type_name: str
    sending_address: str
    reference_address: str | None = None
    property_id: int | None = None
    property_id_desired: int | None = None
    amount: Decimal | None = None
    valid: bool = True
    ecosystem: Ecosystem = Ecosystem.MAIN

    @property
    def is_test_ecosystem(self) -> bool:
        """테스트 생태계 소속 여부"""
        return self.ecosystem == Ecosystem.TEST


@dataclass(frozen=True)
class TradeMatch:
    """MetaDEX 매칭 1건

    Attributes:
        txid: 매칭 상대 트랜잭션 ID
        address: 매칭 상대 주소
        amount_sold: 판매 수량 (판매 property 단위)
        amount_received: 수령 수량 (희망 property 단위)
    """

    txid: str
    address: str
    amount_sold: Decimal
    amount_received: Decimal


@dataclass(frozen=True)
class TradeInfo:
    """MetaDEX 주문과 그 매칭 목록

    Attributes:
        txid: 주문 트랜잭션 ID
        valid: 유효 여부
        property_id_for_sale: 판매 property ID
        property_id_desired: 희망 property ID
        matches: 매칭 목록
    """

    txid: str
    valid: bool
    property_id_for_sale: int
    property_id_desired: int
    matches: tuple[TradeMatch, ...] = field(default_factory=tuple)

    @property
    def ecosystem(self) -> Ecosystem:
        """판매 property 기준 생태계"""
        return ecosystem_of(self.property_id_for_sale)


@dataclass(frozen=True)
class PaymentDetail:
    """gettransaction 상세에서 추출한 주소 목록"""

    txid: str
    addresses: tuple[str, ...] = ()
