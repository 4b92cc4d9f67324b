"""
트랜잭션 분류기

TransactionRecord → LedgerTransaction 변환 (상태 없음).

분류 규칙:
- MatchedTrade: 지갑 계정 내 통화 교환 (판매 -, 수령 +)
- 토큰 정보 있음 + 무효/테스트 생태계: 수수료만
- 토큰 정보 있음 + 결제 1건: 토큰 수신/송신
- 토큰 정보 있음 + 결제 여러 건: 토큰 송신 (타입별) + 복합 수수료
- 기본 계층 결제 1건: BTC 입출금
- 기본 계층 결제 여러 건: 자기 송금 (수수료만)
"""

import logging
from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import Callable, Iterable, Mapping

from adapters.models import PaymentInfo, TokenTxInfo
from core.constants import ExodusAddresses
from core.ledger.types import LedgerTransaction, Split
from core.types import PaymentCategory, TokenTxType, property_id_to_code
from exporter.account_map import AddressAccountMap
from exporter.records import MatchedTrade, PaymentRecord, RecordKind, TransactionRecord

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

DEFAULT_TICKER_OVERRIDES: dict[str, str] = {
    "OMNI_SPT#57": "SAFEAPP",
}

# 설명 문구
DESC_SELF_SEND = "Self send (consolidating tx)"
DESC_TOKEN_SEND = "omni send"
DESC_INVALID_TOKEN = "Invalid or Test Ecosystem Omni Transaction (fees only)"
DESC_MATCHED_TRADE = "Omni Dex Matching Transaction"


class UnsupportedRecordError(Exception):
    """분류 규칙이 없는 레코드"""

    def __init__(self, record: object):
        self.record = record
        super().__init__(f"분류할 수 없는 레코드 타입: {type(record).__name__}")


@dataclass(frozen=True)
class ClassifierConfig:
    """분류기 설정 (계정 이름, 통화 코드)

    YAML의 accounts / ticker_overrides 섹션으로 변경 가능.
    """

    wallet_account: str = "Assets:Crypto:OmniCore"
    default_income: str = "Income:Misc"
    default_expense: str = "Expense:Misc"
    dust_income: str = "Income:OmniDust"
    token_creation_income: str = "Income:TokenCreation"
    transaction_fees: str = "Expense:TransactionFees"
    exodus_fees: str = "Expense:ExodusFees"
    reference_fees: str = "Expense:ReferenceFees"
    multisig_fees: str = "Expense:MultiSigFees"
    base_currency: str = "BTC"
    exodus_address: str = ExodusAddresses.MAINNET
    ticker_overrides: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_TICKER_OVERRIDES)
    )

    @classmethod
    def account_fields(cls) -> frozenset[str]:
        """YAML accounts 섹션에서 변경 가능한 필드"""
        excluded = {"exodus_address", "ticker_overrides"}
        return frozenset(f.name for f in fields(cls) if f.name not in excluded)

    @classmethod
    def from_overrides(
        cls,
        accounts: Mapping[str, str] | None = None,
        ticker_overrides: Mapping[str, str] | None = None,
        exodus_address: str = ExodusAddresses.MAINNET,
    ) -> "ClassifierConfig":
        """기본값 위에 설정 파일 값을 덮어쓴 설정

        Raises:
            ValueError: 알 수 없는 계정 키가 있는 경우
        """
        accounts = dict(accounts or {})
        unknown = set(accounts) - cls.account_fields()
        if unknown:
            raise ValueError(f"알 수 없는 accounts 키: {sorted(unknown)}")

        overrides = dict(DEFAULT_TICKER_OVERRIDES)
        overrides.update(ticker_overrides or {})
        return cls(**accounts, exodus_address=exodus_address, ticker_overrides=overrides)


# -----------------------------------------------------------------------------
# 코멘트
# -----------------------------------------------------------------------------


def payment_comment(payment: PaymentInfo) -> str:
    """결제 항목 코멘트

    예: "addr: 1Abc... (Salary : march) 1.00000000 vout: 0 (receive)"
    """
    note = f" : {payment.comment}" if payment.comment else ""
    return (
        f"addr: {payment.address or 'n/a'} ({payment.label}{note}) "
        f"{format(payment.amount, 'f')} vout: {payment.vout} ({payment.category})"
    )


def token_comment(token: TokenTxInfo) -> str:
    """Omni 트랜잭션 코멘트"""
    return (
        f"omni tx type: {token.type_name}({token.type_int}), "
        f"send-addr: {token.sending_address}, "
        f"ref-addr: {token.reference_address or 'n/a'}"
    )


def _first_fee(payments: Iterable[PaymentInfo]) -> Decimal:
    return next((p.fee for p in payments if p.fee is not None), ZERO)


class TransactionClassifier:
    """TransactionRecord → LedgerTransaction 분류기

    Args:
        account_map: 주소 → 계정 매핑 (수신 상대 계정 결정)
        config: 계정 이름 / 통화 설정
    """

    def __init__(
        self,
        account_map: AddressAccountMap | None = None,
        config: ClassifierConfig | None = None,
    ):
        self.account_map = account_map or AddressAccountMap()
        self.config = config or ClassifierConfig()

        self._handlers: dict[RecordKind, Callable[..., LedgerTransaction]] = {
            RecordKind.MATCHED_TRADE: self._classify_matched_trade,
            RecordKind.TOKEN_PAYMENT: self._classify_token_payment,
            RecordKind.PLAIN_PAYMENT: self._classify_plain_payment,
        }
        self._token_send_handlers: dict[TokenTxType, Callable[[TokenTxInfo], list[Split]]] = {
            TokenTxType.SIMPLE_SEND: self._simple_send_splits,
            TokenTxType.METADEX_TRADE: self._metadex_trade_splits,
            TokenTxType.CREATE_PROPERTY_FIXED: self._create_property_splits,
        }

    def classify_all(self, records: Iterable[TransactionRecord]) -> list[LedgerTransaction]:
        """레코드 목록 분류 (순서 유지)"""
        return [self.classify(record) for record in records]

    def classify(self, record: TransactionRecord) -> LedgerTransaction:
        """레코드 1건 분류

        Raises:
            UnsupportedRecordError: 알 수 없는 레코드 타입
        """
        handler = self._handlers.get(getattr(record, "kind", None))
        if handler is None:
            raise UnsupportedRecordError(record)
        return handler(record)

    def ticker(self, property_id: int | None) -> str:
        """property ID → 출력용 통화 코드 (None이면 기본 통화)"""
        if property_id is None:
            return self.config.base_currency
        code = property_id_to_code(property_id)
        return self.config.ticker_overrides.get(code, code)

    def _wallet(self, amount: Decimal, currency: str | None = None) -> Split:
        return Split(self.config.wallet_account, amount, currency or self.config.base_currency)

    def _split(self, account: str, amount: Decimal, currency: str | None = None) -> Split:
        return Split(account, amount, currency or self.config.base_currency)

    # -------------------------------------------------------------------------
    # MetaDEX 매칭
    # -------------------------------------------------------------------------

    def _classify_matched_trade(self, record: MatchedTrade) -> LedgerTransaction:
        splits = (
            self._wallet(-record.amount_sold, self.ticker(record.property_id_sold)),
            self._wallet(record.amount_received, self.ticker(record.property_id_received)),
        )
        comments = (
            record.txid,
            f"omni dex trade match: matching-addr: {record.counterparty_address}",
        )
        return LedgerTransaction(
            txid=record.txid,
            time=record.time,
            description=DESC_MATCHED_TRADE,
            comments=comments,
            splits=splits,
        )

    # -------------------------------------------------------------------------
    # 기본 계층 결제
    # -------------------------------------------------------------------------

    def _classify_plain_payment(self, record: PaymentRecord) -> LedgerTransaction:
        for payment in record.payments:
            if payment.abandoned:
                logger.warning("포기된(abandoned) 트랜잭션", extra={"txid": record.txid})
            if payment.wallet_conflicts:
                logger.warning(
                    "충돌 트랜잭션이 있는 결제",
                    extra={"txid": record.txid, "conflicts": list(payment.wallet_conflicts)},
                )

        if len(record.payments) == 1:
            description, splits = self._single_payment_splits(record.payments[0])
        else:
            description, splits = DESC_SELF_SEND, self._self_send_splits(record.payments)

        comments = [record.txid]
        comments.extend(payment_comment(p) for p in record.payments)
        comments.extend(record.addresses)
        return LedgerTransaction(
            txid=record.txid,
            time=record.time,
            description=description,
            comments=tuple(comments),
            splits=tuple(splits),
        )

    def _single_payment_splits(self, payment: PaymentInfo) -> tuple[str, list[Split]]:
        cfg = self.config
        fee = payment.fee or ZERO

        if payment.is_send:
            # 보내기는 amount/fee 모두 음수
            splits = [
                self._wallet(payment.amount + fee),
                self._split(cfg.default_expense, -payment.amount),
            ]
            if fee != 0:
                splits.append(self._split(cfg.transaction_fees, -fee))
        else:
            income = self.account_map.get(payment.address, cfg.default_income)
            splits = [
                self._wallet(payment.amount),
                self._split(income, -payment.amount),
            ]
        return payment.label, splits

    def _self_send_splits(self, payments: list[PaymentInfo]) -> list[Split]:
        fee = _first_fee(payments)
        splits = [self._wallet(fee)]
        if fee != 0:
            splits.append(self._split(self.config.transaction_fees, -fee))
        return splits

    # -------------------------------------------------------------------------
    # Omni 결제
    # -------------------------------------------------------------------------

    def _classify_token_payment(self, record: PaymentRecord) -> LedgerTransaction:
        token = record.token_info
        if token is None:
            return self._classify_plain_payment(record)

        if not token.valid or token.is_test_ecosystem:
            description = DESC_INVALID_TOKEN
            splits = self._composite_fee_splits(record.payments, token)
        elif len(record.payments) == 1:
            description = record.payments[0].label
            splits = self._received_token_splits(record.payments[0], token)
        else:
            description = DESC_TOKEN_SEND
            splits = self._sent_token_splits(record.payments, token)

        comments = [record.txid]
        comments.extend(payment_comment(p) for p in record.payments)
        comments.append(token_comment(token))
        return LedgerTransaction(
            txid=record.txid,
            time=record.time,
            description=description,
            comments=tuple(comments),
            splits=tuple(splits),
        )

    def _received_token_splits(self, payment: PaymentInfo, token: TokenTxInfo) -> list[Split]:
        """출력 1건짜리 Omni 트랜잭션 (주로 수신)

        수신이면 함께 받은 BTC(dust)를 별도 수입으로 기록.
        """
        cfg = self.config
        if payment.is_send:
            logger.warning(
                "출력 1건짜리 Omni 송신 (예상 밖)",
                extra={"txid": payment.txid, "type_int": token.type_int},
            )
        if token.type_int != TokenTxType.SIMPLE_SEND:
            logger.warning(
                "Simple Send가 아닌 Omni 수신",
                extra={"txid": payment.txid, "type_int": token.type_int, "type": token.type_name},
            )

        amount = token.amount if token.amount is not None else ZERO
        currency = self.ticker(token.property_id)
        wallet_amount = -amount if payment.is_send else amount

        splits = [self._wallet(wallet_amount, currency)]
        if payment.is_send:
            counter_account = cfg.default_expense
        else:
            counter_account = self.account_map.get(payment.address, cfg.default_income)
            splits.append(self._wallet(payment.amount))
            splits.append(self._split(cfg.dust_income, -payment.amount))
        splits.append(self._split(counter_account, -wallet_amount, currency))

        fee = payment.fee or ZERO
        if payment.is_send and fee != 0:
            splits.append(self._wallet(fee))
            splits.append(self._split(cfg.transaction_fees, -fee))
        return splits

    def _sent_token_splits(self, payments: list[PaymentInfo], token: TokenTxInfo) -> list[Split]:
        """출력 여러 건짜리 Omni 트랜잭션 (지갑에서 송신)"""
        tx_type = TokenTxType.from_code(token.type_int)
        handler = self._token_send_handlers.get(tx_type) if tx_type is not None else None
        if handler is None:
            message = (
                "알 수 없는 Omni 트랜잭션 타입 코드, 수수료만 기록"
                if tx_type is None
                else "지원하지 않는 Omni 트랜잭션 타입, 수수료만 기록"
            )
            logger.warning(
                message,
                extra={"txid": token.txid, "type_int": token.type_int, "type": token.type_name},
            )
            splits: list[Split] = []
        else:
            splits = handler(token)

        splits.extend(self._composite_fee_splits(payments, token))
        return splits

    def _simple_send_splits(self, token: TokenTxInfo) -> list[Split]:
        amount = token.amount if token.amount is not None else ZERO
        currency = self.ticker(token.property_id)
        return [
            self._wallet(-amount, currency),
            self._split(self.config.default_expense, amount, currency),
        ]

    def _metadex_trade_splits(self, token: TokenTxInfo) -> list[Split]:
        # 체결분은 MatchedTrade로 따로 기록
        logger.warning(
            "MetaDEX 주문 트랜잭션, 수수료만 기록",
            extra={"txid": token.txid, "property_id": token.property_id},
        )
        return []

    def _create_property_splits(self, token: TokenTxInfo) -> list[Split]:
        amount = token.amount if token.amount is not None else ZERO
        currency = self.ticker(token.property_id)
        return [
            self._wallet(amount, currency),
            self._split(self.config.token_creation_income, -amount, currency),
        ]

    def _composite_fee_splits(self, payments: list[PaymentInfo], token: TokenTxInfo) -> list[Split]:
        """Omni 트랜잭션 복합 수수료

        채굴 수수료, Exodus 주소 지급액, 참조 주소 지급액,
        주소 없는 출력(멀티시그 인코딩) 합계를 각각 비용 처리.
        """
        cfg = self.config
        miner = _first_fee(payments)
        exodus = next(
            (p.amount for p in payments if p.address == cfg.exodus_address), ZERO
        )
        reference = ZERO
        if token.reference_address is not None:
            reference = next(
                (p.amount for p in payments if p.address == token.reference_address), ZERO
            )
        multisig = sum((p.amount for p in payments if p.address is None), ZERO)

        splits: list[Split] = []
        total = miner + exodus + reference + multisig
        if total != 0:
            splits.append(self._wallet(total))

        components = (
            (cfg.transaction_fees, miner),
            (cfg.exodus_fees, exodus),
            (cfg.reference_fees, reference),
            (cfg.multisig_fees, multisig),
        )
        for account, amount in components:
            if amount != 0:
                splits.append(self._split(account, -amount))
        return splits


def classify(
    record: TransactionRecord,
    account_map: AddressAccountMap | None = None,
    config: ClassifierConfig | None = None,
) -> LedgerTransaction:
    """레코드 1건 분류 (단발 호출용)"""
    return TransactionClassifier(account_map, config).classify(record)
