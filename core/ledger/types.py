"""
복식부기 출력 모델

LedgerTransaction / Split 정의.
분류기(Classifier)가 한 번 생성하고 이후에는 변경하지 않음.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class Split:
    """분개 항목 (부호 있는 금액 + 통화)

    Attributes:
        account: 계정 이름 (예: Assets:Crypto:OmniCore)
        amount: 부호 있는 금액 (양수 = 차변, 음수 = 대변)
        currency: 통화 코드 (예: BTC, USDT, "OMNI_SPT#57")
    """

    account: str
    amount: Decimal
    currency: str


@dataclass(frozen=True)
class LedgerTransaction:
    """Ledger 트랜잭션

    하나의 TransactionRecord에서 만들어지는 복식부기 기록.
    동일 통화 Split 합계는 0이 목표 (통화 교환 매칭은 예외).
    """

    txid: str
    time: datetime
    description: str
    comments: tuple[str, ...]
    splits: tuple[Split, ...]

    def totals_by_currency(self) -> dict[str, Decimal]:
        """통화별 Split 합계"""
        totals: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
        for split in self.splits:
            totals[split.currency] += split.amount
        return dict(totals)

    def is_balanced(self) -> bool:
        """모든 통화의 합계가 정확히 0인지 확인"""
        return all(total == 0 for total in self.totals_by_currency().values())

    def matches_account(self, match_string: str) -> bool:
        """계정 이름(부분 문자열)과 일치하는 Split이 있는지 확인

        Args:
            match_string: 전체 또는 일부 계정 이름 (예: "Income:Consulting")
        """
        return any(match_string in split.account for split in self.splits)
