"""
Ledger-CLI 포맷터

LedgerTransaction을 ledger-cli 평문 형식으로 직렬화.

출력 예:

    ; 5f1c...e2
    ; addr: 1Abc... (Salary) 1.00000000 vout: 0 (receive)
    2022-03-01 12:00:00 Salary
        Assets:Crypto:OmniCore                   1.00000000 BTC
        Income:Salary                            -1.00000000 BTC
"""

from datetime import tzinfo
from decimal import Decimal
from typing import Iterable, TextIO

from core.ledger.types import LedgerTransaction, Split


TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
ACCOUNT_COLUMN_WIDTH = 40

# 이 문자가 포함된 통화 코드는 따옴표로 감싸야 ledger-cli가 파싱 가능
RESERVED_CURRENCY_CHARS = "#"


def format_amount(amount: Decimal) -> str:
    """지수 표기 없이 금액 문자열 변환"""
    return format(amount, "f")


def format_currency(currency: str) -> str:
    """예약 문자가 있으면 따옴표로 감싼 통화 코드"""
    if any(ch in currency for ch in RESERVED_CURRENCY_CHARS):
        return f'"{currency}"'
    return currency


def format_split(split: Split) -> str:
    """Split 한 줄 (고정 폭 계정 컬럼)"""
    return "    {account:<{width}} {amount} {currency}".format(
        account=split.account,
        width=ACCOUNT_COLUMN_WIDTH,
        amount=format_amount(split.amount),
        currency=format_currency(split.currency),
    )


def format_transaction(tx: LedgerTransaction, tz: tzinfo | None = None) -> str:
    """LedgerTransaction → 여러 줄의 ledger-cli 엔트리

    Args:
        tx: 직렬화할 트랜잭션
        tz: 헤더 시간 표시 타임존 (None이면 로컬 타임존)
    """
    comment_lines = "\n" + "\n".join(f"; {c}" for c in tx.comments) + "\n"
    time_string = tx.time.astimezone(tz).strftime(TIME_FORMAT)
    main_line = f"{time_string} {tx.description}\n"
    split_lines = "\n".join(format_split(s) for s in tx.splits) + "\n"
    return comment_lines + main_line + split_lines


def write_transactions(
    entries: Iterable[LedgerTransaction],
    out: TextIO,
    tz: tzinfo | None = None,
) -> int:
    """엔트리 목록을 스트림에 출력 (엔트리마다 빈 줄 추가)

    Returns:
        출력한 엔트리 수
    """
    count = 0
    for tx in entries:
        out.write(format_transaction(tx, tz))
        out.write("\n")
        count += 1
    return count
