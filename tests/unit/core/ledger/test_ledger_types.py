"""
LedgerTransaction / Split 테스트
"""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.ledger import LedgerTransaction, Split


def _tx(*splits: Split) -> LedgerTransaction:
    return LedgerTransaction(
        txid="T1",
        time=datetime(2022, 3, 1, tzinfo=timezone.utc),
        description="test",
        comments=("T1",),
        splits=splits,
    )


class TestBalance:
    """통화별 합계"""

    def test_balanced_single_currency(self) -> None:
        tx = _tx(
            Split("Assets:Wallet", Decimal("1.0"), "BTC"),
            Split("Income:Misc", Decimal("-1.0"), "BTC"),
        )

        assert tx.totals_by_currency() == {"BTC": Decimal("0")}
        assert tx.is_balanced()

    def test_unbalanced(self) -> None:
        tx = _tx(
            Split("Assets:Wallet", Decimal("1.0"), "BTC"),
            Split("Income:Misc", Decimal("-0.9"), "BTC"),
        )

        assert not tx.is_balanced()

    def test_cross_currency_not_balanced(self) -> None:
        """통화 교환은 통화별로 0이 아님"""
        tx = _tx(
            Split("Assets:Wallet", Decimal("-10"), "USDT"),
            Split("Assets:Wallet", Decimal("0.5"), "OMNI"),
        )

        assert tx.totals_by_currency() == {"USDT": Decimal("-10"), "OMNI": Decimal("0.5")}
        assert not tx.is_balanced()

    def test_empty_is_balanced(self) -> None:
        assert _tx().is_balanced()


class TestAccountFilter:
    """matches_account"""

    def test_substring_match(self) -> None:
        tx = _tx(Split("Income:Consulting:ClientA", Decimal("-1"), "BTC"))

        assert tx.matches_account("Income:Consulting")
        assert tx.matches_account("ClientA")
        assert not tx.matches_account("Expense")


class TestImmutability:
    def test_frozen(self) -> None:
        tx = _tx()

        with pytest.raises(FrozenInstanceError):
            tx.description = "changed"
