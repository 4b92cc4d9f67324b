"""
어댑터 공통 모델 테스트
"""

from dataclasses import FrozenInstanceError
from decimal import Decimal

import pytest

from adapters.models import PaymentDetail, TradeInfo, TradeMatch
from core.types import Ecosystem


class TestPaymentInfo:
    """PaymentInfo 테스트"""

    def test_is_send(self, make_payment) -> None:
        assert make_payment(category="send", amount="-1").is_send
        assert not make_payment(category="receive").is_send
        assert not make_payment(category="generate").is_send

    def test_immutable(self, make_payment) -> None:
        payment = make_payment()

        with pytest.raises(FrozenInstanceError):
            payment.amount = Decimal("2")


class TestTokenTxInfo:
    """TokenTxInfo 테스트"""

    def test_default_ecosystem_is_main(self, make_token_tx) -> None:
        token = make_token_tx()

        assert token.ecosystem == Ecosystem.MAIN
        assert not token.is_test_ecosystem

    def test_test_ecosystem(self, make_token_tx) -> None:
        assert make_token_tx(ecosystem=Ecosystem.TEST).is_test_ecosystem


class TestTradeInfo:
    """TradeInfo 테스트"""

    def test_ecosystem_from_property_for_sale(self) -> None:
        main = TradeInfo(txid="a", valid=True, property_id_for_sale=31, property_id_desired=1)
        test = TradeInfo(txid="b", valid=True, property_id_for_sale=2147483651, property_id_desired=2)

        assert main.ecosystem == Ecosystem.MAIN
        assert test.ecosystem == Ecosystem.TEST
        assert main.matches == ()

    def test_matches_kept_in_order(self) -> None:
        matches = tuple(
            TradeMatch(txid=f"M{i}", address="1C", amount_sold=Decimal("1"), amount_received=Decimal("2"))
            for i in range(3)
        )
        trade = TradeInfo(txid="a", valid=True, property_id_for_sale=31, property_id_desired=1, matches=matches)

        assert [m.txid for m in trade.matches] == ["M0", "M1", "M2"]


class TestPaymentDetail:
    def test_default_no_addresses(self) -> None:
        assert PaymentDetail(txid="T1").addresses == ()
