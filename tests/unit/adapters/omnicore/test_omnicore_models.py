"""
Omni Core 응답 변환 테스트
"""

from datetime import datetime, timezone
from decimal import Decimal

from adapters.omnicore.models import (
    parse_payment,
    parse_payment_detail,
    parse_raw_transaction_time,
    parse_token_tx,
    parse_trade,
    to_decimal,
)
from core.types import Ecosystem


class TestToDecimal:
    def test_float_via_string(self) -> None:
        assert to_decimal(0.1) == Decimal("0.1")

    def test_string(self) -> None:
        assert to_decimal("50.00000000") == Decimal("50")


class TestParsePayment:
    """listtransactions 항목"""

    def test_receive_defaults(self) -> None:
        payment = parse_payment({
            "address": "1Abc",
            "category": "receive",
            "amount": 1.5,
            "confirmations": 3,
            "txid": "T1",
            "time": 1646136000,
        })

        assert payment.amount == Decimal("1.5")
        assert payment.fee is None
        assert payment.label == ""
        assert payment.comment is None
        assert payment.vout == 0
        assert payment.abandoned is False
        assert payment.wallet_conflicts == ()
        assert payment.time == datetime(2022, 3, 1, 12, 0, tzinfo=timezone.utc)

    def test_send_fields(self) -> None:
        payment = parse_payment({
            "category": "send",
            "amount": "-0.5",
            "fee": "-0.0001",
            "label": None,
            "comment": "rent",
            "vout": 2,
            "abandoned": True,
            "walletconflicts": ["T0"],
            "txid": "T1",
            "time": 1646136000,
        })

        assert payment.address is None
        assert payment.fee == Decimal("-0.0001")
        assert payment.label == ""
        assert payment.comment == "rent"
        assert payment.abandoned is True
        assert payment.wallet_conflicts == ("T0",)


class TestParseTokenTx:
    """omni_listtransactions 항목"""

    def test_simple_send(self) -> None:
        token = parse_token_tx({
            "txid": "T1",
            "fee": "0.00010000",
            "sendingaddress": "1S",
            "referenceaddress": "1R",
            "type_int": 0,
            "type": "Simple Send",
            "propertyid": 31,
            "amount": "50.00000000",
            "valid": True,
            "confirmations": 53,
        })

        assert token.property_id == 31
        assert token.amount == Decimal("50")
        assert token.reference_address == "1R"
        assert token.ecosystem == Ecosystem.MAIN

    def test_metadex_trade_uses_for_sale_fields(self) -> None:
        token = parse_token_tx({
            "txid": "T2",
            "sendingaddress": "1S",
            "type_int": 25,
            "type": "MetaDEx trade",
            "propertyidforsale": 31,
            "amountforsale": "100",
            "propertyiddesired": 1,
            "valid": True,
            "confirmations": 1,
        })

        assert token.property_id == 31
        assert token.property_id_desired == 1
        assert token.amount == Decimal("100")
        assert token.reference_address is None

    def test_test_ecosystem(self) -> None:
        token = parse_token_tx({
            "txid": "T3",
            "sendingaddress": "1S",
            "type_int": 0,
            "propertyid": 2147483652,
            "amount": "1",
            "valid": True,
        })

        assert token.is_test_ecosystem

    def test_explicit_ecosystem_field(self) -> None:
        token = parse_token_tx({
            "txid": "T4",
            "sendingaddress": "1S",
            "type_int": 50,
            "propertyid": 60,
            "ecosystem": "test",
            "valid": False,
        })

        assert token.ecosystem == Ecosystem.TEST
        assert token.valid is False
        assert token.amount is None


class TestParseTrade:
    def test_matches(self) -> None:
        trade = parse_trade({
            "txid": "order",
            "propertyidforsale": 31,
            "propertyiddesired": 1,
            "valid": True,
            "matches": [
                {"txid": "M1", "address": "1C", "amountsold": "10", "amountreceived": "0.5"},
                {"txid": "M2", "sendingaddress": "1D", "amountsold": "5", "amountreceived": "0.25"},
            ],
        })

        assert trade.ecosystem == Ecosystem.MAIN
        assert [m.txid for m in trade.matches] == ["M1", "M2"]
        assert trade.matches[1].address == "1D"
        assert trade.matches[0].amount_sold == Decimal("10")

    def test_without_matches(self) -> None:
        trade = parse_trade({"propertyidforsale": 2, "propertyiddesired": 1, "valid": True})

        assert trade.matches == ()
        assert trade.ecosystem == Ecosystem.TEST


class TestParseDetailAndTime:
    def test_payment_detail_skips_null_address(self) -> None:
        detail = parse_payment_detail("T1", {"details": [{"address": "1A"}, {"address": None}]})

        assert detail.txid == "T1"
        assert detail.addresses == ("1A",)

    def test_raw_time_prefers_time(self) -> None:
        tx_time = parse_raw_transaction_time({"time": 1646136000, "blocktime": 1})

        assert tx_time == datetime(2022, 3, 1, 12, 0, tzinfo=timezone.utc)

    def test_raw_time_missing(self) -> None:
        assert parse_raw_transaction_time({}) is None
