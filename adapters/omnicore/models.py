"""
Bitcoin Core / Omni Core 응답 -> 공통 모델 변환

JSON-RPC result를 adapters.models의 표준 모델로 변환.
Bitcoin Core 금액은 JSON 숫자(parse_float=Decimal로 디코딩),
Omni Core 금액은 문자열이므로 모두 Decimal로 통일.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from adapters.models import PaymentDetail, PaymentInfo, TokenTxInfo, TradeInfo, TradeMatch
from core.types import Ecosystem, TokenTxType, ecosystem_of


def to_decimal(value: Any) -> Decimal:
    """숫자/문자열 → Decimal (float은 문자열 경유)"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_optional_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    return to_decimal(value)


def from_epoch(seconds: Any) -> datetime:
    """epoch 초 → UTC datetime"""
    return datetime.fromtimestamp(int(seconds), tz=timezone.utc)


def parse_payment(data: dict[str, Any]) -> PaymentInfo:
    """listtransactions 항목 -> PaymentInfo 모델

    Bitcoin Core listtransactions 응답 예시:
    {
        "address": "1BvBMSEYstWetqTFn5Au4m4GFg7xJaNVN2",
        "category": "send",
        "amount": -0.50000000,
        "label": "exchange",
        "vout": 1,
        "fee": -0.00001000,
        "abandoned": false,
        "confirmations": 1204,
        "txid": "5f1c...e2",
        "walletconflicts": [],
        "time": 1646136000,
        "timereceived": 1646136000,
        "comment": "rent"
    }
    """
    return PaymentInfo(
        txid=data["txid"],
        time=from_epoch(data["time"]),
        confirmations=int(data.get("confirmations", 0)),
        category=data["category"],
        amount=to_decimal(data["amount"]),
        fee=to_optional_decimal(data.get("fee")),
        address=data.get("address"),
        label=data.get("label") or "",
        comment=data.get("comment"),
        vout=int(data.get("vout", 0)),
        abandoned=bool(data.get("abandoned", False)),
        wallet_conflicts=tuple(data.get("walletconflicts") or ()),
    )


def _token_ecosystem(
    data: dict[str, Any],
    type_int: int,
    property_id: int | None,
    property_id_desired: int | None,
) -> Ecosystem:
    """Omni 트랜잭션의 생태계 결정

    응답에 ecosystem 필드가 있으면 우선 사용.
    MetaDEX trade는 희망 property, 그 외는 대상 property 기준.
    """
    explicit = data.get("ecosystem")
    if explicit in (Ecosystem.MAIN.value, Ecosystem.TEST.value):
        return Ecosystem(explicit)
    if type_int == TokenTxType.METADEX_TRADE and property_id_desired is not None:
        return ecosystem_of(property_id_desired)
    if property_id is not None:
        return ecosystem_of(property_id)
    return Ecosystem.MAIN


def parse_token_tx(data: dict[str, Any]) -> TokenTxInfo:
    """omni_listtransactions 항목 -> TokenTxInfo 모델

    Omni Core omni_listtransactions 응답 예시 (Simple Send):
    {
        "txid": "1075db...",
        "fee": "0.00010000",
        "sendingaddress": "1MCHESTptvd2LnNp7wmr2sGTpRomteAkq8",
        "referenceaddress": "1MCHESTbJhJK27Ygqj4qKkx4Z4ZxhnP826",
        "ismine": true,
        "version": 0,
        "type_int": 0,
        "type": "Simple Send",
        "propertyid": 31,
        "divisible": true,
        "amount": "50.00000000",
        "valid": true,
        "confirmations": 53
    }

    MetaDEX trade(25)는 propertyid / amount 대신
    propertyidforsale / amountforsale / propertyiddesired 사용.
    """
    type_int = int(data["type_int"])
    property_id = data.get("propertyid", data.get("propertyidforsale"))
    property_id = None if property_id is None else int(property_id)
    property_id_desired = data.get("propertyiddesired")
    property_id_desired = None if property_id_desired is None else int(property_id_desired)

    return TokenTxInfo(
        txid=data["txid"],
        confirmations=int(data.get("confirmations", 0)),
        type_int=type_int,
        type_name=data.get("type", ""),
        sending_address=data.get("sendingaddress", ""),
        reference_address=data.get("referenceaddress") or None,
        property_id=property_id,
        property_id_desired=property_id_desired,
        amount=to_optional_decimal(data.get("amount", data.get("amountforsale"))),
        valid=bool(data.get("valid", False)),
        ecosystem=_token_ecosystem(data, type_int, property_id, property_id_desired),
    )


def parse_trade_match(data: dict[str, Any]) -> TradeMatch:
    """매칭 항목 -> TradeMatch 모델"""
    return TradeMatch(
        txid=data["txid"],
        address=data.get("address", data.get("sendingaddress", "")),
        amount_sold=to_decimal(data.get("amountsold", "0")),
        amount_received=to_decimal(data.get("amountreceived", "0")),
    )


def parse_trade(data: dict[str, Any]) -> TradeInfo:
    """omni_gettradehistoryforaddress 항목 -> TradeInfo 모델

    응답 예시:
    {
        "txid": "3c1f...",
        "sendingaddress": "1MCHESTptvd2LnNp7wmr2sGTpRomteAkq8",
        "propertyidforsale": 31,
        "amountforsale": "100.00000000",
        "propertyiddesired": 1,
        "amountdesired": "5.00000000",
        "valid": true,
        "status": "filled",
        "matches": [
            {
                "txid": "8a2b...",
                "block": 600123,
                "address": "1Pa6zyqnhL6LDJtrkCMi9XmEDNHJ23ffEr",
                "amountsold": "100.00000000",
                "amountreceived": "5.00000000",
                "tradingfee": "0.00000000"
            }
        ]
    }
    """
    return TradeInfo(
        txid=data.get("txid", ""),
        valid=bool(data.get("valid", False)),
        property_id_for_sale=int(data["propertyidforsale"]),
        property_id_desired=int(data["propertyiddesired"]),
        matches=tuple(parse_trade_match(m) for m in data.get("matches") or ()),
    )


def parse_payment_detail(txid: str, data: dict[str, Any]) -> PaymentDetail:
    """gettransaction 응답 -> PaymentDetail (details[].address 중 null 제외)"""
    addresses = tuple(
        detail["address"]
        for detail in data.get("details") or ()
        if detail.get("address") is not None
    )
    return PaymentDetail(txid=txid, addresses=addresses)


def parse_raw_transaction_time(data: dict[str, Any]) -> datetime | None:
    """getrawtransaction(verbose) 응답의 시간 (time → blocktime 순서)

    미확정 트랜잭션이면 None.
    """
    seconds = data.get("time", data.get("blocktime"))
    if seconds is None:
        return None
    return from_epoch(seconds)
