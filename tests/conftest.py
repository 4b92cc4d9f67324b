"""
pytest 공통 fixture 정의

임시 파일(설정/bitcoin.conf/계정 매핑 CSV)과 모델 생성 헬퍼.
"""

import tempfile
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest

from adapters.models import PaymentInfo, TokenTxInfo


T0 = datetime(2022, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def _make_payment(
    txid: str = "tx1",
    amount: str = "1.0",
    category: str = "receive",
    fee: str | None = None,
    address: str | None = "1Receive",
    time: datetime = T0,
    confirmations: int = 10,
    **kwargs,
) -> PaymentInfo:
    """테스트용 PaymentInfo 생성"""
    return PaymentInfo(
        txid=txid,
        time=time,
        confirmations=confirmations,
        category=category,
        amount=Decimal(amount),
        fee=None if fee is None else Decimal(fee),
        address=address,
        **kwargs,
    )


def _make_token_tx(
    txid: str = "tx1",
    type_int: int = 0,
    amount: str | None = "50",
    property_id: int | None = 31,
    sending_address: str = "1Sender",
    confirmations: int = 10,
    **kwargs,
) -> TokenTxInfo:
    """테스트용 TokenTxInfo 생성"""
    return TokenTxInfo(
        txid=txid,
        confirmations=confirmations,
        type_int=type_int,
        type_name=kwargs.pop("type_name", "Simple Send"),
        sending_address=sending_address,
        property_id=property_id,
        amount=None if amount is None else Decimal(amount),
        **kwargs,
    )


@pytest.fixture
def make_payment():
    """PaymentInfo 생성 헬퍼"""
    return _make_payment


@pytest.fixture
def make_token_tx():
    """TokenTxInfo 생성 헬퍼"""
    return _make_token_tx


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_config_file(temp_dir: Path) -> Path:
    """테스트용 exporter.yaml 파일 생성"""
    content = """# 테스트용 exporter.yaml
network: regtest

rpc:
  wallet: cold
  username: alice
  password: "s3cret"
  timeout: 10
  max_retries: 2

fetch:
  min_confirmations: 3
  max_concurrency: 4
  call_timeout: 15

account_filter: Income

accounts:
  wallet_account: Assets:Crypto:Cold

ticker_overrides:
  "OMNI_SPT#99": NINETYNINE
"""
    path = temp_dir / "exporter.yaml"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def temp_bitcoin_conf(temp_dir: Path) -> Path:
    """테스트용 bitcoin.conf 파일 생성"""
    content = """# bitcoind 설정
server=1
rpcuser=bitcoinrpc
rpcpassword=hunter2  # 주석

[test]
rpcport=18332
"""
    path = temp_dir / "bitcoin.conf"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def temp_account_csv(temp_dir: Path) -> Path:
    """테스트용 주소 → 계정 CSV 파일 생성"""
    content = """label,address,account
salary, 1Salary , Income:Salary
rent,1Rent,Expense:Rent
broken-row,1Broken

shop,1Shop,Income:Shop
"""
    path = temp_dir / "accounts.csv"
    path.write_text(content, encoding="utf-8")
    return path
