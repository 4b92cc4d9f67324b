"""
CLI 테스트

OmniCoreRpcClient를 MockWalletRpcClient로 대체하여 실행.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from adapters.mock import MockWalletRpcClient
from core.types import Network
from exporter.cli import build_config, build_parser, main


@pytest.fixture(autouse=True)
def no_logging_setup():
    """테스트 중 루트 로거 핸들러 교체 방지"""
    with patch("exporter.cli.setup_logging") as setup:
        yield setup


class TestBuildConfig:
    """설정 파일 + CLI 인자 병합"""

    def test_defaults_without_config_file(self, temp_dir: Path) -> None:
        args = build_parser().parse_args(["-n", "regtest"])

        with patch("exporter.cli.Paths.CONFIG_FILE", temp_dir / "absent.yaml"):
            config = build_config(args)

        assert config.network == Network.REGTEST
        assert config.rpc.url == "http://127.0.0.1:18443"
        assert config.output is None

    def test_cli_overrides_config_file(self, temp_config_file: Path, temp_dir: Path) -> None:
        args = build_parser().parse_args([
            "-c", str(temp_config_file),
            "-n", "testnet",
            "-w", "hot",
            "-f", "Expense",
            "-o", str(temp_dir / "out.ledger"),
        ])

        config = build_config(args)

        assert config.network == Network.TESTNET
        assert config.rpc.url == "http://127.0.0.1:18332/wallet/hot"
        assert config.rpc.username == "alice"
        assert config.account_filter == "Expense"
        assert config.output == temp_dir / "out.ledger"
        assert config.fetch.min_confirmations == 3

    def test_rpc_url_override(self, temp_dir: Path) -> None:
        args = build_parser().parse_args(["--rpc-url", "http://node:8332/", "-w", "cold"])

        with patch("exporter.cli.Paths.CONFIG_FILE", temp_dir / "absent.yaml"):
            config = build_config(args)

        assert config.rpc.url == "http://node:8332/wallet/cold"


class TestMain:
    """main() 실행"""

    @pytest.mark.asyncio
    async def test_export_to_file(
        self,
        temp_dir: Path,
        temp_bitcoin_conf: Path,
        temp_account_csv: Path,
        make_payment,
    ) -> None:
        client = MockWalletRpcClient()
        client.state.token_layer = False
        client.add_payment(make_payment(txid="T1", address="1Salary", label="salary"))
        output = temp_dir / "wallet.ledger"

        with patch("exporter.cli.OmniCoreRpcClient", return_value=client) as client_cls, \
                patch("exporter.cli.Paths.CONFIG_FILE", temp_dir / "absent.yaml"):
            exit_code = await main([
                "-n", "regtest",
                "--bitcoin-conf", str(temp_bitcoin_conf),
                "-m", str(temp_account_csv),
                "-o", str(output),
            ])

        assert exit_code == 0
        assert "Income:Salary" in output.read_text(encoding="utf-8")
        assert client.closed is True
        kwargs = client_cls.call_args.kwargs
        assert kwargs["username"] == "bitcoinrpc"
        assert kwargs["password"] == "hunter2"
        assert kwargs["url"] == "http://127.0.0.1:18443"

    @pytest.mark.asyncio
    async def test_rpc_failure_returns_1(self, temp_dir: Path, temp_bitcoin_conf: Path) -> None:
        client = MockWalletRpcClient()
        client.set_failure("list_payments")
        output = temp_dir / "out.ledger"
        output.write_text("; previous export\n", encoding="utf-8")

        with patch("exporter.cli.OmniCoreRpcClient", return_value=client), \
                patch("exporter.cli.Paths.CONFIG_FILE", temp_dir / "absent.yaml"):
            exit_code = await main([
                "--bitcoin-conf", str(temp_bitcoin_conf),
                "-o", str(output),
            ])

        assert exit_code == 1
        assert client.closed is True
        # 실패 시 기존 출력 파일은 그대로
        assert output.read_text(encoding="utf-8") == "; previous export\n"
        assert list(temp_dir.glob(".*.tmp")) == []

    @pytest.mark.asyncio
    async def test_missing_credentials_returns_1(self, temp_dir: Path) -> None:
        with patch("exporter.cli.OmniCoreRpcClient") as client_cls, \
                patch("exporter.cli.Paths.CONFIG_FILE", temp_dir / "absent.yaml"):
            exit_code = await main(["--bitcoin-conf", str(temp_dir / "missing.conf")])

        assert exit_code == 1
        client_cls.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_config_file_returns_1(self, temp_dir: Path) -> None:
        exit_code = await main(["-c", str(temp_dir / "missing.yaml")])

        assert exit_code == 1

    @pytest.mark.asyncio
    async def test_missing_account_map_returns_1(self, temp_dir: Path, temp_bitcoin_conf: Path) -> None:
        client = MockWalletRpcClient()

        with patch("exporter.cli.OmniCoreRpcClient", return_value=client), \
                patch("exporter.cli.Paths.CONFIG_FILE", temp_dir / "absent.yaml"):
            exit_code = await main([
                "--bitcoin-conf", str(temp_bitcoin_conf),
                "-m", str(temp_dir / "missing.csv"),
                "-o", str(temp_dir / "out.ledger"),
            ])

        assert exit_code == 1

    def test_version_flag(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert "0.1.0" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_stdout_output_and_log_file_flag(
        self,
        temp_dir: Path,
        temp_bitcoin_conf: Path,
        make_payment,
        no_logging_setup,
        capsys,
    ) -> None:
        client = MockWalletRpcClient()
        client.state.token_layer = False
        client.add_payment(make_payment(txid="T1", label="salary"))

        with patch("exporter.cli.OmniCoreRpcClient", return_value=client) as client_cls, \
                patch("exporter.cli.Paths.CONFIG_FILE", temp_dir / "absent.yaml"):
            exit_code = await main(["--bitcoin-conf", str(temp_bitcoin_conf), "--log-file"])

        assert exit_code == 0
        assert "; T1" in capsys.readouterr().out
        assert no_logging_setup.call_args.kwargs["log_to_file"] is True
        assert client_cls.call_args.kwargs["retry_backoff"] == 1.0
