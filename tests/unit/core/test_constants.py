"""
core/constants.py 테스트
"""

from pathlib import Path

from core.constants import PROJECT_ROOT, Defaults, ExodusAddresses, Paths, RpcPorts
from core.types import Network


class TestProjectRoot:
    """프로젝트 경로"""

    def test_project_root_is_path(self) -> None:
        assert isinstance(PROJECT_ROOT, Path)
        assert (PROJECT_ROOT / "core" / "constants.py").exists()

    def test_config_file_under_config_dir(self) -> None:
        assert Paths.CONFIG_FILE.parent == Paths.CONFIG_DIR


class TestRpcPorts:
    def test_for_network(self) -> None:
        assert RpcPorts.for_network(Network.MAINNET) == 8332
        assert RpcPorts.for_network(Network.TESTNET) == 18332
        assert RpcPorts.for_network(Network.SIGNET) == 38332
        assert RpcPorts.for_network(Network.REGTEST) == 18443


class TestExodusAddresses:
    def test_mainnet(self) -> None:
        assert ExodusAddresses.for_network(Network.MAINNET) == "1EXoDusjGwvnjZUyKkxZ4UHEf77z6A5S4P"

    def test_other_networks_share_testnet_address(self) -> None:
        for network in (Network.TESTNET, Network.SIGNET, Network.REGTEST):
            assert ExodusAddresses.for_network(network) == ExodusAddresses.TESTNET


class TestDefaults:
    def test_fetch_defaults(self) -> None:
        assert Defaults.MIN_CONFIRMATIONS == 1
        assert Defaults.MAX_CONCURRENCY >= 1
        assert Defaults.LABEL_FILTER == "*"
