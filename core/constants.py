"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from pathlib import Path

from core.types import Network


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → 프로젝트 루트)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent

APP_NAME: str = "ledger-export"
APP_VERSION: str = "0.1.0"


class RpcPorts:
    """Bitcoin Core / Omni Core 기본 JSON-RPC 포트 (네트워크별)"""

    MAINNET: int = 8332
    TESTNET: int = 18332
    SIGNET: int = 38332
    REGTEST: int = 18443

    @classmethod
    def for_network(cls, network: Network) -> int:
        """네트워크에 해당하는 기본 포트 반환"""
        return {
            Network.MAINNET: cls.MAINNET,
            Network.TESTNET: cls.TESTNET,
            Network.SIGNET: cls.SIGNET,
            Network.REGTEST: cls.REGTEST,
        }[network]


class ExodusAddresses:
    """Omni Layer Exodus 주소 (프로토콜 지정 주소)

    일부 Omni 트랜잭션은 이 주소로 소액을 전송 (수수료 성격).
    """

    MAINNET: str = "1EXoDusjGwvnjZUyKkxZ4UHEf77z6A5S4P"
    TESTNET: str = "mpexoDuSkGGqvqrkrjiFng38QPkJQVFyqv"  # testnet/signet/regtest 공용

    @classmethod
    def for_network(cls, network: Network) -> str:
        """네트워크에 해당하는 Exodus 주소 반환"""
        if network == Network.MAINNET:
            return cls.MAINNET
        return cls.TESTNET


class Defaults:
    """기본값 상수"""

    NETWORK: str = Network.MAINNET.value
    RPC_HOST: str = "127.0.0.1"
    WALLET: str = ""

    # 조회 조건
    MIN_CONFIRMATIONS: int = 1
    LIST_LIMIT: int = 999_999_999  # listtransactions count (사실상 무제한)
    LABEL_FILTER: str = "*"
    ADDRESS_FILTER: str = "*"

    # 동시성 / 타임아웃
    MAX_CONCURRENCY: int = 8
    RPC_TIMEOUT_SEC: float = 30.0
    RPC_MAX_RETRIES: int = 3
    RPC_RETRY_BACKOFF_SEC: float = 1.0
    CALL_TIMEOUT_MARGIN_SEC: float = 5.0
    # 호출당 제한 시간: 재시도 전체 (30초 × 3회 + 백오프 1초 + 2초) + 여유 5초
    CALL_TIMEOUT_SEC: float = 98.0

    LOG_LEVEL: str = "INFO"


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"

    # 설정 파일
    CONFIG_FILE: Path = CONFIG_DIR / "exporter.yaml"

    # bitcoind 기본 설정 파일 (rpcuser / rpcpassword)
    BITCOIN_CONF: Path = Path.home() / ".bitcoin" / "bitcoin.conf"
