"""
설정 로더

exporter.yaml 로드, bitcoin.conf / .cookie 인증 정보 로드,
네트워크별 RPC URL 생성
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, Paths, RpcPorts
from core.types import Network

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RpcCredentials:
    """JSON-RPC 인증 정보"""

    username: str
    password: str


@dataclass(frozen=True)
class RpcConfig:
    """JSON-RPC 연결 설정"""

    url: str
    username: str | None = None
    password: str | None = None
    timeout: float = Defaults.RPC_TIMEOUT_SEC
    max_retries: int = Defaults.RPC_MAX_RETRIES
    retry_backoff: float = Defaults.RPC_RETRY_BACKOFF_SEC

    @property
    def retry_budget(self) -> float:
        """재시도를 모두 소진할 때까지의 최대 시간 (초)

        시도마다 timeout, 시도 사이 대기는 retry_backoff × 1, × 2, ...
        """
        tries = max(1, self.max_retries)
        return self.timeout * tries + self.retry_backoff * tries * (tries - 1) / 2

    @property
    def has_credentials(self) -> bool:
        """사용자/비밀번호가 모두 설정되었는지"""
        return bool(self.username) and self.password is not None


@dataclass(frozen=True)
class FetchConfig:
    """조회(Fetch) 단계 설정"""

    min_confirmations: int = Defaults.MIN_CONFIRMATIONS
    max_concurrency: int = Defaults.MAX_CONCURRENCY
    call_timeout: float = Defaults.CALL_TIMEOUT_SEC


@dataclass(frozen=True)
class ExportConfig:
    """Export 전체 설정

    불변 데이터 구조로 설정 변경 방지.
    accounts / ticker_overrides는 분류기 설정(ClassifierConfig) 생성에 사용.
    """

    network: Network
    rpc: RpcConfig
    fetch: FetchConfig = field(default_factory=FetchConfig)
    account_map: Path | None = None
    output: Path | None = None
    account_filter: str | None = None
    accounts: dict[str, str] = field(default_factory=dict)
    ticker_overrides: dict[str, str] = field(default_factory=dict)


class ConfigLoadError(Exception):
    """설정 로드 실패 예외"""

    pass


def parse_network(value: str | None) -> Network:
    """네트워크 문자열 검증

    Raises:
        ValueError: 유효하지 않은 네트워크인 경우
    """
    if value is None:
        return Network(Defaults.NETWORK)
    try:
        return Network(value)
    except ValueError as e:
        valid = [n.value for n in Network]
        raise ValueError(
            f"유효하지 않은 network입니다: '{value}'. 유효한 값: {valid}"
        ) from e


def build_rpc_url(
    network: Network,
    wallet: str = "",
    host: str = Defaults.RPC_HOST,
    url: str | None = None,
) -> str:
    """JSON-RPC URL 생성

    url이 주어지면 그대로 사용, 아니면 네트워크 기본 포트로 생성.
    wallet 이름이 있으면 멀티 지갑 경로(/wallet/<name>) 추가.

    Examples:
        >>> build_rpc_url(Network.REGTEST)
        'http://127.0.0.1:18443'
        >>> build_rpc_url(Network.MAINNET, wallet="cold")
        'http://127.0.0.1:8332/wallet/cold'
    """
    base = url.rstrip("/") if url else f"http://{host}:{RpcPorts.for_network(network)}"
    if wallet:
        return f"{base}/wallet/{wallet}"
    return base


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigLoadError(f"'{name}' 섹션은 매핑이어야 합니다")
    return section


def _optional_path(value: Any) -> Path | None:
    if value in (None, ""):
        return None
    return Path(str(value)).expanduser()


def parse_export_config(data: dict[str, Any]) -> ExportConfig:
    """YAML 데이터(dict) → ExportConfig

    Raises:
        ConfigLoadError: 섹션 형식이 잘못된 경우
        ValueError: 유효하지 않은 network인 경우
    """
    network = parse_network(data.get("network"))

    rpc_data = _section(data, "rpc")
    rpc = RpcConfig(
        url=build_rpc_url(
            network,
            wallet=str(rpc_data.get("wallet") or Defaults.WALLET),
            host=str(rpc_data.get("host") or Defaults.RPC_HOST),
            url=rpc_data.get("url"),
        ),
        username=rpc_data.get("username"),
        password=None if rpc_data.get("password") is None else str(rpc_data["password"]),
        timeout=float(rpc_data.get("timeout", Defaults.RPC_TIMEOUT_SEC)),
        max_retries=int(rpc_data.get("max_retries", Defaults.RPC_MAX_RETRIES)),
        retry_backoff=float(rpc_data.get("retry_backoff", Defaults.RPC_RETRY_BACKOFF_SEC)),
    )

    fetch_data = _section(data, "fetch")
    fetch = FetchConfig(
        min_confirmations=int(fetch_data.get("min_confirmations", Defaults.MIN_CONFIRMATIONS)),
        max_concurrency=int(fetch_data.get("max_concurrency", Defaults.MAX_CONCURRENCY)),
        call_timeout=float(fetch_data.get(
            "call_timeout", rpc.retry_budget + Defaults.CALL_TIMEOUT_MARGIN_SEC
        )),
    )
    if fetch.max_concurrency < 1:
        raise ConfigLoadError("fetch.max_concurrency는 1 이상이어야 합니다")
    if fetch.call_timeout < rpc.retry_budget:
        logger.warning(
            "fetch.call_timeout이 RPC 재시도 시간보다 짧음, 마지막 재시도 전에 중단될 수 있음",
            extra={"call_timeout": fetch.call_timeout, "retry_budget": rpc.retry_budget},
        )

    accounts = {str(k): str(v) for k, v in _section(data, "accounts").items()}
    ticker_overrides = {str(k): str(v) for k, v in _section(data, "ticker_overrides").items()}

    return ExportConfig(
        network=network,
        rpc=rpc,
        fetch=fetch,
        account_map=_optional_path(data.get("account_map")),
        output=_optional_path(data.get("output")),
        account_filter=data.get("account_filter") or None,
        accounts=accounts,
        ticker_overrides=ticker_overrides,
    )


def _merge_overrides(data: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """설정 데이터에 덮어쓸 값 병합 (None은 무시, dict는 같은 섹션에 병합)"""
    merged = dict(data)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict):
            section = dict(_section(merged, key))
            section.update({k: v for k, v in value.items() if v is not None})
            merged[key] = section
        else:
            merged[key] = value
    return merged


def load_export_config(
    path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ExportConfig:
    """exporter.yaml 로드 후 CLI 값 덮어쓰기

    Args:
        path: exporter.yaml 경로 (None이면 기본 경로, 기본 파일이 없으면 기본값)
        overrides: 덮어쓸 값 (예: {"network": "regtest", "rpc": {"wallet": "cold"}})

    Returns:
        ExportConfig 인스턴스

    Raises:
        ConfigLoadError: 지정한 파일이 없거나 형식이 잘못된 경우
        ValueError: 유효하지 않은 network인 경우
    """
    if path is not None:
        data = load_config_data(path)
    elif Paths.CONFIG_FILE.exists():
        data = load_config_data(Paths.CONFIG_FILE)
    else:
        data = {}
    return parse_export_config(_merge_overrides(data, overrides or {}))


def load_config_data(path: Path | None = None) -> dict[str, Any]:
    """exporter.yaml 원본 데이터(dict) 로드

    Raises:
        ConfigLoadError: 파일이 없거나 형식이 잘못된 경우
    """
    if path is None:
        path = Paths.CONFIG_FILE

    if not path.exists():
        raise ConfigLoadError(f"설정 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"{path.name} 파싱 실패: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigLoadError(f"{path.name}의 최상위는 매핑이어야 합니다")

    return data


def load_bitcoin_conf(path: Path | None = None) -> RpcCredentials:
    """bitcoin.conf에서 rpcuser / rpcpassword 로드

    key=value 형식, '#' 주석과 [section] 헤더는 무시.
    같은 키가 여러 번 나오면 마지막 값 사용.

    Raises:
        ConfigLoadError: 파일이 없거나 rpcuser/rpcpassword가 없는 경우
    """
    if path is None:
        path = Paths.BITCOIN_CONF

    if not path.exists():
        raise ConfigLoadError(f"bitcoin.conf 파일을 찾을 수 없습니다: {path}")

    values: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if not line or line.startswith("[") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = value.strip()

    username = values.get("rpcuser")
    password = values.get("rpcpassword")
    if not username or password is None:
        raise ConfigLoadError(f"{path}에 rpcuser/rpcpassword가 없습니다")

    return RpcCredentials(username=username, password=password)


def default_cookie_path(network: Network, data_dir: Path | None = None) -> Path:
    """네트워크별 .cookie 파일 기본 경로"""
    base = data_dir or Paths.BITCOIN_CONF.parent
    subdirs = {
        Network.MAINNET: None,
        Network.TESTNET: "testnet3",
        Network.SIGNET: "signet",
        Network.REGTEST: "regtest",
    }
    subdir = subdirs[network]
    return (base / subdir / ".cookie") if subdir else (base / ".cookie")


def load_cookie_file(path: Path) -> RpcCredentials:
    """bitcoind 쿠키 인증 파일(.cookie) 로드 ("__cookie__:<password>")

    Raises:
        ConfigLoadError: 파일이 없거나 형식이 잘못된 경우
    """
    if not path.exists():
        raise ConfigLoadError(f"쿠키 파일을 찾을 수 없습니다: {path}")

    content = path.read_text(encoding="utf-8").strip()
    if ":" not in content:
        raise ConfigLoadError(f"쿠키 파일 형식이 잘못되었습니다: {path}")

    username, password = content.split(":", 1)
    return RpcCredentials(username=username, password=password)


def resolve_credentials(
    config: ExportConfig,
    bitcoin_conf: Path | None = None,
) -> ExportConfig:
    """RPC 인증 정보가 없으면 bitcoin.conf → .cookie 순서로 채움

    Raises:
        ConfigLoadError: 어느 곳에서도 인증 정보를 찾지 못한 경우
    """
    if config.rpc.has_credentials:
        return config

    conf_path = bitcoin_conf or Paths.BITCOIN_CONF
    try:
        creds = load_bitcoin_conf(conf_path)
    except ConfigLoadError as conf_error:
        try:
            creds = load_cookie_file(default_cookie_path(config.network, conf_path.parent))
        except ConfigLoadError:
            raise ConfigLoadError(
                f"RPC 인증 정보를 찾을 수 없습니다 ({conf_error})"
            ) from conf_error

    rpc = replace(config.rpc, username=creds.username, password=creds.password)
    return replace(config, rpc=rpc)
