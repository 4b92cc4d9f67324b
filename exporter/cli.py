"""
ledger-export CLI

실행 방법:
    python -m exporter -n regtest -m accounts.csv -o wallet.ledger
    ledger-export --rpc-url http://127.0.0.1:8332 -w cold -f Income
"""

import argparse
import asyncio
import io
import logging
import os
import sys
from pathlib import Path
from typing import Any, Sequence

from adapters.omnicore import OmniCoreRpcClient, WalletRpcError
from core.config.loader import (
    ConfigLoadError,
    ExportConfig,
    load_export_config,
    resolve_credentials,
)
from core.constants import APP_NAME, APP_VERSION, ExodusAddresses, Paths
from core.logging import setup_logging
from core.types import Network
from exporter.account_map import AccountMapLoadError
from exporter.classifier import ClassifierConfig
from exporter.exporter import LedgerExporter

logger = logging.getLogger("exporter")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Bitcoin Core / Omni Core 지갑 내역을 ledger-cli 형식으로 출력",
    )
    parser.add_argument(
        "-n", "--network",
        choices=[n.value for n in Network],
        default=None,
        help="네트워크 (기본: 설정 파일 또는 mainnet)",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="출력 파일 (기본: stdout)",
    )
    parser.add_argument(
        "-m", "--account-map",
        type=Path,
        default=None,
        help="주소 → 계정 CSV 파일 (label,address,account)",
    )
    parser.add_argument(
        "-w", "--wallet",
        default=None,
        help="지갑 이름 (멀티 지갑 노드)",
    )
    parser.add_argument(
        "-f", "--account-filter",
        default=None,
        help="이 문자열이 포함된 계정이 있는 트랜잭션만 출력",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help=f"설정 파일 (기본: {Paths.CONFIG_FILE}, 없으면 기본값)",
    )
    parser.add_argument(
        "--rpc-url",
        default=None,
        help="JSON-RPC URL (기본: 네트워크 기본 포트)",
    )
    parser.add_argument(
        "--bitcoin-conf",
        type=Path,
        default=None,
        help=f"rpcuser/rpcpassword를 읽을 bitcoin.conf (기본: {Paths.BITCOIN_CONF})",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="DEBUG 로그 출력",
    )
    parser.add_argument(
        "--log-file",
        action="store_true",
        help=f"{Paths.LOGS_DIR}에 daily 롤링 파일 로그 기록",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {APP_VERSION}",
    )
    return parser


def build_config(args: argparse.Namespace) -> ExportConfig:
    """설정 파일 + CLI 인자 → ExportConfig

    -c로 지정한 파일이 없으면 에러, 기본 경로 파일은 없어도 됨.

    Raises:
        ConfigLoadError: 설정 파일 로드 실패
        ValueError: 유효하지 않은 network
    """
    overrides: dict[str, Any] = {
        "network": args.network,
        "output": args.output,
        "account_map": args.account_map,
        "account_filter": args.account_filter,
        "rpc": {"url": args.rpc_url or None, "wallet": args.wallet},
    }
    return load_export_config(args.config, overrides)


def write_output(path: Path | None, text: str) -> None:
    """출력 기록 (path가 없으면 stdout)

    파일은 같은 디렉토리의 임시 파일에 쓴 뒤 교체.
    """
    if path is None:
        sys.stdout.write(text)
        sys.stdout.flush()
        return

    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        tmp_path.write_text(text, encoding="utf-8")
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)


async def main(argv: Sequence[str] | None = None) -> int:
    """CLI 메인

    Returns:
        종료 코드 (0 = 성공, 1 = 실패)
    """
    args = build_parser().parse_args(argv)
    setup_logging(
        APP_NAME,
        console_level=logging.DEBUG if args.verbose else logging.INFO,
        log_to_file=args.log_file,
    )

    try:
        config = resolve_credentials(build_config(args), args.bitcoin_conf)
        classifier_config = ClassifierConfig.from_overrides(
            accounts=config.accounts,
            ticker_overrides=config.ticker_overrides,
            exodus_address=ExodusAddresses.for_network(config.network),
        )
    except (ConfigLoadError, ValueError) as e:
        logger.error(f"설정 로드 실패: {e}")
        return 1

    logger.info(
        f"{APP_NAME} v{APP_VERSION} 시작",
        extra={"network": config.network.value, "url": config.rpc.url},
    )

    client = OmniCoreRpcClient(
        url=config.rpc.url,
        username=config.rpc.username,
        password=config.rpc.password,
        timeout=config.rpc.timeout,
        max_retries=config.rpc.max_retries,
        retry_backoff=config.rpc.retry_backoff,
    )
    # 조회가 모두 끝난 뒤에 출력 (실패 시 기존 출력 파일 유지)
    buffer = io.StringIO()
    try:
        exporter = LedgerExporter(
            client=client,
            out=buffer,
            account_map_path=config.account_map,
            classifier_config=classifier_config,
            fetch_config=config.fetch,
            account_filter=config.account_filter,
        )
        await exporter.export()
        write_output(config.output, buffer.getvalue())
    except AccountMapLoadError as e:
        logger.error(f"계정 매핑 로드 실패: {e}")
        return 1
    except WalletRpcError as e:
        logger.error(f"지갑 조회 실패: {e}")
        return 1
    except OSError as e:
        logger.error(f"출력 실패: {e}")
        return 1
    finally:
        await client.close()

    return 0


def run() -> None:
    """console script 진입점"""
    sys.exit(asyncio.run(main()))
