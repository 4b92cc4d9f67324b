"""
Ledger Exporter

지갑 조회 → 분류 → 출력 파이프라인.

    initialize()        계정 매핑 로드, 분류기 생성
    collect_data()      FetchOrchestrator로 TransactionRecord 수집
    convert_to_ledger() 레코드별 LedgerTransaction 변환 (+ 계정 필터)
    output()            ledger-cli 형식으로 출력
"""

import logging
from datetime import tzinfo
from pathlib import Path
from typing import TextIO

from adapters.interfaces import IWalletRpcClient
from core.config.loader import FetchConfig
from core.ledger import LedgerTransaction, write_transactions
from exporter.account_map import AddressAccountMap, load_address_account_csv
from exporter.classifier import ClassifierConfig, TransactionClassifier
from exporter.orchestrator import FetchOrchestrator
from exporter.records import TransactionRecord

logger = logging.getLogger(__name__)


class LedgerExporter:
    """지갑 → ledger-cli Exporter

    Args:
        client: 지갑 RPC 클라이언트
        out: 출력 스트림
        account_map_path: 주소 → 계정 CSV 경로 (None이면 매핑 없음)
        classifier_config: 분류기 설정
        fetch_config: 조회 설정
        account_filter: 계정 이름 부분 문자열 (해당 계정이 있는 트랜잭션만 출력)
        tz: 출력 시간대 (None이면 로컬)
    """

    def __init__(
        self,
        client: IWalletRpcClient,
        out: TextIO,
        account_map_path: Path | None = None,
        classifier_config: ClassifierConfig | None = None,
        fetch_config: FetchConfig | None = None,
        account_filter: str | None = None,
        tz: tzinfo | None = None,
    ):
        self.client = client
        self.out = out
        self.account_map_path = account_map_path
        self.classifier_config = classifier_config or ClassifierConfig()
        self.fetch_config = fetch_config or FetchConfig()
        self.account_filter = account_filter
        self.tz = tz

        self.account_map = AddressAccountMap()
        self.classifier: TransactionClassifier | None = None

    def initialize(self) -> None:
        """계정 매핑 로드 및 분류기 생성

        Raises:
            AccountMapLoadError: 매핑 파일이 없거나 읽을 수 없는 경우
        """
        if self.account_map_path is not None:
            self.account_map = load_address_account_csv(self.account_map_path)
        self.classifier = TransactionClassifier(self.account_map, self.classifier_config)

    async def collect_data(self) -> list[TransactionRecord]:
        """지갑 조회 (시간순 레코드)"""
        orchestrator = FetchOrchestrator(
            self.client,
            min_confirmations=self.fetch_config.min_confirmations,
            max_concurrency=self.fetch_config.max_concurrency,
            call_timeout=self.fetch_config.call_timeout,
        )
        return await orchestrator.fetch()

    def convert_to_ledger(self, records: list[TransactionRecord]) -> list[LedgerTransaction]:
        """레코드 → LedgerTransaction (계정 필터 적용)"""
        classifier = self.classifier or TransactionClassifier(
            self.account_map, self.classifier_config
        )
        entries = classifier.classify_all(records)
        if self.account_filter:
            entries = [e for e in entries if e.matches_account(self.account_filter)]
        return entries

    def output(self, entries: list[LedgerTransaction]) -> int:
        """출력 스트림에 기록, 기록 건수 반환"""
        return write_transactions(entries, self.out, tz=self.tz)

    async def export(self) -> int:
        """전체 파이프라인 실행

        Returns:
            출력한 트랜잭션 수
        """
        self.initialize()
        records = await self.collect_data()
        entries = self.convert_to_ledger(records)
        written = self.output(entries)

        logger.info(
            "Ledger 출력 완료",
            extra={
                "records": len(records),
                "written": written,
                "account_filter": self.account_filter,
            },
        )
        return written
