"""
TransactionStore

txid -> TransactionRecord 누적 저장소.
여러 조회 태스크가 동시에 접근하므로 모든 변경은 asyncio.Lock 안에서 수행.
"""

import asyncio
import logging
from typing import Sequence

from adapters.models import PaymentInfo, TokenTxInfo
from exporter.records import MatchedTrade, PaymentRecord, TransactionRecord

logger = logging.getLogger(__name__)


class StoreInvariantError(Exception):
    """존재하지 않는 레코드에 대한 접근

    데이터 문제가 아니라 조회 순서(orchestrator) 버그를 의미.
    """

    def __init__(self, operation: str, txid: str, reason: str = "레코드가 없습니다"):
        self.operation = operation
        self.txid = txid
        super().__init__(f"{operation}: {reason} (txid={txid})")


class TransactionStore:
    """TransactionRecord 누적 저장소

    - add_payment: 없으면 생성, 있으면 항목 추가 (insert-or-merge)
    - add_addresses / add_token_info: 기존 결제 레코드 필수
    - add_match: 무조건 저장 (덮어쓰기)
    """

    def __init__(self) -> None:
        self._records: dict[str, TransactionRecord] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, txid: object) -> bool:
        return txid in self._records

    def _require_payment(self, operation: str, txid: str) -> PaymentRecord:
        record = self._records.get(txid)
        if record is None:
            raise StoreInvariantError(operation, txid)
        if not isinstance(record, PaymentRecord):
            raise StoreInvariantError(operation, txid, "결제 레코드가 아닙니다")
        return record

    # -------------------------------------------------------------------------
    # 변경
    # -------------------------------------------------------------------------

    async def add_payment(self, payment: PaymentInfo) -> PaymentRecord:
        """결제 항목 추가

        같은 txid의 레코드가 있으면 항목만 추가 (레코드는 하나로 유지).

        Raises:
            StoreInvariantError: 같은 키에 매칭 레코드가 있는 경우
        """
        async with self._lock:
            existing = self._records.get(payment.txid)
            if existing is None:
                record = PaymentRecord.from_payment(payment)
                self._records[payment.txid] = record
                return record
            if not isinstance(existing, PaymentRecord):
                raise StoreInvariantError("add_payment", payment.txid, "매칭 레코드에 결제 항목 추가 불가")
            existing.payments.append(payment)
            return existing

    async def add_addresses(self, txid: str, addresses: Sequence[str]) -> None:
        """결제 레코드에 주소 목록 추가

        Raises:
            StoreInvariantError: 결제 레코드가 없는 경우
        """
        async with self._lock:
            record = self._require_payment("add_addresses", txid)
            record.addresses.extend(addresses)

    async def add_token_info(self, token_info: TokenTxInfo) -> None:
        """결제 레코드에 Omni 정보 연결 (기존 정보는 덮어씀)

        Raises:
            StoreInvariantError: 결제 레코드가 없는 경우
        """
        async with self._lock:
            record = self._require_payment("add_token_info", token_info.txid)
            record.token_info = token_info

    async def add_match(self, matched: MatchedTrade) -> None:
        """매칭 레코드 저장 (매칭 txid 키로 덮어쓰기)"""
        async with self._lock:
            existing = self._records.get(matched.txid)
            if isinstance(existing, PaymentRecord):
                logger.warning(
                    "매칭 txid가 지갑 결제 레코드와 충돌, 매칭 레코드로 대체",
                    extra={"txid": matched.txid},
                )
            elif isinstance(existing, MatchedTrade) and existing != matched:
                # 같은 taker 트랜잭션이 지갑 주문 여러 건과 체결된 경우
                logger.warning(
                    "같은 txid의 매칭 레코드가 이미 있음, 나중 매칭으로 대체",
                    extra={
                        "txid": matched.txid,
                        "replaced_order": existing.trade.txid,
                        "order": matched.trade.txid,
                    },
                )
            self._records[matched.txid] = matched

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    def keys(self) -> list[str]:
        """저장된 txid 목록 (삽입 순서)"""
        return list(self._records.keys())

    def values(self) -> list[TransactionRecord]:
        """저장된 레코드 사본 목록 (삽입 순서)"""
        return [record.copy() for record in self._records.values()]

    async def snapshot(self) -> list[TransactionRecord]:
        """시간순 정렬된 레코드 사본

        동일 시간이면 txid 순서.
        """
        async with self._lock:
            records = [record.copy() for record in self._records.values()]
        return sorted(records, key=lambda r: (r.time, r.txid))
