"""
주소 → 원장 계정 매핑

CSV 형식 (첫 줄은 헤더):
    label,address,account
    salary,1BvBMSEYstWetqTFn5Au4m4GFg7xJaNVN2,Income:Salary
"""

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


class AccountMapLoadError(Exception):
    """계정 매핑 파일 로드 실패 예외"""

    pass


@dataclass(frozen=True)
class AddressAccount:
    """매핑 항목 1건"""

    label: str
    address: str
    account: str


class AddressAccountMap:
    """주소 → 계정 조회 테이블 (실행 중 불변)"""

    def __init__(self, entries: Iterable[AddressAccount] = ()):
        self._by_address: dict[str, AddressAccount] = {}
        for entry in entries:
            self._by_address[entry.address] = entry

    def __len__(self) -> int:
        return len(self._by_address)

    def __contains__(self, address: object) -> bool:
        return address in self._by_address

    def lookup(self, address: str | None) -> AddressAccount | None:
        if address is None:
            return None
        return self._by_address.get(address)

    def get(self, address: str | None, default: str) -> str:
        """주소의 계정, 없으면 default"""
        entry = self.lookup(address)
        return entry.account if entry is not None else default


def parse_address_account_rows(lines: Iterable[str]) -> list[AddressAccount]:
    """CSV 줄 → 매핑 항목

    첫 줄(헤더)은 건너뛰고, 열이 3개 미만이거나
    주소/계정이 비어 있는 행도 건너뜀.
    """
    entries: list[AddressAccount] = []
    for line_no, row in enumerate(csv.reader(lines), start=1):
        if line_no == 1:
            continue
        if len(row) < 3:
            if row:
                logger.debug("열이 부족한 행 건너뜀", extra={"line": line_no})
            continue

        label, address, account = (col.strip() for col in row[:3])
        if not address or not account:
            logger.debug("주소/계정이 비어 있는 행 건너뜀", extra={"line": line_no})
            continue
        entries.append(AddressAccount(label=label, address=address, account=account))
    return entries


def load_address_account_csv(path: Path) -> AddressAccountMap:
    """주소 → 계정 CSV 파일 로드

    Raises:
        AccountMapLoadError: 파일이 없거나 읽을 수 없는 경우
    """
    if not path.exists():
        raise AccountMapLoadError(f"계정 매핑 파일을 찾을 수 없습니다: {path}")

    try:
        with open(path, encoding="utf-8", newline="") as f:
            entries = parse_address_account_rows(f)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise AccountMapLoadError(f"{path.name} 읽기 실패: {e}") from e

    logger.info("계정 매핑 로드 완료", extra={"path": str(path), "entries": len(entries)})
    return AddressAccountMap(entries)
