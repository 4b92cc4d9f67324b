"""
복식부기 (Double-Entry Bookkeeping) 출력 모델

지갑 트랜잭션을 분류한 결과(LedgerTransaction)와
ledger-cli 평문 직렬화 제공.

사용 예시:
```python
from core.ledger import write_transactions

entries = classifier.classify_all(records)
write_transactions(entries, sys.stdout)
```
"""

from core.ledger.formatter import format_transaction, write_transactions
from core.ledger.types import LedgerTransaction, Split

__all__ = [
    "LedgerTransaction",
    "Split",
    "format_transaction",
    "write_transactions",
]
