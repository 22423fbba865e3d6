"""
그룹 잔고 원장

그룹별 잔고와 추가 전용 변동 기록을 관리.

사용 예시:
```python
from core.ledger import BalanceLedgerStore, BalanceChangeBroker, EntryType

broker = BalanceChangeBroker()
store = BalanceLedgerStore(db, broker)

record = await store.adjust(
    entity_id=-100123,
    actor_id=42,
    delta=Decimal("500"),
    entry_type=EntryType.MANUAL_CREDIT,
    operation_id="topup-1",
)
```
"""

from core.ledger.changes import BalanceChangeBroker, BalanceSubscription
from core.ledger.schema import init_ledger_schema
from core.ledger.store import BalanceLedgerStore
from core.ledger.types import AdjustResult, BalanceRecord, EntryType, LedgerEntry

__all__ = [
    "BalanceLedgerStore",
    "BalanceChangeBroker",
    "BalanceSubscription",
    "init_ledger_schema",
    "AdjustResult",
    "BalanceRecord",
    "EntryType",
    "LedgerEntry",
]
