"""BalanceLedgerStore 통합 테스트"""

import asyncio
import sqlite3
from decimal import Decimal

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger.changes import BalanceChangeBroker
from core.ledger.store import BalanceLedgerStore
from core.ledger.types import EntryType

GROUP = -100111


class TestAdjust:
    """adjust 테스트"""

    @pytest.mark.asyncio
    async def test_first_adjust_creates_record(self, store: BalanceLedgerStore) -> None:
        """레코드가 없으면 잔고 0에서 시작"""
        assert await store.get_balance(GROUP) is None

        record = await store.adjust(GROUP, 1, Decimal("500"), EntryType.MANUAL_CREDIT)

        assert record.balance == Decimal("500")
        assert record.created_at is not None
        entries = await store.list_entries(GROUP)
        assert len(entries) == 1
        assert entries[0].delta == Decimal("500")
        assert entries[0].balance_after == Decimal("500")
        assert entries[0].entry_type == EntryType.MANUAL_CREDIT
        assert entries[0].operation_id == ""

    @pytest.mark.asyncio
    async def test_negative_balance_allowed(self, store: BalanceLedgerStore) -> None:
        """차감으로 음수 잔고 허용"""
        record = await store.adjust(GROUP, 1, Decimal("-30"), EntryType.MANUAL_DEBIT)

        assert record.balance == Decimal("-30")

    @pytest.mark.asyncio
    async def test_same_operation_id_applied_once(self, store: BalanceLedgerStore) -> None:
        """같은 operation_id는 한 번만 반영"""
        await store.adjust(GROUP, 1, Decimal("100"), EntryType.MANUAL_CREDIT, operation_id="op-1")
        record = await store.adjust(
            GROUP, 1, Decimal("100"), EntryType.MANUAL_CREDIT, operation_id="op-1"
        )

        assert record.balance == Decimal("100")
        assert await store.count_entries(GROUP) == 1

    @pytest.mark.asyncio
    async def test_operation_id_scoped_per_group(self, store: BalanceLedgerStore) -> None:
        """operation_id는 그룹 단위로 유일"""
        await store.adjust(GROUP, 1, Decimal("10"), EntryType.MANUAL_CREDIT, operation_id="x")
        other = await store.adjust(-100999, 1, Decimal("10"), EntryType.MANUAL_CREDIT, operation_id="x")

        assert other.balance == Decimal("10")

    @pytest.mark.asyncio
    async def test_zero_delta_without_operation_id_is_read(self, store: BalanceLedgerStore) -> None:
        """operation_id 없는 0원 변동은 조회만"""
        record = await store.adjust(GROUP, 1, Decimal("0"), EntryType.MANUAL_CREDIT)

        assert record.balance == Decimal("0")
        assert await store.get_balance(GROUP) is None
        assert await store.count_entries(GROUP) == 0

    @pytest.mark.asyncio
    async def test_zero_delta_with_operation_id_is_recorded(self, store: BalanceLedgerStore) -> None:
        """operation_id가 있으면 0원 변동도 기록 (정산 완료 표시)"""
        await store.adjust(
            GROUP, 0, Decimal("0"), EntryType.DAILY_SETTLEMENT,
            remark="2026-02-20", operation_id="settlement:-100111:2026-02-20",
        )

        entry = await store.find_entry(GROUP, "settlement:-100111:2026-02-20")
        assert entry is not None
        assert entry.delta == Decimal("0")
        assert entry.remark == "2026-02-20"

    @pytest.mark.asyncio
    async def test_concurrent_adjustments_serialized(self, store: BalanceLedgerStore) -> None:
        """동시 변동도 유실 없이 합산"""
        await asyncio.gather(*(
            store.adjust(GROUP, 1, Decimal("1.5"), EntryType.MANUAL_CREDIT)
            for _ in range(20)
        ))

        record = await store.get_balance(GROUP)
        assert record is not None
        assert record.balance == Decimal("30.0")
        assert await store.count_entries(GROUP) == 20

    @pytest.mark.asyncio
    async def test_concurrent_same_operation_id(self, store: BalanceLedgerStore) -> None:
        """같은 operation_id 동시 요청도 한 번만 반영"""
        await asyncio.gather(*(
            store.adjust(GROUP, 1, Decimal("50"), EntryType.MANUAL_DEBIT, operation_id="dup")
            for _ in range(5)
        ))

        record = await store.get_balance(GROUP)
        assert record is not None
        assert record.balance == Decimal("50")
        assert await store.count_entries(GROUP) == 1

    @pytest.mark.asyncio
    async def test_concurrent_results_report_replay(self, store: BalanceLedgerStore) -> None:
        """동시 요청 중 하나만 replayed=False, 나머지는 같은 원장 항목을 돌려받음"""
        results = await asyncio.gather(*(
            store.apply_adjustment(GROUP, 1, Decimal("-50"), EntryType.MANUAL_DEBIT, operation_id="dup")
            for _ in range(3)
        ))

        applied = [r for r in results if not r.replayed]
        assert len(applied) == 1
        assert applied[0].entry is not None
        assert all(r.entry == applied[0].entry for r in results)
        assert all(r.record.balance == Decimal("-50") for r in results)

    @pytest.mark.asyncio
    async def test_balance_equals_sum_of_deltas(self, store: BalanceLedgerStore) -> None:
        """잔고 = 원장 delta 합계"""
        for delta in ("500", "-350", "12.25", "-0.25"):
            await store.adjust(GROUP, 1, Decimal(delta), EntryType.MANUAL_CREDIT)
        await store.set_min_balance(GROUP, Decimal("200"))

        record = await store.get_balance(GROUP)
        entries = await store.list_entries(GROUP, limit=100)
        assert record is not None
        assert record.balance == sum((e.delta for e in entries), Decimal("0"))


class TestPublish:
    """변경 발행 테스트"""

    @pytest.mark.asyncio
    async def test_publish_on_write(
        self, store: BalanceLedgerStore, broker: BalanceChangeBroker
    ) -> None:
        """쓰기 성공 시 발행"""
        subscription = broker.subscribe()

        await store.adjust(GROUP, 1, Decimal("10"), EntryType.MANUAL_CREDIT)

        assert subscription.pending() == 1
        record = await subscription.get()
        assert record.balance == Decimal("10")

    @pytest.mark.asyncio
    async def test_replay_not_published(
        self, store: BalanceLedgerStore, broker: BalanceChangeBroker
    ) -> None:
        """중복 요청은 발행하지 않음"""
        await store.adjust(GROUP, 1, Decimal("10"), EntryType.MANUAL_CREDIT, operation_id="a")
        subscription = broker.subscribe()

        await store.adjust(GROUP, 1, Decimal("10"), EntryType.MANUAL_CREDIT, operation_id="a")

        assert subscription.pending() == 0

    @pytest.mark.asyncio
    async def test_without_broker(self, db: SQLiteAdapter) -> None:
        """브로커 없이도 동작"""
        store = BalanceLedgerStore(db)

        record = await store.adjust(GROUP, 1, Decimal("10"), EntryType.MANUAL_CREDIT)

        assert record.balance == Decimal("10")


class TestThresholds:
    """임계값 설정 테스트"""

    @pytest.mark.asyncio
    async def test_set_min_balance(self, store: BalanceLedgerStore) -> None:
        """최저 잔고 설정 + 0원 기록"""
        await store.adjust(GROUP, 1, Decimal("300"), EntryType.MANUAL_CREDIT)

        record = await store.set_min_balance(GROUP, Decimal("200"), actor_id=7)

        assert record.min_balance == Decimal("200")
        assert record.balance == Decimal("300")
        latest = (await store.list_entries(GROUP, limit=1))[0]
        assert latest.entry_type == EntryType.THRESHOLD_CHANGE
        assert latest.delta == Decimal("0")
        assert latest.balance_after == Decimal("300")
        assert latest.actor_id == 7
        assert latest.remark == "set_min_balance=200"

    @pytest.mark.asyncio
    async def test_set_min_balance_creates_record(self, store: BalanceLedgerStore) -> None:
        """레코드가 없어도 설정 가능"""
        record = await store.set_min_balance(GROUP, Decimal("50"))

        assert record.balance == Decimal("0")
        assert record.is_low is True

    @pytest.mark.asyncio
    async def test_set_alert_limit(self, store: BalanceLedgerStore) -> None:
        """시간당 알림 상한 설정"""
        record = await store.set_alert_limit(GROUP, 5)

        assert record.alert_limit_per_hour == 5
        assert await store.count_entries(GROUP, EntryType.THRESHOLD_CHANGE) == 1


class TestAppendOnly:
    """원장 추가 전용 테스트"""

    @pytest.mark.asyncio
    async def test_update_rejected(self, store: BalanceLedgerStore, db: SQLiteAdapter) -> None:
        await store.adjust(GROUP, 1, Decimal("10"), EntryType.MANUAL_CREDIT)

        with pytest.raises(sqlite3.DatabaseError, match="append-only"):
            await db.execute("UPDATE balance_ledger SET delta = '999'")

    @pytest.mark.asyncio
    async def test_delete_rejected(self, store: BalanceLedgerStore, db: SQLiteAdapter) -> None:
        await store.adjust(GROUP, 1, Decimal("10"), EntryType.MANUAL_CREDIT)

        with pytest.raises(sqlite3.DatabaseError, match="append-only"):
            await db.execute("DELETE FROM balance_ledger")


class TestQueries:
    """조회 테스트"""

    @pytest.mark.asyncio
    async def test_list_entries_newest_first(self, store: BalanceLedgerStore) -> None:
        for i in range(1, 4):
            await store.adjust(GROUP, 1, Decimal(i), EntryType.MANUAL_CREDIT)

        entries = await store.list_entries(GROUP, limit=2)

        assert [e.delta for e in entries] == [Decimal("3"), Decimal("2")]

    @pytest.mark.asyncio
    async def test_list_balances(self, store: BalanceLedgerStore) -> None:
        await store.adjust(-1, 1, Decimal("1"), EntryType.MANUAL_CREDIT)
        await store.adjust(-2, 1, Decimal("2"), EntryType.MANUAL_CREDIT)

        records = await store.list_balances()

        assert {r.entity_id for r in records} == {-1, -2}

    @pytest.mark.asyncio
    async def test_find_entry_empty_operation_id(self, store: BalanceLedgerStore) -> None:
        assert await store.find_entry(GROUP, "") is None
