"""
원장 SQLite 어댑터 테스트
"""

import asyncio
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import (
    SQLiteAdapter,
    init_schema,
    open_ledger_connection,
    resolve_db_path,
)
from core.constants import PROJECT_ROOT, Paths


class TestResolveDbPath:
    def test_empty_uses_default(self) -> None:
        assert resolve_db_path() == Paths.LEDGER_DB
        assert resolve_db_path("") == Paths.LEDGER_DB

    def test_relative_to_project_root(self) -> None:
        assert resolve_db_path("data/other.db") == PROJECT_ROOT / "data" / "other.db"

    def test_absolute_kept(self, tmp_path: Path) -> None:
        assert resolve_db_path(str(tmp_path / "x.db")) == tmp_path / "x.db"


class TestOpenLedgerConnection:
    @pytest.mark.asyncio
    async def test_pragmas_applied(self, tmp_path: Path) -> None:
        """WAL, busy_timeout 적용 + 상위 디렉토리 생성"""
        db_path = tmp_path / "nested" / "ledger.db"

        conn = await open_ledger_connection(db_path, busy_timeout_ms=1234)
        try:
            mode = await (await conn.execute("PRAGMA journal_mode")).fetchone()
            timeout = await (await conn.execute("PRAGMA busy_timeout")).fetchone()
        finally:
            await conn.close()

        assert db_path.parent.is_dir()
        assert mode[0].lower() == "wal"
        assert timeout[0] == 1234


class TestSQLiteAdapter:
    @pytest_asyncio.fixture
    async def adapter(self, tmp_path: Path) -> SQLiteAdapter:
        adapter = SQLiteAdapter(tmp_path / "ledger.db")
        await adapter.connect()
        await adapter.execute("CREATE TABLE wallet (id INTEGER PRIMARY KEY, amount INTEGER)")
        await adapter.execute("INSERT INTO wallet (id, amount) VALUES (1, 0)")
        await adapter.commit()
        yield adapter
        await adapter.close()

    @pytest.mark.asyncio
    async def test_lifecycle(self, tmp_path: Path) -> None:
        async with SQLiteAdapter(tmp_path / "life.db") as adapter:
            assert adapter.is_connected is True
            assert await adapter.journal_mode() == "wal"

        assert adapter.is_connected is False

    @pytest.mark.asyncio
    async def test_requires_connection(self, tmp_path: Path) -> None:
        adapter = SQLiteAdapter(tmp_path / "idle.db")

        with pytest.raises(RuntimeError):
            await adapter.fetchone("SELECT 1")

        with pytest.raises(RuntimeError):
            async with adapter.transaction():
                pass

    @pytest.mark.asyncio
    async def test_transaction_commits(self, adapter: SQLiteAdapter) -> None:
        async with adapter.transaction() as conn:
            await conn.execute("UPDATE wallet SET amount = amount + 5 WHERE id = 1")

        row = await adapter.fetchone("SELECT amount FROM wallet WHERE id = ?", (1,))
        assert row[0] == 5

    @pytest.mark.asyncio
    async def test_transaction_rolls_back_on_error(self, adapter: SQLiteAdapter) -> None:
        """예외 시 블록 안의 모든 쓰기 취소"""
        with pytest.raises(ValueError):
            async with adapter.transaction() as conn:
                await conn.execute("UPDATE wallet SET amount = 100 WHERE id = 1")
                await conn.execute("INSERT INTO wallet (id, amount) VALUES (2, 1)")
                raise ValueError("중단")

        rows = await adapter.fetchall("SELECT id, amount FROM wallet")
        assert rows == [(1, 0)]

    @pytest.mark.asyncio
    async def test_concurrent_read_modify_write(self, adapter: SQLiteAdapter) -> None:
        """동시 트랜잭션 20개의 증가분이 모두 반영"""

        async def add_one() -> None:
            async with adapter.transaction() as conn:
                cursor = await conn.execute("SELECT amount FROM wallet WHERE id = 1")
                (amount,) = await cursor.fetchone()
                await asyncio.sleep(0)
                await conn.execute("UPDATE wallet SET amount = ? WHERE id = 1", (amount + 1,))

        await asyncio.gather(*(add_one() for _ in range(20)))

        row = await adapter.fetchone("SELECT amount FROM wallet WHERE id = 1")
        assert row[0] == 20


class TestInitSchema:
    @pytest.mark.asyncio
    async def test_creates_tables_idempotently(self, tmp_path: Path) -> None:
        async with SQLiteAdapter(tmp_path / "schema.db") as adapter:
            await init_schema(adapter)
            await init_schema(adapter)

            assert {"group_balance", "balance_ledger"} <= await adapter.table_names()

    @pytest.mark.asyncio
    async def test_operation_id_unique_per_entity(self, tmp_path: Path) -> None:
        """(entity_id, operation_id) 유일, operation_id 없는 기록은 제약 없음"""
        insert = """
            INSERT INTO balance_ledger (
                entity_id, delta, balance_after, entry_type, operation_id, created_at
            ) VALUES (?, '1', '1', 'manual_add', ?, '2026-01-01T00:00:00+00:00')
        """
        async with SQLiteAdapter(tmp_path / "unique.db") as adapter:
            await init_schema(adapter)

            for entity_id, operation_id in ((1, "op"), (2, "op"), (1, None), (1, None)):
                await adapter.execute(insert, (entity_id, operation_id))
            await adapter.commit()

            with pytest.raises(aiosqlite.IntegrityError):
                await adapter.execute(insert, (1, "op"))

    @pytest.mark.asyncio
    async def test_ledger_is_append_only(self, tmp_path: Path) -> None:
        async with SQLiteAdapter(tmp_path / "append.db") as adapter:
            await init_schema(adapter)
            await adapter.execute(
                """
                INSERT INTO balance_ledger (
                    entity_id, delta, balance_after, entry_type, created_at
                ) VALUES (1, '5', '5', 'manual_add', '2026-01-01T00:00:00+00:00')
                """
            )
            await adapter.commit()

            with pytest.raises(aiosqlite.IntegrityError):
                await adapter.execute("UPDATE balance_ledger SET delta = '9'")
            with pytest.raises(aiosqlite.IntegrityError):
                await adapter.execute("DELETE FROM balance_ledger")
