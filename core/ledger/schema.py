"""
잔고 원장 스키마 초기화

Bot/Web 시작 시 자동으로 원장 테이블과 인덱스, 트리거 생성.
CREATE IF NOT EXISTS 패턴으로 안전하게 동작.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


async def init_ledger_schema(db: "SQLiteAdapter") -> None:
    """원장 스키마 초기화 (테이블 + 인덱스 + 트리거)

    이미 존재하는 경우 안전하게 건너뜀 (IF NOT EXISTS).

    Args:
        db: SQLiteAdapter 인스턴스
    """
    await _create_ledger_tables(db)
    await _create_ledger_indexes(db)
    await _create_append_only_triggers(db)
    await db.commit()
    logger.info("원장 스키마 초기화 완료")


async def _create_ledger_tables(db: "SQLiteAdapter") -> None:
    """원장 테이블 생성"""

    # group_balance: 그룹당 1행 (entity_id가 PK)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS group_balance (
            entity_id            INTEGER PRIMARY KEY,
            balance              TEXT NOT NULL DEFAULT '0',
            min_balance          TEXT NOT NULL DEFAULT '0',
            alert_limit_per_hour INTEGER NOT NULL DEFAULT 0,
            created_at           TEXT NOT NULL,
            updated_at           TEXT NOT NULL
        )
    """)

    # balance_ledger: 추가 전용 감사 기록
    await db.execute("""
        CREATE TABLE IF NOT EXISTS balance_ledger (
            entry_id         INTEGER PRIMARY KEY AUTOINCREMENT,
            entity_id        INTEGER NOT NULL,
            actor_id         INTEGER NOT NULL DEFAULT 0,
            delta            TEXT NOT NULL,
            balance_after    TEXT NOT NULL,
            entry_type       TEXT NOT NULL,
            remark           TEXT NOT NULL DEFAULT '',
            operation_id     TEXT,
            created_at       TEXT NOT NULL
        )
    """)


async def _create_ledger_indexes(db: "SQLiteAdapter") -> None:
    """인덱스 생성"""

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_group_balance_updated
        ON group_balance(updated_at DESC)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS ix_balance_ledger_entity_ts
        ON balance_ledger(entity_id, created_at DESC)
    """)

    # 멱등성: operation_id가 있는 기록만 (entity_id, operation_id) 유일
    await db.execute("""
        CREATE UNIQUE INDEX IF NOT EXISTS ux_balance_ledger_operation
        ON balance_ledger(entity_id, operation_id)
        WHERE operation_id IS NOT NULL AND operation_id != ''
    """)


async def _create_append_only_triggers(db: "SQLiteAdapter") -> None:
    """balance_ledger 수정/삭제 금지 트리거"""

    await db.execute("""
        CREATE TRIGGER IF NOT EXISTS trg_balance_ledger_no_update
        BEFORE UPDATE ON balance_ledger
        BEGIN
            SELECT RAISE(ABORT, 'balance_ledger is append-only');
        END
    """)

    await db.execute("""
        CREATE TRIGGER IF NOT EXISTS trg_balance_ledger_no_delete
        BEFORE DELETE ON balance_ledger
        BEGIN
            SELECT RAISE(ABORT, 'balance_ledger is append-only');
        END
    """)
