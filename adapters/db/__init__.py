"""
데이터베이스 어댑터

원장 SQLite 연결 (WAL, 쓰기 트랜잭션 직렬화).
"""

from adapters.db.sqlite_adapter import (
    SQLiteAdapter,
    init_schema,
    open_ledger_connection,
    resolve_db_path,
)

__all__ = [
    "SQLiteAdapter",
    "init_schema",
    "open_ledger_connection",
    "resolve_db_path",
]
