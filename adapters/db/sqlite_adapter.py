"""
원장 SQLite 어댑터

Bot과 Web 두 프로세스가 같은 원장 파일을 연다 (WAL).
프로세스 안에서는 쓰기 트랜잭션을 asyncio.Lock으로,
프로세스 사이에서는 BEGIN IMMEDIATE로 직렬화.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from core.constants import PROJECT_ROOT, DatabaseDefaults, Paths

logger = logging.getLogger(__name__)

Row = tuple[Any, ...]


def resolve_db_path(db_path: Path | str | None = None) -> Path:
    """원장 DB 경로 (비어 있으면 기본 경로, 상대 경로는 프로젝트 루트 기준)"""
    if not db_path:
        return Paths.LEDGER_DB

    path = Path(db_path)
    return path if path.is_absolute() else PROJECT_ROOT / path


async def open_ledger_connection(
    db_path: Path,
    busy_timeout_ms: int = DatabaseDefaults.BUSY_TIMEOUT_MS,
) -> aiosqlite.Connection:
    """원장 연결 열기

    상위 디렉토리를 만들고 WAL/동기화/대기 시간 PRAGMA를 적용.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = await aiosqlite.connect(str(db_path))

    pragmas = (
        "PRAGMA journal_mode=WAL",
        f"PRAGMA synchronous={DatabaseDefaults.SYNCHRONOUS}",
        f"PRAGMA busy_timeout={int(busy_timeout_ms)}",
    )
    for pragma in pragmas:
        await conn.execute(pragma)

    logger.info(
        "원장 DB 연결",
        extra={"db_path": str(db_path), "busy_timeout_ms": busy_timeout_ms},
    )
    return conn


class SQLiteAdapter:
    """원장 SQLite 어댑터

    하나의 연결을 여러 코루틴(명령 처리, 스케줄러 워커, 감시자 스캔)이 공유.
    읽기는 그대로 실행하고, 잔고 변경은 transaction() 안에서만 수행.

    Args:
        db_path: DB 파일 경로 (상대 경로는 프로젝트 루트 기준)
        busy_timeout_ms: 다른 프로세스의 쓰기 잠금 대기 시간

    사용 예시:
    ```python
    async with SQLiteAdapter(config.database_path) as db:
        await init_schema(db)
        async with db.transaction() as conn:
            await conn.execute("UPDATE group_balance SET ...")
    ```
    """

    def __init__(
        self,
        db_path: Path | str | None = None,
        busy_timeout_ms: int = DatabaseDefaults.BUSY_TIMEOUT_MS,
    ):
        self.db_path = resolve_db_path(db_path)
        self.busy_timeout_ms = busy_timeout_ms
        self._conn: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    def _connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError(f"원장 DB에 연결되지 않았습니다: {self.db_path}")
        return self._conn

    async def connect(self) -> None:
        if self._conn is None:
            self._conn = await open_ledger_connection(self.db_path, self.busy_timeout_ms)

    async def close(self) -> None:
        if self._conn is None:
            return
        await self._conn.close()
        self._conn = None
        logger.info("원장 DB 연결 종료", extra={"db_path": str(self.db_path)})

    # -------------------------------------------------------------------------
    # 실행/조회
    # -------------------------------------------------------------------------

    async def execute(self, sql: str, parameters: Row | None = None) -> aiosqlite.Cursor:
        return await self._connection().execute(sql, parameters or ())

    async def fetchone(self, sql: str, parameters: Row | None = None) -> Row | None:
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(self, sql: str, parameters: Row | None = None) -> list[Row]:
        cursor = await self.execute(sql, parameters)
        return list(await cursor.fetchall())

    async def commit(self) -> None:
        """스키마 생성처럼 transaction() 밖에서 실행한 쓰기 커밋"""
        await self._connection().commit()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """쓰기 트랜잭션

        블록이 끝나면 커밋, 예외(취소 포함)가 나면 롤백 후 다시 발생.
        잔고 읽기-수정-쓰기가 다른 코루틴과 섞이지 않음.
        """
        conn = self._connection()
        async with self._write_lock:
            if not conn.in_transaction:
                await conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    # -------------------------------------------------------------------------
    # 진단
    # -------------------------------------------------------------------------

    async def journal_mode(self) -> str:
        row = await self.fetchone("PRAGMA journal_mode")
        return str(row[0]).lower() if row else ""

    async def table_names(self) -> set[str]:
        rows = await self.fetchall("SELECT name FROM sqlite_master WHERE type = 'table'")
        return {row[0] for row in rows}

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """원장 스키마 생성 (여러 번 호출해도 안전)"""
    from core.ledger.schema import init_ledger_schema

    await init_ledger_schema(adapter)
