"""
잔고 원장 저장소

그룹 잔고(group_balance)와 추가 전용 원장(balance_ledger) 저장 및 조회.
모든 쓰기는 하나의 트랜잭션 안에서 잔고 갱신 + 원장 기록을 함께 수행.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.ledger.types import AdjustResult, BalanceRecord, EntryType, LedgerEntry
from core.utils.amounts import ZERO, to_decimal
from core.utils.idempotency import normalize_operation_id

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter
    from core.ledger.changes import BalanceChangeBroker

logger = logging.getLogger(__name__)

_RECORD_COLUMNS = (
    "entity_id, balance, min_balance, alert_limit_per_hour, created_at, updated_at"
)
_ENTRY_COLUMNS = (
    "entry_id, entity_id, actor_id, delta, balance_after, "
    "entry_type, remark, operation_id, created_at"
)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_ts(raw: str | None) -> datetime | None:
    if not raw:
        return None
    return datetime.fromisoformat(raw)


def _row_to_record(row: tuple[Any, ...]) -> BalanceRecord:
    return BalanceRecord(
        entity_id=int(row[0]),
        balance=Decimal(row[1]),
        min_balance=Decimal(row[2]),
        alert_limit_per_hour=int(row[3]),
        created_at=_parse_ts(row[4]),
        updated_at=_parse_ts(row[5]),
    )


def _row_to_entry(row: tuple[Any, ...]) -> LedgerEntry:
    return LedgerEntry(
        entry_id=int(row[0]),
        entity_id=int(row[1]),
        actor_id=int(row[2]),
        delta=Decimal(row[3]),
        balance_after=Decimal(row[4]),
        entry_type=EntryType(row[5]),
        remark=row[6] or "",
        operation_id=row[7] or "",
        created_at=_parse_ts(row[8]),
    )


class BalanceLedgerStore:
    """그룹 잔고 원장 저장소

    - adjust: 잔고 변동 + 원장 기록 (operation_id로 멱등)
    - set_min_balance / set_alert_limit: 임계값 변경 + 0원 원장 기록
    - 쓰기 성공 시 broker로 변경 발행 (실패해도 쓰기는 유지)

    Args:
        db: SQLite 어댑터
        broker: 잔고 변경 브로커 (없으면 발행 생략)
    """

    def __init__(self, db: SQLiteAdapter, broker: BalanceChangeBroker | None = None):
        self.db = db
        self.broker = broker

    # =========================================================================
    # 조회
    # =========================================================================

    async def get_balance(self, entity_id: int) -> BalanceRecord | None:
        """잔고 레코드 조회 (없으면 None)"""
        row = await self.db.fetchone(
            f"SELECT {_RECORD_COLUMNS} FROM group_balance WHERE entity_id = ?",
            (entity_id,),
        )
        return _row_to_record(row) if row else None

    async def list_balances(self) -> list[BalanceRecord]:
        """전체 잔고 레코드 조회 (entity_id 순)"""
        rows = await self.db.fetchall(
            f"SELECT {_RECORD_COLUMNS} FROM group_balance ORDER BY entity_id"
        )
        return [_row_to_record(row) for row in rows]

    async def find_entry(self, entity_id: int, operation_id: str) -> LedgerEntry | None:
        """operation_id로 원장 기록 조회"""
        op_id = normalize_operation_id(operation_id)
        if not op_id:
            return None

        row = await self.db.fetchone(
            f"""
            SELECT {_ENTRY_COLUMNS} FROM balance_ledger
            WHERE entity_id = ? AND operation_id = ?
            """,
            (entity_id, op_id),
        )
        return _row_to_entry(row) if row else None

    async def _get_entry(self, entry_id: int) -> LedgerEntry | None:
        row = await self.db.fetchone(
            f"SELECT {_ENTRY_COLUMNS} FROM balance_ledger WHERE entry_id = ?",
            (entry_id,),
        )
        return _row_to_entry(row) if row else None

    async def list_entries(self, entity_id: int, limit: int = 20) -> list[LedgerEntry]:
        """최근 원장 기록 조회 (최신순)"""
        rows = await self.db.fetchall(
            f"""
            SELECT {_ENTRY_COLUMNS} FROM balance_ledger
            WHERE entity_id = ?
            ORDER BY entry_id DESC
            LIMIT ?
            """,
            (entity_id, limit),
        )
        return [_row_to_entry(row) for row in rows]

    async def count_entries(
        self,
        entity_id: int,
        entry_type: EntryType | None = None,
    ) -> int:
        """원장 기록 수"""
        sql = "SELECT COUNT(*) FROM balance_ledger WHERE entity_id = ?"
        params: list[Any] = [entity_id]

        if entry_type is not None:
            sql += " AND entry_type = ?"
            params.append(entry_type.value)

        row = await self.db.fetchone(sql, tuple(params))
        return int(row[0]) if row else 0

    # =========================================================================
    # 쓰기
    # =========================================================================

    async def adjust(
        self,
        entity_id: int,
        actor_id: int,
        delta: Decimal,
        entry_type: EntryType,
        remark: str = "",
        operation_id: str = "",
    ) -> BalanceRecord:
        """잔고 변동 후 레코드만 반환 (apply_adjustment 참고)"""
        result = await self.apply_adjustment(
            entity_id, actor_id, delta, entry_type, remark=remark, operation_id=operation_id
        )
        return result.record

    async def apply_adjustment(
        self,
        entity_id: int,
        actor_id: int,
        delta: Decimal,
        entry_type: EntryType,
        remark: str = "",
        operation_id: str = "",
    ) -> AdjustResult:
        """잔고 변동 (원자적, 멱등)

        같은 (entity_id, operation_id) 기록이 이미 있으면 아무것도 쓰지 않고
        replayed=True와 기존 원장 항목을 반환. 판정과 쓰기는 같은 트랜잭션이므로
        동시에 들어온 두 요청 중 정확히 하나만 적용됨.
        operation_id 없이 delta가 0이면 조회만 수행.

        Args:
            entity_id: 그룹 ID
            actor_id: 실행자 ID (시스템은 0)
            delta: 변동액 (충전 +, 차감 -)
            entry_type: 원장 기록 유형
            remark: 비고
            operation_id: 멱등성 키

        Returns:
            AdjustResult
        """
        delta = to_decimal(delta)
        op_id = normalize_operation_id(operation_id)

        if delta == 0 and not op_id:
            record = await self.get_balance(entity_id)
            return AdjustResult(record=record or BalanceRecord.empty(entity_id))

        async with self.db.transaction():
            existing = await self.find_entry(entity_id, op_id) if op_id else None
            if existing is not None:
                record = await self.get_balance(entity_id) or BalanceRecord.empty(entity_id)
                result = AdjustResult(record=record, entry=existing, replayed=True)
            else:
                result = await self._apply_delta(
                    entity_id, actor_id, delta, entry_type, remark, op_id
                )

        if result.replayed:
            logger.info(
                "중복 operation_id: 원장 변경 없음",
                extra={"entity_id": entity_id, "operation_id": op_id},
            )
            return result

        logger.info(
            "잔고 변동",
            extra={
                "entity_id": entity_id,
                "actor_id": actor_id,
                "delta": str(delta),
                "balance": str(result.record.balance),
                "entry_type": entry_type.value,
                "operation_id": op_id,
            },
        )
        self._publish(result.record)
        return result

    async def set_min_balance(
        self,
        entity_id: int,
        min_balance: Decimal,
        actor_id: int = 0,
    ) -> BalanceRecord:
        """최저 잔고 임계값 설정 (잔고는 변하지 않음)"""
        value = to_decimal(min_balance)
        record = await self._apply_setting(
            entity_id,
            actor_id,
            "UPDATE group_balance SET min_balance = ?, updated_at = ? WHERE entity_id = ?",
            str(value),
            remark=f"set_min_balance={value}",
        )
        logger.info(
            "최저 잔고 설정",
            extra={"entity_id": entity_id, "actor_id": actor_id, "min_balance": str(value)},
        )
        self._publish(record)
        return record

    async def set_alert_limit(
        self,
        entity_id: int,
        limit: int,
        actor_id: int = 0,
    ) -> BalanceRecord:
        """시간당 알림 상한 설정"""
        record = await self._apply_setting(
            entity_id,
            actor_id,
            "UPDATE group_balance SET alert_limit_per_hour = ?, updated_at = ? WHERE entity_id = ?",
            int(limit),
            remark=f"set_alert_limit={int(limit)}",
        )
        logger.info(
            "알림 상한 설정",
            extra={"entity_id": entity_id, "actor_id": actor_id, "alert_limit": limit},
        )
        self._publish(record)
        return record

    # =========================================================================
    # 내부
    # =========================================================================

    async def _ensure_record(self, entity_id: int, now: str) -> None:
        """레코드가 없으면 잔고 0으로 생성"""
        await self.db.execute(
            """
            INSERT OR IGNORE INTO group_balance (
                entity_id, balance, min_balance, alert_limit_per_hour,
                created_at, updated_at
            ) VALUES (?, '0', '0', 0, ?, ?)
            """,
            (entity_id, now, now),
        )

    async def _append_entry(
        self,
        entity_id: int,
        actor_id: int,
        delta: Decimal,
        balance_after: Decimal,
        entry_type: EntryType,
        remark: str,
        operation_id: str,
        now: str,
    ) -> int:
        """원장 기록 추가 (entry_id 반환)"""
        cursor = await self.db.execute(
            """
            INSERT INTO balance_ledger (
                entity_id, actor_id, delta, balance_after,
                entry_type, remark, operation_id, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entity_id,
                actor_id,
                str(delta),
                str(balance_after),
                entry_type.value,
                remark,
                operation_id or None,
                now,
            ),
        )
        return int(cursor.lastrowid)

    async def _apply_delta(
        self,
        entity_id: int,
        actor_id: int,
        delta: Decimal,
        entry_type: EntryType,
        remark: str,
        operation_id: str,
    ) -> AdjustResult:
        """트랜잭션 내부: 잔고 갱신 + 원장 기록"""
        now = _utc_now()
        await self._ensure_record(entity_id, now)

        current = await self.get_balance(entity_id)
        balance = current.balance if current else ZERO
        new_balance = balance + delta

        await self.db.execute(
            "UPDATE group_balance SET balance = ?, updated_at = ? WHERE entity_id = ?",
            (str(new_balance), now, entity_id),
        )
        entry_id = await self._append_entry(
            entity_id, actor_id, delta, new_balance, entry_type, remark, operation_id, now
        )

        record = await self.get_balance(entity_id) or BalanceRecord.empty(entity_id)
        return AdjustResult(record=record, entry=await self._get_entry(entry_id))

    async def _apply_setting(
        self,
        entity_id: int,
        actor_id: int,
        update_sql: str,
        value: Any,
        remark: str,
    ) -> BalanceRecord:
        """임계값 갱신 + 0원 THRESHOLD_CHANGE 기록 (단일 트랜잭션)"""
        async with self.db.transaction():
            now = _utc_now()
            await self._ensure_record(entity_id, now)
            await self.db.execute(update_sql, (value, now, entity_id))

            record = await self.get_balance(entity_id) or BalanceRecord.empty(entity_id)
            await self._append_entry(
                entity_id,
                actor_id,
                ZERO,
                record.balance,
                EntryType.THRESHOLD_CHANGE,
                remark,
                "",
                now,
            )

        return record

    def _publish(self, record: BalanceRecord) -> None:
        """변경 발행 (실패해도 쓰기 결과에 영향 없음)"""
        if self.broker is None:
            return
        try:
            self.broker.publish(record)
        except Exception as e:
            logger.warning(
                f"잔고 변경 발행 실패: {e}",
                extra={"entity_id": record.entity_id},
            )
