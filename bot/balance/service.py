"""
잔고 서비스

충전/차감/임계값 설정의 입력 검증 후 원장 저장소 호출.
검증 실패는 저장소 접근 전에 InvalidAmountError로 거부.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from bot.balance.errors import InvalidAmountError
from core.ledger.store import BalanceLedgerStore
from core.ledger.types import BalanceRecord, EntryType, LedgerEntry
from core.utils.amounts import ZERO, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdjustmentOutcome:
    """충전/차감 결과

    Attributes:
        record: 변동 후 잔고 레코드
        should_warn: 최저 잔고 미만 경고 필요 여부
    """

    record: BalanceRecord
    should_warn: bool


def _parse_amount(amount: Decimal | int | float | str, field: str = "amount") -> Decimal:
    try:
        return to_decimal(amount)
    except ValueError as e:
        raise InvalidAmountError(f"{field} 형식이 올바르지 않습니다: {amount!r}") from e


class BalanceService:
    """잔고 서비스

    Args:
        store: 원장 저장소
    """

    def __init__(self, store: BalanceLedgerStore):
        self.store = store

    async def get(self, entity_id: int) -> BalanceRecord:
        """잔고 조회 (레코드가 없으면 잔고 0, 임계값 0)"""
        record = await self.store.get_balance(entity_id)
        return record or BalanceRecord.empty(entity_id)

    async def credit(
        self,
        entity_id: int,
        actor_id: int,
        amount: Decimal | int | str,
        operation_id: str = "",
        remark: str = "",
    ) -> AdjustmentOutcome:
        """충전

        Raises:
            InvalidAmountError: amount <= 0
        """
        value = _parse_amount(amount)
        if value <= 0:
            raise InvalidAmountError("충전 금액은 0보다 커야 합니다")

        record = await self.store.adjust(
            entity_id=entity_id,
            actor_id=actor_id,
            delta=value,
            entry_type=EntryType.MANUAL_CREDIT,
            remark=remark,
            operation_id=operation_id,
        )
        return AdjustmentOutcome(record=record, should_warn=record.is_low)

    async def debit(
        self,
        entity_id: int,
        actor_id: int,
        amount: Decimal | int | str,
        operation_id: str = "",
        remark: str = "",
    ) -> AdjustmentOutcome:
        """차감 (잔고가 음수가 되는 것도 허용)

        Raises:
            InvalidAmountError: amount <= 0
        """
        value = _parse_amount(amount)
        if value <= 0:
            raise InvalidAmountError("차감 금액은 0보다 커야 합니다")

        record = await self.store.adjust(
            entity_id=entity_id,
            actor_id=actor_id,
            delta=-value,
            entry_type=EntryType.MANUAL_DEBIT,
            remark=remark,
            operation_id=operation_id,
        )
        return AdjustmentOutcome(record=record, should_warn=record.is_low)

    async def set_min_balance(
        self,
        entity_id: int,
        actor_id: int,
        amount: Decimal | int | str,
    ) -> BalanceRecord:
        """최저 잔고 설정 (0이면 감시 해제)

        Raises:
            InvalidAmountError: amount < 0
        """
        value = _parse_amount(amount, field="min_balance")
        if value < ZERO:
            raise InvalidAmountError("최저 잔고는 0 이상이어야 합니다")

        return await self.store.set_min_balance(entity_id, value, actor_id=actor_id)

    async def set_alert_limit(
        self,
        entity_id: int,
        actor_id: int,
        limit: int | str,
    ) -> BalanceRecord:
        """시간당 알림 상한 설정

        Raises:
            InvalidAmountError: 정수가 아니거나 1 미만
        """
        if isinstance(limit, bool):
            raise InvalidAmountError("알림 상한은 정수여야 합니다")
        try:
            value = int(str(limit).strip())
        except ValueError as e:
            raise InvalidAmountError(f"알림 상한은 정수여야 합니다: {limit!r}") from e
        if value < 1:
            raise InvalidAmountError("알림 상한은 1 이상이어야 합니다")

        return await self.store.set_alert_limit(entity_id, value, actor_id=actor_id)

    async def list_balances(self) -> list[BalanceRecord]:
        """전체 그룹 잔고"""
        return await self.store.list_balances()

    async def history(self, entity_id: int, limit: int = 20) -> list[LedgerEntry]:
        """최근 원장 기록 (최신순)

        Raises:
            InvalidAmountError: limit이 1~200 범위를 벗어남
        """
        if not 1 <= limit <= 200:
            raise InvalidAmountError("limit은 1~200 사이여야 합니다")
        return await self.store.list_entries(entity_id, limit=limit)
