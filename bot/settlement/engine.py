"""
일일 정산 엔진

그룹에 바인딩된 모든 결제 인터페이스의 하루 거래액을 조회해
요율만큼의 차감액을 계산하고, 원장에 단 한 번의 차감으로 반영.

- 한 인터페이스라도 조회에 실패하면 원장에 아무것도 쓰지 않음
- operation_id = settlement:{entity_id}:{YYYY-MM-DD} 로 같은 일자 이중 차감 방지
"""

import asyncio
import logging
from datetime import date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

from adapters.interfaces import IBillingClient
from adapters.models import DailySummary
from bot.balance.errors import BillingQueryError, BillingUnavailableError, NoBindingsError
from core.constants import Defaults
from core.domain.groups import Group, InterfaceBinding
from core.domain.settlement import SettlementItem, SettlementResult
from core.ledger.store import BalanceLedgerStore
from core.ledger.types import BalanceRecord, EntryType, LedgerEntry
from core.utils.amounts import ZERO, parse_gross_amount
from core.utils.idempotency import make_settlement_operation_id
from core.utils.timezone import day_key, get_zone, local_day_range, normalize_summary_date

logger = logging.getLogger(__name__)

_HUNDRED = Decimal("100")


def extract_gross_amount(summary: DailySummary | None, target_date: date) -> Decimal:
    """요약에서 대상 일자의 거래액 추출 (없으면 0)

    날짜 문자열을 정규화해 첫 번째로 일치하는 항목을 사용.
    """
    if summary is None:
        return ZERO

    key = day_key(target_date)
    for item in summary.items:
        if item is None:
            continue
        if normalize_summary_date(item.date) != key:
            continue
        return parse_gross_amount(item.gross_amount)
    return ZERO


class SettlementEngine:
    """일일 정산 엔진

    Args:
        store: 원장 저장소
        billing: 빌링 클라이언트 (None이면 미설정)
        zone: 정산 달력 타임존 (이름 또는 ZoneInfo)
    """

    def __init__(
        self,
        store: BalanceLedgerStore,
        billing: IBillingClient | None,
        zone: str | ZoneInfo = Defaults.TIMEZONE,
    ):
        self.store = store
        self.billing = billing
        self.zone = zone if isinstance(zone, ZoneInfo) else get_zone(zone)

    async def settle_daily(
        self,
        group: Group,
        target_date: date,
        actor_id: int = Defaults.SYSTEM_ACTOR_ID,
    ) -> SettlementResult:
        """그룹의 하루치 정산

        Args:
            group: 정산 대상 그룹
            target_date: 정산 일자 (현지 달력)
            actor_id: 실행자 ID (스케줄러는 0)

        Returns:
            정산 결과 (이미 정산된 일자면 replayed=True)

        Raises:
            NoBindingsError: 바인딩 없음
            BillingUnavailableError: 빌링 클라이언트 미설정
            BillingQueryError: 인터페이스 조회 실패
        """
        entity_id = group.group_id
        if not group.bindings:
            raise NoBindingsError(entity_id)
        if self.billing is None:
            raise BillingUnavailableError()

        operation_id = make_settlement_operation_id(entity_id, target_date)

        existing = await self.store.find_entry(entity_id, operation_id)
        if existing is not None:
            logger.info(
                "이미 정산된 일자: 빌링 조회 생략",
                extra={"entity_id": entity_id, "target_date": day_key(target_date)},
            )
            record = await self.store.get_balance(entity_id) or BalanceRecord.empty(entity_id)
            return self._replayed_result(group, target_date, operation_id, existing, record)

        start, end = local_day_range(target_date, self.zone)

        items: list[SettlementItem] = []
        for binding in group.bindings:
            items.append(await self._settle_binding(binding, start, end, target_date))

        total = sum((item.deduction for item in items), ZERO)
        delta = -total if total else ZERO

        # 같은 일자 정산이 동시에 실행되면 트랜잭션 안에서 하나만 적용됨
        applied = await self.store.apply_adjustment(
            entity_id=entity_id,
            actor_id=actor_id,
            delta=delta,
            entry_type=EntryType.DAILY_SETTLEMENT,
            remark=day_key(target_date),
            operation_id=operation_id,
        )
        if applied.replayed:
            logger.info(
                "동시 정산 감지: 다른 실행이 먼저 기록함",
                extra={"entity_id": entity_id, "target_date": day_key(target_date)},
            )
            return self._replayed_result(
                group, target_date, operation_id, applied.entry, applied.record
            )

        logger.info(
            "일일 정산 완료",
            extra={
                "entity_id": entity_id,
                "target_date": day_key(target_date),
                "deduction": str(total),
                "balance": str(applied.record.balance),
                "interfaces": len(items),
            },
        )

        return SettlementResult(
            entity_id=entity_id,
            target_date=target_date,
            deduction=total,
            balance=applied.record,
            operation_id=operation_id,
            items=tuple(items),
        )

    @staticmethod
    def _replayed_result(
        group: Group,
        target_date: date,
        operation_id: str,
        entry: LedgerEntry | None,
        record: BalanceRecord,
    ) -> SettlementResult:
        """이미 기록된 정산 (차감액은 기존 원장 항목 기준)"""
        deduction = -entry.delta if entry is not None and entry.delta else ZERO
        return SettlementResult(
            entity_id=group.group_id,
            target_date=target_date,
            deduction=deduction,
            balance=record,
            operation_id=operation_id,
            replayed=True,
        )

    async def _settle_binding(
        self,
        binding: InterfaceBinding,
        start: datetime,
        end: datetime,
        target_date: date,
    ) -> SettlementItem:
        """인터페이스 1개 조회 및 차감액 계산"""
        assert self.billing is not None
        try:
            summary = await self.billing.get_daily_summary(binding.interface_id, start, end)
        except asyncio.TimeoutError:
            raise
        except Exception as e:
            logger.warning(
                f"빌링 조회 실패: {e}",
                extra={"interface_id": binding.interface_id},
            )
            raise BillingQueryError(binding.interface_id, e) from e

        gross = extract_gross_amount(summary, target_date)
        rate = binding.rate_percent
        return SettlementItem(
            interface_id=binding.interface_id,
            interface_name=binding.display_name,
            rate_percent=rate,
            gross_amount=gross,
            deduction=gross * rate / _HUNDRED,
        )
