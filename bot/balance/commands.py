"""
잔고 명령 처리기

채팅/웹 계층이 호출하는 명령형 진입점.
관리자 권한과 그룹 등급을 확인한 뒤 BalanceService/SettlementEngine에 위임.

| 명령 | 권한 |
|------|------|
| get_balance | 모든 사용자 |
| credit / debit | 관리자 |
| set_min_balance / set_alert_limit | 관리자 |
| trigger_settlement | 관리자 |
| history | 관리자 |
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Callable

from adapters.interfaces import IAuthorizer, IGroupDirectory
from bot.balance.errors import GroupNotFoundError, GroupTierError, PermissionDeniedError
from bot.balance.service import AdjustmentOutcome, BalanceService
from core.domain.groups import Group
from core.domain.settlement import SettlementResult
from core.ledger.types import BalanceRecord, LedgerEntry
from core.utils.timezone import day_key, now_utc, previous_billing_date

if TYPE_CHECKING:
    from bot.settlement.engine import SettlementEngine

logger = logging.getLogger(__name__)


class BalanceCommandHandler:
    """잔고 명령 처리기

    Args:
        service: 잔고 서비스
        engine: 정산 엔진
        directory: 그룹 디렉터리
        authorizer: 권한 확인
        clock: 현재 시각 함수 (테스트용, 기본 UTC now)
    """

    def __init__(
        self,
        service: BalanceService,
        engine: "SettlementEngine",
        directory: IGroupDirectory,
        authorizer: IAuthorizer,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.service = service
        self.engine = engine
        self.directory = directory
        self.authorizer = authorizer
        self._clock = clock

    async def _require_admin(self, actor_id: int) -> None:
        if not await self.authorizer.is_admin(actor_id):
            logger.warning("관리자 권한 없음", extra={"actor_id": actor_id})
            raise PermissionDeniedError(actor_id)

    async def _require_balance_group(self, entity_id: int) -> Group:
        """잔고 보유(UPSTREAM) 그룹 조회"""
        group = await self.directory.get_group(entity_id)
        if group is None:
            raise GroupNotFoundError(entity_id)
        if not group.is_balance_bearing:
            raise GroupTierError(entity_id, group.tier.value)
        return group

    # =========================================================================
    # 조회
    # =========================================================================

    async def get_balance(self, entity_id: int, actor_id: int) -> BalanceRecord:
        await self._require_balance_group(entity_id)
        return await self.service.get(entity_id)

    async def history(
        self,
        entity_id: int,
        actor_id: int,
        limit: int = 20,
    ) -> list[LedgerEntry]:
        await self._require_admin(actor_id)
        await self._require_balance_group(entity_id)
        return await self.service.history(entity_id, limit=limit)

    # =========================================================================
    # 변경
    # =========================================================================

    async def credit(
        self,
        entity_id: int,
        actor_id: int,
        amount: Decimal | str,
        operation_id: str = "",
    ) -> AdjustmentOutcome:
        await self._require_admin(actor_id)
        await self._require_balance_group(entity_id)
        return await self.service.credit(
            entity_id, actor_id, amount, operation_id=operation_id
        )

    async def debit(
        self,
        entity_id: int,
        actor_id: int,
        amount: Decimal | str,
        operation_id: str = "",
    ) -> AdjustmentOutcome:
        await self._require_admin(actor_id)
        await self._require_balance_group(entity_id)
        return await self.service.debit(
            entity_id, actor_id, amount, operation_id=operation_id
        )

    async def set_min_balance(
        self,
        entity_id: int,
        actor_id: int,
        amount: Decimal | str,
    ) -> BalanceRecord:
        await self._require_admin(actor_id)
        await self._require_balance_group(entity_id)
        return await self.service.set_min_balance(entity_id, actor_id, amount)

    async def set_alert_limit(
        self,
        entity_id: int,
        actor_id: int,
        limit: int | str,
    ) -> BalanceRecord:
        await self._require_admin(actor_id)
        await self._require_balance_group(entity_id)
        return await self.service.set_alert_limit(entity_id, actor_id, limit)

    async def trigger_settlement(self, entity_id: int, actor_id: int) -> SettlementResult:
        """수동 정산 (현지 기준 전날)

        같은 일자를 다시 실행해도 operation_id로 이중 차감되지 않음.
        """
        await self._require_admin(actor_id)
        group = await self._require_balance_group(entity_id)

        target_date = previous_billing_date(self._clock(), self.engine.zone)
        logger.info(
            "수동 정산 요청",
            extra={
                "entity_id": entity_id,
                "actor_id": actor_id,
                "target_date": day_key(target_date),
            },
        )
        return await self.engine.settle_daily(group, target_date, actor_id=actor_id)
