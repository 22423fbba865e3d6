"""
잔고 원장 타입 정의

EntryType, BalanceRecord, LedgerEntry 등 원장에서 사용하는 타입
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from core.constants import WatcherDefaults


class EntryType(str, Enum):
    """원장 기록 유형

    닫힌 집합. str을 상속하여 DB/JSON 직렬화 가능.
    """

    MANUAL_CREDIT = "manual_add"  # 관리자 수동 충전
    MANUAL_DEBIT = "manual_subtract"  # 관리자 수동 차감
    DAILY_SETTLEMENT = "daily_settlement"  # 일일 정산 차감
    THRESHOLD_CHANGE = "set_min_balance"  # 임계값/알림 한도 변경 (delta 0)


@dataclass(frozen=True)
class BalanceRecord:
    """그룹 잔고 레코드 (그룹당 1개)

    Attributes:
        entity_id: 그룹 ID
        balance: 현재 잔고 (음수 허용)
        min_balance: 최저 잔고 임계값 (0이면 감시 비활성화)
        alert_limit_per_hour: 시간당 알림 상한 (0이면 기본값)
        created_at: 생성 시각 (UTC)
        updated_at: 수정 시각 (UTC)
    """

    entity_id: int
    balance: Decimal = Decimal("0")
    min_balance: Decimal = Decimal("0")
    alert_limit_per_hour: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def empty(cls, entity_id: int) -> "BalanceRecord":
        """레코드가 없는 그룹의 기본값 (잔고 0, 임계값 0)"""
        return cls(entity_id=entity_id)

    @property
    def monitoring_enabled(self) -> bool:
        """최저 잔고 감시 활성화 여부"""
        return self.min_balance > 0

    @property
    def is_low(self) -> bool:
        """잔고가 임계값 미만인지 (감시 비활성화 시 항상 False)"""
        return self.monitoring_enabled and self.balance < self.min_balance

    def effective_alert_limit(
        self,
        default: int = WatcherDefaults.ALERT_LIMIT_PER_HOUR,
    ) -> int:
        """적용할 시간당 알림 상한"""
        if self.alert_limit_per_hour <= 0:
            return default
        return self.alert_limit_per_hour


@dataclass(frozen=True)
class LedgerEntry:
    """원장 기록 (추가 전용, 수정/삭제 불가)

    Attributes:
        entry_id: 기록 ID
        entity_id: 그룹 ID
        actor_id: 실행자 ID (시스템은 0)
        delta: 변동액 (부호 포함)
        balance_after: 적용 후 잔고 스냅샷
        entry_type: 기록 유형
        remark: 비고
        operation_id: 멱등성 키 (없으면 빈 문자열)
        created_at: 생성 시각 (UTC)
    """

    entry_id: int
    entity_id: int
    actor_id: int
    delta: Decimal
    balance_after: Decimal
    entry_type: EntryType
    remark: str
    operation_id: str
    created_at: datetime


@dataclass(frozen=True)
class AdjustResult:
    """잔고 변동 결과

    적용 여부는 쓰기 트랜잭션 안에서 판정됨.

    Attributes:
        record: 변동 후 (재실행이면 현재) 잔고 레코드
        entry: 이번에 기록된 원장 항목, 재실행이면 기존 항목 (조회만 한 경우 None)
        replayed: 같은 operation_id가 이미 있어 아무것도 쓰지 않았는지
    """

    record: BalanceRecord
    entry: LedgerEntry | None = None
    replayed: bool = False
