"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화.
금액은 정밀도 보존을 위해 문자열로 반환.
"""

from pydantic import BaseModel, Field

from core.domain.settlement import SettlementItem, SettlementResult
from core.ledger.types import BalanceRecord, LedgerEntry
from core.utils.timezone import day_key


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    version: str = Field(..., description="버전")
    ready: bool = Field(..., description="명령 처리기 초기화 여부")


class BalanceResponse(BaseModel):
    """그룹 잔고 응답"""

    entity_id: int = Field(..., description="그룹 ID")
    balance: str = Field(..., description="현재 잔고")
    min_balance: str = Field(..., description="최저 잔고 (0이면 감시 안 함)")
    alert_limit_per_hour: int = Field(..., description="시간당 알림 상한 (0이면 기본값)")
    is_low: bool = Field(..., description="최저 잔고 미만 여부")
    updated_at: str | None = Field(default=None, description="마지막 변경 시간 (UTC)")

    @classmethod
    def from_record(cls, record: BalanceRecord) -> "BalanceResponse":
        return cls(
            entity_id=record.entity_id,
            balance=str(record.balance),
            min_balance=str(record.min_balance),
            alert_limit_per_hour=record.alert_limit_per_hour,
            is_low=record.is_low,
            updated_at=record.updated_at.isoformat() if record.updated_at else None,
        )


class AdjustResponse(BaseModel):
    """충전/차감 응답"""

    balance: BalanceResponse
    should_warn: bool = Field(..., description="최저 잔고 미만 경고")


class SettlementItemResponse(BaseModel):
    """인터페이스별 정산 내역"""

    interface_id: str
    interface_name: str
    rate_percent: str
    gross_amount: str
    deduction: str

    @classmethod
    def from_item(cls, item: SettlementItem) -> "SettlementItemResponse":
        return cls(
            interface_id=item.interface_id,
            interface_name=item.interface_name,
            rate_percent=str(item.rate_percent),
            gross_amount=str(item.gross_amount),
            deduction=str(item.deduction),
        )


class SettlementResponse(BaseModel):
    """정산 결과 응답"""

    entity_id: int
    target_date: str = Field(..., description="정산 일자 (YYYY-MM-DD)")
    deduction: str = Field(..., description="총 차감액")
    balance: BalanceResponse
    operation_id: str
    replayed: bool = Field(..., description="이미 정산된 일자 (추가 차감 없음)")
    items: list[SettlementItemResponse]

    @classmethod
    def from_result(cls, result: SettlementResult) -> "SettlementResponse":
        return cls(
            entity_id=result.entity_id,
            target_date=day_key(result.target_date),
            deduction=str(result.deduction),
            balance=BalanceResponse.from_record(result.balance),
            operation_id=result.operation_id,
            replayed=result.replayed,
            items=[SettlementItemResponse.from_item(i) for i in result.items],
        )


class LedgerEntryResponse(BaseModel):
    """원장 기록 응답"""

    entry_id: int
    actor_id: int
    delta: str
    balance_after: str
    entry_type: str
    remark: str
    operation_id: str
    created_at: str

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "LedgerEntryResponse":
        return cls(
            entry_id=entry.entry_id,
            actor_id=entry.actor_id,
            delta=str(entry.delta),
            balance_after=str(entry.balance_after),
            entry_type=entry.entry_type.value,
            remark=entry.remark,
            operation_id=entry.operation_id,
            created_at=entry.created_at.isoformat() if entry.created_at else "",
        )


class LedgerListResponse(BaseModel):
    """원장 기록 목록 응답"""

    entity_id: int
    entries: list[LedgerEntryResponse]
