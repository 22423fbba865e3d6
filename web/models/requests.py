"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증.
금액의 양수/음수 규칙은 BalanceService에서 검증 (400 응답).
"""

from decimal import Decimal

from pydantic import BaseModel, Field


class AdjustRequest(BaseModel):
    """충전/차감 요청"""

    amount: Decimal = Field(..., description="금액 (0보다 커야 함)")
    operation_id: str | None = Field(
        default=None,
        max_length=128,
        description="멱등성 키 (같은 키로 재요청 시 한 번만 반영)",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"amount": "350", "operation_id": "d1"},
            ]
        }
    }


class MinBalanceRequest(BaseModel):
    """최저 잔고 설정 요청 (0이면 감시 해제)"""

    min_balance: Decimal = Field(..., description="최저 잔고 (0 이상)")


class AlertLimitRequest(BaseModel):
    """시간당 알림 상한 설정 요청"""

    limit: int = Field(..., description="시간당 최대 알림 수 (1 이상)")
