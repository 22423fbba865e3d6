"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    AdjustRequest,
    AlertLimitRequest,
    MinBalanceRequest,
)
from web.models.responses import (
    AdjustResponse,
    BalanceResponse,
    HealthResponse,
    LedgerEntryResponse,
    LedgerListResponse,
    SettlementItemResponse,
    SettlementResponse,
)

__all__ = [
    # Requests
    "AdjustRequest",
    "AlertLimitRequest",
    "MinBalanceRequest",
    # Responses
    "AdjustResponse",
    "BalanceResponse",
    "HealthResponse",
    "LedgerEntryResponse",
    "LedgerListResponse",
    "SettlementItemResponse",
    "SettlementResponse",
]
