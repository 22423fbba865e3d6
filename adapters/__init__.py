"""
어댑터 레이어

외부 서비스(DB, 빌링, 알림, 그룹 디렉터리 등)와의 연동을 담당.
Protocol 기반 인터페이스로 Mock 교체 가능.
"""

from adapters.interfaces import (
    IAuthorizer,
    IBillingClient,
    IGroupDirectory,
    INotifier,
)
from adapters.models import DailySummary, SummaryItem

__all__ = [
    # Interfaces
    "IAuthorizer",
    "IBillingClient",
    "IGroupDirectory",
    "INotifier",
    # Models
    "DailySummary",
    "SummaryItem",
]
