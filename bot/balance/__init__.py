"""
잔고 모듈

입력 검증, 충전/차감, 임계값 설정, 명령 처리.
"""

from bot.balance.commands import BalanceCommandHandler
from bot.balance.errors import (
    BalanceError,
    BillingQueryError,
    BillingUnavailableError,
    GroupNotFoundError,
    GroupTierError,
    InvalidAmountError,
    NoBindingsError,
    PermissionDeniedError,
)
from bot.balance.service import AdjustmentOutcome, BalanceService

__all__ = [
    "BalanceCommandHandler",
    "BalanceService",
    "AdjustmentOutcome",
    "BalanceError",
    "InvalidAmountError",
    "PermissionDeniedError",
    "GroupNotFoundError",
    "GroupTierError",
    "NoBindingsError",
    "BillingUnavailableError",
    "BillingQueryError",
]
