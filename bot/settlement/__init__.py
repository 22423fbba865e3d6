"""
일일 정산 모듈

정산 엔진과 매일 실행되는 스케줄러.
"""

from bot.settlement.engine import SettlementEngine
from bot.settlement.scheduler import DailySettlementScheduler, DispatchReport

__all__ = [
    "SettlementEngine",
    "DailySettlementScheduler",
    "DispatchReport",
]
