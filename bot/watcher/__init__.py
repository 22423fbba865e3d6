"""
잔고 감시 모듈
"""

from bot.watcher.balance_watcher import AlertState, BalanceWatcher

__all__ = [
    "AlertState",
    "BalanceWatcher",
]
