"""
Telegram 어댑터

Telegram Bot API를 통한 그룹 메시지 전송.
INotifier Protocol 준수.
"""

from adapters.telegram.notifier import TelegramNotifier

__all__ = [
    "TelegramNotifier",
]
