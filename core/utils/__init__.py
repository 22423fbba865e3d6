"""
유틸리티 패키지

idempotency 키 관리, 타임존/정산 달력 처리, 금액 파싱 등 공통 유틸리티
"""

from core.utils.timezone import (
    get_zone,
    now_utc,
    to_local,
    local_day_range,
    next_daily_run,
    previous_billing_date,
    day_key,
    normalize_summary_date,
)

__all__ = [
    "get_zone",
    "now_utc",
    "to_local",
    "local_day_range",
    "next_daily_run",
    "previous_billing_date",
    "day_key",
    "normalize_summary_date",
]
