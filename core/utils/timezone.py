"""
타임존 유틸리티

내부 저장: UTC | 정산 달력: 그룹 운영 타임존 (기본 Asia/Shanghai)
"""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from core.constants import Defaults


# 정산 일자 키 형식
DAY_KEY_FORMAT = "%Y-%m-%d"

# 외부 빌링 데이터에서 허용하는 날짜 형식
_SUMMARY_DATE_LAYOUTS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
)


def get_zone(name: str | None = None) -> ZoneInfo:
    """IANA 타임존 로드

    Args:
        name: 타임존 이름 (None이면 Defaults.TIMEZONE)
    """
    return ZoneInfo(name or Defaults.TIMEZONE)


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.
    """
    return datetime.now(timezone.utc)


def to_local(dt: datetime, zone: ZoneInfo) -> datetime:
    """datetime을 지정 타임존으로 변환 (naive면 UTC로 간주)"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(zone)


def local_midnight(day: date, zone: ZoneInfo) -> datetime:
    """해당 날짜의 현지 00:00:00"""
    return datetime.combine(day, time(0, 0), tzinfo=zone)


def local_day_range(day: date, zone: ZoneInfo) -> tuple[datetime, datetime]:
    """현지 달력 하루 구간 [00:00, 다음날 00:00)

    DST 전환일에도 실제 달력 경계를 사용하므로 구간 길이가 24시간이 아닐 수 있음.

    Returns:
        (start, end) - end는 미포함
    """
    return local_midnight(day, zone), local_midnight(day + timedelta(days=1), zone)


def next_daily_run(
    now: datetime,
    zone: ZoneInfo,
    offset: timedelta = timedelta(minutes=5),
) -> datetime:
    """다음 일일 실행 시각 계산

    현지 자정 + offset 중 now 이후 가장 빠른 시각.
    매 주기마다 다시 계산하므로 시계 변경/DST에 영향받지 않음.

    Example:
        >>> zone = get_zone("Asia/Shanghai")
        >>> next_daily_run(datetime(2026, 3, 1, 15, 0, tzinfo=timezone.utc), zone)
        datetime(2026, 3, 2, 0, 5, tzinfo=ZoneInfo('Asia/Shanghai'))
    """
    local_now = to_local(now, zone)
    candidate = local_midnight(local_now.date(), zone) + offset
    if candidate <= local_now:
        candidate = local_midnight(local_now.date() + timedelta(days=1), zone) + offset
    return candidate


def previous_billing_date(now: datetime, zone: ZoneInfo) -> date:
    """정산 대상 일자 (현지 기준 전날)"""
    return to_local(now, zone).date() - timedelta(days=1)


def day_key(day: date) -> str:
    """정산 일자 키 (YYYY-MM-DD)"""
    return day.strftime(DAY_KEY_FORMAT)


def normalize_summary_date(raw: str | None) -> str:
    """빌링 요약의 날짜 문자열을 YYYY-MM-DD로 정규화

    여러 형식을 허용하며, 해석할 수 없으면 빈 문자열 반환.
    ISO-8601 타임스탬프는 변환 없이 표기된 오프셋 기준의 날짜를 사용.

    Example:
        >>> normalize_summary_date("2026/02/20 13:00:00")
        '2026-02-20'
        >>> normalize_summary_date("2026-02-20T23:30:00+08:00")
        '2026-02-20'
        >>> normalize_summary_date("yesterday")
        ''
    """
    trimmed = (raw or "").strip()
    if not trimmed:
        return ""

    for layout in _SUMMARY_DATE_LAYOUTS:
        try:
            return datetime.strptime(trimmed, layout).strftime(DAY_KEY_FORMAT)
        except ValueError:
            continue

    iso_candidate = trimmed[:-1] + "+00:00" if trimmed.endswith("Z") else trimmed
    try:
        return datetime.fromisoformat(iso_candidate).strftime(DAY_KEY_FORMAT)
    except ValueError:
        pass

    if len(trimmed) >= 10:
        prefix = trimmed[:10]
        for layout in ("%Y-%m-%d", "%Y/%m/%d"):
            try:
                return datetime.strptime(prefix, layout).strftime(DAY_KEY_FORMAT)
            except ValueError:
                continue

    return ""
