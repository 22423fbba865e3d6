"""
Idempotency 유틸리티

원장 operation_id 생성 및 파싱 기능 제공
정산 규칙: settlement:{entity_id}:{YYYY-MM-DD}
"""

from datetime import date, datetime

from core.utils.timezone import DAY_KEY_FORMAT, day_key

# 일일 정산 operation_id 접두사
SETTLEMENT_PREFIX: str = "settlement"


def make_settlement_operation_id(entity_id: int, target_date: date) -> str:
    """결정적 일일 정산 operation_id 생성

    같은 그룹/같은 날짜의 정산은 항상 같은 키를 가지므로
    수동 재실행이나 재시도가 이중 차감되지 않음.

    Example:
        >>> make_settlement_operation_id(-100123, date(2026, 2, 20))
        'settlement:-100123:2026-02-20'
    """
    return f"{SETTLEMENT_PREFIX}:{entity_id}:{day_key(target_date)}"


def parse_settlement_operation_id(operation_id: str) -> tuple[int, date] | None:
    """정산 operation_id에서 (entity_id, target_date) 추출

    Returns:
        (entity_id, target_date) 또는 None (형식 불일치 시)

    Example:
        >>> parse_settlement_operation_id("settlement:-100123:2026-02-20")
        (-100123, datetime.date(2026, 2, 20))
        >>> parse_settlement_operation_id("manual-123")
        None
    """
    if not operation_id:
        return None

    parts = operation_id.split(":")
    if len(parts) != 3 or parts[0] != SETTLEMENT_PREFIX:
        return None

    try:
        entity_id = int(parts[1])
        target = datetime.strptime(parts[2], DAY_KEY_FORMAT).date()
    except ValueError:
        return None

    return entity_id, target


def normalize_operation_id(operation_id: str | None) -> str:
    """operation_id 정규화 (None/공백 → 빈 문자열)"""
    if not operation_id:
        return ""
    return operation_id.strip()
