"""
타입 정의 모듈

Enum 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class GroupTier(str, Enum):
    """그룹 등급

    UPSTREAM 그룹만 잔고를 보유하고 일일 정산 대상이 됨.
    """

    BASIC = "basic"
    UPSTREAM = "upstream"
    DOWNSTREAM = "downstream"


def normalize_tier(raw: str | GroupTier | None) -> GroupTier:
    """등급 문자열 정규화

    대소문자/공백을 무시하고, 알 수 없는 값은 BASIC으로 간주.

    Example:
        >>> normalize_tier(" Upstream ")
        <GroupTier.UPSTREAM: 'upstream'>
        >>> normalize_tier("")
        <GroupTier.BASIC: 'basic'>
    """
    if isinstance(raw, GroupTier):
        return raw
    if not raw:
        return GroupTier.BASIC

    try:
        return GroupTier(raw.strip().lower())
    except ValueError:
        return GroupTier.BASIC


class SchedulerState(str, Enum):
    """일일 정산 스케줄러 상태"""

    IDLE = "IDLE"
    WAITING = "WAITING"
    DISPATCHING = "DISPATCHING"
    STOPPED = "STOPPED"


class SettleOutcome(str, Enum):
    """그룹 단위 정산 결과"""

    SETTLED = "SETTLED"  # 정산 + 결과 전송 완료
    FAILED = "FAILED"  # 재시도 소진 또는 설정 오류
    SKIPPED = "SKIPPED"  # 종료/중단 신호로 시도하지 않음
