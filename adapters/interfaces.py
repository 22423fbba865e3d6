"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
"""

from datetime import datetime
from typing import Protocol, runtime_checkable

from adapters.models import DailySummary
from core.domain.groups import Group


@runtime_checkable
class IAuthorizer(Protocol):
    """권한 확인 인터페이스

    관리자 여부만 판단. 결과 boolean을 그대로 신뢰함.
    """

    async def is_admin(self, actor_id: int) -> bool:
        """관리자 여부

        Args:
            actor_id: 요청자 ID

        Returns:
            관리자면 True
        """
        ...


@runtime_checkable
class IGroupDirectory(Protocol):
    """그룹 디렉터리 인터페이스

    그룹 등급과 인터페이스 바인딩을 제공 (읽기 전용).
    """

    async def list_active_groups(self) -> list[Group]:
        """활성 그룹 목록"""
        ...

    async def get_group(self, group_id: int) -> Group | None:
        """그룹 조회

        Args:
            group_id: 그룹 ID

        Returns:
            그룹 또는 None (없음)
        """
        ...


@runtime_checkable
class IBillingClient(Protocol):
    """빌링(결제 조회) 클라이언트 인터페이스

    인터페이스별 일일 거래액 요약 제공.
    금액은 반드시 Decimal 또는 문자열로 전달.
    """

    async def get_daily_summary(
        self,
        interface_id: str,
        start: datetime,
        end: datetime,
    ) -> DailySummary:
        """기간 내 일별 거래액 요약

        Args:
            interface_id: 결제 인터페이스 ID
            start: 구간 시작 (포함)
            end: 구간 끝 (미포함)

        Returns:
            일별 항목 목록

        Raises:
            Exception: 조회 실패 (네트워크, 인증 등)
        """
        ...


@runtime_checkable
class INotifier(Protocol):
    """알림 서비스 인터페이스

    정산 보고와 잔고 부족 알림을 그룹 채팅으로 전송.
    """

    async def deliver(self, entity_id: int, text: str) -> bool:
        """메시지 전송

        Args:
            entity_id: 대상 그룹 ID
            text: 메시지 본문

        Returns:
            전송 성공 여부
        """
        ...

    async def close(self) -> None:
        """리소스 정리"""
        ...
