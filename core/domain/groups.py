"""
그룹 도메인 모델

그룹 디렉터리(외부 협력자)가 제공하는 읽기 전용 데이터.
이 코어는 그룹 설정을 수정하지 않음.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from core.types import GroupTier, normalize_tier
from core.utils.amounts import parse_rate_percent


@dataclass(frozen=True)
class InterfaceBinding:
    """그룹에 바인딩된 결제 인터페이스

    Attributes:
        interface_id: 빌링 시스템의 인터페이스 ID
        name: 표시 이름
        rate: 요율 문자열 (예: "2%", "1.5")
    """

    interface_id: str
    name: str = ""
    rate: str = ""

    @property
    def rate_percent(self) -> Decimal:
        """요율 (퍼센트 단위 Decimal)"""
        return parse_rate_percent(self.rate)

    @property
    def display_name(self) -> str:
        """표시 이름 (없으면 interface_id)"""
        return self.name.strip() or self.interface_id


@dataclass(frozen=True)
class Group:
    """그룹 (잔고 보유 주체)

    Attributes:
        group_id: 그룹 ID (채팅 ID)
        name: 그룹 이름
        tier: 그룹 등급
        bindings: 인터페이스 바인딩 목록
        active: 활성 여부
    """

    group_id: int
    name: str = ""
    tier: GroupTier = GroupTier.BASIC
    bindings: tuple[InterfaceBinding, ...] = field(default_factory=tuple)
    active: bool = True

    @property
    def is_balance_bearing(self) -> bool:
        """잔고 보유 그룹 여부 (UPSTREAM 등급)"""
        return self.tier == GroupTier.UPSTREAM

    @property
    def is_settlement_eligible(self) -> bool:
        """일일 정산 대상 여부 (UPSTREAM + 바인딩 1개 이상)"""
        return self.is_balance_bearing and len(self.bindings) > 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Group":
        """설정 딕셔너리에서 생성

        Raises:
            ValueError: group_id가 없거나 정수가 아닌 경우
        """
        raw_id = data.get("group_id")
        if raw_id is None:
            raise ValueError("group_id는 필수입니다")

        bindings = tuple(
            InterfaceBinding(
                interface_id=str(b["interface_id"]),
                name=str(b.get("name", "")),
                rate=str(b.get("rate", "")),
            )
            for b in data.get("interface_bindings") or []
        )

        return cls(
            group_id=int(raw_id),
            name=str(data.get("name", "")),
            tier=normalize_tier(data.get("tier")),
            bindings=bindings,
            active=bool(data.get("active", True)),
        )


def filter_settlement_groups(groups: list[Group | None]) -> list[Group]:
    """일일 정산 대상 그룹만 선별"""
    return [g for g in groups if g is not None and g.is_settlement_eligible]
