"""
정적 그룹 디렉터리

설정 파일에서 읽은 그룹 목록을 메모리에 보관.
"""

from typing import Iterable

from core.domain.groups import Group


class StaticGroupDirectory:
    """정적 그룹 디렉터리

    IGroupDirectory Protocol 구현.

    Args:
        groups: 그룹 목록 (group_id 중복 시 마지막 항목 사용)
    """

    def __init__(self, groups: Iterable[Group] = ()):
        self._groups: dict[int, Group] = {g.group_id: g for g in groups}

    async def list_active_groups(self) -> list[Group]:
        """활성 그룹 목록 (group_id 순)"""
        return [g for _, g in sorted(self._groups.items()) if g.active]

    async def get_group(self, group_id: int) -> Group | None:
        """그룹 조회 (비활성 포함)"""
        return self._groups.get(group_id)

    def upsert(self, group: Group) -> None:
        """그룹 추가/교체"""
        self._groups[group.group_id] = group

    def __len__(self) -> int:
        return len(self._groups)
