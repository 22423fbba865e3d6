"""
정적 관리자 목록 기반 권한 확인
"""

from typing import Iterable


class StaticAuthorizer:
    """IAuthorizer Protocol 구현

    Args:
        admin_ids: 관리자 ID 목록
    """

    def __init__(self, admin_ids: Iterable[int] = ()):
        self._admin_ids = frozenset(int(a) for a in admin_ids)

    async def is_admin(self, actor_id: int) -> bool:
        return actor_id in self._admin_ids
