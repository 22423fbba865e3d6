"""
정적 설정 어댑터

settings.yaml에 정의된 그룹/관리자 정보를 제공.
IGroupDirectory, IAuthorizer Protocol 준수.
"""

from adapters.static.authorizer import StaticAuthorizer
from adapters.static.directory import StaticGroupDirectory

__all__ = [
    "StaticAuthorizer",
    "StaticGroupDirectory",
]
