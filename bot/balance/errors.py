"""
잔고/정산 에러

- 검증 에러: 저장소 접근 전에 거부 (InvalidAmountError)
- 권한/대상 에러: PermissionDeniedError, GroupNotFoundError, GroupTierError
- 설정 에러: 자동 재시도하지 않음 (NoBindingsError, BillingUnavailableError)
- 일시적 에러: 스케줄러가 재시도 (BillingQueryError)

취소(CancelledError)와 타임아웃(TimeoutError)은 여기에 포함하지 않고 그대로 전파.
"""


class BalanceError(Exception):
    """잔고/정산 에러 기본 클래스"""

    retryable: bool = False

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidAmountError(BalanceError):
    """금액/임계값 검증 실패"""
    pass


class PermissionDeniedError(BalanceError):
    """관리자 권한 없음"""

    def __init__(self, actor_id: int):
        self.actor_id = actor_id
        super().__init__(f"관리자만 실행할 수 있습니다 (actor_id={actor_id})")


class GroupNotFoundError(BalanceError):
    """그룹 없음"""

    def __init__(self, entity_id: int):
        self.entity_id = entity_id
        super().__init__(f"그룹을 찾을 수 없습니다 (entity_id={entity_id})")


class GroupTierError(BalanceError):
    """잔고 보유 등급이 아닌 그룹"""

    def __init__(self, entity_id: int, tier: str):
        self.entity_id = entity_id
        self.tier = tier
        super().__init__(
            f"잔고 정산 대상 등급이 아닙니다 (entity_id={entity_id}, tier={tier})"
        )


class NoBindingsError(BalanceError):
    """인터페이스 바인딩 없음 (설정 에러)"""

    def __init__(self, entity_id: int):
        self.entity_id = entity_id
        super().__init__(f"바인딩된 결제 인터페이스가 없습니다 (entity_id={entity_id})")


class BillingUnavailableError(BalanceError):
    """빌링 클라이언트 미설정 (설정 에러)"""

    def __init__(self, message: str = "빌링 조회 서비스가 설정되지 않았습니다"):
        super().__init__(message)


class BillingQueryError(BalanceError):
    """빌링 조회 실패 (일시적 에러)"""

    retryable = True

    def __init__(self, interface_id: str, cause: Exception):
        self.interface_id = interface_id
        self.cause = cause
        super().__init__(f"빌링 조회 실패 (interface_id={interface_id}): {cause}")
