"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from fastapi import Header, HTTPException, Request

from bot.balance.commands import BalanceCommandHandler


def get_commands(request: Request) -> BalanceCommandHandler:
    """잔고 명령 처리기 반환 (lifespan에서 app.state에 설정)"""
    commands = getattr(request.app.state, "commands", None)
    if commands is None:
        raise HTTPException(status_code=503, detail="명령 처리기가 초기화되지 않았습니다")
    return commands


def get_actor_id(x_actor_id: int = Header(..., description="요청자 사용자 ID")) -> int:
    """요청자 ID (X-Actor-Id 헤더)

    관리자 여부 판단은 명령 처리기가 수행.
    """
    return x_actor_id
