"""
헬스 체크 엔드포인트

GET /health - 서버 상태 확인
"""

from fastapi import APIRouter, Request

from web.models.responses import HealthResponse

router = APIRouter(tags=["health"])

VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """서버 상태 확인

    Returns:
        HealthResponse: status, version, ready 정보
    """
    return HealthResponse(
        status="ok",
        version=VERSION,
        ready=getattr(request.app.state, "commands", None) is not None,
    )
