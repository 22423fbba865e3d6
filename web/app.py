"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.

운영 모드:
- Bot 내장: create_app(bot)으로 Bot의 명령 처리기를 공유.
  잔고 변경이 같은 브로커로 발행되어 감시자에 즉시 전달되고 수동 정산도 가능.
- 단독 실행 (python -m web): 같은 DB 파일만 공유. 브로커와 빌링 클라이언트가 없으므로
  변경은 Bot 감시자의 주기적 스캔으로 반영되고 수동 정산은 503으로 응답.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from adapters.static import StaticAuthorizer, StaticGroupDirectory
from bot.balance.commands import BalanceCommandHandler
from bot.balance.service import BalanceService
from bot.settlement.engine import SettlementEngine
from core.config.loader import get_settings
from core.ledger.store import BalanceLedgerStore
from core.logging import setup_logging
from web.routes import balances, health

if TYPE_CHECKING:
    from bot.bootstrap import BalanceBot

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리"""
    if app.state.bot is not None:
        # Bot 내장 모드: DB와 브로커는 Bot이 관리
        logger.info("Web: Bot 명령 처리기 공유")
        yield
        return

    setup_logging("web")
    settings = get_settings()
    config = settings.config

    # 시작 시 - DB 연결 + 스키마 자동 초기화
    db = SQLiteAdapter(settings.db_path)
    await db.connect()
    await init_schema(db)

    store = BalanceLedgerStore(db)
    # 빌링 클라이언트 없음: 수동 정산은 503으로 응답
    engine = SettlementEngine(store, None, zone=config.timezone)
    app.state.commands = BalanceCommandHandler(
        service=BalanceService(store),
        engine=engine,
        directory=StaticGroupDirectory(config.groups),
        authorizer=StaticAuthorizer(config.admins),
    )
    logger.info("Web: 잔고 명령 처리기 초기화 완료", extra={"db_path": str(settings.db_path)})

    try:
        yield
    finally:
        # 종료 시 - 리소스 정리
        app.state.commands = None
        await db.close()
        logger.info("Web: DB 연결 종료 완료")


def create_app(bot: BalanceBot | None = None) -> FastAPI:
    """FastAPI 앱 생성

    Args:
        bot: 실행 중인 Bot (있으면 명령 처리기와 변경 브로커를 공유)

    테스트에서는 lifespan 없이 app.state.commands를 직접 설정해 사용.
    """
    app = FastAPI(
        title="GroupLedger API",
        description="그룹 잔고 원장 및 일일 정산 API",
        version=health.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.bot = bot
    app.state.commands = bot.commands if bot is not None else None

    # CORS 설정 (개발용)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # API 라우터 등록
    # =========================================================================

    app.include_router(health.router)
    app.include_router(balances.router)

    return app


app = create_app()
