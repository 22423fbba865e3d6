"""
Bot Bootstrap

설정 로드, 의존성 주입, 생명주기 관리.

구성 요소 (모두 BalanceBot이 생성/소유):
- BalanceLedgerStore + BalanceChangeBroker
- BalanceService / BalanceCommandHandler
- SettlementEngine / DailySettlementScheduler
- BalanceWatcher

main은 web.enabled일 때 같은 이벤트 루프에서 잔고 관리 API(uvicorn)도 실행.
"""

import asyncio
import logging
import signal
import sys
from datetime import datetime
from typing import Callable

import uvicorn

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from adapters.interfaces import IAuthorizer, IBillingClient, IGroupDirectory, INotifier
from adapters.static import StaticAuthorizer, StaticGroupDirectory
from adapters.telegram.notifier import TelegramNotifier
from bot.balance.commands import BalanceCommandHandler
from bot.balance.service import BalanceService
from bot.settlement.engine import SettlementEngine
from bot.settlement.scheduler import DailySettlementScheduler
from bot.watcher.balance_watcher import BalanceWatcher
from core.config.loader import AppConfig, SettingsLoadError, get_settings
from core.constants import Defaults
from core.ledger.changes import BalanceChangeBroker
from core.ledger.store import BalanceLedgerStore
from core.logging import setup_logging
from core.utils.timezone import now_utc
from web.app import create_app

logger = logging.getLogger("bot")


class BalanceBot:
    """잔고 Bot

    모든 컴포넌트를 생성하고 시작/종료 순서를 관리.
    전역 상태 없이 인스턴스가 스케줄러와 감시자를 소유.

    Args:
        config: 애플리케이션 설정
        db: 연결된 SQLite 어댑터
        directory: 그룹 디렉터리
        notifier: 메시지 전송
        authorizer: 권한 확인
        billing: 빌링 클라이언트 (None이면 정산 시 BillingUnavailableError)
        clock: 현재 시각 함수 (테스트용)
    """

    def __init__(
        self,
        config: AppConfig,
        db: SQLiteAdapter,
        directory: IGroupDirectory,
        notifier: INotifier,
        authorizer: IAuthorizer,
        billing: IBillingClient | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.config = config
        self.db = db
        self.notifier = notifier

        self.broker = BalanceChangeBroker(config.watcher.change_buffer_size)
        self.store = BalanceLedgerStore(db, self.broker)
        self.service = BalanceService(self.store)
        self.engine = SettlementEngine(self.store, billing, zone=config.timezone)
        self.commands = BalanceCommandHandler(
            self.service,
            self.engine,
            directory,
            authorizer,
            clock=clock,
        )
        self.scheduler = DailySettlementScheduler(
            self.engine,
            directory,
            notifier,
            config=config.scheduler,
            clock=clock,
        )
        self.watcher = BalanceWatcher(
            self.store,
            self.broker,
            notifier,
            config=config.watcher,
            clock=clock,
        )

    async def start(self) -> None:
        """감시자 → 스케줄러 순으로 시작"""
        await self.watcher.start()
        await self.scheduler.start()
        logger.info(
            "Bot 시작",
            extra={
                "timezone": self.config.timezone,
                "next_settlement": self.scheduler.next_run_at().isoformat(),
            },
        )

    async def stop(self) -> None:
        """스케줄러 → 감시자 → 알림 클라이언트 순으로 종료"""
        logger.info("Bot 종료 중...")
        await self.scheduler.stop()
        await self.watcher.stop()
        await self.notifier.close()

    async def run_until(self, shutdown_event: asyncio.Event) -> None:
        """종료 신호까지 실행"""
        await self.start()
        try:
            await shutdown_event.wait()
        finally:
            await self.stop()


def _install_signal_handlers(shutdown_event: asyncio.Event) -> None:
    """SIGINT/SIGTERM → shutdown_event (지원하지 않는 플랫폼은 무시)"""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown_event.set)
        except (NotImplementedError, RuntimeError):
            logger.debug(f"시그널 핸들러 미지원: {sig}")


def _start_web_server(
    bot: BalanceBot,
    shutdown_event: asyncio.Event,
) -> tuple[uvicorn.Server | None, asyncio.Task | None]:
    """잔고 관리 API를 Bot 이벤트 루프에서 실행

    Bot의 명령 처리기를 공유하므로 API로 변경한 잔고도 감시자에 즉시 전달됨.
    서버가 먼저 종료되면 (uvicorn이 시그널을 받은 경우 등) Bot도 함께 종료.
    """
    web = bot.config.web
    if not web.enabled:
        logger.info("잔고 관리 API 비활성")
        return None, None

    server = uvicorn.Server(uvicorn.Config(
        create_app(bot),
        host=web.host,
        port=web.port,
        log_config=None,
        log_level=Defaults.LOG_LEVEL.lower(),
    ))
    task = asyncio.create_task(server.serve(), name="web-server")
    task.add_done_callback(lambda _: shutdown_event.set())
    logger.info("잔고 관리 API 시작", extra={"host": web.host, "port": web.port})
    return server, task


async def main(billing: IBillingClient | None = None) -> None:
    """Bot 메인 함수

    Args:
        billing: 빌링 클라이언트 (빌링 연동 모듈에서 주입, 없으면 정산 비활성)
    """
    setup_logging("bot")

    logger.info("=" * 60)
    logger.info("GroupLedger Bot 시작")
    logger.info("=" * 60)

    # 1. 설정 로드
    try:
        settings = get_settings()
    except SettingsLoadError as e:
        logger.error(f"설정 로드 실패: {e}")
        sys.exit(1)

    config = settings.config
    if not config.telegram.bot_token:
        logger.error("설정 오류: telegram.bot_token이 없습니다")
        sys.exit(1)

    logger.info(f"DB: {config.database_path}")
    logger.info(f"Timezone: {config.timezone}, 그룹 {len(config.groups)}개")

    if billing is None:
        logger.warning("빌링 클라이언트 미설정: 일일 정산은 BillingUnavailableError로 실패합니다")

    notifier = TelegramNotifier(
        bot_token=config.telegram.bot_token,
        api_base_url=config.telegram.api_base_url,
        timeout=config.scheduler.delivery_timeout_sec,
    )

    # 2. DB 연결 및 스키마 초기화
    async with SQLiteAdapter(config.database_path) as db:
        await init_schema(db)

        # 3. Bot 생성
        bot = BalanceBot(
            config=config,
            db=db,
            directory=StaticGroupDirectory(config.groups),
            notifier=notifier,
            authorizer=StaticAuthorizer(config.admins),
            billing=billing,
        )

        # 4. 종료 이벤트 설정
        shutdown_event = asyncio.Event()
        _install_signal_handlers(shutdown_event)

        web_server, web_task = _start_web_server(bot, shutdown_event)

        logger.info("Bot 실행 중 (종료: Ctrl+C)")
        try:
            await bot.run_until(shutdown_event)
        except asyncio.CancelledError:
            logger.info("메인 루프 취소됨")
        finally:
            if web_server is not None and web_task is not None:
                web_server.should_exit = True
                await web_task

    logger.info("=" * 60)
    logger.info("GroupLedger Bot 정상 종료")
    logger.info("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
