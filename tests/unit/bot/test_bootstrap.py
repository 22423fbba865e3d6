"""
BalanceBot 조립/생명주기 테스트
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import httpx
import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.mock.billing import MockBillingClient
from adapters.mock.notifier import MockNotifier
from adapters.models import SummaryItem
from adapters.static import StaticAuthorizer, StaticGroupDirectory
from bot import bootstrap
from bot.bootstrap import BalanceBot, _start_web_server
from core.config.loader import AppConfig, TelegramConfig, WatcherConfig, WebConfig
from core.domain.groups import Group
from core.types import SchedulerState
from web.app import create_app

ADMIN = 10001


@pytest.fixture
def config(upstream_group: Group) -> AppConfig:
    return AppConfig(
        telegram=TelegramConfig(bot_token="t"),
        admins=frozenset({ADMIN}),
        watcher=WatcherConfig(scan_interval_sec=60),
        groups=(upstream_group,),
    )


def _bot(config: AppConfig, db: SQLiteAdapter, notifier: MockNotifier) -> BalanceBot:
    return BalanceBot(
        config=config,
        db=db,
        directory=StaticGroupDirectory(config.groups),
        notifier=notifier,
        authorizer=StaticAuthorizer(config.admins),
        billing=MockBillingClient(),
    )


class TestBalanceBot:
    """BalanceBot 테스트"""

    def test_components_share_store_and_broker(
        self, config: AppConfig, db: SQLiteAdapter
    ) -> None:
        bot = _bot(config, db, MockNotifier())

        assert bot.watcher.store is bot.store
        assert bot.watcher.broker is bot.broker
        assert bot.store.broker is bot.broker
        assert bot.scheduler.engine is bot.engine
        assert bot.commands.engine is bot.engine
        assert str(bot.engine.zone) == config.timezone

    @pytest.mark.asyncio
    async def test_start_stop(self, config: AppConfig, db: SQLiteAdapter) -> None:
        notifier = MockNotifier()
        bot = _bot(config, db, notifier)

        await bot.start()
        assert bot.watcher.is_running
        assert bot.scheduler.is_running

        await bot.stop()
        assert not bot.watcher.is_running
        assert bot.scheduler.state == SchedulerState.STOPPED.value
        assert notifier.closed is True

    @pytest.mark.asyncio
    async def test_command_debit_reaches_watcher(
        self, config: AppConfig, db: SQLiteAdapter, upstream_group: Group
    ) -> None:
        """명령 → 원장 → 변경 발행 → 감시자 알림"""
        notifier = MockNotifier()
        bot = _bot(config, db, notifier)
        shutdown = asyncio.Event()
        runner = asyncio.create_task(bot.run_until(shutdown))
        await asyncio.sleep(0.01)

        gid = upstream_group.group_id
        await bot.commands.credit(gid, ADMIN, "500")
        await bot.commands.set_min_balance(gid, ADMIN, "200")
        outcome = await bot.commands.debit(gid, ADMIN, "350", operation_id="d1")

        for _ in range(100):
            if notifier.message_count:
                break
            await asyncio.sleep(0.01)
        shutdown.set()
        await asyncio.wait_for(runner, timeout=2)

        assert outcome.record.balance == Decimal("150")
        assert notifier.message_count == 1
        assert notifier.last_delivery.entity_id == gid


class TestEmbeddedWeb:
    """Bot 명령 처리기를 공유하는 잔고 관리 API"""

    @pytest.mark.asyncio
    async def test_http_debit_reaches_watcher(
        self, config: AppConfig, db: SQLiteAdapter, upstream_group: Group
    ) -> None:
        """API 차감 → Bot 브로커 → 감시자 알림"""
        notifier = MockNotifier()
        bot = _bot(config, db, notifier)
        app = create_app(bot)
        gid = upstream_group.group_id
        headers = {"X-Actor-Id": str(ADMIN)}

        assert app.state.commands is bot.commands

        await bot.start()
        try:
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                await client.post(f"/api/groups/{gid}/credit", json={"amount": "500"}, headers=headers)
                await client.put(
                    f"/api/groups/{gid}/min-balance", json={"min_balance": "200"}, headers=headers
                )
                response = await client.post(
                    f"/api/groups/{gid}/debit",
                    json={"amount": "350", "operation_id": "web-d1"},
                    headers=headers,
                )

            for _ in range(100):
                if notifier.message_count:
                    break
                await asyncio.sleep(0.01)
        finally:
            await bot.stop()

        assert response.status_code == 200
        assert response.json()["balance"]["balance"] == "150"
        assert notifier.message_count == 1
        assert notifier.last_delivery.entity_id == gid

    @pytest.mark.asyncio
    async def test_http_settlement_uses_bot_billing(
        self, config: AppConfig, db: SQLiteAdapter, upstream_group: Group
    ) -> None:
        """Bot에 주입된 빌링 클라이언트로 수동 정산"""
        billing = MockBillingClient()
        billing.set_summary("if-1", [SummaryItem("2026-02-20", "1000")])
        billing.set_summary("if-2", [SummaryItem("2026-02-20", "2000")])
        bot = BalanceBot(
            config=config,
            db=db,
            directory=StaticGroupDirectory(config.groups),
            notifier=MockNotifier(),
            authorizer=StaticAuthorizer(config.admins),
            billing=billing,
            clock=lambda: datetime(2026, 2, 21, 1, 0, tzinfo=timezone.utc),
        )

        transport = httpx.ASGITransport(app=create_app(bot))
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post(
                f"/api/groups/{upstream_group.group_id}/settlements",
                headers={"X-Actor-Id": str(ADMIN)},
            )

        assert response.status_code == 200
        assert response.json()["deduction"] == "50.0"
        assert len(billing.calls) == 2

    def test_disabled_web_not_started(self, db: SQLiteAdapter, upstream_group: Group) -> None:
        config = AppConfig(
            telegram=TelegramConfig(bot_token="t"),
            web=WebConfig(enabled=False),
            groups=(upstream_group,),
        )
        bot = _bot(config, db, MockNotifier())

        assert _start_web_server(bot, asyncio.Event()) == (None, None)


class TestMain:
    """main 진입점 설정 검증"""

    @pytest.mark.asyncio
    async def test_exits_without_bot_token(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """토큰 없는 설정은 Bot 시작 전에 종료"""
        settings = SimpleNamespace(config=AppConfig(telegram=TelegramConfig(bot_token="")))
        monkeypatch.setattr(bootstrap, "setup_logging", lambda *args, **kwargs: None)
        monkeypatch.setattr(bootstrap, "get_settings", lambda: settings)

        with pytest.raises(SystemExit) as exc_info:
            await bootstrap.main()

        assert exc_info.value.code == 1
