"""
최저 잔고 감시자

잔고 변경 알림(push)과 주기적 전체 스캔(pull, 기본 10분)을 하나의 태스크에서 처리.
두 경로 모두 같은 evaluate()를 거치므로 중복 관측되어도 결과가 같음.

알림 규칙 (그룹별):
- min_balance <= 0 이면 감시하지 않음
- 알림 창은 1시간 (창 시작 후 1시간이 지나면 전송 수 초기화)
- 정상 → 부족 전환 시에만 알림 (부족 상태 유지 중에는 억제)
- 창 안에서 상한에 도달하면 부족 상태로만 기록하고 알림은 버림 (지연 전송 없음)
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from adapters.interfaces import INotifier
from adapters.telegram.messages import format_low_balance_alert
from core.config.loader import WatcherConfig
from core.constants import WatcherDefaults
from core.ledger.changes import BalanceChangeBroker, BalanceSubscription
from core.ledger.store import BalanceLedgerStore
from core.ledger.types import BalanceRecord
from core.utils.timezone import now_utc

logger = logging.getLogger(__name__)

ALERT_WINDOW = timedelta(seconds=WatcherDefaults.ALERT_WINDOW_SEC)


@dataclass
class AlertState:
    """그룹별 알림 상태

    Attributes:
        is_low: 현재 부족 구간에 있는지 (이미 알림 처리됨)
        window_start: 알림 창 시작 시각
        sent_count: 창 안에서 보낸 알림 수
    """

    is_low: bool = False
    window_start: datetime | None = None
    sent_count: int = 0


class BalanceWatcher:
    """최저 잔고 감시자

    Args:
        store: 원장 저장소 (전체 스캔용)
        broker: 잔고 변경 브로커
        notifier: 알림 전송
        config: 감시자 설정
        clock: 현재 시각 함수 (테스트용)
    """

    def __init__(
        self,
        store: BalanceLedgerStore,
        broker: BalanceChangeBroker,
        notifier: INotifier,
        config: WatcherConfig | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.store = store
        self.broker = broker
        self.notifier = notifier
        self.config = config or WatcherConfig()
        self._clock = clock

        self._states: dict[int, AlertState] = {}
        self._subscription: BalanceSubscription | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def get_state(self, entity_id: int) -> AlertState | None:
        """그룹 알림 상태 조회 (테스트/진단용)"""
        return self._states.get(entity_id)

    # =========================================================================
    # 생명주기
    # =========================================================================

    async def start(self) -> None:
        """감시 시작 (브로커 구독 후 루프 실행)"""
        if self.is_running:
            return

        self._subscription = self.broker.subscribe(self.config.change_buffer_size)
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            "잔고 감시자 시작",
            extra={"scan_interval_sec": self.config.scan_interval_sec},
        )

    async def stop(self) -> None:
        """감시 중지"""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

        logger.info("잔고 감시자 종료")

    async def _run_loop(self) -> None:
        """변경 알림 대기 + 스캔 타이머"""
        assert self._subscription is not None
        loop = asyncio.get_running_loop()
        next_scan = loop.time() + self.config.scan_interval_sec

        while True:
            try:
                timeout = max(next_scan - loop.time(), 0.0)
                try:
                    record = await asyncio.wait_for(self._subscription.get(), timeout=timeout)
                except asyncio.TimeoutError:
                    next_scan = loop.time() + self.config.scan_interval_sec
                    await self.scan_balances()
                    continue

                await self.observe(record)

            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception(f"잔고 감시 루프 에러: {e}")

    # =========================================================================
    # 평가
    # =========================================================================

    async def scan_balances(self) -> int:
        """전체 잔고 스캔

        Returns:
            보낸 알림 수
        """
        try:
            records = await self.store.list_balances()
        except Exception as e:
            logger.warning(f"잔고 스캔 실패: {e}")
            return 0

        alerts = 0
        for record in records:
            if await self.observe(record):
                alerts += 1
        return alerts

    async def observe(self, record: BalanceRecord) -> bool:
        """잔고 관측 → 필요 시 알림 전송

        Returns:
            알림을 시도했는지
        """
        if not self.evaluate(record):
            return False

        await self._deliver_alert(record)
        return True

    def evaluate(self, record: BalanceRecord) -> bool:
        """알림 상태 갱신 (동기, await 없음)

        Returns:
            알림을 보내야 하는지
        """
        if not record.monitoring_enabled:
            return False

        now = self._clock()
        state = self._states.setdefault(record.entity_id, AlertState())

        if state.window_start is None or now - state.window_start >= ALERT_WINDOW:
            state.window_start = now
            state.sent_count = 0

        if not record.is_low:
            state.is_low = False
            return False

        if state.is_low:
            return False

        state.is_low = True
        limit = record.effective_alert_limit(self.config.default_alert_limit_per_hour)
        if state.sent_count >= limit:
            logger.info(
                "알림 상한 도달: 알림 생략",
                extra={"entity_id": record.entity_id, "limit": limit},
            )
            return False

        state.sent_count += 1
        return True

    async def _deliver_alert(self, record: BalanceRecord) -> bool:
        """잔고 부족 알림 전송 (실패해도 억제 상태 유지)"""
        text = format_low_balance_alert(record)
        # 전송 타임아웃은 기록만 함. 감시자 태스크 자체의 취소(CancelledError)는 그대로 전파
        try:
            delivered = await asyncio.wait_for(
                self.notifier.deliver(record.entity_id, text),
                timeout=self.config.delivery_timeout_sec,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "잔고 부족 알림 전송 타임아웃",
                extra={"entity_id": record.entity_id},
            )
            return False
        except Exception as e:
            logger.warning(
                f"잔고 부족 알림 전송 에러: {e}",
                extra={"entity_id": record.entity_id},
            )
            return False

        if not delivered:
            logger.warning(
                "잔고 부족 알림 전송 실패",
                extra={"entity_id": record.entity_id},
            )
            return False

        logger.info(
            "잔고 부족 알림 전송",
            extra={
                "entity_id": record.entity_id,
                "balance": str(record.balance),
                "min_balance": str(record.min_balance),
            },
        )
        return True
