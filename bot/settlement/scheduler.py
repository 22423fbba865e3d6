"""
일일 정산 스케줄러

매일 현지 자정 + offset(기본 5분)에 깨어나 전날 정산을 실행.

상태 전이: IDLE → WAITING → DISPATCHING → IDLE (종료 시 STOPPED)

- 대상: 활성 그룹 중 UPSTREAM 등급 + 바인딩 1개 이상
- 동시 실행: Semaphore (기본 6)
- 그룹당 최대 3회 시도 (정산 20초, 결과 전송 10초 타임아웃)
- 타임아웃 발생 시 해당 분배 전체 중단 (추가 시도 없음)
- 설정 에러(바인딩 없음, 빌링 미설정)는 재시도하지 않음
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable

from adapters.interfaces import IGroupDirectory, INotifier
from adapters.telegram.messages import format_settlement_report
from bot.balance.errors import BillingUnavailableError, NoBindingsError
from bot.settlement.engine import SettlementEngine
from core.config.loader import SchedulerConfig
from core.constants import SchedulerDefaults
from core.domain.groups import Group, filter_settlement_groups
from core.domain.settlement import SettlementResult
from core.domain.state_machines import SchedulerStateMachine
from core.types import SchedulerState, SettleOutcome
from core.utils.timezone import day_key, next_daily_run, now_utc, previous_billing_date

logger = logging.getLogger(__name__)


@dataclass
class DispatchReport:
    """정산 분배 결과

    Attributes:
        target_date: 정산 일자
        settled: 정산 + 보고 전송 완료 그룹
        failed: 시도 소진 또는 설정 에러 그룹
        skipped: 종료/중단으로 시도하지 않은 그룹
        aborted: 타임아웃으로 분배가 중단되었는지
    """

    target_date: date
    settled: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    aborted: bool = False

    @property
    def total(self) -> int:
        return len(self.settled) + len(self.failed) + len(self.skipped)


class DailySettlementScheduler:
    """일일 정산 스케줄러

    Args:
        engine: 정산 엔진 (타임존도 엔진 설정을 따름)
        directory: 그룹 디렉터리
        notifier: 정산 보고 전송
        config: 스케줄러 설정
        clock: 현재 시각 함수 (테스트용)

    사용 예시:
    ```python
    scheduler = DailySettlementScheduler(engine, directory, notifier)
    await scheduler.start()
    ...
    await scheduler.stop()
    ```
    """

    def __init__(
        self,
        engine: SettlementEngine,
        directory: IGroupDirectory,
        notifier: INotifier,
        config: SchedulerConfig | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.engine = engine
        self.directory = directory
        self.notifier = notifier
        self.config = config or SchedulerConfig()
        self._clock = clock

        self._state = SchedulerStateMachine()
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None
        self.last_report: DispatchReport | None = None

    @property
    def state(self) -> str:
        """현재 상태 (SchedulerState 값)"""
        return self._state.state

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def next_run_at(self, now: datetime | None = None) -> datetime:
        """다음 실행 시각 (현지 타임존)"""
        return next_daily_run(
            now or self._clock(),
            self.engine.zone,
            offset=timedelta(minutes=self.config.run_offset_minutes),
        )

    # =========================================================================
    # 생명주기
    # =========================================================================

    async def start(self) -> None:
        """스케줄러 시작"""
        if self.is_running:
            return
        if self._state.is_stopped:
            raise RuntimeError("종료된 스케줄러는 다시 시작할 수 없습니다")

        self._task = asyncio.create_task(self._run_loop())
        logger.info("일일 정산 스케줄러 시작")

    async def stop(self) -> None:
        """스케줄러 종료

        대기 중이면 즉시 깨우고, 분배 중이면 진행 중인 시도가 끝날 때까지 대기.
        새 시도는 시작하지 않음.
        """
        self._stop_event.set()

        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        self._state.stop()
        logger.info("일일 정산 스케줄러 종료")

    async def _run_loop(self) -> None:
        """대기 → 분배 반복"""
        while not self._stop_event.is_set():
            self._state.transition(SchedulerState.WAITING)

            next_run = self.next_run_at()
            wait_seconds = max(
                (next_run - self._clock()).total_seconds(),
                SchedulerDefaults.MIN_WAIT_SEC,
            )
            logger.info(
                f"다음 일일 정산: {next_run.isoformat()} ({wait_seconds:.0f}초 후)"
            )

            if await self._wait(wait_seconds):
                break

            self._state.transition(SchedulerState.DISPATCHING)
            try:
                await self.dispatch()
            except Exception as e:
                logger.exception(f"일일 정산 분배 에러: {e}")
            self._state.transition(SchedulerState.IDLE)

        self._state.stop()

    async def _wait(self, seconds: float) -> bool:
        """지정 시간 대기 (종료 신호 시 즉시 True 반환)"""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
            return True
        except asyncio.TimeoutError:
            return False

    # =========================================================================
    # 분배
    # =========================================================================

    async def dispatch(self, target_date: date | None = None) -> DispatchReport:
        """대상 그룹 전체 정산

        Args:
            target_date: 정산 일자 (None이면 현지 기준 전날)
        """
        if target_date is None:
            target_date = previous_billing_date(self._clock(), self.engine.zone)
        report = DispatchReport(target_date=target_date)

        try:
            groups = await self.directory.list_active_groups()
        except Exception as e:
            logger.error(f"그룹 목록 조회 실패: {e}", extra={"target_date": day_key(target_date)})
            self.last_report = report
            return report

        eligible = filter_settlement_groups(groups)
        logger.info(
            "일일 정산 분배 시작",
            extra={
                "target_date": day_key(target_date),
                "active_groups": len(groups),
                "eligible_groups": len(eligible),
            },
        )

        abort_event = asyncio.Event()
        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def worker(group: Group) -> SettleOutcome:
            async with semaphore:
                return await self._settle_group(group, target_date, abort_event)

        results = await asyncio.gather(
            *(worker(g) for g in eligible),
            return_exceptions=True,
        )

        for group, result in zip(eligible, results):
            if result == SettleOutcome.SETTLED:
                report.settled.append(group.group_id)
            elif result == SettleOutcome.SKIPPED:
                report.skipped.append(group.group_id)
            else:
                report.failed.append(group.group_id)
                if isinstance(result, BaseException):
                    logger.error(
                        f"그룹 정산 중단: {result!r}",
                        extra={"entity_id": group.group_id},
                    )

        report.aborted = abort_event.is_set()
        self.last_report = report

        logger.info(
            "일일 정산 분배 완료",
            extra={
                "target_date": day_key(target_date),
                "settled": len(report.settled),
                "failed": len(report.failed),
                "skipped": len(report.skipped),
                "aborted": report.aborted,
            },
        )
        return report

    async def _settle_group(
        self,
        group: Group,
        target_date: date,
        abort_event: asyncio.Event,
    ) -> SettleOutcome:
        """그룹 1개 정산 + 보고 전송 (최대 max_attempts회)

        정산이 성공하고 전송만 실패한 경우 재시도 시 정산은 다시 하지 않음.

        Raises:
            asyncio.TimeoutError: 정산/전송 타임아웃 (분배 중단 신호)
        """
        entity_id = group.group_id
        result: SettlementResult | None = None

        for attempt in range(1, self.config.max_attempts + 1):
            if self._stop_event.is_set() or abort_event.is_set():
                logger.info(
                    "정산 시도 생략 (종료/중단)",
                    extra={"entity_id": entity_id, "attempt": attempt},
                )
                return SettleOutcome.SKIPPED

            try:
                if result is None:
                    result = await asyncio.wait_for(
                        self.engine.settle_daily(group, target_date),
                        timeout=self.config.attempt_timeout_sec,
                    )
                delivered = await asyncio.wait_for(
                    self.notifier.deliver(entity_id, format_settlement_report(result)),
                    timeout=self.config.delivery_timeout_sec,
                )
            except asyncio.TimeoutError:
                abort_event.set()
                logger.error(
                    "정산 타임아웃: 분배 중단",
                    extra={"entity_id": entity_id, "attempt": attempt},
                )
                raise
            except (NoBindingsError, BillingUnavailableError) as e:
                logger.error(
                    f"정산 설정 에러 (재시도 안 함): {e}",
                    extra={"entity_id": entity_id},
                )
                return SettleOutcome.FAILED
            except Exception as e:
                logger.warning(
                    f"정산 시도 실패: {e}",
                    extra={"entity_id": entity_id, "attempt": attempt},
                )
                continue

            if delivered:
                return SettleOutcome.SETTLED

            logger.warning(
                "정산 보고 전송 실패",
                extra={"entity_id": entity_id, "attempt": attempt},
            )

        logger.error(
            f"정산 포기: {self.config.max_attempts}회 시도 실패",
            extra={"entity_id": entity_id, "target_date": day_key(target_date)},
        )
        return SettleOutcome.FAILED
