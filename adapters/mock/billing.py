"""
Mock 빌링 클라이언트

테스트용 IBillingClient 구현.
인터페이스별 응답/예외/지연을 설정하고 호출 기록을 검증.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime

from adapters.models import DailySummary, SummaryItem


@dataclass(frozen=True)
class SummaryCall:
    """조회 호출 기록"""

    interface_id: str
    start: datetime
    end: datetime


class MockBillingClient:
    """Mock 빌링 클라이언트

    사용 예시:
    ```python
    billing = MockBillingClient()
    billing.set_summary("if-1", [SummaryItem("2026-02-20", "1000")])
    billing.set_error("if-2", ConnectionError("down"))
    ```
    """

    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self.calls: list[SummaryCall] = []
        self._summaries: dict[str, list[SummaryItem]] = {}
        self._errors: dict[str, Exception] = {}
        self._fail_times: dict[str, int] = {}

    def set_summary(self, interface_id: str, items: list[SummaryItem]) -> None:
        """인터페이스 응답 설정"""
        self._summaries[interface_id] = list(items)

    def set_error(self, interface_id: str, error: Exception, times: int = 0) -> None:
        """인터페이스 조회 실패 설정

        Args:
            interface_id: 인터페이스 ID
            error: 발생시킬 예외
            times: 처음 N회만 실패 (0이면 항상)
        """
        self._errors[interface_id] = error
        self._fail_times[interface_id] = times

    async def get_daily_summary(
        self,
        interface_id: str,
        start: datetime,
        end: datetime,
    ) -> DailySummary:
        self.calls.append(SummaryCall(interface_id=interface_id, start=start, end=end))

        if self.delay:
            await asyncio.sleep(self.delay)

        error = self._errors.get(interface_id)
        if error is not None:
            remaining = self._fail_times.get(interface_id, 0)
            if remaining == 0:
                raise error
            if remaining > 1:
                self._fail_times[interface_id] = remaining - 1
            else:
                del self._errors[interface_id]
            raise error

        return DailySummary(
            interface_id=interface_id,
            items=tuple(self._summaries.get(interface_id, [])),
        )

    @property
    def call_count(self) -> int:
        return len(self.calls)
