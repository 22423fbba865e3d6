"""
Mock 알림 서비스

테스트용 Mock Notifier.
INotifier Protocol 준수.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass
class DeliveryRecord:
    """전송 기록"""

    entity_id: int
    text: str
    timestamp: datetime
    sent: bool


class MockNotifier:
    """Mock 알림 서비스

    INotifier Protocol 구현.
    전송된 모든 메시지를 기록하여 테스트에서 검증 가능.

    사용 예시:
    ```python
    notifier = MockNotifier()

    await notifier.deliver(-100123, "테스트 메시지")

    assert notifier.message_count == 1
    assert notifier.last_delivery.text == "테스트 메시지"
    ```
    """

    def __init__(
        self,
        should_fail: bool = False,
        fail_times: int = 0,
        delay: float = 0.0,
        error: Exception | None = None,
    ):
        """
        Args:
            should_fail: True면 모든 전송 실패 (False 반환)
            fail_times: 처음 N회 전송 실패
            delay: 전송 지연 (초, 타임아웃 시나리오용)
            error: 지정 시 전송마다 해당 예외 발생
        """
        self.should_fail = should_fail
        self.fail_times = fail_times
        self.delay = delay
        self.error = error
        self.deliveries: list[DeliveryRecord] = []
        self.closed = False

    async def deliver(self, entity_id: int, text: str) -> bool:
        """메시지 전송"""
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error

        sent = not self.should_fail and self.fail_times <= 0
        if self.fail_times > 0:
            self.fail_times -= 1

        self.deliveries.append(
            DeliveryRecord(
                entity_id=entity_id,
                text=text,
                timestamp=datetime.now(timezone.utc),
                sent=sent,
            )
        )
        return sent

    async def close(self) -> None:
        self.closed = True

    # -------------------------------------------------------------------------
    # 테스트 헬퍼 메서드
    # -------------------------------------------------------------------------

    def clear(self) -> None:
        """전송 기록 초기화"""
        self.deliveries.clear()

    def get_by_entity(self, entity_id: int) -> list[DeliveryRecord]:
        """특정 그룹으로 전송된 기록"""
        return [d for d in self.deliveries if d.entity_id == entity_id]

    @property
    def last_delivery(self) -> DeliveryRecord | None:
        """마지막 전송 기록"""
        return self.deliveries[-1] if self.deliveries else None

    @property
    def message_count(self) -> int:
        """전체 전송 시도 수"""
        return len(self.deliveries)

    @property
    def sent_count(self) -> int:
        """성공적으로 전송된 수"""
        return sum(1 for d in self.deliveries if d.sent)

    @property
    def failed_count(self) -> int:
        """전송 실패한 수"""
        return sum(1 for d in self.deliveries if not d.sent)
