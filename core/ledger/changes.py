"""
잔고 변경 알림 (Publish/Subscribe)

원장 쓰기 성공 시 변경된 BalanceRecord를 구독자에게 전달.
발행은 절대 블록되지 않음: 구독 큐가 가득 차면 가장 오래된 항목을 버림.
누락된 알림은 BalanceWatcher의 주기적 전체 스캔이 보완.
"""

import asyncio
import logging

from core.constants import WatcherDefaults
from core.ledger.types import BalanceRecord

logger = logging.getLogger(__name__)


class BalanceSubscription:
    """잔고 변경 구독

    제한된 크기의 큐. 비동기 이터레이터로 사용 가능.

    사용 예시:
    ```python
    subscription = broker.subscribe()
    async for record in subscription:
        ...
    ```
    """

    def __init__(self, broker: "BalanceChangeBroker", maxsize: int):
        if maxsize <= 0:
            raise ValueError("maxsize는 1 이상이어야 합니다")

        self._broker = broker
        self._queue: asyncio.Queue[BalanceRecord] = asyncio.Queue(maxsize=maxsize)
        self.dropped_count = 0

    def offer(self, record: BalanceRecord) -> None:
        """논블로킹 적재 (가득 차면 가장 오래된 항목 폐기)"""
        if self._queue.full():
            try:
                self._queue.get_nowait()
                self.dropped_count += 1
            except asyncio.QueueEmpty:
                pass
        self._queue.put_nowait(record)

    async def get(self) -> BalanceRecord:
        """다음 변경 대기"""
        return await self._queue.get()

    def pending(self) -> int:
        """대기 중인 변경 수"""
        return self._queue.qsize()

    def close(self) -> None:
        """구독 해제"""
        self._broker.unsubscribe(self)

    def __aiter__(self) -> "BalanceSubscription":
        return self

    async def __anext__(self) -> BalanceRecord:
        return await self.get()


class BalanceChangeBroker:
    """잔고 변경 브로커

    BalanceLedgerStore가 발행하고 BalanceWatcher가 구독.
    구독자가 없거나 느려도 원장 쓰기를 지연시키지 않음.
    """

    def __init__(self, buffer_size: int = WatcherDefaults.CHANGE_BUFFER_SIZE):
        self.buffer_size = buffer_size
        self._subscriptions: list[BalanceSubscription] = []

    def subscribe(self, maxsize: int | None = None) -> BalanceSubscription:
        """새 구독 생성"""
        subscription = BalanceSubscription(self, maxsize or self.buffer_size)
        self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: BalanceSubscription) -> None:
        """구독 해제 (이미 해제된 경우 무시)"""
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def publish(self, record: BalanceRecord) -> None:
        """모든 구독자에게 전달 (fire-and-forget)"""
        for subscription in list(self._subscriptions):
            before = subscription.dropped_count
            subscription.offer(record)
            if subscription.dropped_count > before:
                logger.warning(
                    "잔고 변경 구독 큐 가득 참: 가장 오래된 항목 폐기",
                    extra={
                        "entity_id": record.entity_id,
                        "dropped_count": subscription.dropped_count,
                    },
                )
