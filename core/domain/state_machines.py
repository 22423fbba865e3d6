"""
스케줄러 상태 머신

IDLE → WAITING → DISPATCHING → IDLE 을 하루 한 번 반복.
종료 신호는 어느 상태에서든 STOPPED로 보내며, STOPPED에서는 나갈 수 없음.
"""

import logging

from core.types import SchedulerState

logger = logging.getLogger(__name__)

_ALLOWED: dict[SchedulerState, frozenset[SchedulerState]] = {
    SchedulerState.IDLE: frozenset({SchedulerState.WAITING, SchedulerState.STOPPED}),
    SchedulerState.WAITING: frozenset({SchedulerState.DISPATCHING, SchedulerState.STOPPED}),
    SchedulerState.DISPATCHING: frozenset({SchedulerState.IDLE, SchedulerState.STOPPED}),
    SchedulerState.STOPPED: frozenset(),
}


class StateMachineError(Exception):
    """허용되지 않은 상태 전이"""


class SchedulerStateMachine:
    """일일 정산 스케줄러 상태 머신

    Args:
        initial_state: 시작 상태 (기본 IDLE)
    """

    def __init__(self, initial_state: str | SchedulerState = SchedulerState.IDLE):
        self._state = SchedulerState(initial_state)
        self._history: list[tuple[str, str]] = []

    @property
    def state(self) -> str:
        return self._state.value

    @property
    def is_stopped(self) -> bool:
        return self._state is SchedulerState.STOPPED

    @property
    def history(self) -> list[tuple[str, str]]:
        """(이전, 이후) 전이 이력"""
        return list(self._history)

    def can_transition(self, to_state: str | SchedulerState) -> bool:
        return SchedulerState(to_state) in _ALLOWED[self._state]

    def transition(self, to_state: str | SchedulerState) -> str:
        """상태 전이

        Raises:
            StateMachineError: 허용되지 않은 전이
        """
        target = SchedulerState(to_state)
        if not self.can_transition(target):
            raise StateMachineError(
                f"스케줄러 상태 전이 불가: {self._state.value} → {target.value}"
            )

        self._history.append((self._state.value, target.value))
        logger.debug(f"스케줄러 상태: {self._state.value} → {target.value}")
        self._state = target
        return target.value

    def stop(self) -> None:
        """STOPPED로 전이 (이미 종료 상태면 무시)"""
        if not self.is_stopped:
            self.transition(SchedulerState.STOPPED)
