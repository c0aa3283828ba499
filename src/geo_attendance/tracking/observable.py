from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .model import AttendanceState

logger = logging.getLogger(__name__)

Listener = Callable[[AttendanceState], None]


class StateObservable:
    """Holds the latest known attendance state and notifies subscribers.

    Owned by the container and passed by reference (no module-level state).
    """

    def __init__(self, initial: Optional[AttendanceState] = None):
        self._state = initial if initial is not None else AttendanceState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> AttendanceState:
        return self._state

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener, call it once with the current state, return an unsubscribe handle."""
        self._listeners = [*self._listeners, listener]
        listener(self._state)

        def unsubscribe() -> None:
            self._listeners = [item for item in self._listeners if item is not listener]

        return unsubscribe

    def publish(self, state: AttendanceState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Attendance state listener %r failed", listener)
