"""Item-status polling.

Polling is single-shot-and-reschedule: after every items fetch we decide
whether one more fetch is needed and, if so, arm exactly one timer.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence

from ytrss.models import Item, ItemStatus

POLL_INTERVAL = 3.0

logger = logging.getLogger(__name__)


class PollStep(str, Enum):
    CONTINUE = "continue"
    # Nothing pending any more; the jobs all succeeded so quota changed.
    SETTLED_REFRESH_USAGE = "settled_refresh_usage"
    SETTLED = "settled"


def next_poll_step(items: Sequence[Item]) -> PollStep:
    if any(i.status is ItemStatus.CREATED for i in items):
        return PollStep.CONTINUE
    if items and all(i.status is ItemStatus.SUCCESS for i in items):
        return PollStep.SETTLED_REFRESH_USAGE
    return PollStep.SETTLED


class TimerHandle(Protocol):
    def stop(self) -> None: ...


class PollingScheduler:
    """Owns the one pending poll timer.

    ``set_timer`` is the host's one-shot timer factory (``App.set_timer`` in
    the TUI); ``on_fire`` receives the generation the timer was armed with.
    """

    def __init__(
        self,
        set_timer: Callable[[float, Callable[[], None]], TimerHandle],
        on_fire: Callable[[int], None],
    ) -> None:
        self._set_timer = set_timer
        self._on_fire = on_fire
        self._timer: Optional[TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def schedule(self, delay: float, generation: int) -> None:
        self.cancel()

        def fire() -> None:
            self._timer = None
            self._on_fire(generation)

        logger.debug("Poll scheduled in %.1fs (generation %d)", delay, generation)
        self._timer = self._set_timer(delay, fire)

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer = None
        logger.debug("Poll timer cancelled")
