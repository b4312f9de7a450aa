"""Weekly focus period: a timed read-only lock on the shared app title.

Two states, INACTIVE (no start) and ACTIVE(start). Committing a non-empty
title while inactive starts the period; a periodic check clears both the
start and the title once the period has elapsed. The lock and the hours
remaining are pure functions of (start, now, duration).
"""

import logging
import math
from collections.abc import Callable

from ascetic_planner.core.config import constants
from ascetic_planner.core.errors import LockViolationError
from ascetic_planner.core.logging import span
from ascetic_planner.core.ports import Clock, NotificationPort
from ascetic_planner.domain.focus_period import FocusPeriodState
from ascetic_planner.models.service_models import FocusPeriodStatus
from ascetic_planner.services.notification_service import FeedbackCategory, safe_notify


logger = logging.getLogger(__name__)


def evaluate_period(start_ms: int | None, *, now_ms: int, duration_ms: int = constants.WEEK_MS) -> int | None:
    """Return whole hours remaining (rounded up), or None if inactive or elapsed."""
    if start_ms is None:
        return None
    diff = start_ms + duration_ms - now_ms
    if diff <= 0:
        return None
    return math.ceil(diff / constants.MS_PER_HOUR)


class WeeklyFocusPeriod:
    """Process-wide owner of the app title and its focus period."""

    def __init__(
        self,
        *,
        clock: Clock,
        notifier: NotificationPort | None = None,
        duration_ms: int = constants.WEEK_MS,
        on_change: Callable[[FocusPeriodState], None] | None = None,
    ) -> None:
        self._clock = clock
        self._notifier = notifier
        self.duration_ms = duration_ms
        self._on_change = on_change
        self._state = FocusPeriodState()

    @property
    def state(self) -> FocusPeriodState:
        return self._state.model_copy()

    @property
    def title(self) -> str:
        return self._state.title

    def is_locked(self) -> bool:
        return self.hours_remaining() is not None

    def hours_remaining(self) -> int | None:
        return evaluate_period(self._state.start_ms, now_ms=self._clock.now_ms(), duration_ms=self.duration_ms)

    def status(self, *, expired_now: bool = False) -> FocusPeriodStatus:
        hours = self.hours_remaining()
        return FocusPeriodStatus(
            title=self._state.title,
            is_locked=hours is not None,
            hours_remaining=hours,
            expired_now=expired_now,
        )

    def start_time_wire(self) -> str | None:
        """Start as a decimal epoch-ms string, the form stored and synced."""
        return str(self._state.start_ms) if self._state.start_ms is not None else None

    def load(self, *, title: str, start_ms: int | None) -> None:
        """Adopt stored state without emitting feedback or write-back."""
        self._state = FocusPeriodState(title=title, start_ms=start_ms)

    def replace(self, *, title: str, start_ms: int | None) -> None:
        """Overwrite the state wholesale (sync pull) and persist it."""
        self._state = FocusPeriodState(title=title, start_ms=start_ms)
        self._changed()

    def set_title(self, text: str) -> None:
        """Change the app title; read-only while the period is running."""
        self.check()
        if self.is_locked():
            remaining_ms = self._state.start_ms + self.duration_ms - self._clock.now_ms()
            safe_notify(self._notifier, FeedbackCategory.ERROR)
            raise LockViolationError("App title", remaining_ms)
        self._state = self._state.model_copy(update={"title": text})
        self._changed()

    def commit(self) -> FocusPeriodStatus:
        """Title field lost focus: start the period if there is a title and none is running."""
        with span("focus_period.commit"):
            # An elapsed period that no tick has cleared yet must not block a new one
            self.check()
            if self._state.title.strip() and self._state.start_ms is None:
                now = self._clock.now_ms()
                self._state = self._state.model_copy(update={"start_ms": now})
                logger.info("Focus period started at %d for %r", now, self._state.title)
                safe_notify(self._notifier, FeedbackCategory.HEAVY)
                self._changed()
            return self.status()

    def check(self) -> FocusPeriodStatus:
        """Expire the period once start + duration has been reached."""
        start = self._state.start_ms
        if start is not None and self._clock.now_ms() >= start + self.duration_ms:
            logger.info("Focus period that started at %d expired", start)
            self._state = FocusPeriodState(title="", start_ms=None)
            safe_notify(self._notifier, FeedbackCategory.SUCCESS)
            self._changed()
            return self.status(expired_now=True)
        return self.status()

    def _changed(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self.state)
        except Exception as e:
            logger.warning("Focus period change listener failed: %s", e)
