"""Checklist confirmation required before a trading task may be completed."""

import logging
from collections.abc import Sequence

from ascetic_planner.core.config import constants
from ascetic_planner.core.errors import ValidationRejectedError
from ascetic_planner.core.logging import span
from ascetic_planner.core.ports import NotificationPort
from ascetic_planner.domain.task import Task
from ascetic_planner.services.notification_service import FeedbackCategory, safe_notify
from ascetic_planner.services.task_store import TaskStore


logger = logging.getLogger(__name__)


class TradingGate:
    """Transient checklist workflow in front of TaskStore.complete.

    Holds only the pending task ID and the checked vector; both are reset on
    open, on successful confirm and on cancel.
    """

    def __init__(
        self,
        *,
        store: TaskStore,
        notifier: NotificationPort | None = None,
        checklist: Sequence[str] = constants.TRADING_CHECKLIST,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self.checklist = tuple(checklist)
        self._checked = [False] * len(self.checklist)
        self._pending_task_id: str | None = None

    @property
    def pending_task_id(self) -> str | None:
        return self._pending_task_id

    @property
    def is_open(self) -> bool:
        return self._pending_task_id is not None

    @property
    def checked(self) -> list[bool]:
        return list(self._checked)

    @property
    def all_checked(self) -> bool:
        return all(self._checked)

    def open(self, task_id: str) -> None:
        """Present the checklist for a task awaiting completion."""
        self._store.get(task_id)
        self._pending_task_id = task_id
        self._reset()
        logger.info("Checklist opened for task %s", task_id)

    def toggle(self, index: int) -> bool:
        """Flip one checklist item and return its new state."""
        if not 0 <= index < len(self._checked):
            msg = f"Checklist item out of range: {index}"
            raise IndexError(msg)
        self._checked[index] = not self._checked[index]
        safe_notify(self._notifier, FeedbackCategory.LIGHT)
        return self._checked[index]

    def confirm(self) -> Task:
        """Complete the pending task once every item is acknowledged.

        Raises:
            ValidationRejectedError: nothing pending, or the checklist is incomplete
        """
        with span("trading_gate.confirm"):
            if self._pending_task_id is None:
                safe_notify(self._notifier, FeedbackCategory.ERROR)
                raise ValidationRejectedError("No task is waiting for checklist confirmation")

            if not self.all_checked:
                safe_notify(self._notifier, FeedbackCategory.ERROR)
                missing = sum(1 for item in self._checked if not item)
                raise ValidationRejectedError(f"{missing} checklist item(s) not confirmed")

            task = self._store.complete(self._pending_task_id)
            logger.info("Checklist confirmed, task %s completed", task.id)
            self._pending_task_id = None
            self._reset()
            return task

    def cancel(self) -> None:
        """Drop the pending task without touching it."""
        logger.info("Checklist cancelled for task %s", self._pending_task_id)
        self._pending_task_id = None
        self._reset()

    def _reset(self) -> None:
        self._checked = [False] * len(self.checklist)
