"""Authoritative in-memory task collection and its lifecycle rules.

All mutations run synchronously on the caller's thread; there is a single
writer. After every mutation the new collection is handed to the change
listener (the local persistence mirror), which writes it out in the background.
In-memory state stays authoritative when that write fails.
"""

import logging
import uuid
from collections.abc import Callable, Iterable
from datetime import date

from ascetic_planner.core.config import settings
from ascetic_planner.core.errors import (
    CapacityExceededError,
    LockViolationError,
    PlannerError,
    ValidationRejectedError,
)
from ascetic_planner.core.logging import span
from ascetic_planner.core.ports import CelebrationPort, Clock, NotificationPort
from ascetic_planner.domain.task import (
    SECTIONS,
    SectionId,
    Subtask,
    Task,
    end_of_day_ms,
    extract_tags,
    get_section_config,
)
from ascetic_planner.models.service_models import CompletionOutcome, DisciplineStatus, SectionUsage
from ascetic_planner.services import discipline
from ascetic_planner.services.notification_service import (
    CelebrationReason,
    FeedbackCategory,
    safe_celebrate,
    safe_notify,
)


logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


class TaskStore:
    """Owns the task collection and enforces capacity, focus and completion rules."""

    def __init__(
        self,
        *,
        clock: Clock,
        notifier: NotificationPort | None = None,
        celebrator: CelebrationPort | None = None,
        lock_ms: int | None = None,
        on_change: Callable[[list[Task]], None] | None = None,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._clock = clock
        self._notifier = notifier
        self._celebrator = celebrator
        self.lock_ms = lock_ms if lock_ms is not None else settings.focus_edit_lock_ms
        self._on_change = on_change
        self._id_factory = id_factory
        self._tasks: list[Task] = []

    # ---- reads ----

    def all(self) -> list[Task]:
        return list(self._tasks)

    def get(self, task_id: str) -> Task:
        """Return a task by ID, raising KeyError if it does not exist."""
        for task in self._tasks:
            if task.id == task_id:
                return task
        msg = f"Task not found: {task_id}"
        raise KeyError(msg)

    def tasks_in(self, section: SectionId) -> list[Task]:
        return [task for task in self._tasks if task.section == section]

    def count(self, section: SectionId) -> int:
        return len(self.tasks_in(section))

    def is_full(self, section: SectionId) -> bool:
        config = get_section_config(section)
        return config.is_bounded and self.count(section) >= config.limit

    def usage(self) -> list[SectionUsage]:
        return [
            SectionUsage(section=config.id, title=config.title, count=self.count(config.id), limit=config.limit)
            for config in SECTIONS
        ]

    def focus_task(self) -> Task | None:
        return next((task for task in self.tasks_in(SectionId.TODAY) if task.is_focus), None)

    def discipline(self, task_id: str) -> DisciplineStatus:
        """Derived lock/decay flags for a task at the current clock reading."""
        return discipline.evaluate(self.get(task_id), now_ms=self._clock.now_ms(), lock_ms=self.lock_ms)

    # ---- bulk ----

    def load(self, tasks: Iterable[Task]) -> None:
        """Seed the collection from local storage (no feedback, no write-back)."""
        self._tasks = list(tasks)
        logger.info("Loaded %d tasks", len(self._tasks))

    def replace_all(self, tasks: Iterable[Task]) -> None:
        """Destructively replace the whole collection (sync pull)."""
        self._tasks = list(tasks)
        logger.info("Replaced collection with %d tasks", len(self._tasks))
        self._changed()

    # ---- mutations ----

    def add(self, section: SectionId, raw_title: str) -> Task:
        """Create a task in a section, rejecting it when the section is full."""
        with span("task_store.add"):
            title = raw_title.strip()
            if not title:
                raise self._rejected(ValidationRejectedError("Task title cannot be empty"))

            self._ensure_capacity(section)

            now = self._clock.now_ms()
            task = Task(
                id=self._id_factory(),
                title=title,
                section=section,
                created_at=now,
                updated_at=now,
                last_title_edit_at=0,
                date_added_to_today=now if section == SectionId.TODAY else None,
                is_focus=False,
                tags=extract_tags(title),
                subtasks=[],
            )
            self._tasks.append(task)
            logger.info("Added task %s to %s", task.id, section)

            safe_notify(self._notifier, FeedbackCategory.SUCCESS)
            self._changed()
            return task

    def update(self, task: Task) -> Task:
        """Replace a task record wholesale, keyed by ID.

        Callers are responsible for producing a valid next state; the focus lock
        is checked by edit(), not here. Tags are always re-derived from the title.
        """
        current = self.get(task.id)
        updated = task.model_copy(update={"tags": extract_tags(task.title)})
        self._swap(current, updated)
        self._changed()
        return updated

    def delete(self, task_id: str) -> None:
        with span("task_store.delete"):
            self._tasks = [task for task in self._tasks if task.id != task_id]
            logger.info("Deleted task %s", task_id)
            safe_notify(self._notifier, FeedbackCategory.MEDIUM)
            self._changed()

    def move(self, task_id: str, target: SectionId) -> Task:
        """Move a task between sections.

        Raises:
            CapacityExceededError: target is full and differs from the current section
            KeyError: unknown task
        """
        with span("task_store.move"):
            task = self._move(task_id, target)
            safe_notify(self._notifier, FeedbackCategory.MEDIUM)
            return task

    def complete(self, task_id: str) -> Task:
        """Move a task into done. Trading tasks reach this only through the checklist gate."""
        with span("task_store.complete"):
            task = self._move(task_id, SectionId.DONE)
            safe_notify(self._notifier, FeedbackCategory.SUCCESS)
            return task

    def attempt_complete(self, task_id: str) -> CompletionOutcome:
        """Handle the completion checkbox.

        A done task is reopened into today. A trading task is left untouched and
        the caller must run the checklist gate. Anything else is completed.
        """
        task = self.get(task_id)

        if task.section == SectionId.DONE:
            self.move(task_id, SectionId.TODAY)
            return CompletionOutcome.REOPENED

        if task.is_trading:
            logger.info("Task %s needs checklist confirmation before completion", task_id)
            return CompletionOutcome.AWAITING_CHECKLIST

        self.complete(task_id)
        return CompletionOutcome.COMPLETED

    def edit(self, task_id: str, *, title: str, due_date: date | None) -> Task:
        """Commit a title/due-date edit.

        Raises:
            LockViolationError: the focus task is still inside its lock window
            ValidationRejectedError: empty title on a task that is not the focus
        """
        with span("task_store.edit"):
            task = self.get(task_id)
            now = self._clock.now_ms()

            try:
                discipline.ensure_editable(task, now_ms=now, lock_ms=self.lock_ms)
            except LockViolationError as e:
                self._rejected(e)
                raise

            new_title = title.strip()
            # Empty titles are a draft state reserved for the focus task
            if not new_title and not task.is_focus:
                raise self._rejected(ValidationRejectedError("Task title cannot be empty"))

            updated = task.model_copy(
                update={
                    "title": new_title,
                    "tags": extract_tags(new_title),
                    "due_date": end_of_day_ms(due_date) if due_date else None,
                    "last_title_edit_at": discipline.title_edit_stamp(new_title, now_ms=now),
                    "updated_at": now,
                }
            )
            self._swap(task, updated)
            logger.info("Edited task %s (lock armed: %s)", task_id, updated.last_title_edit_at > 0)

            safe_notify(self._notifier, FeedbackCategory.SUCCESS)
            self._changed()
            return updated

    def toggle_focus(self, task_id: str) -> Task:
        """Star or unstar a task; at most one focus task lives in today."""
        with span("task_store.toggle_focus"):
            task = self.get(task_id)

            if not task.is_focus:
                if task.section != SectionId.TODAY:
                    raise self._rejected(ValidationRejectedError("Only a task in today can be the focus"))
                current = self.focus_task()
                if current is not None:
                    raise self._rejected(ValidationRejectedError(f"Task {current.id} is already the focus"))

            updated = task.model_copy(update={"is_focus": not task.is_focus})
            self._swap(task, updated)

            safe_notify(self._notifier, FeedbackCategory.MEDIUM)
            self._changed()
            return updated

    def add_subtask(self, task_id: str, title: str) -> Task:
        with span("task_store.add_subtask"):
            task = self.get(task_id)
            clean_title = title.strip()
            if not clean_title:
                raise self._rejected(ValidationRejectedError("Subtask title cannot be empty"))

            subtask = Subtask(id=self._id_factory(), title=clean_title, is_completed=False)
            updated = task.model_copy(
                update={"subtasks": [*task.subtasks, subtask], "updated_at": self._clock.now_ms()}
            )
            self._swap(task, updated)

            safe_notify(self._notifier, FeedbackCategory.LIGHT)
            self._changed()
            return updated

    def toggle_subtask(self, task_id: str, subtask_id: str) -> Task:
        with span("task_store.toggle_subtask"):
            task = self.get(task_id)
            if not any(sub.id == subtask_id for sub in task.subtasks):
                msg = f"Subtask not found: {subtask_id}"
                raise KeyError(msg)

            subtasks = [
                sub.model_copy(update={"is_completed": not sub.is_completed}) if sub.id == subtask_id else sub
                for sub in task.subtasks
            ]
            updated = task.model_copy(update={"subtasks": subtasks, "updated_at": self._clock.now_ms()})
            self._swap(task, updated)

            safe_notify(self._notifier, FeedbackCategory.LIGHT)
            self._changed()
            return updated

    # ---- internals ----

    def _move(self, task_id: str, target: SectionId) -> Task:
        task = self.get(task_id)

        # Same-section moves never hit the capacity check and change nothing
        if task.section == target:
            return task

        self._ensure_capacity(target)

        now = self._clock.now_ms()
        moving_to_today = target == SectionId.TODAY
        updated = task.model_copy(
            update={
                "section": target,
                "updated_at": now,
                "date_added_to_today": now if moving_to_today else task.date_added_to_today,
                "is_focus": task.is_focus if moving_to_today else False,
            }
        )
        self._swap(task, updated)
        logger.info("Moved task %s from %s to %s", task_id, task.section, target)

        if target == SectionId.DONE:
            safe_celebrate(self._celebrator, CelebrationReason.TASK_COMPLETED)

        self._changed()
        return updated

    def _ensure_capacity(self, section: SectionId) -> None:
        if self.is_full(section):
            raise self._rejected(CapacityExceededError(section, get_section_config(section).limit))

    def _rejected(self, error: PlannerError) -> PlannerError:
        """Emit the error signal for a rejected action and hand the error back to raise."""
        logger.info("Rejected: %s", error)
        safe_notify(self._notifier, FeedbackCategory.ERROR)
        return error

    def _swap(self, current: Task, updated: Task) -> None:
        self._tasks = [updated if task.id == current.id else task for task in self._tasks]

    def _changed(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self.all())
        except Exception as e:
            logger.warning("Change listener failed: %s", e)
