"""Pure discipline derivations for tasks.

Every flag here is recomputed from stored timestamps and a clock reading on
each call; nothing is cached and nothing is mutated. The focus lock is the
only flag that gates an operation (title/due-date edits). Staleness,
stagnation and overdue are display signals.
"""

from ascetic_planner.core.config import constants
from ascetic_planner.core.errors import LockViolationError
from ascetic_planner.domain.task import SectionId, Task
from ascetic_planner.models.service_models import DisciplineStatus


def is_timer_running(task: Task) -> bool:
    """The lock timer is armed by any non-empty title edit."""
    return task.last_title_edit_at > 0


def ms_since_title_edit(task: Task, *, now_ms: int) -> int:
    return now_ms - task.last_title_edit_at


def is_focus_locked(task: Task, *, now_ms: int, lock_ms: int) -> bool:
    """Focus task edited less than lock_ms ago; unlocked exactly at the boundary."""
    return task.is_focus and is_timer_running(task) and ms_since_title_edit(task, now_ms=now_ms) < lock_ms


def remaining_lock_ms(task: Task, *, now_ms: int, lock_ms: int) -> int:
    if not is_focus_locked(task, now_ms=now_ms, lock_ms=lock_ms):
        return 0
    return max(0, lock_ms - ms_since_title_edit(task, now_ms=now_ms))


def format_remaining(ms: int) -> str:
    """Render a duration as HH:MM:SS (hours are not wrapped at 24)."""
    total_seconds = max(0, ms) // constants.MS_PER_SECOND
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def is_stale_today(task: Task, *, now_ms: int, threshold_ms: int = constants.STALE_TODAY_MS) -> bool:
    if task.section != SectionId.TODAY or not task.date_added_to_today:
        return False
    return now_ms - task.date_added_to_today > threshold_ms


def is_stagnant(task: Task, *, now_ms: int, threshold_ms: int = constants.STAGNATION_THRESHOLD_MS) -> bool:
    return task.section != SectionId.DONE and now_ms - task.updated_at > threshold_ms


def is_past_due(task: Task, *, now_ms: int) -> bool:
    return bool(task.due_date) and now_ms > task.due_date and task.section != SectionId.DONE


def evaluate(task: Task, *, now_ms: int, lock_ms: int) -> DisciplineStatus:
    """Compute every derived flag for a task at now_ms."""
    locked = is_focus_locked(task, now_ms=now_ms, lock_ms=lock_ms)
    remaining = remaining_lock_ms(task, now_ms=now_ms, lock_ms=lock_ms)
    return DisciplineStatus(
        task_id=task.id,
        is_timer_running=is_timer_running(task),
        is_focus_locked=locked,
        remaining_lock_ms=remaining,
        remaining_lock_display=format_remaining(remaining) if locked else None,
        shows_editable_badge=task.is_focus and not locked and task.section != SectionId.DONE,
        is_stale_today=is_stale_today(task, now_ms=now_ms),
        is_stagnant=is_stagnant(task, now_ms=now_ms),
        is_past_due=is_past_due(task, now_ms=now_ms),
    )


def ensure_editable(task: Task, *, now_ms: int, lock_ms: int) -> None:
    """Raise LockViolationError if the task's title/due date may not be edited now."""
    if is_focus_locked(task, now_ms=now_ms, lock_ms=lock_ms):
        raise LockViolationError(f"Task {task.id}", remaining_lock_ms(task, now_ms=now_ms, lock_ms=lock_ms))


def title_edit_stamp(title: str, *, now_ms: int) -> int:
    """lastTitleEditAt after an accepted edit: 0 disarms the timer for an empty draft."""
    return 0 if not title.strip() else now_ms
