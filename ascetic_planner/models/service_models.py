"""Pydantic models for service layer return types.

These models give the service boundaries typed results instead of loose
dictionaries or tuples.
"""

from enum import StrEnum

from pydantic import BaseModel


class DisciplineStatus(BaseModel):
    """Derived discipline and decay flags of one task at one moment."""

    task_id: str
    is_timer_running: bool
    is_focus_locked: bool
    remaining_lock_ms: int
    remaining_lock_display: str | None = None
    shows_editable_badge: bool
    is_stale_today: bool
    is_stagnant: bool
    is_past_due: bool

    @property
    def is_in_pain(self) -> bool:
        """Red highlight: left in today too long or past its due date."""
        return self.is_stale_today or self.is_past_due


class SectionUsage(BaseModel):
    """Occupancy of one section."""

    section: str
    title: str
    count: int
    limit: float

    @property
    def is_full(self) -> bool:
        return self.count >= self.limit

    @property
    def limit_display(self) -> str:
        return "∞" if self.limit == float("inf") else str(int(self.limit))


class CompletionOutcome(StrEnum):
    """What attempt_complete did with the task."""

    COMPLETED = "completed"
    REOPENED = "reopened"
    AWAITING_CHECKLIST = "awaiting_checklist"


class FocusPeriodStatus(BaseModel):
    """Weekly focus period as seen at one check tick."""

    title: str
    is_locked: bool
    hours_remaining: int | None = None
    expired_now: bool = False


class SyncResult(BaseModel):
    """Outcome of a successful push or pull."""

    direction: str
    task_count: int
    snapshot_updated_at: int
