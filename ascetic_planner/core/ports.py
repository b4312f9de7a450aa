"""Ports (interfaces) used by the planner services.

Services depend on these Protocols rather than on concrete adapters, so the
SQLite mirror, the HTTP snapshot store and the feedback channels stay swappable
and tests can substitute in-memory fakes.
"""

from typing import TYPE_CHECKING, Protocol


if TYPE_CHECKING:
    from ascetic_planner.domain.snapshot import SyncSnapshot
    from ascetic_planner.domain.task import Task
    from ascetic_planner.services.notification_service import CelebrationReason, FeedbackCategory


class Clock(Protocol):
    """Supplies the current time in epoch milliseconds."""

    def now_ms(self) -> int: ...


class PersistencePort(Protocol):
    """Local store for the full task collection plus the shared app state."""

    async def load(self) -> list["Task"]: ...

    async def replace_all(self, tasks: list["Task"]) -> None: ...

    async def load_app_state(self) -> tuple[str | None, int | None]: ...

    async def save_app_state(self, *, app_title: str, focus_start_ms: int | None) -> None: ...


class RemoteSnapshotPort(Protocol):
    """Whole-state snapshot store addressed by one shared identifier."""

    async def put(self, snapshot: "SyncSnapshot") -> None: ...

    async def get(self) -> "SyncSnapshot": ...


class NotificationPort(Protocol):
    """Best-effort feedback signal; must never raise."""

    def notify(self, category: "FeedbackCategory") -> None: ...


class CelebrationPort(Protocol):
    """Visual celebration hook (fireworks on completion or successful pull)."""

    def celebrate(self, reason: "CelebrationReason") -> None: ...
