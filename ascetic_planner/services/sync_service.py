"""Wholesale push/pull of local state against the remote snapshot store.

There is no merge: push overwrites the remote snapshot with local state, pull
overwrites local tasks, app title and focus-period start with the remote
snapshot. The remote store is last-write-wins.
"""

import logging

from ascetic_planner.core.errors import RemoteIOError
from ascetic_planner.core.logging import span
from ascetic_planner.core.ports import CelebrationPort, Clock, NotificationPort, RemoteSnapshotPort
from ascetic_planner.domain.snapshot import SyncSnapshot
from ascetic_planner.models.service_models import SyncResult
from ascetic_planner.services.focus_period import WeeklyFocusPeriod
from ascetic_planner.services.notification_service import (
    CelebrationReason,
    FeedbackCategory,
    safe_celebrate,
    safe_notify,
)
from ascetic_planner.services.task_store import TaskStore


logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Explicit, user-initiated sync actions. No retries, no cancellation."""

    def __init__(
        self,
        *,
        store: TaskStore,
        focus_period: WeeklyFocusPeriod,
        remote: RemoteSnapshotPort,
        clock: Clock,
        notifier: NotificationPort | None = None,
        celebrator: CelebrationPort | None = None,
    ) -> None:
        self._store = store
        self._focus_period = focus_period
        self._remote = remote
        self._clock = clock
        self._notifier = notifier
        self._celebrator = celebrator
        self._in_flight = 0

    @property
    def is_loading(self) -> bool:
        """Advisory busy flag for callers that want to gate re-entry."""
        return self._in_flight > 0

    def build_snapshot(self) -> SyncSnapshot:
        return SyncSnapshot(
            tasks=self._store.all(),
            app_title=self._focus_period.title,
            focus_start_time=self._focus_period.start_time_wire(),
            updated_at=self._clock.now_ms(),
        )

    async def push(self) -> SyncResult:
        """Upload local state, replacing whatever the remote holds.

        Raises:
            RemoteIOError: transport failure or non-success status
        """
        with span("sync.push"):
            snapshot = self.build_snapshot()
            self._in_flight += 1
            try:
                await self._remote.put(snapshot)
            except RemoteIOError:
                safe_notify(self._notifier, FeedbackCategory.ERROR)
                raise
            finally:
                self._in_flight -= 1

            logger.info("Pushed snapshot with %d tasks", len(snapshot.tasks))
            safe_notify(self._notifier, FeedbackCategory.SUCCESS)
            return SyncResult(direction="push", task_count=len(snapshot.tasks), snapshot_updated_at=snapshot.updated_at)

    async def pull(self) -> SyncResult:
        """Replace local state with the remote snapshot.

        Local state is untouched when the download fails.

        Raises:
            RemoteIOError: transport failure, non-success status or unreadable payload
        """
        with span("sync.pull"):
            self._in_flight += 1
            try:
                snapshot = await self._remote.get()
            except RemoteIOError:
                safe_notify(self._notifier, FeedbackCategory.ERROR)
                raise
            finally:
                self._in_flight -= 1

            self._store.replace_all(snapshot.tasks)
            self._focus_period.replace(title=snapshot.app_title, start_ms=snapshot.focus_start_ms)
            self._focus_period.check()

            logger.info("Pulled snapshot with %d tasks", len(snapshot.tasks))
            safe_notify(self._notifier, FeedbackCategory.SUCCESS)
            safe_celebrate(self._celebrator, CelebrationReason.SYNC_PULLED)
            return SyncResult(direction="pull", task_count=len(snapshot.tasks), snapshot_updated_at=snapshot.updated_at)
