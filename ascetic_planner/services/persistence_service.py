"""Local persistence: SQLite-backed port plus the best-effort background mirror."""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from pydantic import ValidationError

from ascetic_planner.core import db_client
from ascetic_planner.core.config import constants
from ascetic_planner.core.logging import span
from ascetic_planner.core.ports import PersistencePort
from ascetic_planner.domain.focus_period import FocusPeriodState
from ascetic_planner.domain.task import Task


logger = logging.getLogger(__name__)


class SqlitePersistence:
    """PersistencePort over core.db_client."""

    def __init__(self, *, db_path: str | None = None) -> None:
        self._db_path = db_path

    async def load(self) -> list[Task]:
        payloads = await db_client.load_tasks(db_path=self._db_path)
        tasks = []
        for payload in payloads:
            try:
                tasks.append(Task.from_stored(payload))
            except ValidationError as e:
                logger.warning("Skipping unreadable stored task %s: %s", payload.get("id"), e)
        return tasks

    async def replace_all(self, tasks: list[Task]) -> None:
        await db_client.replace_all_tasks([task.to_wire() for task in tasks], db_path=self._db_path)

    async def load_app_state(self) -> tuple[str | None, int | None]:
        values = await db_client.get_app_state(db_path=self._db_path)
        raw_start = values.get(constants.FOCUS_START_KEY)
        start_ms = int(raw_start) if raw_start and raw_start.isdigit() else None
        return values.get(constants.APP_TITLE_KEY), start_ms

    async def save_app_state(self, *, app_title: str, focus_start_ms: int | None) -> None:
        await db_client.set_app_state(
            {
                constants.APP_TITLE_KEY: app_title,
                constants.FOCUS_START_KEY: str(focus_start_ms) if focus_start_ms is not None else None,
            },
            db_path=self._db_path,
        )


class LocalMirror:
    """Writes state changes to the persistence port without blocking callers.

    Writes run as tasks on the running event loop, one at a time and in the
    order they were scheduled, so the last mutation is the one left on disk.
    Failures are logged and swallowed; in-memory state is never rolled back.
    """

    def __init__(self, persistence: PersistencePort) -> None:
        self._persistence = persistence
        self._write_lock = asyncio.Lock()
        self._pending: set[asyncio.Task[None]] = set()

    def schedule_tasks(self, tasks: list[Task]) -> None:
        snapshot = [task.model_copy(deep=True) for task in tasks]
        self._schedule(self._write_tasks(snapshot), "tasks")

    def schedule_app_state(self, state: FocusPeriodState) -> None:
        self._schedule(self._write_app_state(state.model_copy()), "app_state")

    async def flush(self) -> None:
        """Wait for every scheduled write to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _schedule(self, write: Coroutine[Any, Any, None], label: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            write.close()
            logger.warning("No running event loop, %s change not persisted", label)
            return
        task = loop.create_task(write)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _write_tasks(self, tasks: list[Task]) -> None:
        async with self._write_lock:
            with span("local_mirror.write_tasks"):
                try:
                    await self._persistence.replace_all(tasks)
                except Exception as e:
                    logger.error("Local task write failed, keeping in-memory state: %s", e)

    async def _write_app_state(self, state: FocusPeriodState) -> None:
        async with self._write_lock:
            try:
                await self._persistence.save_app_state(app_title=state.title, focus_start_ms=state.start_ms)
            except Exception as e:
                logger.error("Local app state write failed, keeping in-memory state: %s", e)


async def load_local_state(
    persistence: PersistencePort,
    *,
    default_title: str,
) -> tuple[list[Task], FocusPeriodState]:
    """Read tasks and app state; a failed read yields empty state rather than an error."""
    with span("local_mirror.load"):
        try:
            tasks = await persistence.load()
        except Exception as e:
            logger.error("Local task load failed, starting empty: %s", e)
            tasks = []

        try:
            title, start_ms = await persistence.load_app_state()
        except Exception as e:
            logger.error("Local app state load failed: %s", e)
            title, start_ms = None, None

        return tasks, FocusPeriodState(title=title if title is not None else default_title, start_ms=start_ms)
