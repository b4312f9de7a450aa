"""ascetic_planner - application context, lifespan and command line."""

import argparse
import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass

from ascetic_planner.core import db_client
from ascetic_planner.core.clock import SystemClock
from ascetic_planner.core.config import Settings, settings
from ascetic_planner.core.errors import PersistenceIOError, RemoteIOError, classify_error_with_response
from ascetic_planner.core.logging import configure_logfire
from ascetic_planner.core.ports import CelebrationPort, Clock, NotificationPort, PersistencePort, RemoteSnapshotPort
from ascetic_planner.core.scheduler import start_scheduler, stop_scheduler
from ascetic_planner.interface.remote_store import JsonBinSnapshotStore
from ascetic_planner.services.focus_period import WeeklyFocusPeriod
from ascetic_planner.services.notification_service import LoggingCelebrator, LoggingNotifier
from ascetic_planner.services.persistence_service import LocalMirror, SqlitePersistence, load_local_state
from ascetic_planner.services.sync_service import SyncOrchestrator
from ascetic_planner.services.task_store import TaskStore
from ascetic_planner.services.trading_gate import TradingGate


logger = logging.getLogger(__name__)


@dataclass
class PlannerContext:
    """Process-wide wiring of the planner services."""

    clock: Clock
    store: TaskStore
    gate: TradingGate
    focus_period: WeeklyFocusPeriod
    mirror: LocalMirror
    sync: SyncOrchestrator | None


def build_context(
    *,
    config: Settings,
    persistence: PersistencePort,
    remote: RemoteSnapshotPort | None = None,
    clock: Clock | None = None,
    notifier: NotificationPort | None = None,
    celebrator: CelebrationPort | None = None,
) -> PlannerContext:
    """Wire the services together; sync is unavailable without a remote store."""
    clock = clock or SystemClock()
    notifier = notifier or LoggingNotifier()
    celebrator = celebrator or LoggingCelebrator()
    mirror = LocalMirror(persistence)

    store = TaskStore(
        clock=clock,
        notifier=notifier,
        celebrator=celebrator,
        lock_ms=config.focus_edit_lock_ms,
        on_change=mirror.schedule_tasks,
    )
    focus_period = WeeklyFocusPeriod(clock=clock, notifier=notifier, on_change=mirror.schedule_app_state)
    gate = TradingGate(store=store, notifier=notifier)
    sync = None
    if remote is not None:
        sync = SyncOrchestrator(
            store=store,
            focus_period=focus_period,
            remote=remote,
            clock=clock,
            notifier=notifier,
            celebrator=celebrator,
        )

    return PlannerContext(clock=clock, store=store, gate=gate, focus_period=focus_period, mirror=mirror, sync=sync)


def build_remote(config: Settings) -> RemoteSnapshotPort | None:
    """Remote store from settings, or None when sync is not configured."""
    if not (config.remote_bin_id and config.remote_master_key):
        logger.info("Remote snapshot store not configured, sync disabled")
        return None
    return JsonBinSnapshotStore.from_settings(config)


@asynccontextmanager
async def lifespan(config: Settings = settings) -> AsyncIterator[PlannerContext]:
    """Load local state, start the periodic checks, and tear everything down on exit."""
    configure_logfire()

    try:
        await db_client.init_db(db_path=config.sqlite_db_path)
    except PersistenceIOError as e:
        logger.error("Local storage unavailable, running in memory only: %s", e)

    persistence = SqlitePersistence(db_path=config.sqlite_db_path)
    context = build_context(config=config, persistence=persistence, remote=build_remote(config))

    tasks, state = await load_local_state(persistence, default_title=config.default_app_title)
    context.store.load(tasks)
    context.focus_period.load(title=state.title, start_ms=state.start_ms)
    context.focus_period.check()

    start_scheduler(context.focus_period)
    try:
        yield context
    finally:
        stop_scheduler()
        await context.mirror.flush()
        await db_client.close_connection(db_path=config.sqlite_db_path)


def report_status(context: PlannerContext) -> None:
    """Log section usage, per-task discipline flags and the focus period."""
    for usage in context.store.usage():
        logger.info("%s: %d/%s", usage.title, usage.count, usage.limit_display)
        for task in context.store.tasks_in(usage.section):
            status = context.store.discipline(task.id)
            flags = [
                name
                for name, enabled in (
                    ("focus", task.is_focus),
                    (f"locked {status.remaining_lock_display}", status.is_focus_locked),
                    ("editable", status.shows_editable_badge),
                    ("stale", status.is_stale_today),
                    ("stagnant", status.is_stagnant),
                    ("past due", status.is_past_due),
                )
                if enabled
            ]
            suffix = f" [{', '.join(flags)}]" if flags else ""
            logger.info("  - %s%s", task.title or "(draft)", suffix)

    period = context.focus_period.status()
    if period.is_locked:
        logger.info("Focus: %s (%d h left)", period.title, period.hours_remaining)
    else:
        logger.info("Focus: %s (not locked)", period.title or "-")


async def run_command(command: str, config: Settings = settings) -> int:
    """Run one command line action and return the process exit code."""
    async with lifespan(config) as context:
        if command == "status":
            report_status(context)
            return 0

        if context.sync is None:
            logger.error("Sync is not configured. Set REMOTE_BIN_ID and REMOTE_MASTER_KEY.")
            return 2

        try:
            result = await (context.sync.push() if command == "push" else context.sync.pull())
        except RemoteIOError as e:
            response = classify_error_with_response(e)
            logger.error("%s %s", response.message, response.suggestion)
            return 1

        logger.info("%s complete: %d tasks", result.direction.capitalize(), result.task_count)
        if command == "pull":
            report_status(context)
        return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="ascetic-planner", description="Bucketed planner with focus discipline")
    parser.add_argument(
        "command",
        choices=["status", "push", "pull"],
        help="status: show sections; push: upload local state; pull: replace local state with the remote snapshot",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(message)s")
    return asyncio.run(run_command(args.command))
