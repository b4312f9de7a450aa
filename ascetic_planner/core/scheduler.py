"""Scheduler for periodic checks (weekly focus period expiry)."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ascetic_planner.core.config import constants
from ascetic_planner.services.focus_period import WeeklyFocusPeriod


logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = AsyncIOScheduler()


async def run_focus_period_check(focus_period: WeeklyFocusPeriod) -> None:
    """Scheduled job body: expire the focus period when its time is up.

    Runs on the event loop, so the expiry is written back by the local mirror.
    """
    try:
        status = focus_period.check()
        if status.expired_now:
            logger.info("Focus period expired, app title cleared")
    except Exception as e:
        logger.error(f"Error in focus period check job: {e}")


def start_scheduler(focus_period: WeeklyFocusPeriod) -> None:
    """Start the scheduler and register all jobs.

    Must be called with an event loop running.
    """
    logger.info("Starting scheduler")

    scheduler.add_job(
        run_focus_period_check,
        trigger=IntervalTrigger(seconds=constants.FOCUS_PERIOD_CHECK_SECONDS),
        args=[focus_period],
        id="focus_period_check",
        name="Expire Weekly Focus Period",
        replace_existing=True,
    )
    logger.info(f"Scheduled focus period check: every {constants.FOCUS_PERIOD_CHECK_SECONDS}s")

    scheduler.start()


def stop_scheduler() -> None:
    """Stop the scheduler."""
    if scheduler.running:
        logger.info("Stopping scheduler")
        scheduler.shutdown(wait=False)
