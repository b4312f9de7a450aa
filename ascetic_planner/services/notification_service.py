"""Feedback signals (haptic-style categories) and celebration effects."""

import logging
from enum import StrEnum

from ascetic_planner.core.ports import CelebrationPort, NotificationPort


logger = logging.getLogger(__name__)


class FeedbackCategory(StrEnum):
    """Feedback intensity sent to the notifier."""

    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"
    SUCCESS = "success"
    ERROR = "error"


class CelebrationReason(StrEnum):
    """Events that fire the celebration effect."""

    TASK_COMPLETED = "task_completed"
    SYNC_PULLED = "sync_pulled"


class LoggingNotifier:
    """Notifier for headless runs: records each signal in the log."""

    def notify(self, category: FeedbackCategory) -> None:
        logger.debug("feedback", extra={"category": str(category)})


class LoggingCelebrator:
    """Celebrator for headless runs."""

    def celebrate(self, reason: CelebrationReason) -> None:
        logger.info("celebration", extra={"reason": str(reason)})


def safe_notify(notifier: NotificationPort | None, category: FeedbackCategory) -> None:
    """Send a feedback signal without letting adapter failures reach the caller."""
    if notifier is None:
        return
    try:
        notifier.notify(category)
    except Exception as e:
        logger.warning("Notifier failed for %s: %s", category, e)


def safe_celebrate(celebrator: CelebrationPort | None, reason: CelebrationReason) -> None:
    """Fire the celebration effect, best-effort."""
    if celebrator is None:
        return
    try:
        celebrator.celebrate(reason)
    except Exception as e:
        logger.warning("Celebrator failed for %s: %s", reason, e)
