"""Tests for the pure discipline derivations."""

import pytest

from ascetic_planner.core.config import constants
from ascetic_planner.core.errors import LockViolationError
from ascetic_planner.domain.task import SectionId
from ascetic_planner.services import discipline
from tests.unit.mocks import LOCK_MS, T0


HOUR = constants.MS_PER_HOUR


@pytest.mark.unit
class TestFocusLock:
    """Tests for the focus edit lock."""

    def test_timer_off_when_never_edited(self, make_task):
        task = make_task(is_focus=True, last_title_edit_at=0)

        assert discipline.is_timer_running(task) is False
        assert discipline.is_focus_locked(task, now_ms=T0, lock_ms=LOCK_MS) is False

    def test_locked_inside_window(self, make_task):
        task = make_task(is_focus=True, last_title_edit_at=T0)

        assert discipline.is_focus_locked(task, now_ms=T0 + LOCK_MS - 1, lock_ms=LOCK_MS) is True
        assert discipline.remaining_lock_ms(task, now_ms=T0 + 10_000, lock_ms=LOCK_MS) == 50_000

    def test_unlocked_at_boundary(self, make_task):
        task = make_task(is_focus=True, last_title_edit_at=T0)

        assert discipline.is_focus_locked(task, now_ms=T0 + LOCK_MS, lock_ms=LOCK_MS) is False
        assert discipline.remaining_lock_ms(task, now_ms=T0 + LOCK_MS, lock_ms=LOCK_MS) == 0

    def test_non_focus_task_never_locked(self, make_task):
        task = make_task(is_focus=False, last_title_edit_at=T0)

        assert discipline.is_focus_locked(task, now_ms=T0 + 1, lock_ms=LOCK_MS) is False

    def test_ensure_editable_raises_while_locked(self, make_task):
        task = make_task(is_focus=True, last_title_edit_at=T0)

        with pytest.raises(LockViolationError) as exc_info:
            discipline.ensure_editable(task, now_ms=T0 + 1_000, lock_ms=LOCK_MS)

        assert exc_info.value.remaining_ms == 59_000
        discipline.ensure_editable(task, now_ms=T0 + LOCK_MS, lock_ms=LOCK_MS)

    def test_title_edit_stamp(self):
        """Test empty drafts disarm the timer and real titles arm it."""
        assert discipline.title_edit_stamp("", now_ms=T0) == 0
        assert discipline.title_edit_stamp("   ", now_ms=T0) == 0
        assert discipline.title_edit_stamp("Deep work", now_ms=T0) == T0


@pytest.mark.unit
class TestFormatRemaining:
    @pytest.mark.parametrize(
        ("ms", "expected"),
        [
            (0, "00:00:00"),
            (999, "00:00:00"),
            (3_723_000, "01:02:03"),
            (72 * HOUR, "72:00:00"),
            (-5, "00:00:00"),
        ],
    )
    def test_format(self, ms, expected):
        assert discipline.format_remaining(ms) == expected


@pytest.mark.unit
class TestDecay:
    """Tests for stale-today, stagnation and overdue flags."""

    def test_stale_after_more_than_a_day_in_today(self, make_task):
        task = make_task(date_added_to_today=T0)

        assert discipline.is_stale_today(task, now_ms=T0 + 25 * HOUR) is True
        assert discipline.is_stale_today(task, now_ms=T0 + 23 * HOUR) is False
        assert discipline.is_stale_today(task, now_ms=T0 + 24 * HOUR) is False

    def test_stale_needs_today_and_entry_time(self, make_task):
        elsewhere = make_task(section=SectionId.TOMORROW, date_added_to_today=T0)
        unstamped = make_task(date_added_to_today=None)

        assert discipline.is_stale_today(elsewhere, now_ms=T0 + 48 * HOUR) is False
        assert discipline.is_stale_today(unstamped, now_ms=T0 + 48 * HOUR) is False

    def test_stagnant_after_three_days_untouched(self, make_task):
        task = make_task(section=SectionId.MONTH, updated_at=T0)

        assert discipline.is_stagnant(task, now_ms=T0 + 73 * HOUR) is True
        assert discipline.is_stagnant(task, now_ms=T0 + 71 * HOUR) is False

    def test_done_never_stagnant_or_overdue(self, make_task):
        task = make_task(section=SectionId.DONE, updated_at=T0, due_date=T0)

        assert discipline.is_stagnant(task, now_ms=T0 + 30 * 24 * HOUR) is False
        assert discipline.is_past_due(task, now_ms=T0 + HOUR) is False

    def test_past_due(self, make_task):
        task = make_task(due_date=T0)

        assert discipline.is_past_due(task, now_ms=T0 + 1) is True
        assert discipline.is_past_due(task, now_ms=T0) is False
        assert discipline.is_past_due(make_task(due_date=None), now_ms=T0 + HOUR) is False


@pytest.mark.unit
class TestEvaluate:
    """Tests for the combined status."""

    def test_locked_focus_task(self, make_task):
        task = make_task(is_focus=True, last_title_edit_at=T0)

        status = discipline.evaluate(task, now_ms=T0 + 1_000, lock_ms=LOCK_MS)

        assert status.is_focus_locked is True
        assert status.remaining_lock_display == "00:00:59"
        assert status.shows_editable_badge is False

    def test_unlocked_focus_task_shows_badge(self, make_task):
        task = make_task(is_focus=True, last_title_edit_at=T0)

        status = discipline.evaluate(task, now_ms=T0 + LOCK_MS, lock_ms=LOCK_MS)

        assert status.is_focus_locked is False
        assert status.remaining_lock_display is None
        assert status.shows_editable_badge is True

    def test_in_pain_when_stale_or_overdue(self, make_task):
        task = make_task(date_added_to_today=T0, due_date=None)

        assert discipline.evaluate(task, now_ms=T0 + 25 * HOUR, lock_ms=LOCK_MS).is_in_pain is True
        assert discipline.evaluate(task, now_ms=T0 + HOUR, lock_ms=LOCK_MS).is_in_pain is False

    def test_evaluation_is_pure(self, make_task):
        """Test evaluating twice at the same instant gives the same answer and leaves the task alone."""
        task = make_task(is_focus=True, last_title_edit_at=T0, date_added_to_today=T0)
        before = task.model_copy(deep=True)

        first = discipline.evaluate(task, now_ms=T0 + 5_000, lock_ms=LOCK_MS)
        second = discipline.evaluate(task, now_ms=T0 + 5_000, lock_ms=LOCK_MS)

        assert first == second
        assert task == before
