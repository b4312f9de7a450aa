"""Tests for the task and snapshot models."""

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from ascetic_planner.domain.snapshot import SyncSnapshot
from ascetic_planner.domain.task import SectionId, Task, end_of_day_ms, extract_tags, get_section_config
from tests.unit.mocks import T0


@pytest.mark.unit
class TestTags:
    def test_latin_and_cyrillic(self):
        assert extract_tags("Plan #trading and #трейдинг_2024") == ["#trading", "#трейдинг_2024"]

    def test_dedupes_in_first_occurrence_order(self):
        assert extract_tags("#b #a #b #a") == ["#b", "#a"]

    def test_no_tags(self):
        assert extract_tags("Nothing here # not a tag") == []


@pytest.mark.unit
class TestSections:
    def test_titles_and_limits(self):
        today = get_section_config(SectionId.TODAY)
        done = get_section_config(SectionId.DONE)

        assert today.title == "Сегодня"
        assert today.limit == 3
        assert today.is_bounded is True
        assert done.is_bounded is False


@pytest.mark.unit
class TestEndOfDay:
    def test_normalized_to_last_millisecond(self):
        moment = datetime.fromtimestamp(end_of_day_ms(date(2024, 3, 1)) / 1000)

        assert (moment.year, moment.month, moment.day) == (2024, 3, 1)
        assert (moment.hour, moment.minute, moment.second) == (23, 59, 59)
        assert end_of_day_ms(date(2024, 3, 2)) - end_of_day_ms(date(2024, 3, 1)) in {
            24 * 3600 * 1000,
            23 * 3600 * 1000,
            25 * 3600 * 1000,
        }


@pytest.mark.unit
class TestTaskWire:
    """Tests for the camelCase storage/sync shape."""

    def test_to_wire_uses_camel_case_and_omits_absent_dates(self, make_task):
        wire = make_task("a", section=SectionId.MONTH).to_wire()

        assert wire == {
            "id": "a",
            "title": "Task a",
            "section": "month",
            "createdAt": T0,
            "updatedAt": T0,
            "lastTitleEditAt": 0,
            "isFocus": False,
            "tags": [],
            "subtasks": [],
        }

    def test_accepts_camel_case_payload(self):
        task = Task.model_validate(
            {
                "id": "x",
                "title": "Remote",
                "section": "thisWeek",
                "createdAt": T0,
                "updatedAt": T0,
                "dateAddedToToday": T0,
                "dueDate": T0 + 1,
            }
        )

        assert task.section == SectionId.THIS_WEEK
        assert task.due_date == T0 + 1
        assert task.is_focus is False

    def test_unknown_section_rejected(self):
        with pytest.raises(ValidationError):
            Task.model_validate({"id": "x", "title": "", "section": "someday", "createdAt": 0, "updatedAt": 0})


@pytest.mark.unit
class TestFromStored:
    """Tests for the load-time migration of the edit stamp."""

    def _payload(self, **extra):
        return {"id": "x", "title": "T", "section": "today", "createdAt": T0, "updatedAt": T0, **extra}

    def test_missing_stamp_becomes_zero(self):
        assert Task.from_stored(self._payload()).last_title_edit_at == 0

    def test_stamp_equal_to_creation_becomes_zero(self):
        assert Task.from_stored(self._payload(lastTitleEditAt=T0)).last_title_edit_at == 0

    def test_real_edit_stamp_kept_for_focus_task(self):
        task = Task.from_stored(self._payload(lastTitleEditAt=T0 + 10, isFocus=True))

        assert task.last_title_edit_at == T0 + 10
        assert task.is_focus is True


@pytest.mark.unit
class TestSyncSnapshot:
    """Tests for snapshot parsing."""

    @pytest.mark.parametrize(("raw", "expected"), [(None, None), ("", None), (str(T0), T0), (T0, T0)])
    def test_focus_start_forms(self, raw, expected):
        assert SyncSnapshot.model_validate({"focusStartTime": raw}).focus_start_ms == expected

    def test_non_numeric_start_rejected(self):
        with pytest.raises(ValidationError):
            SyncSnapshot.model_validate({"focusStartTime": "next tuesday"})

    def test_null_title_becomes_empty(self):
        assert SyncSnapshot.model_validate({"appTitle": None}).app_title == ""

    def test_empty_payload(self):
        snapshot = SyncSnapshot.model_validate({})

        assert snapshot.tasks == []
        assert snapshot.updated_at == 0
