"""Task domain models and enums."""

import re
from datetime import date, datetime, time
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ascetic_planner.core.config import constants


# Hashtags over Latin and Cyrillic word characters, e.g. "#trading", "#трейдинг"
TAG_PATTERN = re.compile(r"#[a-zA-Zа-яА-Я0-9_]+")


class SectionId(StrEnum):
    """Fixed time buckets a task can live in."""

    TODAY = "today"
    TOMORROW = "tomorrow"
    THIS_WEEK = "thisWeek"
    NEXT_WEEK = "nextWeek"
    MONTH = "month"
    DONE = "done"


class SectionConfig(BaseModel):
    """Display title and capacity of a section."""

    id: SectionId
    title: str
    limit: float = Field(..., description="Maximum number of tasks; inf for unbounded")

    @property
    def is_bounded(self) -> bool:
        return self.limit != float("inf")


SECTIONS: list[SectionConfig] = [
    SectionConfig(id=SectionId.TODAY, title="Сегодня", limit=constants.SECTION_LIMITS["today"]),
    SectionConfig(id=SectionId.TOMORROW, title="Завтра", limit=constants.SECTION_LIMITS["tomorrow"]),
    SectionConfig(id=SectionId.THIS_WEEK, title="На этой неделе", limit=constants.SECTION_LIMITS["thisWeek"]),
    SectionConfig(id=SectionId.NEXT_WEEK, title="На следующей неделе", limit=constants.SECTION_LIMITS["nextWeek"]),
    SectionConfig(id=SectionId.MONTH, title="Цели месяца", limit=constants.SECTION_LIMITS["month"]),
    SectionConfig(id=SectionId.DONE, title="Сделано", limit=constants.SECTION_LIMITS["done"]),
]


def get_section_config(section: SectionId) -> SectionConfig:
    """Look up the configuration for a section."""
    return next(config for config in SECTIONS if config.id == section)


def extract_tags(title: str) -> list[str]:
    """Derive the tag list from title text, first occurrence order, no duplicates."""
    return list(dict.fromkeys(TAG_PATTERN.findall(title)))


def end_of_day_ms(day: date) -> int:
    """Normalize a due date to 23:59:59.999 local time, as epoch milliseconds."""
    moment = datetime.combine(day, time(23, 59, 59, 999000))
    return int(round(moment.timestamp() * 1000))


class Subtask(BaseModel):
    """Checklist entry inside a task."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    is_completed: bool = False


class Task(BaseModel):
    """Task record; field aliases match the camelCase wire/storage shape."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Opaque unique task ID")
    title: str = Field(..., description="Task title; may be empty only for a focus draft")
    section: SectionId
    created_at: int = Field(..., description="Creation time (epoch ms)")
    updated_at: int = Field(..., description="Last touch time (epoch ms), drives stagnation")
    last_title_edit_at: int = Field(default=0, description="Last accepted title edit (epoch ms), 0 = timer off")
    date_added_to_today: int | None = Field(default=None, description="When the task entered today (epoch ms)")
    due_date: int | None = Field(default=None, description="User due date, end of day (epoch ms)")
    is_focus: bool = Field(default=False, description="Featured focus task, meaningful only in today")
    tags: list[str] = Field(default_factory=list)
    subtasks: list[Subtask] = Field(default_factory=list)

    @property
    def is_trading(self) -> bool:
        trading_tags = {tag.lower() for tag in constants.TRADING_TAGS}
        return any(tag.lower() in trading_tags for tag in self.tags)

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the camelCase shape, omitting absent optional dates."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_stored(cls, payload: dict[str, Any]) -> "Task":
        """Validate a stored task, normalizing records that predate the edit lock.

        Such records either lack lastTitleEditAt or carry their creation time
        in it; both mean the timer was never armed by a real edit.
        """
        data = dict(payload)
        last_edit = data.get("lastTitleEditAt")
        if last_edit is None or last_edit == data.get("createdAt"):
            data["lastTitleEditAt"] = 0
        return cls.model_validate(data)
