"""Whole-state snapshot exchanged with the remote store."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ascetic_planner.domain.task import Task


class SyncSnapshot(BaseModel):
    """Task collection, app title and focus-period start at one moment."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    tasks: list[Task] = Field(default_factory=list)
    app_title: str = ""
    focus_start_time: str | None = Field(default=None, description="Decimal epoch-ms string or null")
    updated_at: int = 0

    @field_validator("app_title", mode="before")
    @classmethod
    def _blank_title(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("focus_start_time", mode="before")
    @classmethod
    def _decimal_start(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        text = str(value).strip()
        if not text.isdigit():
            msg = f"focusStartTime must be a decimal epoch-ms string, got {value!r}"
            raise ValueError(msg)
        return text

    @property
    def focus_start_ms(self) -> int | None:
        return int(self.focus_start_time) if self.focus_start_time else None

    def to_wire(self) -> dict[str, Any]:
        return {
            "tasks": [task.to_wire() for task in self.tasks],
            "appTitle": self.app_title,
            "focusStartTime": self.focus_start_time,
            "updatedAt": self.updated_at,
        }
