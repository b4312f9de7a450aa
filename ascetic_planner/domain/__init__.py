"""Domain models and DTOs."""

from ascetic_planner.domain.focus_period import FocusPeriodState
from ascetic_planner.domain.snapshot import SyncSnapshot
from ascetic_planner.domain.task import (
    SECTIONS,
    SectionConfig,
    SectionId,
    Subtask,
    Task,
    end_of_day_ms,
    extract_tags,
    get_section_config,
)


__all__ = [
    "SECTIONS",
    "FocusPeriodState",
    "SectionConfig",
    "SectionId",
    "Subtask",
    "SyncSnapshot",
    "Task",
    "end_of_day_ms",
    "extract_tags",
    "get_section_config",
]
