from ascetic_planner.services import (
    discipline,
    focus_period,
    notification_service,
    persistence_service,
    sync_service,
    task_store,
    trading_gate,
)


__all__ = [
    "discipline",
    "focus_period",
    "notification_service",
    "persistence_service",
    "sync_service",
    "task_store",
    "trading_gate",
]
