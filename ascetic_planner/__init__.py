"""ascetic_planner - bucketed task planner with focus discipline locks."""

__version__ = "0.1.0"
