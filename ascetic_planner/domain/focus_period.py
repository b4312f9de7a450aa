"""Weekly focus period state."""

from pydantic import BaseModel, Field


class FocusPeriodState(BaseModel):
    """App title plus the start of the running focus period (None = inactive)."""

    title: str = ""
    start_ms: int | None = Field(default=None, description="Period start (epoch ms)")
