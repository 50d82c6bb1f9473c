"""Shop settings API schemas."""

from datetime import time

from pydantic import BaseModel, Field, model_validator


class WeekdayHoursPayload(BaseModel):
    """Default hours of one weekday (0 = Sunday)."""

    weekday: int = Field(ge=0, le=6)
    is_closed: bool
    open_time: time
    close_time: time

    @model_validator(mode="after")
    def _check_hours(self) -> "WeekdayHoursPayload":
        if not self.is_closed and self.open_time >= self.close_time:
            raise ValueError("open_time must be before close_time")
        return self


class WelcomeMessagePayload(BaseModel):
    message: str = Field(max_length=2000)
