"""Calendar API schemas."""

from datetime import date as dt_date, datetime, time

from pydantic import BaseModel, ConfigDict, model_validator


class ResolvedDayResponse(BaseModel):
    """Effective state of one calendar day."""

    date: dt_date
    weekday: int
    is_closed: bool
    open_time: time | None
    close_time: time | None
    reason: str | None
    is_exception: bool


class OverrideUpsert(BaseModel):
    """Payload for creating or replacing the override of one date."""

    is_closed: bool
    open_time: time | None = None
    close_time: time | None = None
    reason: str | None = None
    cutoff_date: dt_date | None = None

    @model_validator(mode="after")
    def _check_hours(self) -> "OverrideUpsert":
        if not self.is_closed and self.open_time is not None and self.close_time is not None:
            if self.open_time >= self.close_time:
                raise ValueError("open_time must be before close_time")
        return self


class OverrideResponse(BaseModel):
    """Serialized override with the editor's advisory default check."""

    date: dt_date
    is_closed: bool
    open_time: time | None
    close_time: time | None
    reason: str | None
    cutoff_date: dt_date | None
    matches_default: bool

    model_config = ConfigDict(from_attributes=True)


class EarliestPickupResponse(BaseModel):
    category: str
    now: datetime
    base_minimum_date: dt_date
    earliest_pickup_date: dt_date


class PickupDateCheckResponse(BaseModel):
    date: dt_date
    category: str
    selectable: bool
