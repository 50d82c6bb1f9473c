"""Pickup-date eligibility engine.

Pure functions over (date, override set, weekly schedule, now). Nothing here
reads the clock or the database: callers load one snapshot of the overrides
and the weekly schedule per request and pass ``now`` explicitly.

Three layers build on each other:

* ``resolve_day`` applies a per-date override on top of the weekly schedule.
* ``base_minimum_date`` counts open days of lead time from "today", with a
  noon cut-off and a longer lead time for bread.
* ``earliest_selectable_date`` scans forward from tomorrow and also accepts
  dates opened early by an override whose ``cutoff_date`` has not passed.
"""

from __future__ import annotations

import calendar
import logging
from collections.abc import Iterable, Mapping
from datetime import date as dt_date, datetime, time, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator

logger = logging.getLogger(__name__)

BREAD_CATEGORY_NAME: str = "Pain"
NOON_CUTOFF: time = time(12, 0, 0)
# Furthest pickup date a customer can realistically book ahead.
PICKUP_SCAN_HORIZON_DAYS: int = 60
# Bound on walks over consecutive closed days.
MAX_CLOSURE_SCAN_DAYS: int = 366
END_OF_DAY: time = time(23, 59, 59)

DEFAULT_OPEN_TIME: time = time(8, 0)
DEFAULT_CLOSE_TIME: time = time(19, 0)
DEFAULT_CLOSED_WEEKDAYS: frozenset[int] = frozenset({0, 1})

WEEKDAY_NAMES: tuple[str, ...] = ("Dimanche", "Lundi", "Mardi", "Mercredi", "Jeudi", "Vendredi", "Samedi")


class ProductCategory(str, Enum):
    """Lead-time family of a cart."""

    BREAD = "bread"
    OTHER = "other"

    @classmethod
    def from_name(cls, name: str | None, bread_name: str = BREAD_CATEGORY_NAME) -> ProductCategory:
        """Map a catalog category name; unknown names get the short lead time."""
        if name is not None and name.strip() == bread_name:
            return cls.BREAD
        return cls.OTHER


LEAD_TIME_OPEN_DAYS: dict[ProductCategory, tuple[int, int]] = {
    # (before noon, after noon)
    ProductCategory.BREAD: (3, 4),
    ProductCategory.OTHER: (1, 2),
}


def sunday_based_weekday(day: dt_date) -> int:
    """Return weekday index with 0 = Sunday, 6 = Saturday."""
    return (day.weekday() + 1) % 7


class WeekdayHours(BaseModel):
    """Default open/closed state and hours for one weekday."""

    model_config = ConfigDict(frozen=True)

    weekday: int
    is_closed: bool
    open_time: time = DEFAULT_OPEN_TIME
    close_time: time = DEFAULT_CLOSE_TIME


class WeeklySchedule(BaseModel):
    """Seven weekday entries, indexed 0 (Sunday) to 6 (Saturday)."""

    model_config = ConfigDict(frozen=True)

    days: tuple[WeekdayHours, ...]

    @field_validator("days")
    @classmethod
    def _one_entry_per_weekday(cls, days: tuple[WeekdayHours, ...]) -> tuple[WeekdayHours, ...]:
        ordered = tuple(sorted(days, key=lambda entry: entry.weekday))
        if [entry.weekday for entry in ordered] != list(range(7)):
            raise ValueError("weekly schedule needs exactly one entry per weekday 0..6")
        return ordered

    @classmethod
    def default(
        cls,
        open_time: time = DEFAULT_OPEN_TIME,
        close_time: time = DEFAULT_CLOSE_TIME,
    ) -> WeeklySchedule:
        """Closed Sunday and Monday, open the rest of the week."""
        return cls(
            days=tuple(
                WeekdayHours(
                    weekday=weekday,
                    is_closed=weekday in DEFAULT_CLOSED_WEEKDAYS,
                    open_time=open_time,
                    close_time=close_time,
                )
                for weekday in range(7)
            )
        )

    def for_weekday(self, weekday: int) -> WeekdayHours:
        return self.days[weekday]

    def for_date(self, day: dt_date) -> WeekdayHours:
        return self.days[sunday_based_weekday(day)]


class DayOverride(BaseModel):
    """Exception to the weekly schedule for a single date."""

    model_config = ConfigDict(frozen=True)

    date: dt_date
    is_closed: bool
    open_time: time | None = None
    close_time: time | None = None
    reason: str | None = None
    cutoff_date: dt_date | None = None

    def cutoff_deadline(self) -> datetime | None:
        """Last local instant at which this date can still be ordered early."""
        if self.cutoff_date is None:
            return None
        return datetime.combine(self.cutoff_date, END_OF_DAY)


class ResolvedDay(BaseModel):
    """Effective state of one date once its override (if any) is applied."""

    model_config = ConfigDict(frozen=True)

    date: dt_date
    is_closed: bool
    open_time: time | None
    close_time: time | None
    reason: str | None = None
    is_exception: bool = False


OverrideMap = Mapping[dt_date, DayOverride]


def index_overrides(overrides: Iterable[DayOverride]) -> dict[dt_date, DayOverride]:
    """Key overrides by date; a later entry for the same date replaces an earlier one."""
    return {override.date: override for override in overrides}


def resolve_day(day: dt_date, overrides: OverrideMap, schedule: WeeklySchedule) -> ResolvedDay:
    """Apply the override for ``day`` (if any) on top of the weekly schedule."""
    default = schedule.for_date(day)
    override = overrides.get(day)
    if override is None:
        return ResolvedDay(
            date=day,
            is_closed=default.is_closed,
            open_time=default.open_time,
            close_time=default.close_time,
        )

    if override.is_closed:
        return ResolvedDay(
            date=day,
            is_closed=True,
            open_time=None,
            close_time=None,
            reason=override.reason,
            is_exception=True,
        )

    if override.open_time is None or override.close_time is None:
        logger.debug("[CALENDAR] Override for %s has no hours; using %s defaults", day, WEEKDAY_NAMES[default.weekday])
    return ResolvedDay(
        date=day,
        is_closed=False,
        open_time=override.open_time if override.open_time is not None else default.open_time,
        close_time=override.close_time if override.close_time is not None else default.close_time,
        reason=override.reason,
        is_exception=True,
    )


def is_open_day(day: dt_date, overrides: OverrideMap, schedule: WeeklySchedule) -> bool:
    return not resolve_day(day, overrides, schedule).is_closed


def next_open_date(start: dt_date, overrides: OverrideMap, schedule: WeeklySchedule) -> dt_date:
    """Return the first open date on or after ``start``."""
    cursor = start
    for _ in range(MAX_CLOSURE_SCAN_DAYS):
        if is_open_day(cursor, overrides, schedule):
            return cursor
        cursor += timedelta(days=1)
    logger.warning("[CALENDAR] No open day within %s days of %s; using %s", MAX_CLOSURE_SCAN_DAYS, start, start)
    return start


def lead_time_open_days(category: ProductCategory, before_noon: bool) -> int:
    """Number of open days between ordering and pickup."""
    before, after = LEAD_TIME_OPEN_DAYS[category]
    return before if before_noon else after


def base_minimum_date(
    category: ProductCategory,
    now: datetime,
    overrides: OverrideMap,
    schedule: WeeklySchedule,
) -> dt_date:
    """Earliest pickup date under the normal lead-time rule.

    When today is closed the order counts as placed before noon on the next
    open day. The count starts the day after that start date and only
    advances on open days.
    """
    today = now.date()
    if is_open_day(today, overrides, schedule):
        start = today
        before_noon = now.time() <= NOON_CUTOFF
    else:
        start = next_open_date(today + timedelta(days=1), overrides, schedule)
        before_noon = True

    lead_time = lead_time_open_days(category, before_noon)
    cursor = start
    counted = 0
    steps = 0
    while counted < lead_time and steps < MAX_CLOSURE_SCAN_DAYS:
        cursor += timedelta(days=1)
        steps += 1
        if is_open_day(cursor, overrides, schedule):
            counted += 1
    if counted < lead_time:
        logger.warning(
            "[CALENDAR] Lead time of %s open days not reached within %s days of %s",
            lead_time,
            MAX_CLOSURE_SCAN_DAYS,
            start,
        )
    return cursor


def is_date_selectable(
    candidate: dt_date,
    now: datetime,
    base_minimum: dt_date,
    overrides: OverrideMap,
    schedule: WeeklySchedule,
) -> bool:
    """Return whether ``candidate`` can be picked given a precomputed base minimum."""
    if resolve_day(candidate, overrides, schedule).is_closed:
        return False
    if candidate >= base_minimum:
        return True

    override = overrides.get(candidate)
    if override is None:
        return False
    deadline = override.cutoff_deadline()
    return deadline is not None and now <= deadline


def earliest_selectable_date(
    category: ProductCategory,
    now: datetime,
    overrides: OverrideMap,
    schedule: WeeklySchedule,
    horizon_days: int = PICKUP_SCAN_HORIZON_DAYS,
) -> dt_date:
    """Earliest date a customer may choose for pickup, starting from tomorrow."""
    base_minimum = base_minimum_date(category, now, overrides, schedule)
    candidate = now.date() + timedelta(days=1)
    for _ in range(horizon_days):
        if is_date_selectable(candidate, now, base_minimum, overrides, schedule):
            return candidate
        candidate += timedelta(days=1)

    logger.warning(
        "[CALENDAR] No selectable pickup date within %s days of %s; falling back to %s",
        horizon_days,
        now.date(),
        base_minimum,
    )
    return base_minimum


def is_pickup_date_allowed(
    candidate: dt_date,
    category: ProductCategory,
    now: datetime,
    overrides: OverrideMap,
    schedule: WeeklySchedule,
) -> bool:
    """Validate a pickup date submitted by a customer at ``now``."""
    if candidate <= now.date():
        return False
    base_minimum = base_minimum_date(category, now, overrides, schedule)
    return is_date_selectable(candidate, now, base_minimum, overrides, schedule)


def project_schedule(
    start: dt_date,
    number_of_days: int,
    overrides: OverrideMap,
    schedule: WeeklySchedule,
) -> list[ResolvedDay]:
    """Resolve a contiguous range of dates, in ascending order."""
    return [resolve_day(start + timedelta(days=offset), overrides, schedule) for offset in range(max(number_of_days, 0))]


def week_start(day: dt_date) -> dt_date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def project_week(anchor: dt_date, overrides: OverrideMap, schedule: WeeklySchedule) -> list[ResolvedDay]:
    return project_schedule(week_start(anchor), 7, overrides, schedule)


def project_month(year: int, month: int, overrides: OverrideMap, schedule: WeeklySchedule) -> list[ResolvedDay]:
    _, days_in_month = calendar.monthrange(year, month)
    return project_schedule(dt_date(year, month, 1), days_in_month, overrides, schedule)


def matches_default(override: DayOverride, schedule: WeeklySchedule) -> bool:
    """Return True when an override changes nothing the weekly schedule would give.

    Only the day editor looks at this; ``resolve_day`` treats every override as
    an exception.
    """
    default = schedule.for_date(override.date)
    if override.is_closed != default.is_closed:
        return False
    if override.reason or override.cutoff_date is not None:
        return False
    if override.is_closed:
        return True
    open_time = override.open_time if override.open_time is not None else default.open_time
    close_time = override.close_time if override.close_time is not None else default.close_time
    return open_time == default.open_time and close_time == default.close_time
