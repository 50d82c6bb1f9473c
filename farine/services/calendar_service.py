"""Calendar override storage and snapshot loading."""

import logging
from datetime import date, time

from sqlalchemy.orm import Session

from farine.models.calendar_override import CalendarOverride
from farine.services.calendar_engine import DayOverride, WeeklySchedule
from farine.services.settings_service import get_weekly_schedule

logger = logging.getLogger(__name__)


def to_day_override(row: CalendarOverride) -> DayOverride:
    """Convert a stored override row into the engine's value type."""
    return DayOverride(
        date=row.date,
        is_closed=row.is_closed,
        open_time=row.open_time,
        close_time=row.close_time,
        reason=row.reason,
        cutoff_date=row.cutoff_date,
    )


def list_overrides(db: Session, start: date | None = None, end: date | None = None) -> list[CalendarOverride]:
    """Return override rows ordered by date, optionally within [start, end]."""
    query = db.query(CalendarOverride)
    if start is not None:
        query = query.filter(CalendarOverride.date >= start)
    if end is not None:
        query = query.filter(CalendarOverride.date <= end)
    return query.order_by(CalendarOverride.date.asc()).all()


def load_overrides(db: Session, start: date | None = None, end: date | None = None) -> dict[date, DayOverride]:
    """Return one snapshot of the override set keyed by date."""
    return {row.date: to_day_override(row) for row in list_overrides(db, start=start, end=end)}


def load_calendar_snapshot(db: Session) -> tuple[WeeklySchedule, dict[date, DayOverride]]:
    """Read weekly schedule and overrides together for a single resolution."""
    return get_weekly_schedule(db), load_overrides(db)


def get_override(db: Session, day: date) -> CalendarOverride | None:
    return db.query(CalendarOverride).filter(CalendarOverride.date == day).first()


def upsert_override(
    db: Session,
    *,
    day: date,
    is_closed: bool,
    open_time: time | None,
    close_time: time | None,
    reason: str | None,
    cutoff_date: date | None,
) -> CalendarOverride:
    """Create or replace the single override stored for ``day``."""
    row: CalendarOverride | None = get_override(db, day)
    if row is None:
        row = CalendarOverride(date=day)
        db.add(row)

    row.is_closed = is_closed
    row.open_time = None if is_closed else open_time
    row.close_time = None if is_closed else close_time
    row.reason = (reason or "").strip() or None
    row.cutoff_date = cutoff_date

    db.commit()
    db.refresh(row)
    logger.info("[CALENDAR] Override saved for %s (closed=%s, cutoff=%s)", day, is_closed, cutoff_date)
    return row


def delete_override(db: Session, day: date) -> bool:
    """Remove the override for ``day``; return False when there was none."""
    row: CalendarOverride | None = get_override(db, day)
    if row is None:
        return False

    db.delete(row)
    db.commit()
    logger.info("[CALENDAR] Override removed for %s", day)
    return True
