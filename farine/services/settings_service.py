"""Application settings helpers: weekly opening hours and storefront texts."""

from datetime import time

from sqlalchemy.orm import Session

from farine.core.config import settings
from farine.models.app_setting import AppSetting
from farine.services.calendar_engine import DEFAULT_CLOSED_WEEKDAYS, WeekdayHours, WeeklySchedule

WELCOME_MESSAGE_KEY: str = "welcome_message"
DAY_FIELDS: tuple[str, ...] = ("closed", "open", "close")


def day_setting_key(weekday: int, field: str) -> str:
    """Return the settings key for one weekday field (weekday 0 = Sunday)."""
    return f"day_{weekday}_{field}"


def parse_hhmm_time(value: str) -> time:
    """Parse time from HH:MM format string."""
    parsed: time = time.fromisoformat(value)
    return time(hour=parsed.hour, minute=parsed.minute)


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"true", "1", "yes"}:
        return True
    if normalized in {"false", "0", "no"}:
        return False
    return default


def _setting_values(db: Session, keys: list[str]) -> dict[str, str]:
    rows: list[AppSetting] = db.query(AppSetting).filter(AppSetting.key.in_(keys)).all()
    return {row.key: row.value for row in rows}


def _upsert_setting(db: Session, key: str, value: str) -> None:
    setting: AppSetting | None = db.get(AppSetting, key)
    if setting is None:
        db.add(AppSetting(key=key, value=value))
    else:
        setting.value = value


def get_weekly_schedule(db: Session) -> WeeklySchedule:
    """Read the weekly schedule from settings with fallback defaults."""
    keys = [day_setting_key(weekday, field) for weekday in range(7) for field in DAY_FIELDS]
    values: dict[str, str] = _setting_values(db, keys)

    days: list[WeekdayHours] = []
    for weekday in range(7):
        is_closed = _parse_bool(
            values.get(day_setting_key(weekday, "closed")),
            default=weekday in DEFAULT_CLOSED_WEEKDAYS,
        )
        try:
            open_time: time = parse_hhmm_time(values.get(day_setting_key(weekday, "open"), ""))
        except ValueError:
            open_time = settings.default_open_time

        try:
            close_time: time = parse_hhmm_time(values.get(day_setting_key(weekday, "close"), ""))
        except ValueError:
            close_time = settings.default_close_time

        days.append(WeekdayHours(weekday=weekday, is_closed=is_closed, open_time=open_time, close_time=close_time))

    return WeeklySchedule(days=tuple(days))


def save_weekly_schedule(db: Session, schedule: WeeklySchedule) -> None:
    """Persist every weekday entry of the schedule."""
    for entry in schedule.days:
        _upsert_setting(db, day_setting_key(entry.weekday, "closed"), "true" if entry.is_closed else "false")
        _upsert_setting(db, day_setting_key(entry.weekday, "open"), entry.open_time.strftime("%H:%M"))
        _upsert_setting(db, day_setting_key(entry.weekday, "close"), entry.close_time.strftime("%H:%M"))

    db.commit()


def get_welcome_message(db: Session) -> str:
    setting: AppSetting | None = db.get(AppSetting, WELCOME_MESSAGE_KEY)
    if setting is None:
        return settings.welcome_message
    return setting.value


def save_welcome_message(db: Session, message: str) -> None:
    _upsert_setting(db, WELCOME_MESSAGE_KEY, message)
    db.commit()
