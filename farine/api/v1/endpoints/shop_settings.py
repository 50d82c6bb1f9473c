"""Shop settings endpoints: default weekly hours and welcome message."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from farine.db.session import get_db
from farine.schemas.settings import WeekdayHoursPayload, WelcomeMessagePayload
from farine.services.calendar_engine import WeekdayHours, WeeklySchedule
from farine.services.settings_service import (
    get_weekly_schedule,
    get_welcome_message,
    save_weekly_schedule,
    save_welcome_message,
)

router: APIRouter = APIRouter()


def _serialize_schedule(schedule: WeeklySchedule) -> list[WeekdayHoursPayload]:
    return [
        WeekdayHoursPayload(
            weekday=entry.weekday,
            is_closed=entry.is_closed,
            open_time=entry.open_time,
            close_time=entry.close_time,
        )
        for entry in schedule.days
    ]


@router.get("/hours", response_model=list[WeekdayHoursPayload])
def get_hours(db: Session = Depends(get_db)) -> list[WeekdayHoursPayload]:
    """Return the default weekly schedule, Sunday first."""
    return _serialize_schedule(get_weekly_schedule(db))


@router.put("/hours", response_model=list[WeekdayHoursPayload])
def put_hours(payload: list[WeekdayHoursPayload], db: Session = Depends(get_db)) -> list[WeekdayHoursPayload]:
    """Replace the default weekly schedule; all seven weekdays are required."""
    try:
        schedule = WeeklySchedule(
            days=tuple(
                WeekdayHours(
                    weekday=entry.weekday,
                    is_closed=entry.is_closed,
                    open_time=entry.open_time,
                    close_time=entry.close_time,
                )
                for entry in payload
            )
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Exactly one entry per weekday 0..6 is required",
        ) from exc

    save_weekly_schedule(db, schedule)
    return _serialize_schedule(schedule)


@router.get("/welcome-message", response_model=WelcomeMessagePayload)
def get_welcome(db: Session = Depends(get_db)) -> WelcomeMessagePayload:
    return WelcomeMessagePayload(message=get_welcome_message(db))


@router.put("/welcome-message", response_model=WelcomeMessagePayload)
def put_welcome(payload: WelcomeMessagePayload, db: Session = Depends(get_db)) -> WelcomeMessagePayload:
    save_welcome_message(db, payload.message)
    return WelcomeMessagePayload(message=payload.message)
