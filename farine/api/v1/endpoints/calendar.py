"""Calendar endpoints: pickup eligibility, schedule projections and overrides."""

from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from farine.core.config import settings
from farine.db.session import get_db
from farine.models.calendar_override import CalendarOverride
from farine.schemas.calendar import (
    EarliestPickupResponse,
    OverrideResponse,
    OverrideUpsert,
    PickupDateCheckResponse,
    ResolvedDayResponse,
)
from farine.services.calendar_engine import (
    ProductCategory,
    ResolvedDay,
    WeeklySchedule,
    base_minimum_date,
    earliest_selectable_date,
    is_pickup_date_allowed,
    matches_default,
    project_month,
    project_schedule,
    project_week,
    sunday_based_weekday,
)
from farine.services.calendar_service import (
    delete_override,
    list_overrides,
    load_calendar_snapshot,
    to_day_override,
    upsert_override,
)
from farine.services.settings_service import get_weekly_schedule
from farine.utils.time import local_now

router: APIRouter = APIRouter()


def _serialize_day(day: ResolvedDay) -> ResolvedDayResponse:
    return ResolvedDayResponse(
        date=day.date,
        weekday=sunday_based_weekday(day.date),
        is_closed=day.is_closed,
        open_time=day.open_time,
        close_time=day.close_time,
        reason=day.reason,
        is_exception=day.is_exception,
    )


def _serialize_override(row: CalendarOverride, schedule: WeeklySchedule) -> OverrideResponse:
    return OverrideResponse(
        date=row.date,
        is_closed=row.is_closed,
        open_time=row.open_time,
        close_time=row.close_time,
        reason=row.reason,
        cutoff_date=row.cutoff_date,
        matches_default=matches_default(to_day_override(row), schedule),
    )


@router.get("/earliest-pickup", response_model=EarliestPickupResponse)
def get_earliest_pickup(
    category: str = Query(default=""),
    db: Session = Depends(get_db),
) -> EarliestPickupResponse:
    """Return the first pickup date the storefront should offer for a category."""
    now: datetime = local_now()
    product_category = ProductCategory.from_name(category, settings.bread_category_name)
    schedule, overrides = load_calendar_snapshot(db)
    return EarliestPickupResponse(
        category=product_category.value,
        now=now,
        base_minimum_date=base_minimum_date(product_category, now, overrides, schedule),
        earliest_pickup_date=earliest_selectable_date(
            product_category,
            now,
            overrides,
            schedule,
            horizon_days=settings.pickup_horizon_days,
        ),
    )


@router.get("/pickup-dates/{day}", response_model=PickupDateCheckResponse)
def check_pickup_date(
    day: date,
    category: str = Query(default=""),
    db: Session = Depends(get_db),
) -> PickupDateCheckResponse:
    """Tell whether a date can currently be chosen for pickup."""
    now: datetime = local_now()
    product_category = ProductCategory.from_name(category, settings.bread_category_name)
    schedule, overrides = load_calendar_snapshot(db)
    return PickupDateCheckResponse(
        date=day,
        category=product_category.value,
        selectable=is_pickup_date_allowed(day, product_category, now, overrides, schedule),
    )


@router.get("/schedule", response_model=list[ResolvedDayResponse])
def get_schedule(
    start: date | None = Query(default=None),
    days: int = Query(default=7, ge=1, le=366),
    db: Session = Depends(get_db),
) -> list[ResolvedDayResponse]:
    """Resolve a contiguous range of days, starting today by default."""
    schedule, overrides = load_calendar_snapshot(db)
    start_date: date = start or local_now().date()
    return [_serialize_day(day) for day in project_schedule(start_date, days, overrides, schedule)]


@router.get("/week", response_model=list[ResolvedDayResponse])
def get_week(
    day: date | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[ResolvedDayResponse]:
    """Resolve Monday to Sunday of the week containing ``day``."""
    schedule, overrides = load_calendar_snapshot(db)
    anchor: date = day or local_now().date()
    return [_serialize_day(item) for item in project_week(anchor, overrides, schedule)]


@router.get("/month", response_model=list[ResolvedDayResponse])
def get_month(
    year: int = Query(ge=2000, le=2100),
    month: int = Query(ge=1, le=12),
    db: Session = Depends(get_db),
) -> list[ResolvedDayResponse]:
    """Resolve every day of a calendar month."""
    schedule, overrides = load_calendar_snapshot(db)
    return [_serialize_day(item) for item in project_month(year, month, overrides, schedule)]


@router.get("/overrides", response_model=list[OverrideResponse])
def get_overrides(
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[OverrideResponse]:
    """List stored overrides, ordered by date."""
    schedule = get_weekly_schedule(db)
    return [_serialize_override(row, schedule) for row in list_overrides(db, start=start, end=end)]


@router.put("/overrides/{day}", response_model=OverrideResponse)
def put_override(
    day: date,
    payload: OverrideUpsert,
    db: Session = Depends(get_db),
) -> OverrideResponse:
    """Create or replace the override of one date."""
    row = upsert_override(
        db,
        day=day,
        is_closed=payload.is_closed,
        open_time=payload.open_time,
        close_time=payload.close_time,
        reason=payload.reason,
        cutoff_date=payload.cutoff_date,
    )
    return _serialize_override(row, get_weekly_schedule(db))


@router.delete("/overrides/{day}", status_code=status.HTTP_204_NO_CONTENT)
def remove_override(day: date, db: Session = Depends(get_db)) -> Response:
    """Reset one date to the weekly schedule."""
    if not delete_override(db, day):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Override not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
