"""Per-date calendar exception ORM model."""

from datetime import date as dt_date, datetime, time, timezone

from sqlalchemy import Boolean, Date, DateTime, String, Time
from sqlalchemy.orm import Mapped, mapped_column

from farine.db.base import Base


class CalendarOverride(Base):
    """Administrator-entered exception to the weekly schedule for one date."""

    __tablename__ = "calendar_overrides"

    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[dt_date] = mapped_column(Date, nullable=False, unique=True, index=True)
    is_closed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    open_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    close_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cutoff_date: Mapped[dt_date | None] = mapped_column(Date, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
