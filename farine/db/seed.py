"""Database seeding helpers."""

import logging

from sqlalchemy.orm import Session

from farine.core.config import settings
from farine.models.app_setting import AppSetting
from farine.models.catalog import Category
from farine.services.calendar_engine import WeeklySchedule
from farine.services.order_status import ensure_default_statuses
from farine.services.settings_service import WELCOME_MESSAGE_KEY, day_setting_key, save_weekly_schedule, save_welcome_message

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: tuple[str, ...] = (settings.bread_category_name, "Viennoiseries", "Pâtisseries")


def ensure_default_categories(session: Session) -> int:
    """Create missing default categories, keeping their listed order."""
    existing: set[str] = {row.name for row in session.query(Category).all()}
    created = 0
    for sort_order, name in enumerate(DEFAULT_CATEGORIES, start=1):
        if name in existing:
            continue
        session.add(Category(name=name, sort_order=sort_order))
        created += 1
    if created:
        session.commit()
    return created


def ensure_seed_data(session: Session) -> None:
    """Insert reference rows needed by the storefront; safe to run on every startup."""
    statuses_created = ensure_default_statuses(session)
    categories_created = ensure_default_categories(session)

    if session.get(AppSetting, day_setting_key(0, "closed")) is None:
        save_weekly_schedule(
            session,
            WeeklySchedule.default(open_time=settings.default_open_time, close_time=settings.default_close_time),
        )
        logger.info("[BOOTSTRAP] Default weekly schedule stored")

    if session.get(AppSetting, WELCOME_MESSAGE_KEY) is None:
        save_welcome_message(session, settings.welcome_message)

    logger.info("[BOOTSTRAP] Seed done: %s statuses, %s categories created", statuses_created, categories_created)
