"""Shared SQLAlchemy base declarative class and model imports."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


# Import model modules so metadata is populated before create_all.
from farine.models import app_setting as _app_setting  # noqa: E402,F401
from farine.models import calendar_override as _calendar_override  # noqa: E402,F401
from farine.models import catalog as _catalog  # noqa: E402,F401
from farine.models import order as _order  # noqa: E402,F401
