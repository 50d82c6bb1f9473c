"""Application configuration."""

from datetime import time
from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the application."""

    app_name: str = "FARINE ordering API"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    database_url: str = getenv("DATABASE_URL", "sqlite:///./farine.db")
    log_level: str = getenv("LOG_LEVEL", "INFO")
    bread_category_name: str = getenv("FARINE_BREAD_CATEGORY", "Pain")
    default_open_time: time = time.fromisoformat(getenv("FARINE_DEFAULT_OPEN_TIME", "08:00"))
    default_close_time: time = time.fromisoformat(getenv("FARINE_DEFAULT_CLOSE_TIME", "19:00"))
    pickup_horizon_days: int = int(getenv("FARINE_PICKUP_HORIZON_DAYS", "60"))
    default_order_status: str = getenv("FARINE_DEFAULT_ORDER_STATUS", "A préparer")
    cancelled_order_status: str = getenv("FARINE_CANCELLED_ORDER_STATUS", "Annulée")
    welcome_message: str = getenv("FARINE_WELCOME_MESSAGE", "Bienvenue chez FARINE !")


settings: Settings = Settings()
