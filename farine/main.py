"""FastAPI entrypoint for the FARINE bakery ordering API."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from farine.api.v1.api import api_router
from farine.core.config import settings
from farine.core.logging_config import setup_logging
from farine.db import session as db_session
from farine.db.base import Base
from farine.db.seed import ensure_seed_data

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, debug=settings.debug)
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup() -> None:
    logger.info("[BOOTSTRAP] Starting %s (env=%s)", settings.app_name, settings.app_env)
    Base.metadata.create_all(bind=db_session.engine)
    with db_session.SessionLocal() as session:
        try:
            ensure_seed_data(session)
        except Exception:
            logger.exception("[BOOTSTRAP] Seed failed; continuing startup.")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
