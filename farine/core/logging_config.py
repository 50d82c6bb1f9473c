"""Logging setup shared by the API process."""

import logging
import sys

LOG_FORMAT: str = "%(asctime)s | %(levelname)-8s | %(name)-32s | %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Install one stream handler on the root logger.

    Calling it again only updates the level, so reloads do not stack handlers.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    if any(getattr(handler, "_farine_handler", False) for handler in root_logger.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler._farine_handler = True  # type: ignore[attr-defined]
    root_logger.addHandler(handler)

    # uvicorn access lines duplicate what the endpoints already log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
