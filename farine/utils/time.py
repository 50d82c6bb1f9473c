"""Wall-clock helpers for the bakery's local time."""

from __future__ import annotations

from datetime import datetime


def local_now() -> datetime:
    """Return the current naive local date-time of the shop.

    Request handlers read it once and pass it down, so tests can freeze it by
    patching this name in the endpoint module.
    """
    return datetime.now().replace(microsecond=0)
