"""
SubTrack Backend — Shared Route Dependencies
=============================================

What:  Small FastAPI dependencies used by several routers.
How:   Overridable through `app.dependency_overrides`, which is how tests pin
       "today" to a fixed date.
"""

from datetime import date, datetime

from subtrack.config import settings


def get_today() -> date:
    """The current calendar date in the configured timezone."""
    return datetime.now(settings.tzinfo).date()
