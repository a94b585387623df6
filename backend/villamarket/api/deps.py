"""Shared API dependencies — single import point for all routers.

Re-exports the database session and authentication dependencies so that
router modules can import everything they need from one place::

    from villamarket.api.deps import get_current_user, get_db
"""

from fastapi import Query

from villamarket.auth.dependencies import get_current_user, get_optional_user
from villamarket.config import settings
from villamarket.database import get_db


def page_limit(
    limit: int = Query(settings.search_default_limit, ge=1, description="Page size (capped server-side)"),
) -> int:
    """Page size clamped to ``settings.search_max_limit``."""
    return min(limit, settings.search_max_limit)


__all__ = [
    "get_current_user",
    "get_db",
    "get_optional_user",
    "page_limit",
]
