"""
Row access helpers shared by the pure resolvers.

Resolvers accept ORM objects or plain mappings, so every field read goes
through ``field``.
"""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Optional


def field(row: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a mapping or an object."""
    if row is None:
        return default
    if isinstance(row, Mapping):
        return row.get(name, default)
    return getattr(row, name, default)


def as_utc(value: Any) -> Optional[datetime]:
    """
    Normalize a stored instant to an aware UTC datetime.

    Naive values are taken to be UTC (SQLite drops tzinfo). ISO strings are
    parsed. Empty values give None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
