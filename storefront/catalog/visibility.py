"""
Soft-Delete / Visibility Filter

A row is publicly visible iff ``deleted_at`` is empty and, for rows that carry
a ``status`` (products), the status is ``active``.

The same rule exists in two forms: ``is_visible`` for rows already loaded and
``visibility_criteria`` for query predicates. Listing paths apply both.
"""

from typing import Any, Iterable, List, TypeVar

from sqlalchemy import ColumnElement

from storefront.catalog.rows import field
from storefront.database.models import ProductStatus

T = TypeVar("T")

_MISSING = object()


def is_visible(row: Any) -> bool:
    """Check whether a single row may appear in a public read."""
    if row is None:
        return False
    if field(row, "deleted_at") is not None:
        return False
    status = field(row, "status", _MISSING)
    if status is not _MISSING and status != ProductStatus.ACTIVE.value:
        return False
    return True


def filter_visible(rows: Iterable[T]) -> List[T]:
    """Post-query form of the predicate; keeps input order."""
    return [row for row in rows if is_visible(row)]


def visibility_criteria(model: Any) -> List[ColumnElement[bool]]:
    """Query form of the predicate for a mapped class."""
    criteria = [model.deleted_at.is_(None)]
    if hasattr(model, "status"):
        criteria.append(model.status == ProductStatus.ACTIVE.value)
    return criteria
