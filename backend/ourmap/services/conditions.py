"""Predicate combinators for composing SQL filter conditions.

Filters are built as plain lists of SQLAlchemy boolean expressions and
folded with ``all_of`` / ``any_of``.  Both skip ``None`` entries so optional
filters can be written inline::

    where = all_of(
        Event.date_time >= now,
        visibility_condition(viewer_id),
        category_condition(values) if values else None,
    )
"""
from typing import Optional

from sqlalchemy import and_, or_, true, false
from sqlalchemy.sql.elements import ColumnElement


def _present(conditions) -> list[ColumnElement]:
    return [c for c in conditions if c is not None]


def all_of(*conditions: Optional[ColumnElement]) -> ColumnElement:
    """Conjunction; an empty conjunction is TRUE."""
    present = _present(conditions)
    if not present:
        return true()
    if len(present) == 1:
        return present[0]
    return and_(*present)


def any_of(*conditions: Optional[ColumnElement]) -> ColumnElement:
    """Disjunction; an empty disjunction is FALSE."""
    present = _present(conditions)
    if not present:
        return false()
    if len(present) == 1:
        return present[0]
    return or_(*present)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_ci(column, needle: str) -> ColumnElement:
    """Case-insensitive substring match (``ILIKE %needle%``); wildcards in ``needle`` match literally."""
    return column.ilike(f"%{_escape_like(needle)}%", escape="\\")
