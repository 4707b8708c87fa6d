"""Shared sorting utilities for repository queries."""

from __future__ import annotations

from collections.abc import Mapping

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from paytrack.core.database import Base


def apply_order_by(
    query: Query,  # type: ignore[type-arg]
    model: type[Base],
    sort_field: str | None,
    sort_order: str | None = None,
    *,
    aliases: Mapping[str, str] | None = None,
    default_field: str = "created_at",
    default_direction: str = "desc",
) -> Query:  # type: ignore[type-arg]
    """Apply ordering to a SQLAlchemy query.

    Args:
        query: The SQLAlchemy query to sort.
        model: The SQLAlchemy model class.
        sort_field: Requested field. With ``aliases`` only its keys are accepted,
            otherwise any mapped column name. Anything else falls back to
            ``default_field``.
        sort_order: "asc" or "desc"; anything else uses ``default_direction``.
        aliases: Maps public field names (e.g. "paymentDueDate") to columns.
        default_field: Default column to sort by.
        default_direction: Default sort direction ("asc" or "desc").

    Returns:
        The query ordered by the chosen column, then by primary key so that
        paging over equal values is stable.
    """
    field = default_field
    direction = default_direction

    columns = model.__table__.columns
    if sort_field:
        candidate = aliases.get(sort_field) if aliases is not None else sort_field
        if candidate is not None and candidate in columns:
            field = candidate

    if sort_order:
        candidate_direction = sort_order.lower()
        if candidate_direction in ("asc", "desc"):
            direction = candidate_direction

    column = getattr(model, field)
    order_func = asc if direction == "asc" else desc
    query = query.order_by(order_func(column))
    if field != "id" and "id" in columns:
        query = query.order_by(order_func(model.id))
    return query
