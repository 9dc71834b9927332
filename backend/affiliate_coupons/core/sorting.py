"""Shared sorting utilities for repository queries."""

from __future__ import annotations

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from affiliate_coupons.core.database import Base


def normalize_order(order: str | None) -> str:
    """There can be only two orders: ``DESC`` when asked for, ``ASC`` otherwise."""
    if order and order.strip().upper() == "DESC":
        return "DESC"
    return "ASC"


def normalize_orderby(
    model: type[Base],
    orderby: str | None,
    default_field: str = "id",
) -> str:
    """Return ``orderby`` if it names a column of ``model``, else ``default_field``."""
    if orderby and orderby in model.__table__.columns:
        return orderby
    return default_field


def apply_order_by(
    query: Query,  # type: ignore[type-arg]
    model: type[Base],
    orderby: str | None,
    order: str | None = "DESC",
    default_field: str = "id",
) -> Query:  # type: ignore[type-arg]
    """Apply ordering to a SQLAlchemy query.

    Args:
        query: The SQLAlchemy query to sort.
        model: The SQLAlchemy model class.
        orderby: Column name to order by. Unknown columns fall back to
            ``default_field``.
        order: "ASC" or "DESC" (case-insensitive). Anything else is "ASC".
        default_field: Fallback column, normally the primary key.

    Returns:
        The query with ordering applied.
    """
    field = normalize_orderby(model, orderby, default_field)
    column = getattr(model, field)
    order_func = desc if normalize_order(order) == "DESC" else asc
    return query.order_by(order_func(column))
