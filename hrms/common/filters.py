"""Query helpers shared by the list endpoints.

Filter keys name a mapped column, optionally with an operator suffix
(``hire_date__from``, ``status__in``). Keys that do not match a column
are skipped, as are ``None`` values, so routers can pass every query
parameter straight through.
"""

from __future__ import annotations

import operator
from typing import Any, Callable, Mapping, Optional, Sequence

from sqlalchemy import Select, String, cast, or_

_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "from": operator.ge,
    "to": operator.le,
    "in": lambda column, values: column.in_(values),
}


def _column(model: Any, name: str) -> Any:
    return getattr(model, name, None)


def _split_key(key: str) -> tuple[str, Callable[[Any, Any], Any]]:
    name, sep, suffix = key.rpartition("__")
    if sep and suffix in _OPERATORS:
        return name, _OPERATORS[suffix]
    return key, operator.eq


def apply_filters(query: Select, model: Any, filters: Mapping[str, Any]) -> Select:
    """AND together one condition per non-``None`` filter value."""
    conditions = []
    for key, value in filters.items():
        if value is None:
            continue
        name, compare = _split_key(key)
        column = _column(model, name)
        if column is not None:
            conditions.append(compare(column, value))
    return query.where(*conditions) if conditions else query


def apply_search(
    query: Select,
    model: Any,
    search: Optional[str],
    columns: Sequence[str],
) -> Select:
    """Case-insensitive substring match on any of *columns*."""
    term = (search or "").strip()
    if not term:
        return query
    matches = [
        cast(column, String).ilike(f"%{term}%")
        for column in (_column(model, name) for name in columns)
        if column is not None
    ]
    return query.where(or_(*matches)) if matches else query


def apply_sorting(query: Select, model: Any, sort: Optional[str]) -> Select:
    """Order by ``sort``; a leading ``-`` sorts descending."""
    if not sort:
        return query
    column = _column(model, sort.lstrip("-"))
    if column is None:
        return query
    return query.order_by(column.desc() if sort.startswith("-") else column.asc())
