"""Filter compiler: FilterCriteria -> repository query shape.

Repositories never see Exact/Pattern/Range objects. They get a flat tuple of
``Clause(field, op, value)`` with ``op`` one of ``eq``, ``neq``, ``gte``,
``lte``, ``imatch``. These are the operator names the PostgREST query builder uses,
so the Supabase repository can apply them one-to-one.
"""

from dataclasses import dataclass
from typing import Any, Optional

from pydantic.alias_generators import to_camel

from drivematch.models.criteria import (
    Exact,
    FilterCriteria,
    NotEqual,
    Pattern,
    Range,
    SortDirective,
)

@dataclass(frozen=True)
class Clause:
    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class CatalogQuery:
    clauses: tuple[Clause, ...]
    sort: Optional[SortDirective] = None
    limit: Optional[int] = None
    columns: Optional[tuple[str, ...]] = None


def compile_clauses(criteria: FilterCriteria) -> tuple[Clause, ...]:
    """Flatten criteria into AND-ed clauses, preserving insertion order."""
    clauses: list[Clause] = []
    for field, condition in criteria.items():
        if isinstance(condition, Exact):
            clauses.append(Clause(field, "eq", condition.value))
        elif isinstance(condition, NotEqual):
            clauses.append(Clause(field, "neq", condition.value))
        elif isinstance(condition, Pattern):
            clauses.append(Clause(field, "imatch", condition.pattern))
        elif isinstance(condition, Range):
            if condition.gte is not None:
                clauses.append(Clause(field, "gte", condition.gte))
            if condition.lte is not None:
                clauses.append(Clause(field, "lte", condition.lte))
        else:
            raise TypeError(f"Unsupported condition for {field}: {condition!r}")
    return tuple(clauses)


def compile_query(
    criteria: FilterCriteria,
    sort: Optional[SortDirective] = None,
    limit: Optional[int] = None,
    columns: Optional[tuple[str, ...]] = None,
) -> CatalogQuery:
    return CatalogQuery(
        clauses=compile_clauses(criteria),
        sort=sort,
        limit=limit,
        columns=columns,
    )


def applied_filters(criteria: FilterCriteria) -> dict[str, Any]:
    """JSON view of the criteria for the advisor response (camelCase keys)."""
    view: dict[str, Any] = {}
    for field, condition in criteria.items():
        key = to_camel(field)
        if isinstance(condition, Exact):
            view[key] = condition.value
        elif isinstance(condition, NotEqual):
            view[key] = {"ne": condition.value}
        elif isinstance(condition, Pattern):
            view[key] = {"pattern": condition.pattern}
        elif isinstance(condition, Range):
            bounds: dict[str, Any] = {}
            if condition.gte is not None:
                bounds["gte"] = condition.gte
            if condition.lte is not None:
                bounds["lte"] = condition.lte
            view[key] = bounds
    return view
