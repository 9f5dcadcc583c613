"""Filter criteria shared by the query interpreter, prefilter and repositories.

A criteria mapping goes from a Vehicle field name (snake_case) to exactly one
condition. Builders treat it as last-write-wins: assigning a field again
replaces the previous condition.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union


@dataclass(frozen=True)
class Exact:
    """Field equals ``value``."""

    value: Any


@dataclass(frozen=True)
class Pattern:
    """Case-insensitive regex search, e.g. ``"tata"`` or ``"suv|sedan"``."""

    pattern: str


@dataclass(frozen=True)
class Range:
    """Numeric range with optional inclusive bounds."""

    gte: Optional[float] = None
    lte: Optional[float] = None

    def contains(self, value: float) -> bool:
        if self.gte is not None and value < self.gte:
            return False
        if self.lte is not None and value > self.lte:
            return False
        return True


@dataclass(frozen=True)
class NotEqual:
    """Field differs from ``value``."""

    value: Any


Condition = Union[Exact, Pattern, Range, NotEqual]
FilterCriteria = Mapping[str, Condition]


@dataclass(frozen=True)
class SortDirective:
    field: str
    descending: bool = False


def freeze(criteria: dict[str, Condition]) -> FilterCriteria:
    """Return a read-only view handed to the compiler."""
    return MappingProxyType(dict(criteria))
