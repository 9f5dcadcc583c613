"""In-memory catalog repository.

Canonical contract implementation for tests and local development:

- Stores vehicles in insertion order (that order is the "repository order"
  the ranker's stable sort preserves)
- Applies AND-semantics filtering
- Sorts (stable) and applies the limit AFTER filtering
"""

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from drivematch.models.vehicle import Vehicle
from drivematch.services.filter_compiler import CatalogQuery, Clause
from drivematch.services.normalizer import parse_number

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(vehicle: Vehicle, field: str) -> Any:
    value = getattr(vehicle, field, None)
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if field == "created_at":
        return _EPOCH
    return parse_number(value)


class InMemoryVehicleRepository:
    def __init__(self, vehicles: Iterable[Vehicle]) -> None:
        self._vehicles = list(vehicles)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "InMemoryVehicleRepository":
        """Load a catalog dump (list of vehicle objects, camelCase or snake_case)."""
        with open(path, encoding="utf-8") as f:
            rows = json.load(f)
        return cls(Vehicle.model_validate(row) for row in rows)

    def __len__(self) -> int:
        return len(self._vehicles)

    async def find_by_id(self, vehicle_id: str) -> Optional[Vehicle]:
        for vehicle in self._vehicles:
            if vehicle.id == vehicle_id:
                return vehicle
        return None

    async def find_by_filter(self, query: CatalogQuery) -> list[Vehicle]:
        matches = [v for v in self._vehicles if self._matches(v, query.clauses)]

        if query.sort is not None:
            field = query.sort.field
            matches.sort(
                key=lambda v: _sort_key(v, field),
                reverse=query.sort.descending,
            )

        if query.limit is not None:
            matches = matches[: query.limit]
        return matches

    async def find_trending(self, limit: int) -> list[Vehicle]:
        return [v for v in self._vehicles if v.is_trending][:limit]

    async def find_by_ids(self, vehicle_ids: list[str]) -> list[Vehicle]:
        wanted = set(vehicle_ids)
        return [v for v in self._vehicles if v.id in wanted]

    def _matches(self, vehicle: Vehicle, clauses: tuple[Clause, ...]) -> bool:
        for clause in clauses:
            value = getattr(vehicle, clause.field, None)
            if clause.op == "eq":
                if value != clause.value:
                    return False
            elif clause.op == "neq":
                if value == clause.value:
                    return False
            elif clause.op == "imatch":
                if value is None or not re.search(clause.value, str(value), re.IGNORECASE):
                    return False
            elif clause.op == "gte":
                if parse_number(value) < clause.value:
                    return False
            elif clause.op == "lte":
                if parse_number(value) > clause.value:
                    return False
            else:
                raise ValueError(f"Unsupported operator: {clause.op}")
        return True
