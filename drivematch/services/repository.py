"""Vehicle catalog repository.

The matching engine only reads the catalog through three calls:
``find_by_id``, ``find_by_filter`` and ``find_trending``. The production
implementation talks to a Supabase ``vehicles`` table via the PostgREST query
builder; ``InMemoryVehicleRepository`` (memory_repository.py) implements the
same contract for tests and local development.

Supabase calls are synchronous, so each one is pushed to a worker thread.
Storage failures surface as ``RepositoryError`` and are never retried.
"""

import asyncio
import time
from typing import Any, Optional, Protocol

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from drivematch.core.exceptions import RepositoryError
from drivematch.core.logging import log_db_query, log_error
from drivematch.models.vehicle import Vehicle
from drivematch.services.filter_compiler import CatalogQuery, Clause

# Unit-string columns carry a numeric shadow column (filled by
# scripts/load_data.py) so range filters compare numbers, not text.
NUMERIC_COLUMN_MAP: dict[str, str] = {
    "engine_power": "engine_power_value",
    "torque": "torque_value",
    "mileage": "mileage_value",
}


class VehicleRepository(Protocol):
    async def find_by_id(self, vehicle_id: str) -> Optional[Vehicle]: ...

    async def find_by_filter(self, query: CatalogQuery) -> list[Vehicle]: ...

    async def find_trending(self, limit: int) -> list[Vehicle]: ...

    async def find_by_ids(self, vehicle_ids: list[str]) -> list[Vehicle]: ...


def _column_for(clause: Clause) -> str:
    if clause.op in ("gte", "lte"):
        return NUMERIC_COLUMN_MAP.get(clause.field, clause.field)
    return clause.field


def _to_vehicles(data: Any) -> list[Vehicle]:
    vehicles: list[Vehicle] = []
    if data and isinstance(data, list):
        for row in data:
            if isinstance(row, dict):
                vehicles.append(Vehicle.model_validate(row))
    return vehicles


class SupabaseVehicleRepository:
    """Catalog reads against a Supabase table."""

    def __init__(self, client: Client, table: str = "vehicles") -> None:
        self.client = client
        self.table = table

    async def _execute(self, operation: str, build) -> list[Vehicle]:
        start = time.time()
        try:
            result = await asyncio.to_thread(lambda: build().execute())
        except (APIError, httpx.HTTPError) as e:
            log_error("Catalog query failed", e, operation=operation, table=self.table)
            raise RepositoryError(f"Catalog {operation} failed") from e
        vehicles = _to_vehicles(result.data)
        log_db_query(operation, self.table, (time.time() - start) * 1000, rows=len(vehicles))
        return vehicles

    async def find_by_id(self, vehicle_id: str) -> Optional[Vehicle]:
        def _build():
            return self.client.table(self.table).select("*").eq("id", vehicle_id).limit(1)

        vehicles = await self._execute("find_by_id", _build)
        return vehicles[0] if vehicles else None

    async def find_by_filter(self, query: CatalogQuery) -> list[Vehicle]:
        def _build():
            columns = ", ".join(query.columns) if query.columns else "*"
            builder = self.client.table(self.table).select(columns)
            for clause in query.clauses:
                column = _column_for(clause)
                if clause.op == "imatch":
                    builder = builder.filter(column, "imatch", clause.value)
                elif clause.op == "eq" and clause.value is None:
                    builder = builder.is_(column, "null")
                elif clause.op == "neq" and clause.value is None:
                    builder = builder.not_.is_(column, "null")
                else:
                    builder = getattr(builder, clause.op)(column, clause.value)
            if query.sort is not None:
                builder = builder.order(query.sort.field, desc=query.sort.descending)
            if query.limit is not None:
                builder = builder.limit(query.limit)
            return builder

        return await self._execute("find_by_filter", _build)

    async def find_trending(self, limit: int) -> list[Vehicle]:
        def _build():
            return (
                self.client.table(self.table)
                .select("*")
                .eq("is_trending", True)
                .limit(limit)
            )

        return await self._execute("find_trending", _build)

    async def find_by_ids(self, vehicle_ids: list[str]) -> list[Vehicle]:
        def _build():
            return self.client.table(self.table).select("*").in_("id", vehicle_ids)

        return await self._execute("find_by_ids", _build)
