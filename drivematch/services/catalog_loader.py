"""Seed the Supabase catalog table from a JSON or CSV dump.

Dumps may come straight from the old Mongo export (camelCase keys, ``_id``
objects). Column names are converted to snake_case and every unit-string
attribute gets its numeric shadow column so range filters work server-side.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

import pandas as pd
from pydantic.alias_generators import to_snake
from supabase import Client

from drivematch.services.normalizer import parse_number
from drivematch.services.repository import NUMERIC_COLUMN_MAP

logger = logging.getLogger(__name__)


def _mongo_id(value: Any) -> Any:
    if isinstance(value, dict) and "$oid" in value:
        return value["$oid"]
    return value


def read_catalog(path: str | Path) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog dump not found: {path}")
    if path.suffix.lower() == ".csv":
        return pd.read_csv(path)
    return pd.read_json(path, orient="records", convert_dates=False)


def prepare_records(df: pd.DataFrame) -> list[dict[str, Any]]:
    """DataFrame -> list of snake_case row dicts ready for insert."""
    df = df.drop(columns=["__v"], errors="ignore")
    df = df.rename(columns={c: "id" if c == "_id" else to_snake(c) for c in df.columns})
    if "id" in df.columns:
        df["id"] = df["id"].map(_mongo_id).astype(str)

    for field, column in NUMERIC_COLUMN_MAP.items():
        if field in df.columns:
            df[column] = df[field].map(parse_number)

    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")


async def load_catalog(
    client: Client, path: str | Path, table: str = "vehicles", batch_size: int = 500
) -> int:
    """Upsert a catalog dump into ``table``. Returns the number of rows sent."""
    records = prepare_records(read_catalog(path))

    total_inserted = 0
    for i in range(0, len(records), batch_size):
        batch = records[i : i + batch_size]

        def _upsert_batch(b=batch):
            return client.table(table).upsert(b).execute()

        await asyncio.to_thread(_upsert_batch)
        total_inserted += len(batch)
        logger.info(f"Upserted {total_inserted}/{len(records)} vehicles...")

    return len(records)
