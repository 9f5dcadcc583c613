#!/usr/bin/env python
"""Script to load a vehicle catalog dump into the Supabase vehicles table."""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from drivematch.config import get_settings
from drivematch.services.catalog_loader import load_catalog
from drivematch.services.db import get_supabase_client


def main():
    settings = get_settings()
    if not settings.use_supabase:
        print("Error: SUPABASE_URL and SUPABASE_KEY must be set")
        sys.exit(1)

    path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path(settings.seed_file)
    if not path.exists():
        print(f"Error: catalog file not found at {path}")
        sys.exit(1)

    print(f"Loading vehicles from {path}...")
    count = asyncio.run(
        load_catalog(get_supabase_client(), path, table=settings.vehicles_table)
    )
    print(f"Successfully loaded {count} vehicles into {settings.vehicles_table}")


if __name__ == "__main__":
    main()
