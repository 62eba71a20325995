#!/usr/bin/env python3
"""Seed demo catalog script.

Creates the default roles and super admin, then the demo marketplaces,
categories, badges and published products with their links.

With ``STORAGE_BACKEND=database`` products are written to the configured
database; the other aggregates live in process memory and are rebuilt
by the application on startup (``SEED_DEMO_DATA=true``).

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --no-create-tables
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from devdaily.application.admin_service import AdminService
from devdaily.application.demo_catalog import seed_demo_catalog
from devdaily.infrastructure.config import settings
from devdaily.infrastructure.database import create_tables, get_session
from devdaily.infrastructure.logging import configure_logging
from devdaily.infrastructure.sql_repository import SqlAlchemyProductRepository


async def seed(create: bool) -> dict[str, int]:
    """Seed admins and the demo catalog into the configured backend."""
    admin = AdminService().ensure_default_admin()
    admin_id = admin.id if admin else None

    if not settings.uses_database:
        return await seed_demo_catalog(admin_id=admin_id)

    if create:
        await create_tables()
    result: dict[str, int] = {}
    # The session commits once the loop resumes the generator
    async for session in get_session():
        result = await seed_demo_catalog(SqlAlchemyProductRepository(session), admin_id=admin_id)
    return result


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed the DevDaily demo catalog")
    parser.add_argument(
        "--no-create-tables",
        action="store_true",
        help="Don't create database tables before seeding",
    )
    args = parser.parse_args()

    configure_logging(settings.log_level, json_output=False)

    print("=" * 60)
    print("DevDaily Catalog Seeder")
    print("=" * 60)
    print(f"Storage: {settings.storage_backend}")
    print()

    try:
        result = await seed(create=not args.no_create_tables)
    except Exception as e:
        print(f"  ✗ Error: {e}")
        sys.exit(1)

    for kind, count in result.items():
        print(f"  ✓ {kind.capitalize()}: {count} created")
    print()
    print("Seeding complete!")


if __name__ == "__main__":
    asyncio.run(main())
