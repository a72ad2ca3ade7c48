#!/usr/bin/env python3
"""
Database setup script for PreopFlow.

This script performs:
1. Health check (collections, document counts, indexes, replica set)
2. Index creation through Beanie
3. Default station seeding

Usage:
    python scripts/setup_database.py --health-check
    python scripts/setup_database.py --create-indexes
    python scripts/setup_database.py --seed-stations
"""

import argparse
import asyncio
import sys
from typing import Any, Dict

# Add the src directory to the Python path
sys.path.insert(0, "src")

from beanie import init_beanie

from preopflow.adapters.db.mongo.models.circuit_m import DOCUMENT_MODELS
from preopflow.core.config import get_settings
from preopflow.core.container import ServiceNames, build_container
from preopflow.domain.catalog import station_layout


class DatabaseSetup:
    """Health check, indexes and seeding for the circuit collections."""

    def __init__(self):
        self.settings = get_settings()
        if self.settings.database.backend != "mongo":
            raise SystemExit("Set DATABASE_BACKEND=mongo and DATABASE_URI to use this script")
        self.container = build_container(self.settings)
        self.client = self.container.get(ServiceNames.MONGO_CLIENT)
        self.db = self.client[self.settings.database.db_name]

    async def health_check(self) -> Dict[str, Any]:
        print("Performing database health check...")
        hello = await self.client.admin.command("hello")
        collections = await self.db.list_collection_names()
        status: Dict[str, Any] = {
            # Transactions need a replica set or a sharded cluster
            "replica_set": hello.get("setName") or ("mongos" if hello.get("msg") == "isdbgrid" else None),
            "collections": {},
        }
        for model in DOCUMENT_MODELS:
            name = model.Settings.name
            if name not in collections:
                status["collections"][name] = "missing"
                continue
            indexes = await self.db[name].list_indexes().to_list(None)
            status["collections"][name] = {
                "documents": await self.db[name].count_documents({}),
                "indexes": len(indexes),
            }
        for key, value in status.items():
            print(f"  {key}: {value}")
        if not status["replica_set"]:
            print("WARNING: server is not a replica set; transactions will fail")
        return status

    async def create_indexes(self) -> None:
        print("Creating indexes...")
        await init_beanie(database=self.db, document_models=DOCUMENT_MODELS)
        print("Indexes created")

    async def seed_stations(self) -> None:
        await init_beanie(database=self.db, document_models=DOCUMENT_MODELS)
        layout = station_layout(self.settings.circuit.default_station_counts)
        created = await self.container.get(ServiceNames.SEED_DEFAULT_STATIONS).execute(layout)
        if created:
            print(f"Seeded {len(created)} stations")
        else:
            print("Stations already present; nothing seeded")

    def close(self) -> None:
        self.client.close()


async def main() -> None:
    parser = argparse.ArgumentParser(description="PreopFlow database setup")
    parser.add_argument("--health-check", action="store_true", help="Check database health")
    parser.add_argument("--create-indexes", action="store_true", help="Create collection indexes")
    parser.add_argument("--seed-stations", action="store_true", help="Seed default stations")
    args = parser.parse_args()

    if not (args.health_check or args.create_indexes or args.seed_stations):
        parser.print_help()
        return

    setup = DatabaseSetup()
    try:
        if args.create_indexes:
            await setup.create_indexes()
        if args.seed_stations:
            await setup.seed_stations()
        if args.health_check:
            await setup.health_check()
    finally:
        setup.close()


if __name__ == "__main__":
    asyncio.run(main())
