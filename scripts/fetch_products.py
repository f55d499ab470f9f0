#!/usr/bin/env python3
"""
Import products from the dummy products API into the catalog.

Products whose SKU is already stored are skipped; pass --update to refresh
stored products instead.

Usage:
    python scripts/fetch_products.py [--limit 30] [--update]
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import config
from db import create_db_and_tables, get_db_session
from exceptions.product import CatalogImportException
from services.catalog_import import CatalogImportService


async def fetch_products(limit: int, update: bool):
    await create_db_and_tables()
    print(f"🔄 Fetching {limit} products from {config.DUMMY_PRODUCTS_API}...")
    async with get_db_session() as session:
        if update:
            result = await CatalogImportService.update_existing(session, limit=limit)
            print(f"✅ Updated: {result['updated']}, not found: {result['notFound']}, failed: {result['failed']}")
        else:
            result = await CatalogImportService.fetch_and_store(session, limit=limit)
            print(f"✅ Stored: {result['stored']}, skipped: {result['skipped']}, failed: {result['failed']}")


def main():
    parser = argparse.ArgumentParser(description="Import products from the dummy products API")
    parser.add_argument("--limit", type=int, default=config.CATALOG_IMPORT_DEFAULT_LIMIT)
    parser.add_argument("--update", action="store_true", help="refresh products that are already stored")
    args = parser.parse_args()
    try:
        asyncio.run(fetch_products(args.limit, args.update))
    except CatalogImportException as e:
        print(f"❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
