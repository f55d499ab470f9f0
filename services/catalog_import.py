import logging

import aiohttp
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import session_commit
from exceptions.product import CatalogImportException
from models.product import ProductInputDTO
from repositories.product import ProductRepository

logger = logging.getLogger(__name__)


class CatalogImportService:
    """Seeds and refreshes the catalog from the dummy products API."""

    @staticmethod
    async def fetch_products(limit: int = config.CATALOG_IMPORT_DEFAULT_LIMIT) -> list[dict]:
        logger.info(f"📥 Fetching {limit} products from {config.DUMMY_PRODUCTS_API}")
        try:
            timeout = aiohttp.ClientTimeout(total=30)
            async with aiohttp.ClientSession(timeout=timeout) as http:
                async with http.get(config.DUMMY_PRODUCTS_API, params={"limit": str(limit)}) as response:
                    response.raise_for_status()
                    data = await response.json()
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error(f"❌ Failed to fetch products: {e}")
            raise CatalogImportException(str(e))

        products = data.get("products") if isinstance(data, dict) else None
        if not isinstance(products, list):
            raise CatalogImportException("Invalid response format from dummy API")
        logger.info(f"✅ Successfully fetched {len(products)} products")
        return products

    @staticmethod
    async def store_products(raw_products: list[dict], session: AsyncSession) -> dict:
        """Stores products whose SKU is not in the catalog yet."""
        stored = skipped = failed = 0
        existing = await ProductRepository.get_existing_skus(
            [p.get("sku") for p in raw_products if p.get("sku")], session
        )
        for raw in raw_products:
            try:
                values = ProductInputDTO.model_validate(raw).model_dump(exclude_none=True)
            except ValidationError as e:
                logger.warning(f"Skipping malformed product {raw.get('id')}: {e.error_count()} errors")
                failed += 1
                continue
            sku = values.get("sku")
            if not sku or not values.get("title") or values.get("price") is None:
                failed += 1
                continue
            if sku in existing:
                skipped += 1
                continue
            await ProductRepository.create(values, session)
            # Duplicates inside the same batch
            existing.add(sku)
            stored += 1
        await session_commit(session)
        logger.info(f"✅ Catalog import finished: {stored} stored, {skipped} skipped, {failed} failed")
        return {"stored": stored, "skipped": skipped, "failed": failed}

    @staticmethod
    async def fetch_and_store(session: AsyncSession, limit: int = config.CATALOG_IMPORT_DEFAULT_LIMIT) -> dict:
        raw_products = await CatalogImportService.fetch_products(limit)
        return await CatalogImportService.store_products(raw_products, session)

    @staticmethod
    async def update_existing(session: AsyncSession, limit: int = config.CATALOG_IMPORT_DEFAULT_LIMIT) -> dict:
        """Refreshes already stored products from the source, matched by SKU."""
        raw_products = await CatalogImportService.fetch_products(limit)
        updated = not_found = failed = 0
        for raw in raw_products:
            try:
                values = ProductInputDTO.model_validate(raw).model_dump(exclude_none=True)
            except ValidationError:
                failed += 1
                continue
            sku = values.pop("sku", None)
            if not sku:
                failed += 1
                continue
            product = await ProductRepository.update_by_sku(sku, values, session)
            if product is None:
                not_found += 1
            else:
                updated += 1
        await session_commit(session)
        logger.info(f"✅ Catalog refresh finished: {updated} updated, {not_found} not found, {failed} failed")
        return {"updated": updated, "notFound": not_found, "failed": failed}
