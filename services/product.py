import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from exceptions.base import ValidationException
from exceptions.product import ProductNotFoundException, DuplicateProductException
from models.product import ProductDTO, ProductInputDTO
from repositories.product import ProductRepository

logger = logging.getLogger(__name__)

REQUIRED_PRODUCT_FIELDS = ("title", "description", "category", "price", "sku")


class ProductService:

    @staticmethod
    async def get_products(page: int, limit: int, session: AsyncSession,
                           category: str | None = None) -> tuple[list[ProductDTO], int]:
        products, total = await ProductRepository.get_paginated(
            page, limit, session, categories=[category] if category else None
        )
        logger.info(f"Retrieved {len(products)} products (page {page}, category={category or 'all'})")
        return products, total

    @staticmethod
    async def search(query: str | None, page: int, limit: int, session: AsyncSession) -> tuple[list[ProductDTO], int]:
        if not query or not query.strip():
            raise ValidationException("Search query is required", field="q")
        products, total = await ProductRepository.search(query.strip(), page, limit, session)
        logger.info(f"Search '{query}' matched {total} products")
        return products, total

    @staticmethod
    async def get_categories(session: AsyncSession) -> list[str]:
        return await ProductRepository.get_categories(session)

    @staticmethod
    async def get_by_categories(categories: str | None, page: int, limit: int,
                                session: AsyncSession) -> tuple[list[ProductDTO], int]:
        names = [c.strip() for c in (categories or "").split(",") if c.strip()]
        if not names:
            raise ValidationException("At least one category is required", field="categories")
        return await ProductRepository.get_paginated(page, limit, session, categories=names)

    @staticmethod
    async def get_stats(session: AsyncSession) -> dict:
        categories = await ProductRepository.get_categories(session)
        return {
            "totalProducts": await ProductRepository.get_count(session),
            "totalCategories": len(categories),
            "categories": categories,
        }

    @staticmethod
    async def get_product(product_id: int, session: AsyncSession) -> ProductDTO:
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            raise ProductNotFoundException(product_id)
        return product

    @staticmethod
    async def create_product(payload: ProductInputDTO, actor: str, session: AsyncSession) -> ProductDTO:
        values = payload.model_dump(exclude_unset=True, exclude_none=True)
        missing = [field for field in REQUIRED_PRODUCT_FIELDS if values.get(field) in (None, "")]
        if missing:
            raise ValidationException(f"Missing required fields: {', '.join(missing)}")
        if await ProductRepository.get_by_sku(values["sku"], session) is not None:
            logger.warning(f"[{actor}] createProduct: duplicate SKU {values['sku']}")
            raise DuplicateProductException(values["sku"])

        product = await ProductRepository.create(values, session)
        await session_commit(session)
        logger.info(f"✅ [{actor}] createProduct: created product {product.id} ({product.sku})")
        return product

    @staticmethod
    async def update_product(product_id: int, payload: ProductInputDTO, actor: str,
                             session: AsyncSession) -> ProductDTO:
        values = payload.model_dump(exclude_unset=True)
        if "sku" in values:
            holder = await ProductRepository.get_by_sku(values["sku"], session)
            if holder is not None and holder.id != product_id:
                raise DuplicateProductException(values["sku"])

        product = await ProductRepository.update(product_id, values, session)
        if product is None:
            raise ProductNotFoundException(product_id)
        await session_commit(session)
        logger.info(f"✅ [{actor}] updateProduct: updated product {product_id} ({', '.join(values) or 'no fields'})")
        return product

    @staticmethod
    async def delete_product(product_id: int, actor: str, session: AsyncSession) -> None:
        deleted = await ProductRepository.delete(product_id, session)
        if not deleted:
            raise ProductNotFoundException(product_id)
        await session_commit(session)
        logger.info(f"✅ [{actor}] deleteProduct: deleted product {product_id}")

    @staticmethod
    async def bulk_update(updates: list[tuple[int, ProductInputDTO]], actor: str,
                          session: AsyncSession) -> dict:
        """
        Applies each update independently. A missing product counts as failed
        and does not stop the remaining updates.
        """
        if not updates:
            raise ValidationException("Updates array is required", field="updates")
        updated = 0
        failed = 0
        for product_id, payload in updates:
            product = await ProductRepository.update(product_id, payload.model_dump(exclude_unset=True), session)
            if product is None:
                failed += 1
            else:
                updated += 1
        await session_commit(session)
        logger.info(f"✅ [{actor}] bulkUpdate: {updated} updated, {failed} failed")
        return {"updated": updated, "failed": failed}
