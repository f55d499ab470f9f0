from sqlalchemy import select, func, or_, cast, String, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.product import Product, ProductDTO


class ProductRepository:
    @staticmethod
    async def create(values: dict, session: AsyncSession) -> ProductDTO:
        product = Product(**values)
        session.add(product)
        await session_flush(session)
        return ProductDTO.model_validate(product, from_attributes=True)

    @staticmethod
    async def get_by_id(product_id: int, session: AsyncSession) -> ProductDTO | None:
        product = await session.get(Product, product_id)
        if product is not None:
            return ProductDTO.model_validate(product, from_attributes=True)
        return None

    @staticmethod
    async def get_by_ids(product_ids: list[int], session: AsyncSession) -> dict[int, ProductDTO]:
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(product_ids))
        products = await session_execute(stmt, session)
        return {p.id: ProductDTO.model_validate(p, from_attributes=True) for p in products.scalars().all()}

    @staticmethod
    async def get_by_sku(sku: str, session: AsyncSession) -> ProductDTO | None:
        stmt = select(Product).where(Product.sku == sku)
        product = await session_execute(stmt, session)
        product = product.scalar()
        if product is not None:
            return ProductDTO.model_validate(product, from_attributes=True)
        return None

    @staticmethod
    async def get_existing_skus(skus: list[str], session: AsyncSession) -> set[str]:
        if not skus:
            return set()
        stmt = select(Product.sku).where(Product.sku.in_(skus))
        result = await session_execute(stmt, session)
        return set(result.scalars().all())

    @staticmethod
    async def update(product_id: int, values: dict, session: AsyncSession) -> ProductDTO | None:
        product = await session.get(Product, product_id)
        if product is None:
            return None
        for key, value in values.items():
            setattr(product, key, value)
        await session_flush(session)
        return ProductDTO.model_validate(product, from_attributes=True)

    @staticmethod
    async def update_by_sku(sku: str, values: dict, session: AsyncSession) -> ProductDTO | None:
        stmt = select(Product).where(Product.sku == sku)
        product = await session_execute(stmt, session)
        product = product.scalar()
        if product is None:
            return None
        for key, value in values.items():
            setattr(product, key, value)
        await session_flush(session)
        return ProductDTO.model_validate(product, from_attributes=True)

    @staticmethod
    async def delete(product_id: int, session: AsyncSession) -> bool:
        stmt = delete(Product).where(Product.id == product_id)
        result = await session_execute(stmt, session)
        return result.rowcount > 0

    @staticmethod
    async def get_paginated(page: int, limit: int, session: AsyncSession,
                            categories: list[str] | None = None) -> tuple[list[ProductDTO], int]:
        conditions = []
        if categories:
            conditions.append(Product.category.in_(categories))
        return await ProductRepository._paginate(conditions, page, limit, session)

    @staticmethod
    async def search(query: str, page: int, limit: int, session: AsyncSession) -> tuple[list[ProductDTO], int]:
        """
        Case-insensitive substring search over title, description, category and tags.
        Tags are stored as JSON, so the serialized array is matched as text.
        """
        pattern = f"%{query.lower()}%"
        conditions = [or_(
            func.lower(Product.title).like(pattern),
            func.lower(Product.description).like(pattern),
            func.lower(Product.category).like(pattern),
            func.lower(cast(Product.tags, String)).like(pattern),
        )]
        return await ProductRepository._paginate(conditions, page, limit, session)

    @staticmethod
    async def _paginate(conditions: list, page: int, limit: int, session: AsyncSession) -> tuple[list[ProductDTO], int]:
        count_stmt = select(func.count(Product.id)).where(*conditions)
        total = await session_execute(count_stmt, session)
        total = total.scalar_one()

        stmt = (
            select(Product)
            .where(*conditions)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        products = await session_execute(stmt, session)
        return [ProductDTO.model_validate(p, from_attributes=True) for p in products.scalars().all()], total

    @staticmethod
    async def get_categories(session: AsyncSession) -> list[str]:
        stmt = select(Product.category).distinct().order_by(Product.category)
        categories = await session_execute(stmt, session)
        return list(categories.scalars().all())

    @staticmethod
    async def get_count(session: AsyncSession) -> int:
        stmt = select(func.count(Product.id))
        count = await session_execute(stmt, session)
        return count.scalar_one()
