from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.product import ProductDTO
from models.wishlist import Wishlist, WishlistDTO
from models.wishlistItem import WishlistItem


class WishlistRepository:
    @staticmethod
    async def _get_active(user_id: int, session: AsyncSession) -> Wishlist | None:
        stmt = select(Wishlist).where(Wishlist.user_id == user_id, Wishlist.is_active == True)
        wishlist = await session_execute(stmt, session)
        return wishlist.scalar()

    @staticmethod
    async def get_or_create(user_id: int, session: AsyncSession) -> WishlistDTO:
        wishlist = await WishlistRepository._get_active(user_id, session)
        if wishlist is None:
            wishlist = Wishlist(user_id=user_id, items=[], is_active=True)
            session.add(wishlist)
            await session_flush(session)
        return WishlistDTO.model_validate(wishlist, from_attributes=True)

    @staticmethod
    async def add_item(user_id: int, product: ProductDTO, session: AsyncSession) -> WishlistDTO:
        await WishlistRepository.get_or_create(user_id, session)
        wishlist = await WishlistRepository._get_active(user_id, session)
        if not any(item.product_id == product.id for item in wishlist.items):
            wishlist.items.append(WishlistItem(
                product_id=product.id,
                title=product.title,
                price=product.price,
                thumbnail=product.thumbnail or "",
            ))
            await session_flush(session)
        return WishlistDTO.model_validate(wishlist, from_attributes=True)

    @staticmethod
    async def remove_item(user_id: int, product_id: int, session: AsyncSession) -> WishlistDTO | None:
        """Returns None when the product is not in the wishlist."""
        wishlist = await WishlistRepository._get_active(user_id, session)
        if wishlist is None:
            return None
        existing = next((item for item in wishlist.items if item.product_id == product_id), None)
        if existing is None:
            return None
        wishlist.items.remove(existing)
        await session_flush(session)
        return WishlistDTO.model_validate(wishlist, from_attributes=True)

    @staticmethod
    async def clear(user_id: int, session: AsyncSession) -> WishlistDTO:
        await WishlistRepository.get_or_create(user_id, session)
        wishlist = await WishlistRepository._get_active(user_id, session)
        wishlist.items.clear()
        await session_flush(session)
        return WishlistDTO.model_validate(wishlist, from_attributes=True)
