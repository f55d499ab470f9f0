import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from exceptions.product import ProductNotFoundException
from exceptions.cart import WishlistItemNotFoundException
from models.user import UserDTO
from models.wishlist import WishlistDTO
from repositories.product import ProductRepository
from repositories.wishlist import WishlistRepository

logger = logging.getLogger(__name__)


class WishlistService:

    @staticmethod
    async def get_wishlist(user: UserDTO, session: AsyncSession) -> WishlistDTO:
        wishlist = await WishlistRepository.get_or_create(user.id, session)
        await session_commit(session)
        return wishlist

    @staticmethod
    async def add_item(user: UserDTO, product_id: int, session: AsyncSession) -> WishlistDTO:
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            raise ProductNotFoundException(product_id)
        wishlist = await WishlistRepository.add_item(user.id, product, session)
        await session_commit(session)
        logger.info(f"✅ [{user.username}] addToWishlist: product {product_id}")
        return wishlist

    @staticmethod
    async def remove_item(user: UserDTO, product_id: int, session: AsyncSession) -> WishlistDTO:
        wishlist = await WishlistRepository.remove_item(user.id, product_id, session)
        if wishlist is None:
            raise WishlistItemNotFoundException(product_id)
        await session_commit(session)
        logger.info(f"✅ [{user.username}] removeFromWishlist: product {product_id}")
        return wishlist

    @staticmethod
    async def clear(user: UserDTO, session: AsyncSession) -> WishlistDTO:
        wishlist = await WishlistRepository.clear(user.id, session)
        await session_commit(session)
        logger.info(f"✅ [{user.username}] clearWishlist")
        return wishlist

    @staticmethod
    async def get_stats(user: UserDTO, session: AsyncSession) -> dict:
        wishlist = await WishlistService.get_wishlist(user, session)
        return {"itemCount": len(wishlist.items)}
