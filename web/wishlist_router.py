from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from models.user import UserDTO
from services.wishlist import WishlistService
from web.dependencies import get_session, get_current_user
from web.payloads import WishlistItemPayload
from web.responses import envelope

wishlist_router = APIRouter(prefix="/api/wishlist", tags=["wishlist"])


@wishlist_router.get("")
async def get_wishlist(user: UserDTO = Depends(get_current_user),
                       session: AsyncSession = Depends(get_session)):
    return envelope(await WishlistService.get_wishlist(user, session), "Wishlist retrieved successfully")


@wishlist_router.post("/add")
async def add_to_wishlist(payload: WishlistItemPayload,
                          user: UserDTO = Depends(get_current_user),
                          session: AsyncSession = Depends(get_session)):
    wishlist = await WishlistService.add_item(user, payload.product_id, session)
    return envelope(wishlist, "Item added to wishlist successfully")


@wishlist_router.delete("/item/{product_id}")
async def remove_from_wishlist(product_id: int,
                               user: UserDTO = Depends(get_current_user),
                               session: AsyncSession = Depends(get_session)):
    wishlist = await WishlistService.remove_item(user, product_id, session)
    return envelope(wishlist, "Item removed from wishlist successfully")


@wishlist_router.delete("/clear")
async def clear_wishlist(user: UserDTO = Depends(get_current_user),
                         session: AsyncSession = Depends(get_session)):
    return envelope(await WishlistService.clear(user, session), "Wishlist cleared successfully")


@wishlist_router.get("/stats")
async def get_wishlist_stats(user: UserDTO = Depends(get_current_user),
                             session: AsyncSession = Depends(get_session)):
    return envelope(await WishlistService.get_stats(user, session), "Wishlist statistics retrieved successfully")
