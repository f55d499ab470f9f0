"""
Cart endpoints for guests and authenticated users.

A guest is identified by the guest cart cookie. Whenever a request creates a
new guest cart the cookie is (re)issued on the response.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from enums.capability import Capability
from models.user import UserDTO
from services.cart import CartService
from utils.pagination import build_pagination
from web.dependencies import get_session, get_current_user, get_optional_user, get_guest_id, \
    require_capability, PageParams
from web.payloads import AddToCartPayload, UpdateCartItemPayload
from web.responses import envelope, set_guest_cookie, clear_guest_cookie

cart_router = APIRouter(prefix="/api/cart", tags=["cart"])


@cart_router.get("")
async def get_cart(response: Response,
                   user: UserDTO | None = Depends(get_optional_user),
                   guest_id: str | None = Depends(get_guest_id),
                   session: AsyncSession = Depends(get_session)):
    cart, new_guest_id = await CartService.resolve_cart(user, guest_id, session)
    set_guest_cookie(response, new_guest_id)
    return envelope(cart, "Cart retrieved successfully")


@cart_router.post("/add")
async def add_to_cart(payload: AddToCartPayload, response: Response,
                      user: UserDTO | None = Depends(get_optional_user),
                      guest_id: str | None = Depends(get_guest_id),
                      session: AsyncSession = Depends(get_session)):
    cart, new_guest_id = await CartService.add_item(user, guest_id, payload.product_id, payload.quantity, session)
    set_guest_cookie(response, new_guest_id)
    return envelope(cart, "Item added to cart successfully")


@cart_router.put("/item/{product_id}")
async def update_cart_item(product_id: int, payload: UpdateCartItemPayload,
                           user: UserDTO | None = Depends(get_optional_user),
                           guest_id: str | None = Depends(get_guest_id),
                           session: AsyncSession = Depends(get_session)):
    cart = await CartService.update_item(user, guest_id, product_id, payload.quantity, session)
    return envelope(cart, "Cart item updated successfully")


@cart_router.delete("/item/{product_id}")
async def remove_from_cart(product_id: int,
                           user: UserDTO | None = Depends(get_optional_user),
                           guest_id: str | None = Depends(get_guest_id),
                           session: AsyncSession = Depends(get_session)):
    cart = await CartService.remove_item(user, guest_id, product_id, session)
    return envelope(cart, "Item removed from cart successfully")


@cart_router.delete("/clear")
async def clear_cart(response: Response,
                     user: UserDTO | None = Depends(get_optional_user),
                     guest_id: str | None = Depends(get_guest_id),
                     session: AsyncSession = Depends(get_session)):
    cart, new_guest_id = await CartService.clear_cart(user, guest_id, session)
    set_guest_cookie(response, new_guest_id)
    return envelope(cart, "Cart cleared successfully")


@cart_router.get("/stats")
async def get_cart_stats(response: Response,
                         user: UserDTO | None = Depends(get_optional_user),
                         guest_id: str | None = Depends(get_guest_id),
                         session: AsyncSession = Depends(get_session)):
    stats, new_guest_id = await CartService.get_stats(user, guest_id, session)
    set_guest_cookie(response, new_guest_id)
    return envelope(stats, "Cart statistics retrieved successfully")


@cart_router.post("/validate")
async def validate_cart(response: Response,
                        user: UserDTO | None = Depends(get_optional_user),
                        guest_id: str | None = Depends(get_guest_id),
                        session: AsyncSession = Depends(get_session)):
    validation, new_guest_id = await CartService.validate_cart(user, guest_id, session)
    set_guest_cookie(response, new_guest_id)
    return envelope(validation, "Cart validation completed")


@cart_router.get("/guest-carts")
async def get_guest_carts(paging: PageParams = Depends(),
                          user: UserDTO = Depends(require_capability(Capability.CART_VIEW_GUESTS)),
                          session: AsyncSession = Depends(get_session)):
    carts, total = await CartService.get_guest_carts(paging.page, paging.limit, session)
    return envelope(carts, "Guest carts retrieved successfully",
                    pagination=build_pagination(paging.page, paging.limit, total))


@cart_router.post("/merge-guest")
async def merge_guest_cart(response: Response,
                           user: UserDTO = Depends(get_current_user),
                           guest_id: str | None = Depends(get_guest_id),
                           session: AsyncSession = Depends(get_session)):
    cart = await CartService.merge_guest_cart(user, guest_id, session)
    clear_guest_cookie(response)
    return envelope(cart, "Guest cart merged successfully")


# Registered last so the fixed paths above take precedence
@cart_router.get("/{cart_id}")
async def get_cart_by_id(cart_id: int,
                         user: UserDTO | None = Depends(get_optional_user),
                         guest_id: str | None = Depends(get_guest_id),
                         session: AsyncSession = Depends(get_session)):
    cart = await CartService.get_cart_by_id(cart_id, user, guest_id, session)
    return envelope(cart, "Cart retrieved successfully")
