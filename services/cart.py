import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from enums.capability import Capability
from exceptions.cart import (
    CartNotFoundException,
    CartItemNotFoundException,
    GuestCartNotFoundException,
    CartAccessDeniedException,
    InvalidCartStateException,
)
from exceptions.order import InsufficientStockException
from exceptions.product import ProductNotFoundException
from models.cart import CartDTO
from models.user import UserDTO
from repositories.cart import CartRepository
from repositories.product import ProductRepository
from utils.permission_utils import has_capability


def actor_name(user: UserDTO | None) -> str:
    return user.username if user is not None else "guest"


class CartService:

    @staticmethod
    async def find_cart(user: UserDTO | None, guest_id: str | None, session: AsyncSession) -> CartDTO | None:
        """The caller's active cart without creating one."""
        if user is not None:
            return await CartRepository.get_active_by_user(user.id, session)
        if guest_id:
            return await CartRepository.get_active_by_guest(guest_id, session)
        return None

    @staticmethod
    async def resolve_cart(user: UserDTO | None, guest_id: str | None,
                           session: AsyncSession) -> tuple[CartDTO, str | None]:
        """
        Get-or-create the caller's active cart.

        Authenticated callers get their user cart and the guest cookie is ignored.
        Otherwise the cookie's guest cart is used, or a new guest cart is created.

        Returns:
            (cart, guest_id to issue as cookie, None when no new cookie is needed)
        """
        cart = await CartService.find_cart(user, guest_id, session)
        if cart is not None:
            return cart, None

        if user is not None:
            cart = await CartRepository.create(session, user_id=user.id)
            await session_commit(session)
            logging.info(f"🛒 Created cart {cart.id} for user {user.id}")
            return cart, None

        cart = await CartRepository.create(session)
        await session_commit(session)
        logging.info(f"🛒 Created guest cart {cart.id}")
        return cart, cart.guest_id

    @staticmethod
    async def get_cart_by_id(cart_id: int, user: UserDTO | None, guest_id: str | None,
                             session: AsyncSession) -> CartDTO:
        cart = await CartRepository.get_by_id(cart_id, session)
        if cart is None:
            raise CartNotFoundException(cart_id)
        is_owner = user is not None and cart.user_id == user.id
        is_guest_holder = cart.user_id is None and guest_id is not None and cart.guest_id == guest_id
        can_view_guests = user is not None and has_capability(user.role, Capability.CART_VIEW_GUESTS)
        if not (is_owner or is_guest_holder or can_view_guests):
            raise CartAccessDeniedException(cart_id)
        return cart

    @staticmethod
    async def add_item(user: UserDTO | None, guest_id: str | None, product_id: int, quantity: int,
                       session: AsyncSession) -> tuple[CartDTO, str | None]:
        """Stock is not checked here, only at quantity update and checkout."""
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            raise ProductNotFoundException(product_id)
        cart, new_guest_id = await CartService.resolve_cart(user, guest_id, session)
        cart = await CartRepository.add_item(cart.id, product, quantity, session)
        await session_commit(session)
        logging.info(f"✅ [{actor_name(user)}] addToCart: product {product_id} x{quantity} -> cart {cart.id}")
        return cart, new_guest_id

    @staticmethod
    async def update_item(user: UserDTO | None, guest_id: str | None, product_id: int, quantity: int,
                          session: AsyncSession) -> CartDTO:
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            raise ProductNotFoundException(product_id)
        if quantity > 0 and product.stock < quantity:
            raise InsufficientStockException(
                product_id, product.title, product.stock, quantity,
                message=f"Only {product.stock} items available in stock",
            )
        # A caller without a cart has no line to update, and no cart is created for them
        cart = await CartService.find_cart(user, guest_id, session)
        if cart is None:
            raise CartItemNotFoundException(product_id)
        updated = await CartRepository.set_quantity(cart.id, product_id, quantity, session)
        if updated is None:
            raise CartItemNotFoundException(product_id)
        await session_commit(session)
        logging.info(f"✅ [{actor_name(user)}] updateCartItem: product {product_id} -> {quantity} in cart {cart.id}")
        return updated

    @staticmethod
    async def remove_item(user: UserDTO | None, guest_id: str | None, product_id: int,
                          session: AsyncSession) -> CartDTO:
        cart = await CartService.find_cart(user, guest_id, session)
        if cart is None:
            raise CartItemNotFoundException(product_id)
        updated = await CartRepository.remove_item(cart.id, product_id, session)
        if updated is None:
            raise CartItemNotFoundException(product_id)
        await session_commit(session)
        logging.info(f"✅ [{actor_name(user)}] removeFromCart: product {product_id} from cart {cart.id}")
        return updated

    @staticmethod
    async def clear_cart(user: UserDTO | None, guest_id: str | None,
                         session: AsyncSession) -> tuple[CartDTO, str | None]:
        cart, new_guest_id = await CartService.resolve_cart(user, guest_id, session)
        cart = await CartRepository.clear(cart.id, session)
        await session_commit(session)
        logging.info(f"✅ [{actor_name(user)}] clearCart: cart {cart.id}")
        return cart, new_guest_id

    @staticmethod
    async def get_stats(user: UserDTO | None, guest_id: str | None,
                        session: AsyncSession) -> tuple[dict, str | None]:
        cart, new_guest_id = await CartService.resolve_cart(user, guest_id, session)
        stats = {
            "totalItems": cart.total_items,
            "totalAmount": cart.total_amount,
            "itemCount": len(cart.items),
        }
        return stats, new_guest_id

    @staticmethod
    async def validate_cart(user: UserDTO | None, guest_id: str | None,
                            session: AsyncSession) -> tuple[dict, str | None]:
        """Checks every line against the live catalog without changing anything."""
        cart, new_guest_id = await CartService.resolve_cart(user, guest_id, session)
        products = await ProductRepository.get_by_ids([item.product_id for item in cart.items], session)
        results = []
        for item in cart.items:
            product = products.get(item.product_id)
            if product is None:
                results.append({
                    "productId": item.product_id,
                    "title": item.title,
                    "available": False,
                    "reason": "Product not found",
                })
            elif product.stock < item.quantity:
                results.append({
                    "productId": item.product_id,
                    "title": item.title,
                    "available": False,
                    "reason": "Insufficient stock",
                    "availableStock": product.stock,
                    "requestedQuantity": item.quantity,
                })
            else:
                results.append({
                    "productId": item.product_id,
                    "title": item.title,
                    "available": True,
                    "currentPrice": product.price,
                    "stock": product.stock,
                })
        validation = {
            "allItemsAvailable": all(r["available"] for r in results),
            "validationResults": results,
            "cartTotal": cart.total_amount,
        }
        return validation, new_guest_id

    @staticmethod
    async def get_guest_carts(page: int, limit: int, session: AsyncSession) -> tuple[list[CartDTO], int]:
        return await CartRepository.get_guest_carts(page, limit, session)

    @staticmethod
    async def merge_guest_cart(user: UserDTO, guest_id: str | None, session: AsyncSession) -> CartDTO:
        """
        Without a user cart the guest cart is re-owned as is. Otherwise lines are
        summed into the user cart by product and the guest cart is deactivated.
        """
        if not guest_id:
            raise InvalidCartStateException("Guest ID (from cookie) and user authentication are required")
        guest_cart = await CartRepository.get_active_by_guest(guest_id, session)
        if guest_cart is None:
            raise GuestCartNotFoundException(guest_id)

        user_cart = await CartRepository.get_active_by_user(user.id, session)
        if user_cart is None:
            merged = await CartRepository.assign_to_user(guest_cart.id, user.id, session)
        else:
            merged = await CartRepository.merge_into(guest_cart.id, user_cart.id, session)
        await session_commit(session)
        logging.info(f"✅ [{user.username}] mergeGuestCart: guest cart {guest_cart.id} -> cart {merged.id}")
        return merged
