import uuid

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.cart import Cart, CartDTO
from models.cartItem import CartItem
from models.product import ProductDTO


class CartRepository:
    @staticmethod
    def _recalculate(cart: Cart) -> None:
        # Always from the current lines, cached totals are never trusted
        cart.total_items = sum(item.quantity for item in cart.items)
        cart.total_amount = round(sum(item.price * item.quantity for item in cart.items), 2)

    @staticmethod
    async def _get(cart_id: int, session: AsyncSession) -> Cart | None:
        return await session.get(Cart, cart_id)

    @staticmethod
    async def _save(cart: Cart, session: AsyncSession) -> CartDTO:
        CartRepository._recalculate(cart)
        await session_flush(session)
        return CartDTO.model_validate(cart, from_attributes=True)

    @staticmethod
    async def create(session: AsyncSession, user_id: int | None = None) -> CartDTO:
        cart = Cart(guest_id=uuid.uuid4().hex, user_id=user_id, items=[],
                    total_items=0, total_amount=0.0, is_active=True)
        session.add(cart)
        await session_flush(session)
        return CartDTO.model_validate(cart, from_attributes=True)

    @staticmethod
    async def get_by_id(cart_id: int, session: AsyncSession) -> CartDTO | None:
        cart = await CartRepository._get(cart_id, session)
        if cart is not None:
            return CartDTO.model_validate(cart, from_attributes=True)
        return None

    @staticmethod
    async def get_active_by_user(user_id: int, session: AsyncSession) -> CartDTO | None:
        stmt = select(Cart).where(Cart.user_id == user_id, Cart.is_active == True)
        cart = await session_execute(stmt, session)
        cart = cart.scalar()
        if cart is not None:
            return CartDTO.model_validate(cart, from_attributes=True)
        return None

    @staticmethod
    async def get_active_by_guest(guest_id: str, session: AsyncSession) -> CartDTO | None:
        """Guest carts only, a cart re-owned by a user is no longer reachable through the cookie."""
        stmt = select(Cart).where(Cart.guest_id == guest_id, Cart.user_id.is_(None), Cart.is_active == True)
        cart = await session_execute(stmt, session)
        cart = cart.scalar()
        if cart is not None:
            return CartDTO.model_validate(cart, from_attributes=True)
        return None

    @staticmethod
    async def add_item(cart_id: int, product: ProductDTO, quantity: int, session: AsyncSession) -> CartDTO:
        cart = await CartRepository._get(cart_id, session)
        existing = next((item for item in cart.items if item.product_id == product.id), None)
        if existing is not None:
            existing.quantity += quantity
        else:
            cart.items.append(CartItem(
                product_id=product.id,
                title=product.title,
                price=product.price,
                thumbnail=product.thumbnail or "",
                quantity=quantity,
            ))
        return await CartRepository._save(cart, session)

    @staticmethod
    async def set_quantity(cart_id: int, product_id: int, quantity: int, session: AsyncSession) -> CartDTO | None:
        """Returns None when the cart has no line for the product."""
        cart = await CartRepository._get(cart_id, session)
        existing = next((item for item in cart.items if item.product_id == product_id), None)
        if existing is None:
            return None
        if quantity <= 0:
            cart.items.remove(existing)
        else:
            existing.quantity = quantity
        return await CartRepository._save(cart, session)

    @staticmethod
    async def remove_item(cart_id: int, product_id: int, session: AsyncSession) -> CartDTO | None:
        return await CartRepository.set_quantity(cart_id, product_id, 0, session)

    @staticmethod
    async def clear(cart_id: int, session: AsyncSession) -> CartDTO:
        cart = await CartRepository._get(cart_id, session)
        cart.items.clear()
        return await CartRepository._save(cart, session)

    @staticmethod
    async def deactivate(cart_id: int, session: AsyncSession) -> None:
        cart = await CartRepository._get(cart_id, session)
        cart.is_active = False
        await session_flush(session)

    @staticmethod
    async def assign_to_user(cart_id: int, user_id: int, session: AsyncSession) -> CartDTO:
        cart = await CartRepository._get(cart_id, session)
        cart.user_id = user_id
        return await CartRepository._save(cart, session)

    @staticmethod
    async def merge_into(source_cart_id: int, target_cart_id: int, session: AsyncSession) -> CartDTO:
        """
        Sums the source lines into the target by product id and deactivates the source.
        Lines keep the snapshot of whichever cart held the product first.
        """
        source = await CartRepository._get(source_cart_id, session)
        target = await CartRepository._get(target_cart_id, session)
        lines = {item.product_id: item for item in target.items}
        for item in source.items:
            if item.product_id in lines:
                lines[item.product_id].quantity += item.quantity
            else:
                target.items.append(CartItem(
                    product_id=item.product_id,
                    title=item.title,
                    price=item.price,
                    thumbnail=item.thumbnail,
                    quantity=item.quantity,
                ))
        source.is_active = False
        return await CartRepository._save(target, session)

    @staticmethod
    async def get_guest_carts(page: int, limit: int, session: AsyncSession) -> tuple[list[CartDTO], int]:
        conditions = [Cart.user_id.is_(None), Cart.is_active == True]
        count_stmt = select(func.count(Cart.id)).where(*conditions)
        total = await session_execute(count_stmt, session)
        total = total.scalar_one()

        stmt = (
            select(Cart)
            .where(*conditions)
            .order_by(Cart.updated_at.desc(), Cart.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        carts = await session_execute(stmt, session)
        return [CartDTO.model_validate(c, from_attributes=True) for c in carts.scalars().all()], total
