import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from enums.order_status import OrderStatus
from enums.payment_method import PaymentMethod
from enums.payment_status import PaymentStatus
from exceptions.base import ValidationException
from exceptions.cart import EmptyCartException
from exceptions.order import (
    OrderNotFoundException,
    OrderOwnershipException,
    ProductUnavailableException,
    InsufficientStockException,
    InvalidOrderStateException,
)
from exceptions.payment import CheckoutSessionException, PaymentException
from models.order import OrderDTO
from models.orderItem import OrderItemDTO
from models.user import UserDTO
from repositories.cart import CartRepository
from repositories.order import OrderRepository
from repositories.product import ProductRepository
from services.payment import PaymentService
from utils.order_state_machine import OrderStateMachine
from utils.security import generate_reference


class OrderService:

    @staticmethod
    async def create_order(user: UserDTO, shipping_address: dict, payment_method: PaymentMethod,
                           session: AsyncSession, success_url: str | None = None,
                           cancel_url: str | None = None) -> tuple[OrderDTO, dict | None]:
        """
        Checkout: turns the caller's active cart into an order.

        Flow:
        1. Reject ONLINE checkout without both redirect URLs
        2. Re-validate every cart line against live stock, all or nothing
        3. Snapshot title/price/thumbnail and create the order PENDING/PENDING
        4. ONLINE only: request a hosted checkout session, on failure the
           order is deactivated and the checkout fails
        5. Clear the cart

        Stock is validated, never decremented.

        Returns:
            (order, {"id", "url"} of the checkout session or None for COD)
        """
        if payment_method == PaymentMethod.ONLINE and (not success_url or not cancel_url):
            raise ValidationException("Success URL and cancel URL are required for online payment")

        cart = await CartRepository.get_active_by_user(user.id, session)
        if cart is None or not cart.items:
            raise EmptyCartException(user.id)

        products = await ProductRepository.get_by_ids([item.product_id for item in cart.items], session)
        order_items = []
        for cart_item in cart.items:
            product = products.get(cart_item.product_id)
            if product is None:
                raise ProductUnavailableException(cart_item.product_id)
            if product.stock < cart_item.quantity:
                raise InsufficientStockException(product.id, product.title, product.stock, cart_item.quantity)
            order_items.append(OrderItemDTO(
                product_id=product.id,
                title=product.title,
                price=product.price,
                quantity=cart_item.quantity,
                thumbnail=product.thumbnail or "",
            ))

        order = await OrderRepository.create(OrderDTO(
            order_number=generate_reference("ORD"),
            user_id=user.id,
            items=order_items,
            total_amount=round(sum(item.price * item.quantity for item in order_items), 2),
            total_items=sum(item.quantity for item in order_items),
            shipping_address=shipping_address,
            payment_method=payment_method,
        ), session)
        await session_commit(session)
        logging.info(f"✅ Order {order.order_number} created (Status: PENDING/PENDING, Method: {payment_method.value})")

        checkout_session = None
        if payment_method == PaymentMethod.ONLINE:
            try:
                checkout_session = await PaymentService.create_checkout_session(order, success_url, cancel_url)
            except PaymentException as e:
                await OrderRepository.deactivate(order.id, session)
                await session_commit(session)
                logging.error(f"❌ Checkout session failed for order {order.order_number}, order deactivated: {e}")
                raise CheckoutSessionException(order.order_number, str(e))
            order = await OrderRepository.update(order.id, {"session_id": checkout_session["id"]}, session)

        # Cleared even if the buyer never completes the hosted checkout
        await CartRepository.clear(cart.id, session)
        await session_commit(session)
        logging.info(f"✅ [{user.username}] createOrder: {order.order_number} with {order.total_items} items")
        return order, checkout_session

    @staticmethod
    async def get_order(user: UserDTO, order_id: int, session: AsyncSession) -> OrderDTO:
        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        if order.user_id != user.id:
            raise OrderOwnershipException(order_id, user.id)
        return order

    @staticmethod
    async def get_order_by_number(user: UserDTO, order_number: str, session: AsyncSession) -> OrderDTO:
        order = await OrderRepository.get_by_order_number(order_number, session)
        if order is None:
            raise OrderNotFoundException(order_number)
        if order.user_id != user.id:
            raise OrderOwnershipException(order.id, user.id)
        return order

    @staticmethod
    async def get_user_orders(user: UserDTO, page: int, limit: int,
                              session: AsyncSession) -> tuple[list[OrderDTO], int]:
        orders, total = await OrderRepository.get_by_user(user.id, page, limit, session)
        logging.info(f"[{user.username}] getUserOrders: {len(orders)} of {total} orders (page {page})")
        return orders, total

    @staticmethod
    async def get_order_stats(user: UserDTO, session: AsyncSession) -> dict:
        return await OrderRepository.get_stats(user.id, session)

    @staticmethod
    async def get_payment_history(user: UserDTO, page: int, limit: int,
                                  session: AsyncSession) -> tuple[list[OrderDTO], int]:
        return await OrderRepository.get_payment_history(user.id, page, limit, session)

    @staticmethod
    async def cancel_order(user: UserDTO, order_id: int, session: AsyncSession) -> OrderDTO:
        """
        Customer cancellation. Blocked once the order is SHIPPED or DELIVERED,
        whatever the payment status. A paid order gets a best-effort refund:
        a refund failure is logged and the cancellation still goes through.
        """
        order = await OrderService.get_order(user, order_id, session)
        if not OrderStateMachine.can_customer_transition(order.order_status, OrderStatus.CANCELLED):
            raise InvalidOrderStateException(order.id, order.order_status.value)

        if order.payment_status == PaymentStatus.PAID and order.session_id:
            try:
                await PaymentService.create_refund(order.session_id)
                logging.info(f"💸 [{user.username}] cancelOrder: refund issued for order {order.order_number}")
            except PaymentException as e:
                logging.error(f"❌ [{user.username}] cancelOrder: failed to issue refund for "
                              f"{order.order_number}: {e}")

        order = await OrderRepository.update(order.id, {"order_status": OrderStatus.CANCELLED}, session)
        await session_commit(session)
        logging.info(f"✅ [{user.username}] cancelOrder: cancelled order {order.order_number}")
        return order

    @staticmethod
    async def get_all_orders(page: int, limit: int, session: AsyncSession,
                             status: OrderStatus | None = None) -> tuple[list[OrderDTO], int]:
        return await OrderRepository.get_all(page, limit, session, status=status)

    @staticmethod
    async def update_order_status(admin: UserDTO, order_id: int, new_status: OrderStatus,
                                  session: AsyncSession) -> OrderDTO:
        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        if not OrderStateMachine.validate_and_log_transition(
                order.order_number, order.order_status, new_status, actor=admin.username):
            raise InvalidOrderStateException(
                order.id, order.order_status.value,
                message=f"Invalid status transition from {order.order_status.value} to {new_status.value}",
            )
        order = await OrderRepository.update(order.id, {"order_status": new_status}, session)
        await session_commit(session)
        return order

    @staticmethod
    async def apply_checkout_completed(order_number: str, session_id: str,
                                       gateway_payment_status: str | None,
                                       session: AsyncSession) -> OrderDTO | None:
        """
        Map the gateway's authoritative payment status onto the order.
        Replays simply reapply the same status. Returns None for unknown orders.
        """
        order = await OrderRepository.get_by_order_number(order_number, session)
        if order is None:
            return None
        payment_status = PaymentStatus.PAID if gateway_payment_status == "paid" else PaymentStatus.PENDING
        order = await OrderRepository.update(order.id, {
            "payment_status": payment_status,
            "transaction_id": session_id,
        }, session)
        await session_commit(session)
        logging.info(f"💳 Order {order_number} payment status -> {payment_status.value}")
        return order
