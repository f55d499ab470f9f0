from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from enums.capability import Capability
from enums.order_status import OrderStatus
from exceptions.base import ValidationException
from models.user import UserDTO
from services.order import OrderService
from utils.pagination import build_pagination
from web.dependencies import get_session, get_current_user, require_capability, PageParams
from web.payloads import CreateOrderPayload, OrderStatusPayload
from web.responses import envelope

order_router = APIRouter(prefix="/api/orders", tags=["orders"])


def parse_order_status(value: str | None) -> OrderStatus | None:
    if value is None:
        return None
    try:
        return OrderStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in OrderStatus)
        raise ValidationException(f"Invalid status. Valid statuses are: {valid}", field="status")


@order_router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(payload: CreateOrderPayload,
                       user: UserDTO = Depends(get_current_user),
                       session: AsyncSession = Depends(get_session)):
    order, checkout_session = await OrderService.create_order(
        user,
        payload.shipping_address.model_dump(by_alias=True),
        payload.payment_method,
        session,
        success_url=payload.success_url,
        cancel_url=payload.cancel_url,
    )
    return envelope(order, "Order created successfully", checkoutSession=checkout_session)


@order_router.get("")
async def get_user_orders(paging: PageParams = Depends(),
                          user: UserDTO = Depends(get_current_user),
                          session: AsyncSession = Depends(get_session)):
    orders, total = await OrderService.get_user_orders(user, paging.page, paging.limit, session)
    return envelope(orders, "Orders retrieved successfully",
                    pagination=build_pagination(paging.page, paging.limit, total))


@order_router.get("/stats")
async def get_order_stats(user: UserDTO = Depends(get_current_user),
                          session: AsyncSession = Depends(get_session)):
    return envelope(await OrderService.get_order_stats(user, session), "Order statistics retrieved successfully")


@order_router.get("/payments/history")
async def get_payment_history(paging: PageParams = Depends(),
                              user: UserDTO = Depends(get_current_user),
                              session: AsyncSession = Depends(get_session)):
    orders, total = await OrderService.get_payment_history(user, paging.page, paging.limit, session)
    return envelope(orders, "Payment history retrieved successfully",
                    pagination=build_pagination(paging.page, paging.limit, total))


@order_router.get("/admin/all")
async def get_all_orders(order_status: str | None = Query(default=None, alias="status"),
                         paging: PageParams = Depends(),
                         user: UserDTO = Depends(require_capability(Capability.ORDER_MANAGE)),
                         session: AsyncSession = Depends(get_session)):
    orders, total = await OrderService.get_all_orders(
        paging.page, paging.limit, session, status=parse_order_status(order_status)
    )
    return envelope(orders, "All orders retrieved successfully",
                    pagination=build_pagination(paging.page, paging.limit, total))


@order_router.put("/admin/{order_id}/status")
async def update_order_status(order_id: int, payload: OrderStatusPayload,
                              user: UserDTO = Depends(require_capability(Capability.ORDER_MANAGE)),
                              session: AsyncSession = Depends(get_session)):
    order = await OrderService.update_order_status(user, order_id, parse_order_status(payload.status), session)
    return envelope(order, "Order status updated successfully")


@order_router.get("/order/{order_number}")
async def get_order_by_number(order_number: str,
                              user: UserDTO = Depends(get_current_user),
                              session: AsyncSession = Depends(get_session)):
    order = await OrderService.get_order_by_number(user, order_number, session)
    return envelope(order, "Order retrieved successfully")


@order_router.delete("/{order_id}/cancel")
async def cancel_order(order_id: int,
                       user: UserDTO = Depends(get_current_user),
                       session: AsyncSession = Depends(get_session)):
    order = await OrderService.cancel_order(user, order_id, session)
    return envelope(order, "Order cancelled successfully")


# Registered last so the fixed paths above take precedence
@order_router.get("/{order_id}")
async def get_order(order_id: int,
                    user: UserDTO = Depends(get_current_user),
                    session: AsyncSession = Depends(get_session)):
    order = await OrderService.get_order(user, order_id, session)
    return envelope(order, "Order retrieved successfully")
