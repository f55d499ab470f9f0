from sqlalchemy import select, func, case, or_
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.order_status import OrderStatus
from enums.payment_method import PaymentMethod
from enums.payment_status import PaymentStatus
from models.order import Order, OrderDTO
from models.orderItem import OrderItem


class OrderRepository:
    @staticmethod
    async def create(order_dto: OrderDTO, session: AsyncSession) -> OrderDTO:
        order = Order(
            order_number=order_dto.order_number,
            user_id=order_dto.user_id,
            total_amount=order_dto.total_amount,
            total_items=order_dto.total_items,
            shipping_address=order_dto.shipping_address,
            payment_method=order_dto.payment_method,
            payment_status=PaymentStatus.PENDING,
            order_status=OrderStatus.PENDING,
            is_active=True,
            items=[OrderItem(**item.model_dump()) for item in order_dto.items],
        )
        session.add(order)
        await session_flush(session)
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def _get(order_id: int, session: AsyncSession) -> Order | None:
        stmt = select(Order).where(Order.id == order_id, Order.is_active == True)
        order = await session_execute(stmt, session)
        return order.scalar()

    @staticmethod
    async def get_by_id(order_id: int, session: AsyncSession) -> OrderDTO | None:
        order = await OrderRepository._get(order_id, session)
        if order is not None:
            return OrderDTO.model_validate(order, from_attributes=True)
        return None

    @staticmethod
    async def get_by_order_number(order_number: str, session: AsyncSession) -> OrderDTO | None:
        stmt = select(Order).where(Order.order_number == order_number, Order.is_active == True)
        order = await session_execute(stmt, session)
        order = order.scalar()
        if order is not None:
            return OrderDTO.model_validate(order, from_attributes=True)
        return None

    @staticmethod
    async def update(order_id: int, values: dict, session: AsyncSession) -> OrderDTO | None:
        order = await OrderRepository._get(order_id, session)
        if order is None:
            return None
        for key, value in values.items():
            setattr(order, key, value)
        await session_flush(session)
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def deactivate(order_id: int, session: AsyncSession) -> None:
        await OrderRepository.update(order_id, {'is_active': False}, session)

    @staticmethod
    async def get_by_user(user_id: int, page: int, limit: int, session: AsyncSession) -> tuple[list[OrderDTO], int]:
        return await OrderRepository._paginate(
            [Order.user_id == user_id, Order.is_active == True], page, limit, session
        )

    @staticmethod
    async def get_payment_history(user_id: int, page: int, limit: int,
                                  session: AsyncSession) -> tuple[list[OrderDTO], int]:
        conditions = [
            Order.user_id == user_id,
            Order.is_active == True,
            Order.payment_method == PaymentMethod.ONLINE,
            or_(Order.session_id.is_not(None), Order.transaction_id.is_not(None)),
        ]
        return await OrderRepository._paginate(conditions, page, limit, session)

    @staticmethod
    async def get_all(page: int, limit: int, session: AsyncSession,
                      status: OrderStatus | None = None) -> tuple[list[OrderDTO], int]:
        conditions = [Order.is_active == True]
        if status is not None:
            conditions.append(Order.order_status == status)
        return await OrderRepository._paginate(conditions, page, limit, session)

    @staticmethod
    async def _paginate(conditions: list, page: int, limit: int, session: AsyncSession) -> tuple[list[OrderDTO], int]:
        count_stmt = select(func.count(Order.id)).where(*conditions)
        total = await session_execute(count_stmt, session)
        total = total.scalar_one()

        stmt = (
            select(Order)
            .where(*conditions)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        orders = await session_execute(stmt, session)
        return [OrderDTO.model_validate(o, from_attributes=True) for o in orders.scalars().all()], total

    @staticmethod
    async def get_stats(user_id: int, session: AsyncSession) -> dict:
        def count_status(order_status: OrderStatus):
            return func.coalesce(func.sum(case((Order.order_status == order_status, 1), else_=0)), 0)

        stmt = select(
            func.count(Order.id),
            count_status(OrderStatus.PENDING),
            count_status(OrderStatus.CONFIRMED),
            count_status(OrderStatus.SHIPPED),
            count_status(OrderStatus.DELIVERED),
            count_status(OrderStatus.CANCELLED),
            func.coalesce(func.sum(Order.total_amount), 0.0),
        ).where(Order.user_id == user_id, Order.is_active == True)
        result = await session_execute(stmt, session)
        total, pending, confirmed, shipped, delivered, cancelled, spent = result.one()
        return {
            "totalOrders": total,
            "pendingOrders": pending,
            "confirmedOrders": confirmed,
            "shippedOrders": shipped,
            "deliveredOrders": delivered,
            "cancelledOrders": cancelled,
            "totalSpent": round(float(spent), 2),
        }
