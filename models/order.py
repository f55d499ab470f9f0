from datetime import datetime

from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, String, Boolean, JSON, CheckConstraint, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship

from enums.order_status import OrderStatus
from enums.payment_method import PaymentMethod
from enums.payment_status import PaymentStatus
from models.base import Base, CamelDTO, utc_now
from models.orderItem import OrderItemDTO


class Order(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True)
    # Human readable, generated once at creation and never changed
    order_number = Column(String, nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    total_amount = Column(Float, nullable=False)
    total_items = Column(Integer, nullable=False)

    # {street, city, state, postalCode, country, isDefault}
    shipping_address = Column(JSON, nullable=False)

    # Payment and fulfillment are independent axes
    payment_method = Column(SQLEnum(PaymentMethod), nullable=False)
    payment_status = Column(SQLEnum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING)
    order_status = Column(SQLEnum(OrderStatus), nullable=False, default=OrderStatus.PENDING)

    # Gateway identifiers
    session_id = Column(String, nullable=True)
    transaction_id = Column(String, nullable=True)

    # Soft delete, set when the gateway session could not be created
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    items = relationship(
        'OrderItem',
        back_populates='order',
        cascade='all, delete-orphan',
        lazy='selectin',
        order_by='OrderItem.id',
    )

    __table_args__ = (
        CheckConstraint('total_amount >= 0', name='check_order_total_amount_non_negative'),
        Index('ix_orders_user_created', 'user_id', 'created_at'),
    )


class OrderDTO(CamelDTO):
    id: int | None = None
    order_number: str | None = None
    user_id: int | None = None
    items: list[OrderItemDTO] = []
    total_amount: float | None = None
    total_items: int | None = None
    shipping_address: dict | None = None
    payment_method: PaymentMethod | None = None
    payment_status: PaymentStatus | None = None
    order_status: OrderStatus | None = None
    session_id: str | None = None
    transaction_id: str | None = None
    is_active: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
