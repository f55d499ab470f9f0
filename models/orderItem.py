from sqlalchemy import Column, Integer, Float, String, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from models.base import Base, CamelDTO


class OrderItem(Base):
    __tablename__ = 'order_items'

    __table_args__ = (
        CheckConstraint('price >= 0', name='ck_order_item_price_non_negative'),
        CheckConstraint('quantity > 0', name='ck_order_item_quantity_positive'),
    )

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True)
    # Frozen at checkout, the catalog may change afterwards
    product_id = Column(Integer, nullable=False)
    title = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False)
    thumbnail = Column(String, nullable=False, default="")

    order = relationship("Order", back_populates="items")


class OrderItemDTO(CamelDTO):
    product_id: int | None = None
    title: str | None = None
    price: float | None = None
    quantity: int | None = None
    thumbnail: str | None = None
