from datetime import datetime

from sqlalchemy import Column, Integer, ForeignKey, CheckConstraint, Float, String, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship

from models.base import Base, CamelDTO, utc_now


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete='CASCADE'), nullable=False)
    # Plain reference so lines survive product deletion
    product_id = Column(Integer, nullable=False)
    # Snapshot taken when the product was added, not live-linked to the catalog
    title = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    thumbnail = Column(String, nullable=False, default="")
    quantity = Column(Integer, nullable=False)
    added_at = Column(DateTime, nullable=False, default=utc_now)

    cart = relationship('Cart', back_populates='items')

    __table_args__ = (
        CheckConstraint('quantity > 0', name='check_quantity_positive'),
        UniqueConstraint('cart_id', 'product_id', name='uq_cart_items_cart_product'),
    )


class CartItemDTO(CamelDTO):
    id: int | None = None
    cart_id: int | None = None
    product_id: int | None = None
    title: str | None = None
    price: float | None = None
    thumbnail: str | None = None
    quantity: int | None = None
    added_at: datetime | None = None
