from datetime import datetime

from sqlalchemy import Column, Integer, ForeignKey, Float, String, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship

from models.base import Base, CamelDTO, utc_now


class WishlistItem(Base):
    __tablename__ = "wishlist_items"

    id = Column(Integer, primary_key=True)
    wishlist_id = Column(Integer, ForeignKey("wishlists.id", ondelete='CASCADE'), nullable=False)
    # Plain reference so lines survive product deletion
    product_id = Column(Integer, nullable=False)
    title = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    thumbnail = Column(String, nullable=False, default="")
    added_at = Column(DateTime, nullable=False, default=utc_now)

    wishlist = relationship('Wishlist', back_populates='items')

    __table_args__ = (
        UniqueConstraint('wishlist_id', 'product_id', name='uq_wishlist_items_wishlist_product'),
    )


class WishlistItemDTO(CamelDTO):
    product_id: int | None = None
    title: str | None = None
    price: float | None = None
    thumbnail: str | None = None
    added_at: datetime | None = None
