from datetime import datetime

from sqlalchemy import Column, Integer, ForeignKey, Boolean, DateTime
from sqlalchemy.orm import relationship

from models.base import Base, CamelDTO, utc_now
from models.wishlistItem import WishlistItemDTO


class Wishlist(Base):
    __tablename__ = "wishlists"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    items = relationship(
        'WishlistItem',
        back_populates='wishlist',
        cascade='all, delete-orphan',
        lazy='selectin',
        order_by='WishlistItem.id',
    )


class WishlistDTO(CamelDTO):
    id: int | None = None
    user_id: int | None = None
    items: list[WishlistItemDTO] = []
    is_active: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
