# cart is a mutable list of line items owned either by a registered user or by an
# anonymous visitor holding the cart's guest_id in a cookie. Totals are a cache that
# is recomputed from the line items after every mutation.
#
# note that items are NOT reserved, so stock is checked again at quantity update
# and at checkout
from datetime import datetime

from sqlalchemy import Column, Integer, ForeignKey, Float, Boolean, DateTime, String, Index, text
from sqlalchemy.orm import relationship

from models.base import Base, CamelDTO, utc_now
from models.cartItem import CartItemDTO


class Cart(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True)
    # Opaque token referenced from the guest cookie
    guest_id = Column(String(32), nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    total_items = Column(Integer, nullable=False, default=0)
    total_amount = Column(Float, nullable=False, default=0.0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    items = relationship(
        'CartItem',
        back_populates='cart',
        cascade='all, delete-orphan',
        lazy='selectin',
        order_by='CartItem.id',
    )

    __table_args__ = (
        # At most one active cart per registered user
        Index(
            'uq_carts_active_user', 'user_id',
            unique=True,
            sqlite_where=text('is_active = 1 AND user_id IS NOT NULL'),
            postgresql_where=text('is_active AND user_id IS NOT NULL'),
        ),
    )


class CartDTO(CamelDTO):
    id: int | None = None
    guest_id: str | None = None
    user_id: int | None = None
    items: list[CartItemDTO] = []
    total_items: int | None = None
    total_amount: float | None = None
    is_active: bool | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
