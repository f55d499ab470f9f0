"""
Models Package

This file ensures all SQLAlchemy models are imported and registered,
which is required for relationships to work correctly.
"""

from models.base import Base
from models.address import Address
from models.user import User
from models.product import Product
from models.cartItem import CartItem
from models.cart import Cart
from models.wishlistItem import WishlistItem
from models.wishlist import Wishlist
from models.orderItem import OrderItem
from models.order import Order
from models.ticketMessage import TicketMessage
from models.ticket import Ticket

__all__ = [
    'Base',
    'Address',
    'User',
    'Product',
    'Cart',
    'CartItem',
    'Wishlist',
    'WishlistItem',
    'Order',
    'OrderItem',
    'Ticket',
    'TicketMessage',
]
