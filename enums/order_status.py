from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "PENDING"        # Created, awaiting confirmation
    CONFIRMED = "CONFIRMED"    # Accepted by the shop
    SHIPPED = "SHIPPED"        # Handed to carrier (no cancellation from here on)
    DELIVERED = "DELIVERED"    # Final
    CANCELLED = "CANCELLED"    # Final
