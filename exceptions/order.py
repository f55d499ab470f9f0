"""
Order-related exceptions.
"""

from .base import ShopException


class OrderException(ShopException):
    """Base exception for order-related errors."""
    pass


class OrderNotFoundException(OrderException):
    """Raised when order is not found by id or order number."""

    def __init__(self, order_ref: int | str):
        super().__init__(
            "Order not found",
            details={'order_ref': order_ref}
        )
        self.order_ref = order_ref


class OrderOwnershipException(OrderException):
    """Raised when a user accesses an order that belongs to someone else."""

    def __init__(self, order_id: int, user_id: int):
        super().__init__(
            "Access denied",
            details={'order_id': order_id, 'user_id': user_id}
        )
        self.order_id = order_id
        self.user_id = user_id


class ProductUnavailableException(OrderException):
    """Raised at checkout when a cart line references a product that no longer exists."""

    def __init__(self, product_id: int):
        super().__init__(
            f"Product {product_id} not found",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class InsufficientStockException(OrderException):
    """Raised when requested quantity exceeds catalog stock."""

    def __init__(self, product_id: int, title: str, available: int, requested: int, message: str | None = None):
        super().__init__(
            message or f"Insufficient stock for product {title}. Available: {available}",
            details={
                'product_id': product_id,
                'available': available,
                'requested': requested
            }
        )
        self.product_id = product_id
        self.title = title
        self.available = available
        self.requested = requested


class InvalidOrderStateException(OrderException):
    """Raised when the fulfillment status does not allow the operation."""

    def __init__(self, order_id: int, current_state: str, message: str | None = None):
        super().__init__(
            message or f"Order cannot be cancelled. Current status: {current_state}",
            details={'order_id': order_id, 'current_state': current_state}
        )
        self.order_id = order_id
        self.current_state = current_state
