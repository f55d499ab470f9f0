"""
Cart and wishlist exceptions.
"""

from .base import ShopException


class CartException(ShopException):
    """Base exception for cart-related errors."""
    pass


class EmptyCartException(CartException):
    """Raised when trying to checkout with an empty or missing cart."""

    def __init__(self, user_id: int):
        super().__init__(
            "Cart is empty. Add items to cart before placing order",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class CartNotFoundException(CartException):
    """Raised when a cart looked up by id does not exist."""

    def __init__(self, cart_id: int):
        super().__init__(
            "Cart not found",
            details={'cart_id': cart_id}
        )
        self.cart_id = cart_id


class CartItemNotFoundException(CartException):
    """Raised when the cart has no line for a product."""

    def __init__(self, product_id: int):
        super().__init__(
            "Item not found in cart",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class GuestCartNotFoundException(CartException):
    """Raised when the guest cookie references no active cart."""

    def __init__(self, guest_id: str):
        super().__init__(
            "Guest cart not found",
            details={'guest_id': guest_id}
        )
        self.guest_id = guest_id


class CartAccessDeniedException(CartException):
    """Raised when a caller reads a cart that is neither theirs nor their guest cart."""

    def __init__(self, cart_id: int):
        super().__init__(
            "Access denied",
            details={'cart_id': cart_id}
        )
        self.cart_id = cart_id


class InvalidCartStateException(CartException):
    """Raised when cart is in invalid state for operation."""

    def __init__(self, reason: str):
        super().__init__(reason, details={'reason': reason})
        self.reason = reason


class WishlistItemNotFoundException(CartException):
    """Raised when the wishlist does not hold a product."""

    def __init__(self, product_id: int):
        super().__init__(
            "Product not found in wishlist",
            details={'product_id': product_id}
        )
        self.product_id = product_id
