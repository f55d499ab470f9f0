"""
Payment gateway exceptions.
"""

from .base import ShopException


class PaymentException(ShopException):
    """Base exception for payment-related errors."""
    pass


class CheckoutSessionException(PaymentException):
    """Raised when the hosted checkout session could not be created."""

    def __init__(self, order_number: str, reason: str):
        super().__init__(
            "Failed to create checkout session. Please try again.",
            details={'order_number': order_number, 'error': reason}
        )
        self.order_number = order_number
        self.reason = reason


class RefundException(PaymentException):
    """Raised when a refund could not be issued for a checkout session."""

    def __init__(self, session_id: str, reason: str):
        super().__init__(
            f"Failed to create refund: {reason}",
            details={'session_id': session_id}
        )
        self.session_id = session_id
        self.reason = reason


class PaymentGatewayException(PaymentException):
    """Raised when a call to the payment gateway fails."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Payment gateway error during {operation}: {reason}",
            details={'operation': operation}
        )
        self.operation = operation
        self.reason = reason


class WebhookSignatureException(PaymentException):
    """Raised when an inbound webhook cannot be authenticated."""

    def __init__(self, reason: str):
        super().__init__(
            f"Webhook signature verification failed: {reason}",
            details={'reason': reason}
        )
        self.reason = reason
