"""
Authentication and authorization exceptions.
"""

from .base import ShopException


class AuthException(ShopException):
    """Base exception for authentication and authorization errors."""
    pass


class AuthenticationRequiredException(AuthException):
    def __init__(self):
        super().__init__("Access token required")


class InvalidTokenException(AuthException):
    def __init__(self):
        super().__init__("Invalid token")


class TokenExpiredException(AuthException):
    def __init__(self):
        super().__init__("Token expired")


class InvalidCredentialsException(AuthException):
    def __init__(self):
        super().__init__("Invalid email or password")


class PermissionDeniedException(AuthException):
    """Raised when the caller's role lacks a capability."""

    def __init__(self, role: str, capability: str):
        super().__init__(
            "Access denied. Insufficient permissions",
            details={'role': role, 'capability': capability}
        )
        self.role = role
        self.capability = capability
