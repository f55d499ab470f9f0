"""
User and account exceptions.
"""

from .base import ShopException


class UserException(ShopException):
    """Base exception for user-related errors."""
    pass


class UserNotFoundException(UserException):
    """Raised when user is not found by id or email."""

    def __init__(self, identifier: int | str):
        super().__init__(
            "User not found",
            details={'identifier': identifier}
        )
        self.identifier = identifier


class UserAlreadyExistsException(UserException):
    """Raised when username or email is already taken."""

    def __init__(self, field: str):
        super().__init__(
            f"User with this {field} already exists",
            details={'field': field}
        )
        self.field = field


class InvalidOtpException(UserException):
    def __init__(self, email: str, message: str = "Invalid OTP"):
        super().__init__(message, details={'email': email})
        self.email = email


class OtpExpiredException(UserException):
    def __init__(self, email: str):
        super().__init__("OTP expired. Please request a new one.", details={'email': email})
        self.email = email


class AccountNotActiveException(UserException):
    """Raised at login when a customer has not completed the address step."""

    def __init__(self, user_id: int):
        super().__init__(
            "Account not active. Please complete your registration by adding an address",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class AccountAlreadyActiveException(UserException):
    def __init__(self, user_id: int):
        super().__init__(
            "Account is already active",
            details={'user_id': user_id}
        )
        self.user_id = user_id


class SuperAdminProtectedException(UserException):
    """Raised on any attempt to modify a super admin account."""

    def __init__(self, user_id: int, operation: str):
        super().__init__(
            f"Cannot {operation} super admin",
            details={'user_id': user_id, 'operation': operation}
        )
        self.user_id = user_id
        self.operation = operation


class NotAnAdminException(UserException):
    def __init__(self, user_id: int):
        super().__init__(
            "User is not an admin",
            details={'user_id': user_id}
        )
        self.user_id = user_id
