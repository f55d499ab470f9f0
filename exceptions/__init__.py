"""
Custom exceptions for the shop backend.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
ShopException (base)
├── ValidationException
├── AuthException
│   ├── AuthenticationRequiredException
│   ├── InvalidTokenException
│   ├── TokenExpiredException
│   ├── InvalidCredentialsException
│   └── PermissionDeniedException
├── CartException
│   ├── EmptyCartException
│   ├── CartNotFoundException
│   ├── CartItemNotFoundException
│   ├── GuestCartNotFoundException
│   ├── CartAccessDeniedException
│   ├── InvalidCartStateException
│   └── WishlistItemNotFoundException
├── OrderException
│   ├── OrderNotFoundException
│   ├── OrderOwnershipException
│   ├── ProductUnavailableException
│   ├── InsufficientStockException
│   └── InvalidOrderStateException
├── PaymentException
│   ├── CheckoutSessionException
│   ├── RefundException
│   ├── PaymentGatewayException
│   └── WebhookSignatureException
├── ProductException
│   ├── ProductNotFoundException
│   ├── DuplicateProductException
│   └── CatalogImportException
├── TicketException
│   ├── TicketNotFoundException
│   └── TicketOwnershipException
└── UserException
    ├── UserNotFoundException
    ├── UserAlreadyExistsException
    ├── InvalidOtpException
    ├── OtpExpiredException
    ├── AccountNotActiveException
    ├── AccountAlreadyActiveException
    ├── SuperAdminProtectedException
    └── NotAnAdminException

Usage:
------
Services raise specific exceptions:
    raise OrderNotFoundException(order_id)

The FastAPI exception handler turns them into the JSON envelope:
    {"success": false, "message": "Order not found"}  # 404
"""

from .base import ShopException, ValidationException
from .auth import (
    AuthException,
    AuthenticationRequiredException,
    InvalidTokenException,
    TokenExpiredException,
    InvalidCredentialsException,
    PermissionDeniedException,
)
from .cart import (
    CartException,
    EmptyCartException,
    CartNotFoundException,
    CartItemNotFoundException,
    GuestCartNotFoundException,
    CartAccessDeniedException,
    InvalidCartStateException,
    WishlistItemNotFoundException,
)
from .order import (
    OrderException,
    OrderNotFoundException,
    OrderOwnershipException,
    ProductUnavailableException,
    InsufficientStockException,
    InvalidOrderStateException,
)
from .payment import (
    PaymentException,
    CheckoutSessionException,
    RefundException,
    PaymentGatewayException,
    WebhookSignatureException,
)
from .product import ProductException, ProductNotFoundException, DuplicateProductException, CatalogImportException
from .ticket import TicketException, TicketNotFoundException, TicketOwnershipException
from .user import (
    UserException,
    UserNotFoundException,
    UserAlreadyExistsException,
    InvalidOtpException,
    OtpExpiredException,
    AccountNotActiveException,
    AccountAlreadyActiveException,
    SuperAdminProtectedException,
    NotAnAdminException,
)

__all__ = [
    # Base
    'ShopException',
    'ValidationException',

    # Auth
    'AuthException',
    'AuthenticationRequiredException',
    'InvalidTokenException',
    'TokenExpiredException',
    'InvalidCredentialsException',
    'PermissionDeniedException',

    # Cart
    'CartException',
    'EmptyCartException',
    'CartNotFoundException',
    'CartItemNotFoundException',
    'GuestCartNotFoundException',
    'CartAccessDeniedException',
    'InvalidCartStateException',
    'WishlistItemNotFoundException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'OrderOwnershipException',
    'ProductUnavailableException',
    'InsufficientStockException',
    'InvalidOrderStateException',

    # Payment
    'PaymentException',
    'CheckoutSessionException',
    'RefundException',
    'PaymentGatewayException',
    'WebhookSignatureException',

    # Product
    'ProductException',
    'ProductNotFoundException',
    'DuplicateProductException',
    'CatalogImportException',

    # Ticket
    'TicketException',
    'TicketNotFoundException',
    'TicketOwnershipException',

    # User
    'UserException',
    'UserNotFoundException',
    'UserAlreadyExistsException',
    'InvalidOtpException',
    'OtpExpiredException',
    'AccountNotActiveException',
    'AccountAlreadyActiveException',
    'SuperAdminProtectedException',
    'NotAnAdminException',
]
