"""
Error Handler Utility for the HTTP layer

Provides centralized error handling with:
- Automatic exception to HTTP status mapping
- Consistent {success: false, message} envelope
- Logging for debugging

Registered on the FastAPI app in server.py, so routers and services simply
raise ShopException subclasses.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from exceptions import (
    ShopException,
    ValidationException,
    AuthenticationRequiredException,
    InvalidTokenException,
    TokenExpiredException,
    InvalidCredentialsException,
    PermissionDeniedException,
    EmptyCartException,
    CartNotFoundException,
    CartItemNotFoundException,
    GuestCartNotFoundException,
    CartAccessDeniedException,
    InvalidCartStateException,
    WishlistItemNotFoundException,
    OrderNotFoundException,
    OrderOwnershipException,
    ProductUnavailableException,
    InsufficientStockException,
    InvalidOrderStateException,
    CheckoutSessionException,
    RefundException,
    PaymentGatewayException,
    WebhookSignatureException,
    ProductNotFoundException,
    DuplicateProductException,
    CatalogImportException,
    TicketNotFoundException,
    TicketOwnershipException,
    UserNotFoundException,
    UserAlreadyExistsException,
    InvalidOtpException,
    OtpExpiredException,
    AccountNotActiveException,
    AccountAlreadyActiveException,
    SuperAdminProtectedException,
    NotAnAdminException,
)

logger = logging.getLogger(__name__)

# Map exception types to HTTP status codes
ERROR_STATUS_MAPPING: dict[type[ShopException], int] = {
    # Validation
    ValidationException: status.HTTP_400_BAD_REQUEST,

    # Auth
    AuthenticationRequiredException: status.HTTP_401_UNAUTHORIZED,
    InvalidTokenException: status.HTTP_401_UNAUTHORIZED,
    TokenExpiredException: status.HTTP_401_UNAUTHORIZED,
    InvalidCredentialsException: status.HTTP_401_UNAUTHORIZED,
    PermissionDeniedException: status.HTTP_403_FORBIDDEN,

    # Cart
    EmptyCartException: status.HTTP_400_BAD_REQUEST,
    CartNotFoundException: status.HTTP_404_NOT_FOUND,
    CartItemNotFoundException: status.HTTP_404_NOT_FOUND,
    GuestCartNotFoundException: status.HTTP_404_NOT_FOUND,
    CartAccessDeniedException: status.HTTP_403_FORBIDDEN,
    InvalidCartStateException: status.HTTP_400_BAD_REQUEST,
    WishlistItemNotFoundException: status.HTTP_404_NOT_FOUND,

    # Order
    OrderNotFoundException: status.HTTP_404_NOT_FOUND,
    OrderOwnershipException: status.HTTP_403_FORBIDDEN,
    ProductUnavailableException: status.HTTP_400_BAD_REQUEST,
    InsufficientStockException: status.HTTP_400_BAD_REQUEST,
    InvalidOrderStateException: status.HTTP_400_BAD_REQUEST,

    # Payment
    CheckoutSessionException: status.HTTP_500_INTERNAL_SERVER_ERROR,
    RefundException: status.HTTP_500_INTERNAL_SERVER_ERROR,
    PaymentGatewayException: status.HTTP_500_INTERNAL_SERVER_ERROR,
    WebhookSignatureException: status.HTTP_400_BAD_REQUEST,

    # Product
    ProductNotFoundException: status.HTTP_404_NOT_FOUND,
    DuplicateProductException: status.HTTP_409_CONFLICT,
    CatalogImportException: status.HTTP_500_INTERNAL_SERVER_ERROR,

    # Ticket
    TicketNotFoundException: status.HTTP_404_NOT_FOUND,
    TicketOwnershipException: status.HTTP_403_FORBIDDEN,

    # User
    UserNotFoundException: status.HTTP_404_NOT_FOUND,
    UserAlreadyExistsException: status.HTTP_409_CONFLICT,
    InvalidOtpException: status.HTTP_400_BAD_REQUEST,
    OtpExpiredException: status.HTTP_400_BAD_REQUEST,
    AccountNotActiveException: status.HTTP_403_FORBIDDEN,
    AccountAlreadyActiveException: status.HTTP_400_BAD_REQUEST,
    SuperAdminProtectedException: status.HTTP_403_FORBIDDEN,
    NotAnAdminException: status.HTTP_400_BAD_REQUEST,
}


def get_status_code(exception: ShopException) -> int:
    """
    Resolve the HTTP status for a domain exception.

    Subclasses without their own entry inherit the closest mapped parent,
    anything unmapped is a server error.
    """
    for cls in type(exception).__mro__:
        if cls in ERROR_STATUS_MAPPING:
            return ERROR_STATUS_MAPPING[cls]
    logger.error(f"Unmapped exception type: {type(exception).__name__}")
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def build_error_body(exception: ShopException) -> dict:
    body = {"success": False, "message": exception.message}
    if isinstance(exception, AccountNotActiveException):
        body["requiresAddress"] = True
    if isinstance(exception, CheckoutSessionException):
        body["error"] = exception.reason
    return body


def handle_service_error(exception: ShopException) -> JSONResponse:
    status_code = get_status_code(exception)
    if status_code >= 500:
        logger.error(f"Service error handled: {type(exception).__name__} - {exception!r}")
    else:
        logger.warning(f"Service error handled: {type(exception).__name__} - {str(exception)}")
    return JSONResponse(status_code=status_code, content=build_error_body(exception))


def handle_unexpected_error(exception: Exception) -> JSONResponse:
    """Any non-ShopException, logged with traceback and hidden from the client."""
    logger.error(f"Unexpected error: {type(exception).__name__} - {str(exception)}", exc_info=exception)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error"},
    )


def describe_validation_error(exception: RequestValidationError) -> str:
    messages = []
    for error in exception.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg", "Invalid request"))
    return "; ".join(messages) or "Invalid request"


async def shop_exception_handler(request: Request, exception: ShopException) -> JSONResponse:
    return handle_service_error(exception)


async def validation_exception_handler(request: Request, exception: RequestValidationError) -> JSONResponse:
    message = describe_validation_error(exception)
    logger.warning(f"Request validation failed on {request.url.path}: {message}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"success": False, "message": message})


async def unexpected_exception_handler(request: Request, exception: Exception) -> JSONResponse:
    return handle_unexpected_error(exception)


async def http_exception_handler(request: Request, exception: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exception.status_code,
        content={"success": False, "message": str(exception.detail)},
        headers=getattr(exception, "headers", None),
    )
