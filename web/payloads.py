"""
Request bodies accepted by the routers.

Fields are camelCase on the wire. Presence checks that need the exact error
messages of the public API live in the services, so most fields here are optional.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from enums.payment_method import PaymentMethod
from models.product import ProductInputDTO


class CamelPayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# Products

class ProductUpdateEntry(CamelPayload):
    product_id: int
    update_data: ProductInputDTO


class BulkUpdatePayload(CamelPayload):
    updates: list[ProductUpdateEntry] = []


class CatalogImportPayload(CamelPayload):
    limit: int | None = Field(default=None, ge=1, le=200)


# Cart and wishlist

class AddToCartPayload(CamelPayload):
    product_id: int
    quantity: int = Field(default=1, ge=1)


class UpdateCartItemPayload(CamelPayload):
    quantity: int


class WishlistItemPayload(CamelPayload):
    product_id: int


# Orders

class ShippingAddressPayload(CamelPayload):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)
    country: str = Field(min_length=1)
    is_default: bool = False


class CreateOrderPayload(CamelPayload):
    shipping_address: ShippingAddressPayload
    payment_method: PaymentMethod
    success_url: str | None = None
    cancel_url: str | None = None


class OrderStatusPayload(CamelPayload):
    status: str


# Tickets

class CreateTicketPayload(CamelPayload):
    subject: str | None = None
    category: str | None = None
    message: str | None = None
    priority: str | None = None
    order_id: str | None = None


class TicketMessagePayload(CamelPayload):
    message: str | None = None
    attachments: list[str] = []


class TicketStatusPayload(CamelPayload):
    status: str | None = None


class TicketPriorityPayload(CamelPayload):
    priority: str | None = None


# Users

class RegisterPayload(CamelPayload):
    username: str | None = None
    email: str | None = None
    password: str | None = None
    confirm_password: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None
    country_code: str | None = None


class LoginPayload(CamelPayload):
    email: str | None = None
    password: str | None = None


class SendOtpPayload(CamelPayload):
    email: str | None = None
    purpose: str | None = None
    update_data: dict | None = None


class VerifyOtpPayload(CamelPayload):
    email: str | None = None
    otp: str | None = None


class AddressPayload(CamelPayload):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    is_default: bool = False
    address_type: str | None = None


class CompleteRegistrationPayload(CamelPayload):
    email: str | None = None
    addresses: list[AddressPayload] | None = None


class ResetPasswordPayload(CamelPayload):
    email: str | None = None
    otp: str | None = None
    new_password: str | None = None


class UpdateProfilePayload(CamelPayload):
    otp: str | None = None


class CreateAdminPayload(CamelPayload):
    username: str | None = None
    email: str | None = None
    password: str | None = None
    first_name: str | None = None
    last_name: str | None = None
