"""
Unit Tests: PaymentService

The stripe SDK is patched at its call sites, nothing leaves the process.
"""

import hashlib
import hmac
import json
import time
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import stripe

import config
from enums.payment_method import PaymentMethod
from exceptions.payment import PaymentGatewayException, RefundException, WebhookSignatureException
from models.order import OrderDTO
from models.orderItem import OrderItemDTO
from services.payment import PaymentService


def sign_webhook(payload: bytes, secret: str) -> str:
    timestamp = int(time.time())
    signature = hmac.new(secret.encode(), f"{timestamp}.".encode() + payload, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


@pytest.fixture
def stripe_key():
    with patch.object(config, "STRIPE_SECRET_KEY", "sk_test_dummy"):
        yield


@pytest.fixture
def order():
    return OrderDTO(
        id=7,
        order_number="ORD1700000000000123",
        user_id=3,
        items=[
            OrderItemDTO(product_id=1, title="Lipstick", price=19.99, quantity=2, thumbnail="https://cdn/l.png"),
            OrderItemDTO(product_id=2, title="Mascara", price=5.0, quantity=1, thumbnail=""),
        ],
        total_amount=44.98,
        total_items=3,
        payment_method=PaymentMethod.ONLINE,
    )


class TestLineItems:

    def test_amounts_in_smallest_unit(self, order):
        line_items = PaymentService.build_line_items(order)

        assert [li["price_data"]["unit_amount"] for li in line_items] == [1999, 500]
        assert [li["quantity"] for li in line_items] == [2, 1]
        assert line_items[0]["price_data"]["currency"] == config.STRIPE_CURRENCY
        assert line_items[0]["price_data"]["product_data"]["images"] == ["https://cdn/l.png"]
        assert line_items[1]["price_data"]["product_data"]["images"] == []


class TestCheckoutSession:

    @pytest.mark.asyncio
    async def test_unconfigured_gateway(self, order):
        with patch.object(config, "STRIPE_SECRET_KEY", ""):
            with pytest.raises(PaymentGatewayException) as exc_info:
                await PaymentService.create_checkout_session(order, "https://s", "https://c")
        assert exc_info.value.reason == "STRIPE_SECRET_KEY is not configured"

    @pytest.mark.asyncio
    async def test_create(self, order, stripe_key):
        create = MagicMock(return_value=SimpleNamespace(id="cs_test_1", url="https://checkout.stripe.com/cs_test_1"))

        with patch("stripe.checkout.Session.create", create):
            result = await PaymentService.create_checkout_session(order, "https://s", "https://c")

        assert result == {"id": "cs_test_1", "url": "https://checkout.stripe.com/cs_test_1"}
        kwargs = create.call_args.kwargs
        assert kwargs["api_key"] == "sk_test_dummy"
        assert kwargs["mode"] == "payment"
        assert kwargs["success_url"] == "https://s"
        assert kwargs["cancel_url"] == "https://c"
        assert kwargs["metadata"] == {"orderId": "7", "orderNumber": "ORD1700000000000123", "userId": "3"}
        assert kwargs["shipping_address_collection"] == {"allowed_countries": config.STRIPE_ALLOWED_COUNTRIES}

    @pytest.mark.asyncio
    async def test_sdk_error_wrapped(self, order, stripe_key):
        create = MagicMock(side_effect=stripe.StripeError("Invalid API Key provided"))

        with patch("stripe.checkout.Session.create", create):
            with pytest.raises(PaymentGatewayException) as exc_info:
                await PaymentService.create_checkout_session(order, "https://s", "https://c")
        assert "Invalid API Key provided" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_retrieve(self, stripe_key):
        retrieve = MagicMock(return_value=SimpleNamespace(
            id="cs_test_1", payment_status="paid", payment_intent="pi_1", metadata={"orderNumber": "ORD1"},
        ))

        with patch("stripe.checkout.Session.retrieve", retrieve):
            result = await PaymentService.retrieve_checkout_session("cs_test_1")

        retrieve.assert_called_once_with("cs_test_1", api_key="sk_test_dummy")
        assert result == {"id": "cs_test_1", "payment_status": "paid", "payment_intent": "pi_1",
                          "metadata": {"orderNumber": "ORD1"}}


class TestRefund:

    @pytest.mark.asyncio
    async def test_refund_payment_intent(self, stripe_key):
        retrieve = MagicMock(return_value=SimpleNamespace(
            id="cs_test_1", payment_status="paid", payment_intent="pi_1", metadata={},
        ))
        refund = MagicMock(return_value=SimpleNamespace(id="re_1"))

        with patch("stripe.checkout.Session.retrieve", retrieve), patch("stripe.Refund.create", refund):
            refund_id = await PaymentService.create_refund("cs_test_1")

        assert refund_id == "re_1"
        refund.assert_called_once_with(payment_intent="pi_1", api_key="sk_test_dummy")

    @pytest.mark.asyncio
    async def test_expanded_payment_intent(self, stripe_key):
        retrieve = MagicMock(return_value=SimpleNamespace(
            id="cs_test_1", payment_status="paid", payment_intent=SimpleNamespace(id="pi_2"), metadata={},
        ))
        refund = MagicMock(return_value=SimpleNamespace(id="re_2"))

        with patch("stripe.checkout.Session.retrieve", retrieve), patch("stripe.Refund.create", refund):
            await PaymentService.create_refund("cs_test_1")

        assert refund.call_args.kwargs["payment_intent"] == "pi_2"

    @pytest.mark.asyncio
    async def test_no_payment_intent(self, stripe_key):
        retrieve = MagicMock(return_value=SimpleNamespace(
            id="cs_test_1", payment_status="unpaid", payment_intent=None, metadata=None,
        ))

        with patch("stripe.checkout.Session.retrieve", retrieve):
            with pytest.raises(RefundException) as exc_info:
                await PaymentService.create_refund("cs_test_1")
        assert exc_info.value.message == "Failed to create refund: No payment intent found for this session"

    @pytest.mark.asyncio
    async def test_gateway_refusal(self, stripe_key):
        retrieve = MagicMock(return_value=SimpleNamespace(
            id="cs_test_1", payment_status="paid", payment_intent="pi_1", metadata={},
        ))
        refund = MagicMock(side_effect=stripe.StripeError("Charge already refunded"))

        with patch("stripe.checkout.Session.retrieve", retrieve), patch("stripe.Refund.create", refund):
            with pytest.raises(RefundException):
                await PaymentService.create_refund("cs_test_1")


class TestWebhookSignature:

    def test_valid(self):
        payload = json.dumps({"id": "evt_1", "type": "checkout.session.completed"}).encode()

        with patch.object(config, "STRIPE_WEBHOOK_SECRET", "whsec_unit"):
            event = PaymentService.verify_webhook_signature(payload, sign_webhook(payload, "whsec_unit"))

        assert event["type"] == "checkout.session.completed"

    def test_missing_header(self):
        with pytest.raises(WebhookSignatureException) as exc_info:
            PaymentService.verify_webhook_signature(b"{}", None)
        assert exc_info.value.reason == "Missing Stripe-Signature header"

    def test_wrong_secret(self):
        payload = b'{"type": "checkout.session.completed"}'

        with patch.object(config, "STRIPE_WEBHOOK_SECRET", "whsec_unit"):
            with pytest.raises(WebhookSignatureException):
                PaymentService.verify_webhook_signature(payload, sign_webhook(payload, "whsec_other"))
