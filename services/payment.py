"""
Payment gateway adapter.

Wraps the blocking stripe SDK; every call runs in the default executor so the
event loop is never blocked by gateway latency.
"""

import asyncio
import functools
import json
import logging

import stripe

import config
from exceptions.payment import PaymentGatewayException, RefundException, WebhookSignatureException
from models.order import OrderDTO

logger = logging.getLogger(__name__)


class PaymentService:

    @staticmethod
    async def _call(operation: str, func, *args, **kwargs):
        if not config.STRIPE_SECRET_KEY:
            raise PaymentGatewayException(operation, "STRIPE_SECRET_KEY is not configured")
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(
                None, functools.partial(func, *args, api_key=config.STRIPE_SECRET_KEY, **kwargs)
            )
        except stripe.StripeError as e:
            logger.error(f"❌ Stripe {operation} failed: {e.user_message or str(e)}")
            raise PaymentGatewayException(operation, e.user_message or str(e))

    @staticmethod
    def build_line_items(order: OrderDTO) -> list[dict]:
        return [
            {
                "price_data": {
                    "currency": config.STRIPE_CURRENCY,
                    "product_data": {
                        "name": item.title,
                        "description": f"Quantity: {item.quantity}",
                        "images": [item.thumbnail] if item.thumbnail else [],
                    },
                    # Smallest currency unit
                    "unit_amount": round(item.price * 100),
                },
                "quantity": item.quantity,
            }
            for item in order.items
        ]

    @staticmethod
    async def create_checkout_session(order: OrderDTO, success_url: str, cancel_url: str) -> dict:
        """
        Create a hosted checkout session for the order.

        Returns:
            {"id": session id, "url": hosted page to redirect the buyer to}
        """
        checkout_session = await PaymentService._call(
            "createCheckoutSession",
            stripe.checkout.Session.create,
            payment_method_types=["card"],
            line_items=PaymentService.build_line_items(order),
            mode="payment",
            success_url=success_url,
            cancel_url=cancel_url,
            metadata={
                "orderId": str(order.id),
                "orderNumber": order.order_number,
                "userId": str(order.user_id),
            },
            shipping_address_collection={"allowed_countries": config.STRIPE_ALLOWED_COUNTRIES},
        )
        logger.info(f"💳 Created checkout session {checkout_session.id} for order {order.order_number}")
        return {"id": checkout_session.id, "url": checkout_session.url}

    @staticmethod
    async def retrieve_checkout_session(session_id: str) -> dict:
        checkout_session = await PaymentService._call(
            "retrieveCheckoutSession", stripe.checkout.Session.retrieve, session_id
        )
        return {
            "id": checkout_session.id,
            "payment_status": checkout_session.payment_status,
            "payment_intent": checkout_session.payment_intent,
            "metadata": dict(checkout_session.metadata or {}),
        }

    @staticmethod
    async def create_refund(session_id: str) -> str:
        """Refund the payment intent behind a checkout session, returns the refund id."""
        checkout_session = await PaymentService.retrieve_checkout_session(session_id)
        payment_intent = checkout_session["payment_intent"]
        if not payment_intent:
            raise RefundException(session_id, "No payment intent found for this session")
        if not isinstance(payment_intent, str):
            payment_intent = payment_intent.id
        try:
            refund = await PaymentService._call("createRefund", stripe.Refund.create, payment_intent=payment_intent)
        except PaymentGatewayException as e:
            raise RefundException(session_id, e.reason)
        logger.info(f"💸 Created refund {refund.id} for session {session_id}")
        return refund.id

    @staticmethod
    def verify_webhook_signature(payload: bytes, signature: str | None) -> dict:
        """
        Authenticate an inbound webhook and return the parsed event.

        Raises:
            WebhookSignatureException: missing header, bad signature or bad payload
        """
        if not signature:
            raise WebhookSignatureException("Missing Stripe-Signature header")
        try:
            stripe.Webhook.construct_event(payload, signature, config.STRIPE_WEBHOOK_SECRET)
        except stripe.SignatureVerificationError as e:
            raise WebhookSignatureException(str(e))
        except ValueError as e:
            raise WebhookSignatureException(f"Invalid payload: {e}")
        # Verified, so the raw body is the event
        return json.loads(payload)
