import json
import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

import config
from exceptions.base import ValidationException
from exceptions.payment import PaymentException, WebhookSignatureException
from services.order import OrderService
from services.payment import PaymentService
from web.dependencies import get_session

processing_router = APIRouter(prefix="/api/orders/checkout", tags=["payments"])

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


def __authenticate(payload: bytes, signature: str | None) -> dict:
    """
    Signed events are verified whenever a webhook secret is configured.
    Without a secret, unsigned events are accepted for local testing only.
    """
    if config.STRIPE_WEBHOOK_SECRET:
        return PaymentService.verify_webhook_signature(payload, signature)
    if config.IS_PRODUCTION:
        logging.error("❌ Payment webhook rejected: STRIPE_WEBHOOK_SECRET is not configured")
        raise WebhookSignatureException("Webhook secret is not configured")
    try:
        event = json.loads(payload)
    except ValueError:
        raise ValidationException("Invalid webhook event structure")
    logging.warning("⚠️ Processing unsigned payment webhook (no webhook secret configured)")
    return event


def _acknowledge(message: str, processed: bool) -> dict:
    # Always 200 so the gateway does not redeliver, even when nothing was applied
    return {"success": True, "received": True, "processed": processed, "message": message}


@processing_router.post("/webhook")
async def handle_payment_webhook(request: Request, session: AsyncSession = Depends(get_session)):
    """
    Payment gateway webhook. Only checkout-session-completed is applied.

    The payment status is never taken from the event itself: the session is
    re-fetched from the gateway and its payment_status mapped onto the order.
    """
    payload = await request.body()
    event = __authenticate(payload, request.headers.get("Stripe-Signature"))
    if not isinstance(event, dict) or not event.get("type"):
        logging.error("❌ Payment webhook rejected: invalid event structure")
        raise ValidationException("Invalid webhook event structure")

    event_type = event["type"]
    if event_type != CHECKOUT_SESSION_COMPLETED:
        logging.info(f"🔔 Unhandled payment webhook event type: {event_type}")
        return _acknowledge(f"Unhandled event type: {event_type}", processed=False)

    data = event.get("data")
    checkout_session = data.get("object") if isinstance(data, dict) else None
    if not isinstance(checkout_session, dict):
        logging.error("❌ Payment webhook rejected: checkout.session.completed without a session object")
        raise ValidationException("Invalid webhook event structure")
    session_id = checkout_session.get("id")
    metadata = checkout_session.get("metadata")
    order_number = metadata.get("orderNumber") if isinstance(metadata, dict) else None
    if not session_id or not order_number:
        logging.error("❌ checkout.session.completed without session id or order number")
        return _acknowledge("Missing session ID or order number", processed=False)

    try:
        gateway_session = await PaymentService.retrieve_checkout_session(session_id)
    except PaymentException as e:
        logging.error(f"❌ Failed to retrieve checkout session {session_id}: {e}")
        return _acknowledge("Failed to retrieve session from payment gateway", processed=False)

    order = await OrderService.apply_checkout_completed(
        order_number, session_id, gateway_session.get("payment_status"), session
    )
    if order is None:
        logging.error(f"❌ Payment webhook for unknown order {order_number}")
        return _acknowledge(f"Order not found: {order_number}", processed=False)

    message = f"Checkout processed for order {order.order_number} with status: {order.payment_status.value}"
    logging.info(f"✅ {message}")
    return _acknowledge(message, processed=True)
