# routers/stripe_webhooks.py

import json
from typing import Optional

from fastapi import APIRouter, Header, HTTPException, Request

from core.logging_config import logger
from core.stripe_helpers import stripe_field, verify_webhook_signature
from core.subscription_helpers import (
    find_user_id_by_customer,
    mark_subscription_canceled,
    sync_subscription_from_stripe,
)
from services.provisioning import provision_checkout_session

router = APIRouter(
    prefix="/webhooks/stripe",
    tags=["Webhooks"],
)

SUBSCRIPTION_SYNC_EVENTS = (
    "customer.subscription.created",
    "customer.subscription.updated",
)


def _subscription_user_id(subscription: dict) -> Optional[str]:
    metadata = stripe_field(subscription, "metadata") or {}
    customer_id = stripe_field(subscription, "customer")
    return stripe_field(metadata, "user_id") or (
        find_user_id_by_customer(customer_id) if customer_id else None
    )


def dispatch_event(event: dict) -> dict:
    """Apply one verified Stripe event. Unknown events are acknowledged and ignored."""
    event_type = event.get("type")
    data = (event.get("data") or {}).get("object") or {}

    if event_type == "checkout.session.completed":
        result = provision_checkout_session(data)
        return {"status": "processed", "user_id": result["user_id"]}

    if event_type in SUBSCRIPTION_SYNC_EVENTS or event_type == "customer.subscription.deleted":
        subscription_id = data.get("id")
        customer_id = data.get("customer")

        if not subscription_id or not customer_id:
            logger.warning(f"Missing subscription_id or customer_id in webhook event: {event_type}")
            return {"status": "ignored", "reason": "missing_ids"}

        user_id = _subscription_user_id(data)
        if not user_id:
            logger.warning(f"No user for Stripe customer {customer_id} ({event_type})")
            return {"status": "ignored", "reason": "unknown_customer"}

        if event_type == "customer.subscription.deleted":
            mark_subscription_canceled(user_id, subscription_id)
        else:
            sync_subscription_from_stripe(user_id, customer_id=customer_id, subscription_id=subscription_id)

        return {"status": "processed", "user_id": user_id}

    logger.info(f"Ignoring Stripe event {event_type}")
    return {"status": "ignored", "reason": "unhandled_event"}


@router.post("")
async def handle_stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="stripe-signature"),
):
    """
    Stripe webhook endpoint.

    Handles:
    - checkout.session.completed → provision the account
    - customer.subscription.created / updated → sync the subscription row
    - customer.subscription.deleted → mark the subscription canceled

    **Security:** the `stripe-signature` header is verified against
    `STRIPE_WEBHOOK_SECRET` whenever a secret is configured.
    """
    body = await request.body()

    if not verify_webhook_signature(body, stripe_signature):
        raise HTTPException(400, "Invalid webhook signature")

    try:
        event = json.loads(body.decode("utf-8"))
    except ValueError:
        raise HTTPException(400, "Invalid webhook payload")

    logger.info(f"Received Stripe webhook event: {event.get('type')}")

    try:
        return dispatch_event(event)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error processing Stripe webhook {event.get('type')}: {e}")
        raise HTTPException(500, "Error processing webhook")
