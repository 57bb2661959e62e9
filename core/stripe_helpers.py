# core/stripe_helpers.py

from typing import Any, Optional

import stripe
from fastapi import HTTPException

from core.config import settings
from core.logging_config import logger


ACTIVE_SUBSCRIPTION_STATUSES = ("active", "trialing")


def get_stripe_client():
    """Configured stripe module, or 500 when the secret key is missing."""
    if not settings.STRIPE_SECRET_KEY:
        raise HTTPException(500, "Stripe secret key not configured")

    stripe.api_key = settings.STRIPE_SECRET_KEY
    return stripe


def stripe_field(obj: Any, key: str, default=None):
    """
    Read a key from a StripeObject or a plain webhook dict.
    Item access on purpose: `subscription.items` is dict.items on StripeObject.
    """
    if obj is None:
        return default
    try:
        value = obj[key]
    except (KeyError, TypeError, IndexError):
        return default
    return default if value is None else value


# ============================================================
# Customers + Checkout
# ============================================================
def create_customer(email: str, user_id: str, name: Optional[str] = None) -> str:
    """Create a Stripe customer tagged with our user id; returns the customer id."""
    client = get_stripe_client()

    try:
        customer = client.Customer.create(
            email=email,
            name=name,
            metadata={"user_id": user_id},
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe API error creating customer for {user_id}: {e}")
        raise HTTPException(502, "Failed to create payment customer")

    logger.info(f"Created Stripe customer {customer.id} for user {user_id}")
    return customer.id


def create_checkout_session(
    *,
    customer_id: str,
    user_id: str,
    price_id: str,
    mode: str,
    success_url: str,
    cancel_url: str,
):
    """
    Create a Stripe Checkout Session for one unit of `price_id`.
    The user id rides along as client_reference_id + metadata so the
    webhook can provision the right account.
    """
    client = get_stripe_client()

    params = {
        "customer": customer_id,
        "payment_method_types": ["card"],
        "line_items": [{"price": price_id, "quantity": 1}],
        "mode": mode,
        "success_url": success_url,
        "cancel_url": cancel_url,
        "client_reference_id": user_id,
        "metadata": {"user_id": user_id},
    }
    if mode == "subscription":
        params["subscription_data"] = {"metadata": {"user_id": user_id}}

    try:
        session = client.checkout.Session.create(**params)
    except stripe.StripeError as e:
        logger.error(f"Stripe API error creating checkout for {user_id}: {e}")
        raise HTTPException(502, "Failed to create checkout session")

    if not stripe_field(session, "url"):
        raise HTTPException(502, "Checkout session returned no payment link")

    return session


def retrieve_checkout_session(session_id: str):
    client = get_stripe_client()

    try:
        return client.checkout.Session.retrieve(session_id)
    except stripe.StripeError as e:
        logger.error(f"Stripe API error retrieving session {session_id}: {e}")
        raise HTTPException(400, "Invalid checkout session")


def is_checkout_session_paid(session) -> bool:
    """A session counts once it is complete and paid (or needs no payment)."""
    if stripe_field(session, "status") != "complete":
        logger.warning(f"Stripe session {stripe_field(session, 'id')} not complete: {stripe_field(session, 'status')}")
        return False

    payment_status = stripe_field(session, "payment_status")
    if payment_status not in ("paid", "no_payment_required"):
        logger.warning(f"Stripe session {stripe_field(session, 'id')} not paid: {payment_status}")
        return False

    return True


# ============================================================
# Subscriptions
# ============================================================
def subscription_snapshot(subscription) -> dict:
    """
    Flatten a Stripe subscription into the columns of
    stripe_user_subscriptions.
    """
    items = stripe_field(stripe_field(subscription, "items"), "data") or []
    first_item = items[0] if items else None
    price = stripe_field(first_item, "price")

    # Billing period moved from the subscription to its items in newer API versions
    period_start = stripe_field(subscription, "current_period_start") or stripe_field(first_item, "current_period_start")
    period_end = stripe_field(subscription, "current_period_end") or stripe_field(first_item, "current_period_end")

    # Only an expanded payment method carries card details; a bare id yields None
    card = stripe_field(stripe_field(subscription, "default_payment_method"), "card")

    return {
        "subscription_id": stripe_field(subscription, "id"),
        "subscription_status": stripe_field(subscription, "status"),
        "price_id": stripe_field(price, "id"),
        "current_period_start": period_start,
        "current_period_end": period_end,
        "cancel_at_period_end": bool(stripe_field(subscription, "cancel_at_period_end", False)),
        "payment_method_brand": stripe_field(card, "brand"),
        "payment_method_last4": stripe_field(card, "last4"),
    }


def fetch_subscription(
    stripe_subscription_id: Optional[str] = None,
    stripe_customer_id: Optional[str] = None,
):
    """
    Most relevant Stripe subscription: by id when known, else the
    customer's most recent one. None when the customer has none.
    """
    if not stripe_subscription_id and not stripe_customer_id:
        return None

    client = get_stripe_client()

    try:
        if stripe_subscription_id:
            return client.Subscription.retrieve(
                stripe_subscription_id,
                expand=["default_payment_method"],
            )

        subscriptions = client.Subscription.list(
            customer=stripe_customer_id,
            status="all",
            limit=1,
            expand=["data.default_payment_method"],
        )
        data = stripe_field(subscriptions, "data") or []
        return data[0] if data else None

    except stripe.StripeError as e:
        logger.error(f"Stripe API error fetching subscription: {e}")
        raise HTTPException(502, "Failed to fetch subscription from payment provider")


# ============================================================
# Webhooks
# ============================================================
def verify_webhook_signature(payload: bytes, signature: Optional[str]) -> bool:
    """
    Check the Stripe-Signature header against STRIPE_WEBHOOK_SECRET.
    Without a configured secret verification is skipped (development).
    """
    if not settings.STRIPE_WEBHOOK_SECRET:
        logger.warning("Stripe webhook secret not configured - signature verification disabled")
        return True

    if not signature:
        return False

    try:
        stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)
        return True
    except ValueError as e:
        logger.error(f"Invalid payload in webhook: {e}")
        return False
    except stripe.SignatureVerificationError as e:
        logger.error(f"Invalid signature in webhook: {e}")
        return False
