# core/subscription_helpers.py

"""
Helpers around the stripe_user_subscriptions table (one row per user).
"""

from typing import Any, Dict, Optional

from core.logging_config import logger
from core.stripe_helpers import (
    ACTIVE_SUBSCRIPTION_STATUSES,
    fetch_subscription,
    subscription_snapshot,
)
from core.supabase_helpers import require_client

SUBSCRIPTIONS_TABLE = "stripe_user_subscriptions"


def is_subscription_active(subscription: Optional[Dict[str, Any]]) -> bool:
    if not subscription:
        return False
    return subscription.get("subscription_status") in ACTIVE_SUBSCRIPTION_STATUSES


def get_user_subscription(user_id: str) -> Optional[Dict[str, Any]]:
    """
    Subscription row for `user_id`, or None.
    Lookup failures are logged and treated as "no subscription".
    """
    client = require_client()

    try:
        result = (
            client.table(SUBSCRIPTIONS_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.error(f"Error fetching subscription for user {user_id}: {e}")
        return None

    return result.data[0] if result.data else None


def find_user_id_by_customer(customer_id: str) -> Optional[str]:
    client = require_client()

    result = (
        client.table(SUBSCRIPTIONS_TABLE)
        .select("user_id")
        .eq("customer_id", customer_id)
        .limit(1)
        .execute()
    )
    return result.data[0]["user_id"] if result.data else None


def upsert_user_subscription(user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create or update the user's subscription row (conflict on user_id).
    None values are dropped so a partial update never blanks a column.
    """
    client = require_client()

    payload = {k: v for k, v in fields.items() if v is not None}
    payload["user_id"] = user_id

    try:
        result = (
            client.table(SUBSCRIPTIONS_TABLE)
            .upsert(payload, on_conflict="user_id")
            .execute()
        )
    except Exception as e:
        logger.error(f"Error upserting subscription for user {user_id}: {e}")
        raise

    if not result.data:
        raise RuntimeError("Subscription upsert returned no data")

    return result.data[0]


def sync_subscription_from_stripe(
    user_id: str,
    customer_id: Optional[str] = None,
    subscription_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Re-read the subscription from Stripe and store its snapshot.
    Without a Stripe subscription yet the row keeps status "not_started".
    """
    subscription = fetch_subscription(
        stripe_subscription_id=subscription_id,
        stripe_customer_id=customer_id,
    )

    fields: Dict[str, Any] = {"customer_id": customer_id}
    if subscription is None:
        fields["subscription_status"] = "not_started"
    else:
        fields.update(subscription_snapshot(subscription))

    row = upsert_user_subscription(user_id, fields)
    logger.info(
        f"Synced subscription for user {user_id}: status={row.get('subscription_status')}"
    )
    return row


def mark_subscription_canceled(user_id: str, subscription_id: Optional[str]) -> Dict[str, Any]:
    return upsert_user_subscription(
        user_id,
        {
            "subscription_id": subscription_id,
            "subscription_status": "canceled",
            "cancel_at_period_end": False,
        },
    )
