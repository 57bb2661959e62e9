# services/provisioning.py

"""
Turn a paid Stripe Checkout session into a usable account:
subscription row synced from Stripe and profile row created.
Safe to run more than once for the same session (webhook + success page).
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException
from supabase import Client

from core.logging_config import get_logger
from core.stripe_helpers import is_checkout_session_paid, stripe_field
from core.subscription_helpers import find_user_id_by_customer, sync_subscription_from_stripe
from core.supabase_helpers import require_client

logger = get_logger("provisioning")

DEFAULT_PROFILE_NAME = "Usuário"


def default_profile_name(email: Optional[str], metadata_name: Optional[str] = None) -> str:
    if metadata_name and metadata_name.strip():
        return metadata_name.strip()
    local_part = (email or "").split("@")[0].strip()
    return local_part or DEFAULT_PROFILE_NAME


def ensure_profile(
    client: Client,
    user_id: str,
    email: Optional[str],
    name: Optional[str] = None,
) -> Dict[str, Any]:
    """Return the user's profile, creating it on first use."""
    existing = (
        client.table("profiles")
        .select("*")
        .eq("id", user_id)
        .limit(1)
        .execute()
    )
    if existing.data:
        return existing.data[0]

    payload = {
        "id": user_id,
        "email": email,
        "name": default_profile_name(email, name),
    }
    # upsert: a concurrent webhook may have created it in the meantime
    created = client.table("profiles").upsert(payload, on_conflict="id").execute()
    logger.info(f"Created profile for user {user_id}")
    return created.data[0] if created.data else payload


def _auth_user_details(client: Client, user_id: str) -> Dict[str, Optional[str]]:
    try:
        resp = client.auth.admin.get_user_by_id(user_id)
    except Exception as e:
        logger.warning(f"Could not load auth user {user_id}: {e}")
        return {"email": None, "name": None}

    user = getattr(resp, "user", None)
    if user is None:
        return {"email": None, "name": None}
    metadata = user.user_metadata or {}
    return {"email": user.email, "name": metadata.get("name")}


def provision_checkout_session(session) -> Dict[str, Any]:
    """
    Provision the account behind a completed checkout session.
    400 when the session is not paid or names no known user.
    """
    if not is_checkout_session_paid(session):
        raise HTTPException(400, "Checkout session is not paid")

    customer_id = stripe_field(session, "customer")
    subscription_id = stripe_field(session, "subscription")
    metadata = stripe_field(session, "metadata") or {}

    user_id = (
        stripe_field(session, "client_reference_id")
        or stripe_field(metadata, "user_id")
        or (find_user_id_by_customer(customer_id) if customer_id else None)
    )
    if not user_id:
        logger.error(f"Checkout session {stripe_field(session, 'id')} has no user reference")
        raise HTTPException(400, "Checkout session is not linked to a user")

    subscription = sync_subscription_from_stripe(
        user_id,
        customer_id=customer_id,
        subscription_id=subscription_id,
    )

    client = require_client()
    details = _auth_user_details(client, user_id)
    email = details["email"] or stripe_field(stripe_field(session, "customer_details"), "email")
    profile = ensure_profile(client, user_id, email, details["name"])

    logger.info(f"Provisioned user {user_id} from session {stripe_field(session, 'id')}")
    return {"user_id": user_id, "subscription": subscription, "profile": profile}
