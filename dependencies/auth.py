from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from core.config import settings
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from core.subscription_helpers import get_user_subscription, is_subscription_active


bearer_scheme = HTTPBearer()


# ============================================================
# Current User (Supabase Auth identity)
# ============================================================
class CurrentUser(BaseModel):
    id: str                         # Supabase Auth UID (= profiles.id)
    email: str
    name: Optional[str] = None
    access_token: Optional[str] = None


# ============================================================
# AUTH DECODING (Supabase: validates JWT + reads metadata)
# ============================================================
def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentUser:

    token = credentials.credentials

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")

    # ---------------------------------------------------------
    # Validate JWT via Supabase GoTrue
    # ---------------------------------------------------------
    try:
        auth_resp = client.auth.get_user(token)
    except Exception as e:
        logger.info(f"Token rejected by Supabase: {type(e).__name__}")
        raise unauthorized

    if not auth_resp or not auth_resp.user or not auth_resp.user.email:
        raise unauthorized

    auth_user = auth_resp.user
    metadata = auth_user.user_metadata or {}

    return CurrentUser(
        id=auth_user.id,
        email=auth_user.email,
        name=metadata.get("name"),
        access_token=token,
    )


# ============================================================
# SUBSCRIPTION GATE (every data router depends on this)
# ============================================================
def get_subscribed_user(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """
    Authenticated user with an active or trialing subscription.
    402 otherwise, so the client can send the user to checkout.
    """
    if not settings.SUBSCRIPTION_GATING_ENABLED:
        return current_user

    subscription = get_user_subscription(current_user.id)
    if not is_subscription_active(subscription):
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="Active subscription required. Please subscribe to a plan to continue.",
        )

    return current_user
