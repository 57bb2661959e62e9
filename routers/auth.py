# routers/auth.py

from fastapi import APIRouter, Depends, HTTPException, Request

from core.logging_config import logger
from core.rate_limiter import client_ip, require_rate_limit
from core.subscription_helpers import get_user_subscription, is_subscription_active
from core.supabase_helpers import require_client
from dependencies.auth import CurrentUser, get_current_user
from models.auth import LoginRequest, PasswordResetRequest, TokenResponse


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)

RESET_MESSAGE = "If an account exists with this email, a password reset link has been sent."


# ============================================================
# LOGIN (SUPABASE AUTH)
# ============================================================
@router.post("/login", response_model=TokenResponse, summary="Authenticate user")
def login(payload: LoginRequest, request: Request):
    """
    Email/password sign-in. Users without an active subscription still get
    a session; `subscription_active` tells the client to show the plans page.
    """
    email = payload.email.strip().lower()
    require_rate_limit(request, "login", subject=email, max_requests=10, window_seconds=300)

    client = require_client()

    try:
        response = client.auth.sign_in_with_password(
            {"email": email, "password": payload.password}
        )
    except Exception as e:
        logger.warning(f"Login attempt failed for {email}: {type(e).__name__}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not response.session or not response.session.access_token:
        raise HTTPException(401, "Invalid email or password")

    subscription = get_user_subscription(response.user.id) if response.user else None

    return TokenResponse(
        access_token=response.session.access_token,
        refresh_token=response.session.refresh_token,
        expires_in=response.session.expires_in or 3600,
        subscription_active=is_subscription_active(subscription),
    )


# ============================================================
# LOGOUT
# ============================================================
@router.post("/logout", summary="Revoke the current session")
def logout(current_user: CurrentUser = Depends(get_current_user)):
    client = require_client()

    try:
        client.auth.admin.sign_out(current_user.access_token)
    except Exception as e:
        # Token is already unusable or expired; the client drops it either way
        logger.warning(f"Logout for {current_user.id} failed: {type(e).__name__}")

    logger.info(f"User {current_user.id} logged out")
    return {"success": True}


# ============================================================
# CURRENT USER
# ============================================================
@router.get("/me", response_model=CurrentUser, response_model_exclude={"access_token"}, summary="Current authenticated user")
def read_me(current_user: CurrentUser = Depends(get_current_user)):
    return current_user


# ============================================================
# PASSWORD RESET
# ============================================================
@router.post(
    "/password-reset",
    summary="Send a password reset email via Supabase",
    description="""
    Rate limited to 5 requests per 15 minutes per email.

    **Note:** This endpoint always returns success to prevent email enumeration attacks.
    """,
    responses={
        200: {"description": "Email sent (or email not found, for security)"},
        429: {"description": "Rate limit exceeded"},
    },
)
def request_password_reset(payload: PasswordResetRequest, request: Request):
    email = payload.email.strip().lower()

    require_rate_limit(request, "password-reset", subject=email, max_requests=5, window_seconds=900)
    logger.info(f"Password reset attempt: email={email}, ip={client_ip(request)}")

    client = require_client()

    try:
        client.auth.reset_password_for_email(email)
        logger.info(f"Password reset email sent: email={email}")
    except Exception as e:
        logger.error(f"Failed to send password reset email to {email}: {type(e).__name__}: {e}")

    return {"success": True, "message": RESET_MESSAGE}
