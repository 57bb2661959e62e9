# routers/signup.py

from typing import Tuple

from fastapi import APIRouter, HTTPException, Request

from core.config import settings
from core.errors import extract_supabase_error, handle_supabase_error
from core.logging_config import logger
from core.plans import PLANS, get_plan_by_id, get_plan_by_price_id
from core.rate_limiter import require_rate_limit
from core.stripe_helpers import (
    create_checkout_session,
    create_customer,
    retrieve_checkout_session,
    stripe_field,
)
from core.subscription_helpers import is_subscription_active, upsert_user_subscription
from core.supabase_helpers import require_client
from models.signup import SignupConfirm, SignupCreate, SignupResponse
from services.provisioning import provision_checkout_session


router = APIRouter(
    prefix="/signup",
    tags=["Signup"],
)

plans_router = APIRouter(
    prefix="/plans",
    tags=["Plans"],
)


def checkout_urls() -> Tuple[str, str]:
    """(success_url, cancel_url) on the front-end."""
    base = settings.FRONTEND_URL.rstrip("/")
    return (
        f"{base}/?payment=success&session_id={{CHECKOUT_SESSION_ID}}",
        f"{base}/auth?payment=cancelled",
    )


# -----------------------------------------------------
# PUBLIC - Plans on sale
# -----------------------------------------------------
@plans_router.get("", summary="Public: List subscription plans")
def list_plans():
    return {"success": True, "data": [plan.model_dump() for plan in PLANS]}


@plans_router.get("/{product_id}", summary="Public: Get a plan by product id")
def get_plan(product_id: str):
    plan = get_plan_by_id(product_id)
    if not plan:
        raise HTTPException(404, "Plan not found")
    return {"success": True, "data": plan.model_dump()}


# -----------------------------------------------------
# 1️⃣ PUBLIC - Create account + start checkout
# -----------------------------------------------------
@router.post("", response_model=SignupResponse, summary="Public: Create account and start checkout")
def signup(payload: SignupCreate, request: Request):
    """
    Runs in order, stopping at the first failure (nothing is rolled back):
    auth user → Stripe customer → subscription row (not_started) → checkout session.
    """
    require_rate_limit(request, "signup", max_requests=10, window_seconds=3600)

    plan = get_plan_by_price_id(payload.price_id)
    if not plan:
        raise HTTPException(400, "Unknown plan")

    client = require_client()

    # --- Auth user ---
    try:
        auth_resp = client.auth.sign_up({
            "email": payload.email,
            "password": payload.password,
            "options": {"data": {"name": payload.name, "product": plan.id}},
        })
    except Exception as e:
        message = extract_supabase_error(e)
        logger.warning(f"Signup failed for {payload.email}: {message}")
        if "already" in message.lower() and "regist" in message.lower():
            raise HTTPException(400, "Email already registered")
        raise HTTPException(400, f"Signup failed: {message}")

    if not auth_resp or not auth_resp.user:
        raise HTTPException(400, "Signup failed: no user returned")

    user_id = auth_resp.user.id
    logger.info(f"Created auth user {user_id} for plan {plan.id}")

    # --- Stripe customer + subscription row ---
    customer_id = create_customer(payload.email, user_id, payload.name)

    try:
        upsert_user_subscription(user_id, {
            "customer_id": customer_id,
            "subscription_status": "not_started",
        })
    except Exception as e:
        raise handle_supabase_error(e, "Failed to record customer")

    # --- Checkout ---
    success_url, cancel_url = checkout_urls()
    session = create_checkout_session(
        customer_id=customer_id,
        user_id=user_id,
        price_id=plan.price_id,
        mode=plan.mode,
        success_url=success_url,
        cancel_url=cancel_url,
    )

    return SignupResponse(
        user_id=user_id,
        checkout_url=stripe_field(session, "url"),
        session_id=stripe_field(session, "id"),
    )


# -----------------------------------------------------
# 2️⃣ PUBLIC - Payment success page confirms the session
# -----------------------------------------------------
@router.post("/confirm", summary="Public: Provision account after checkout")
def confirm_signup(payload: SignupConfirm):
    session = retrieve_checkout_session(payload.session_id)
    result = provision_checkout_session(session)

    subscription = result["subscription"]
    return {
        "success": True,
        "data": {
            "user_id": result["user_id"],
            "subscription_status": subscription.get("subscription_status"),
            "subscription_active": is_subscription_active(subscription),
        },
    }
