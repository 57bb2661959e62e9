# routers/subscriptions.py

from fastapi import APIRouter, Depends, HTTPException

from core.errors import handle_supabase_error
from core.logging_config import logger
from core.plans import PLANS, get_plan_by_price_id, plan_display_name
from core.stripe_helpers import create_checkout_session, create_customer, stripe_field
from core.subscription_helpers import (
    get_user_subscription,
    is_subscription_active,
    sync_subscription_from_stripe,
    upsert_user_subscription,
)
from dependencies.auth import CurrentUser, get_current_user
from models.signup import CheckoutRequest
from models.subscription import UserSubscriptionRead
from routers.signup import checkout_urls

router = APIRouter(
    prefix="/subscriptions",
    tags=["Subscriptions"],
)


def to_read_model(user_id: str, row: dict) -> UserSubscriptionRead:
    row = {k: v for k, v in (row or {}).items() if v is not None}
    row["user_id"] = user_id
    return UserSubscriptionRead(
        **row,
        product_name=plan_display_name(row.get("price_id")),
        is_active=is_subscription_active(row),
    )


@router.get("/me", response_model=UserSubscriptionRead)
def get_my_subscription(current_user: CurrentUser = Depends(get_current_user)):
    """
    Subscription of the current user. Users who never reached checkout
    get a "not_started" placeholder rather than a 404.
    """
    subscription = get_user_subscription(current_user.id)
    return to_read_model(current_user.id, subscription or {})


@router.post("/me/sync", response_model=UserSubscriptionRead)
def sync_my_subscription(current_user: CurrentUser = Depends(get_current_user)):
    """Re-read the subscription from Stripe (e.g. after the success redirect)."""
    subscription = get_user_subscription(current_user.id)
    if not subscription or not subscription.get("customer_id"):
        raise HTTPException(404, "No payment customer found for this account")

    try:
        row = sync_subscription_from_stripe(
            current_user.id,
            customer_id=subscription.get("customer_id"),
            subscription_id=subscription.get("subscription_id"),
        )
    except HTTPException:
        raise
    except Exception as e:
        raise handle_supabase_error(e, "Failed to sync subscription")

    return to_read_model(current_user.id, row)


@router.post("/checkout", summary="Start checkout for an existing account")
def start_checkout(
    payload: CheckoutRequest,
    current_user: CurrentUser = Depends(get_current_user),
):
    plan = get_plan_by_price_id(payload.price_id) if payload.price_id else PLANS[0]
    if not plan:
        raise HTTPException(400, "Unknown plan")

    subscription = get_user_subscription(current_user.id)
    if is_subscription_active(subscription):
        raise HTTPException(400, "Subscription already active")

    customer_id = (subscription or {}).get("customer_id")
    if not customer_id:
        customer_id = create_customer(current_user.email, current_user.id, current_user.name)
        try:
            upsert_user_subscription(current_user.id, {
                "customer_id": customer_id,
                "subscription_status": "not_started",
            })
        except Exception as e:
            raise handle_supabase_error(e, "Failed to record customer")

    success_url, cancel_url = checkout_urls()
    session = create_checkout_session(
        customer_id=customer_id,
        user_id=current_user.id,
        price_id=plan.price_id,
        mode=plan.mode,
        success_url=success_url,
        cancel_url=cancel_url,
    )

    logger.info(f"Checkout session started for user {current_user.id}")
    return {
        "success": True,
        "data": {"checkout_url": stripe_field(session, "url"), "session_id": stripe_field(session, "id")},
    }
