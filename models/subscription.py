# models/subscription.py

from typing import Optional

from pydantic import BaseModel, Field

from models.enums import SubscriptionStatus


class UserSubscriptionRead(BaseModel):
    """Row of stripe_user_subscriptions plus derived fields."""
    user_id: str
    customer_id: Optional[str] = None
    subscription_id: Optional[str] = None
    subscription_status: SubscriptionStatus = SubscriptionStatus.not_started
    price_id: Optional[str] = None
    current_period_start: Optional[int] = Field(None, description="Unix timestamp")
    current_period_end: Optional[int] = Field(None, description="Unix timestamp")
    cancel_at_period_end: bool = False
    payment_method_brand: Optional[str] = None
    payment_method_last4: Optional[str] = None

    product_name: Optional[str] = None
    is_active: bool = False
