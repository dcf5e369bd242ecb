"""Pydantic models for PayPal subscription billing."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SubscriptionTier(str, Enum):
    """Purchasable tiers, as sent by the pricing page."""

    PRO = "pro"
    PREMIUM = "premium"

    @property
    def label(self) -> str:
        """Display label stored on the subscriber row."""
        return self.value.capitalize()


class PlanDefinition(BaseModel):
    """Monthly billing plan offered for a tier."""

    name: str
    description: str
    amount: str
    currency: str = "USD"


PLANS: dict[SubscriptionTier, PlanDefinition] = {
    SubscriptionTier.PRO: PlanDefinition(
        name="Knowledge Forge Pro Plan",
        description=(
            "Multi-format knowledge capture, advanced AI brainstorming, "
            "higher precision retrieval"
        ),
        amount="19.00",
    ),
    SubscriptionTier.PREMIUM: PlanDefinition(
        name="Knowledge Forge Premium Plan",
        description="All Pro features with highest limits, early access to beta features",
        amount="30.00",
    ),
}


class CreateSubscriptionRequest(BaseModel):
    tier: SubscriptionTier


class CreateSubscriptionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    subscription_id: str = Field(..., alias="subscriptionId")


class SubscriptionStatus(BaseModel):
    subscribed: bool = False
    subscription_tier: str | None = None
    subscription_end: str | None = None


class WebhookEventType(str, Enum):
    """PayPal subscription lifecycle events the service reacts to."""

    ACTIVATED = "BILLING.SUBSCRIPTION.ACTIVATED"
    CANCELLED = "BILLING.SUBSCRIPTION.CANCELLED"
    SUSPENDED = "BILLING.SUBSCRIPTION.SUSPENDED"
    PAYMENT_FAILED = "BILLING.SUBSCRIPTION.PAYMENT.FAILED"
    RENEWED = "BILLING.SUBSCRIPTION.RENEWED"
