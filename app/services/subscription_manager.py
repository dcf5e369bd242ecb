"""Subscription lifecycle: checkout creation, PayPal webhooks and status lookup.

Subscriber state only moves through PayPal events:

    (none) --create--> pending (subscribed=false)
    pending/inactive --ACTIVATED--> active (tier, end date)
    active --CANCELLED/SUSPENDED--> inactive (tier and end cleared)
    active --RENEWED--> active (end date refreshed)

PAYMENT.FAILED is logged only.
"""

from __future__ import annotations

from typing import Any

from app.core.auth_middleware import AuthenticatedUser
from app.core.logging import get_logger
from app.core.schemas_billing import (
    PLANS,
    CreateSubscriptionResponse,
    SubscriptionStatus,
    SubscriptionTier,
    WebhookEventType,
)
from app.db.subscribers import SubscriberStore
from app.services.paypal_service import PayPalError, PayPalService

logger = get_logger(__name__)

VERIFICATION_SUCCESS = "SUCCESS"


class WebhookVerificationError(Exception):
    """PayPal reported that a webhook delivery is not authentic."""


def resolve_tier(resource: dict[str, Any]) -> SubscriptionTier:
    """Premium when the plan or custom id mentions it, Pro otherwise."""
    plan_id = (resource.get("plan_id") or "").lower()
    custom_id = (resource.get("custom_id") or "").lower()
    if "premium" in plan_id or "premium" in custom_id:
        return SubscriptionTier.PREMIUM
    return SubscriptionTier.PRO


def _next_billing_time(resource: dict[str, Any]) -> str | None:
    return (resource.get("billing_info") or {}).get("next_billing_time")


class SubscriptionManager:
    def __init__(
        self,
        paypal: PayPalService | None,
        subscribers: SubscriberStore,
        *,
        webhook_id: str | None = None,
        brand_name: str = "Knowledge Forge",
        return_base_url: str = "http://localhost:5173",
    ):
        self.paypal = paypal
        self.subscribers = subscribers
        self.webhook_id = webhook_id
        self.brand_name = brand_name
        self.return_base_url = return_base_url

    def _require_paypal(self) -> PayPalService:
        if self.paypal is None:
            raise PayPalError("PayPal credentials not configured")
        return self.paypal

    async def create_subscription(
        self, user: AuthenticatedUser, tier: SubscriptionTier, origin: str | None = None
    ) -> CreateSubscriptionResponse:
        """
        Create a PayPal subscription for ``user`` and return its approval link.

        The product and the tier's plan are created on first use and reused
        afterwards. A pending subscriber row is recorded before returning.

        Raises:
            PayPalError: credentials missing, a PayPal call failed, or no
                approval link was returned
        """
        paypal = self._require_paypal()
        base_url = (origin or self.return_base_url).rstrip("/")
        plan = PLANS[tier]

        token = await paypal.get_access_token()
        product_id = await paypal.ensure_product(token)
        plan_id = await paypal.ensure_plan(token, product_id, plan)

        given_name, surname = user.name_parts
        subscription = await paypal.create_subscription(
            token,
            plan_id=plan_id,
            email=user.email,
            given_name=given_name,
            surname=surname,
            brand_name=self.brand_name,
            return_url=f"{base_url}/subscription-success",
            cancel_url=f"{base_url}/subscription-cancelled",
            custom_id=f"{tier.value}:{user.id}",
        )

        approve_url = next(
            (link.get("href") for link in subscription.get("links", []) if link.get("rel") == "approve"),
            None,
        )
        if not approve_url:
            raise PayPalError("No approval URL found in PayPal response")

        self.subscribers.upsert_pending(
            email=user.email,
            user_id=user.id,
            subscription_id=subscription["id"],
            tier_label=tier.label,
        )
        return CreateSubscriptionResponse(url=approve_url, subscription_id=subscription["id"])

    async def handle_webhook(self, event: dict[str, Any], headers: dict[str, str | None]) -> None:
        """
        Verify (when a webhook id is configured) and apply one webhook event.

        A verification request that cannot be completed is logged and the
        event is still applied; an explicit non-SUCCESS status is rejected.

        Raises:
            PayPalError: a webhook id is configured but PayPal credentials are not
            WebhookVerificationError: PayPal reported the delivery as not authentic
        """
        if self.webhook_id:
            if self.paypal is None:
                raise PayPalError("PayPal credentials not configured")
            status = await self.paypal.verify_webhook_signature(headers, self.webhook_id, event)
            if status is None:
                logger.warning("Webhook verification unavailable, processing event anyway")
            elif status != VERIFICATION_SUCCESS:
                logger.error(f"Webhook verification failed: status={status}")
                raise WebhookVerificationError("Webhook verification failed")

        self.handle_event(event)

    def handle_event(self, event: dict[str, Any]) -> None:
        event_type = event.get("event_type")
        resource = event.get("resource") or {}
        subscription_id = resource.get("id")
        logger.info(f"PayPal webhook received: {event_type} subscription={subscription_id}")

        if event_type == WebhookEventType.ACTIVATED.value:
            email = (resource.get("subscriber") or {}).get("email_address")
            if not email:
                logger.warning(f"Activation for {subscription_id} has no subscriber email, ignoring")
                return
            tier = resolve_tier(resource)
            self.subscribers.activate(
                email=email,
                subscription_id=subscription_id,
                tier_label=tier.label,
                subscription_end=_next_billing_time(resource),
            )
            logger.info(f"Subscription {subscription_id} activated ({tier.label})")

        elif event_type in (WebhookEventType.CANCELLED.value, WebhookEventType.SUSPENDED.value):
            self.subscribers.deactivate(subscription_id)
            logger.info(f"Subscription {subscription_id} deactivated")

        elif event_type == WebhookEventType.PAYMENT_FAILED.value:
            logger.warning(f"Payment failed for subscription {subscription_id}")

        elif event_type == WebhookEventType.RENEWED.value:
            self.subscribers.renew(subscription_id, _next_billing_time(resource))
            logger.info(f"Subscription {subscription_id} renewed")

        else:
            logger.info(f"Unhandled webhook event type: {event_type}")

    def get_status(self, user_id: str) -> SubscriptionStatus:
        row = self.subscribers.get_by_user(user_id)
        if not row:
            return SubscriptionStatus()
        return SubscriptionStatus(
            subscribed=bool(row.get("subscribed")),
            subscription_tier=row.get("subscription_tier"),
            subscription_end=row.get("subscription_end"),
        )
