"""Subscriber rows: one per user, driven by PayPal lifecycle events."""

from datetime import UTC, datetime
from typing import Any

from supabase import Client

from app.core.logging import get_logger

logger = get_logger(__name__)

SUBSCRIBERS_TABLE = "subscribers"


def _now() -> str:
    return datetime.now(UTC).isoformat()


class SubscriberStore:
    def __init__(self, client: Client):
        self.client = client

    def upsert_pending(
        self, *, email: str, user_id: str, subscription_id: str, tier_label: str
    ) -> None:
        """Record a created-but-unapproved subscription (subscribed stays false)."""
        self.client.table(SUBSCRIBERS_TABLE).upsert(
            {
                "email": email,
                "user_id": user_id,
                "external_subscription_id": subscription_id,
                "subscribed": False,
                "subscription_tier": tier_label,
                "subscription_end": None,
                "updated_at": _now(),
            },
            on_conflict="email",
        ).execute()
        logger.info(f"Recorded pending subscription {subscription_id}", extra={"user_id": user_id})

    def activate(
        self, *, email: str, subscription_id: str, tier_label: str, subscription_end: str | None
    ) -> None:
        self.client.table(SUBSCRIBERS_TABLE).upsert(
            {
                "email": email,
                "external_subscription_id": subscription_id,
                "subscribed": True,
                "subscription_tier": tier_label,
                "subscription_end": subscription_end,
                "updated_at": _now(),
            },
            on_conflict="email",
        ).execute()

    def deactivate(self, subscription_id: str) -> None:
        """Cancellation/suspension: clear tier and end date."""
        self.client.table(SUBSCRIBERS_TABLE).update(
            {
                "subscribed": False,
                "subscription_tier": None,
                "subscription_end": None,
                "updated_at": _now(),
            }
        ).eq("external_subscription_id", subscription_id).execute()

    def renew(self, subscription_id: str, subscription_end: str | None) -> None:
        self.client.table(SUBSCRIBERS_TABLE).update(
            {
                "subscribed": True,
                "subscription_end": subscription_end,
                "updated_at": _now(),
            }
        ).eq("external_subscription_id", subscription_id).execute()

    def get_by_user(self, user_id: str) -> dict[str, Any] | None:
        response = (
            self.client.table(SUBSCRIBERS_TABLE)
            .select("subscribed, subscription_tier, subscription_end")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None
