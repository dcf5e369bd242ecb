"""PayPal REST API service for subscription billing.

Uses httpx for async HTTP requests. Covers the calls the subscription flow
needs: OAuth token, catalog product, monthly plan, subscription creation and
webhook signature verification.
"""

from __future__ import annotations

from typing import Any

import httpx

from app.core.logging import get_logger
from app.core.schemas_billing import PlanDefinition

logger = get_logger(__name__)

PRODUCT_ID = "knowledge-forge-subscriptions"
PRODUCT_NAME = "Knowledge Forge Subscriptions"
# PayPal caps page_size at 20 for plan listings
PLAN_PAGE_SIZE = 20


class PayPalError(Exception):
    """A PayPal API call failed."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


def _is_duplicate(response: httpx.Response) -> bool:
    if response.status_code not in (400, 409, 422):
        return False
    text = response.text
    return "DUPLICATE_RESOURCE_IDENTIFIER" in text or "already exists" in text.lower()


def _raise_for_status(response: httpx.Response, action: str) -> None:
    if response.is_success:
        return
    logger.error(f"PayPal {action} failed: status={response.status_code} body={response.text}")
    raise PayPalError(
        f"Failed to {action}: {response.text}",
        status_code=response.status_code,
        body=response.text,
    )


class PayPalService:
    """Thin client over the PayPal REST endpoints used for billing."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        base_url: str,
        timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    @staticmethod
    def _headers(access_token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def get_access_token(self) -> str:
        """Exchange client credentials for an OAuth access token."""
        async with self._client() as client:
            resp = await client.post(
                "/v1/oauth2/token",
                auth=(self.client_id, self.client_secret),
                data={"grant_type": "client_credentials"},
            )
            _raise_for_status(resp, "get PayPal access token")
            return resp.json()["access_token"]

    async def ensure_product(self, access_token: str) -> str:
        """Create the catalog product, reusing it if it already exists."""
        async with self._client() as client:
            resp = await client.post(
                "/v1/catalogs/products",
                headers=self._headers(access_token),
                json={
                    "id": PRODUCT_ID,
                    "name": PRODUCT_NAME,
                    "type": "SERVICE",
                    "category": "SOFTWARE",
                },
            )
            if _is_duplicate(resp):
                logger.debug(f"PayPal product {PRODUCT_ID} already exists, reusing")
                return PRODUCT_ID
            _raise_for_status(resp, "create PayPal product")
            return resp.json().get("id", PRODUCT_ID)

    async def ensure_plan(self, access_token: str, product_id: str, plan: PlanDefinition) -> str:
        """Return the id of the active monthly plan named ``plan.name``, creating it if needed."""
        async with self._client() as client:
            page = 1
            while True:
                resp = await client.get(
                    "/v1/billing/plans",
                    headers=self._headers(access_token),
                    params={
                        "product_id": product_id,
                        "page_size": PLAN_PAGE_SIZE,
                        "page": page,
                        "total_required": "false",
                    },
                )
                _raise_for_status(resp, "list PayPal plans")
                data = resp.json()
                for existing in data.get("plans", []):
                    if existing.get("name") == plan.name and existing.get("status") == "ACTIVE":
                        return existing["id"]
                if not any(link.get("rel") == "next" for link in data.get("links", [])):
                    break
                page += 1

            resp = await client.post(
                "/v1/billing/plans",
                headers={**self._headers(access_token), "Prefer": "return=representation"},
                json={
                    "product_id": product_id,
                    "name": plan.name,
                    "description": plan.description,
                    "status": "ACTIVE",
                    "billing_cycles": [
                        {
                            "frequency": {"interval_unit": "MONTH", "interval_count": 1},
                            "tenure_type": "REGULAR",
                            "sequence": 1,
                            "total_cycles": 0,
                            "pricing_scheme": {
                                "fixed_price": {"value": plan.amount, "currency_code": plan.currency}
                            },
                        }
                    ],
                    "payment_preferences": {
                        "auto_bill_outstanding": True,
                        "setup_fee_failure_action": "CONTINUE",
                        "payment_failure_threshold": 3,
                    },
                },
            )
            _raise_for_status(resp, "create PayPal plan")
            plan_id = resp.json()["id"]
            logger.info(f"Created PayPal plan {plan_id} ({plan.name})")
            return plan_id

    async def create_subscription(
        self,
        access_token: str,
        *,
        plan_id: str,
        email: str,
        given_name: str,
        surname: str,
        brand_name: str,
        return_url: str,
        cancel_url: str,
        custom_id: str | None = None,
    ) -> dict[str, Any]:
        """Create a subscription awaiting buyer approval."""
        payload: dict[str, Any] = {
            "plan_id": plan_id,
            "subscriber": {
                "email_address": email,
                "name": {"given_name": given_name, "surname": surname},
            },
            "application_context": {
                "brand_name": brand_name,
                "user_action": "SUBSCRIBE_NOW",
                "payment_method": {
                    "payer_selected": "PAYPAL",
                    "payee_preferred": "IMMEDIATE_PAYMENT_REQUIRED",
                },
                "return_url": return_url,
                "cancel_url": cancel_url,
            },
        }
        if custom_id:
            payload["custom_id"] = custom_id

        async with self._client() as client:
            resp = await client.post(
                "/v1/billing/subscriptions",
                headers={**self._headers(access_token), "Prefer": "return=representation"},
                json=payload,
            )
            _raise_for_status(resp, "create PayPal subscription")
            data = resp.json()
            logger.info(f"PayPal subscription created: id={data.get('id')}")
            return data

    async def verify_webhook_signature(
        self, headers: dict[str, str | None], webhook_id: str, event: dict[str, Any]
    ) -> str | None:
        """
        Ask PayPal whether a webhook delivery is authentic.

        Returns:
            The ``verification_status`` (``SUCCESS`` or ``FAILURE``), or None
            when the token or verification request itself did not succeed
        """
        payload = {
            "auth_algo": headers.get("paypal-auth-algo"),
            "cert_id": headers.get("paypal-cert-id"),
            "transmission_id": headers.get("paypal-transmission-id"),
            "transmission_sig": headers.get("paypal-transmission-sig"),
            "transmission_time": headers.get("paypal-transmission-time"),
            "webhook_id": webhook_id,
            "webhook_event": event,
        }

        try:
            access_token = await self.get_access_token()
        except PayPalError:
            logger.warning("Could not obtain PayPal token for webhook verification")
            return None

        async with self._client() as client:
            resp = await client.post(
                "/v1/notifications/verify-webhook-signature",
                headers=self._headers(access_token),
                json=payload,
            )
            if not resp.is_success:
                logger.warning(f"Webhook verification request failed: status={resp.status_code}")
                return None
            return resp.json().get("verification_status")
