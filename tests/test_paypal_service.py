"""Tests for the PayPal REST client (httpx MockTransport)."""

import json

import httpx
import pytest

from app.core.schemas_billing import PLANS, SubscriptionTier
from app.services.paypal_service import PRODUCT_ID, PayPalError, PayPalService

BASE_URL = "https://api-m.sandbox.paypal.com"


def _service(handler) -> tuple[PayPalService, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    service = PayPalService("client", "secret", BASE_URL, transport=httpx.MockTransport(_record))
    return service, requests


class TestAccessToken:
    @pytest.mark.asyncio
    async def test_get_access_token(self):
        service, requests = _service(lambda r: httpx.Response(200, json={"access_token": "tok"}))

        assert await service.get_access_token() == "tok"
        assert requests[0].url.path == "/v1/oauth2/token"
        assert requests[0].headers["authorization"].startswith("Basic ")
        assert b"grant_type=client_credentials" in requests[0].content

    @pytest.mark.asyncio
    async def test_token_failure_raises(self):
        service, _ = _service(lambda r: httpx.Response(401, text="invalid_client"))

        with pytest.raises(PayPalError) as exc_info:
            await service.get_access_token()
        assert exc_info.value.status_code == 401


class TestCatalog:
    @pytest.mark.asyncio
    async def test_existing_product_is_reused(self):
        service, _ = _service(
            lambda r: httpx.Response(400, json={"name": "DUPLICATE_RESOURCE_IDENTIFIER"})
        )
        assert await service.ensure_product("tok") == PRODUCT_ID

    @pytest.mark.asyncio
    async def test_product_error_raises(self):
        service, _ = _service(lambda r: httpx.Response(500, text="boom"))
        with pytest.raises(PayPalError):
            await service.ensure_product("tok")

    @pytest.mark.asyncio
    async def test_existing_active_plan_is_reused(self):
        plan = PLANS[SubscriptionTier.PRO]
        service, requests = _service(
            lambda r: httpx.Response(
                200,
                json={
                    "plans": [
                        {"id": "P-OLD", "name": plan.name, "status": "INACTIVE"},
                        {"id": "P-PRO", "name": plan.name, "status": "ACTIVE"},
                    ]
                },
            )
        )

        assert await service.ensure_plan("tok", PRODUCT_ID, plan) == "P-PRO"
        assert len(requests) == 1
        assert requests[0].method == "GET"

    @pytest.mark.asyncio
    async def test_plan_on_later_page_is_found(self):
        plan = PLANS[SubscriptionTier.PRO]

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["page"] == "1":
                return httpx.Response(
                    200,
                    json={
                        "plans": [{"id": f"P-{i}", "name": "Other", "status": "ACTIVE"} for i in range(20)],
                        "links": [{"rel": "next", "href": "https://api/v1/billing/plans?page=2"}],
                    },
                )
            return httpx.Response(
                200, json={"plans": [{"id": "P-PRO", "name": plan.name, "status": "ACTIVE"}]}
            )

        service, requests = _service(handler)

        assert await service.ensure_plan("tok", PRODUCT_ID, plan) == "P-PRO"
        assert [r.method for r in requests] == ["GET", "GET"]

    @pytest.mark.asyncio
    async def test_missing_plan_is_created(self):
        plan = PLANS[SubscriptionTier.PREMIUM]

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json={"plans": []})
            return httpx.Response(201, json={"id": "P-PREMIUM"})

        service, requests = _service(handler)

        assert await service.ensure_plan("tok", PRODUCT_ID, plan) == "P-PREMIUM"
        body = json.loads(requests[1].content)
        assert body["name"] == "Knowledge Forge Premium Plan"
        cycle = body["billing_cycles"][0]
        assert cycle["frequency"] == {"interval_unit": "MONTH", "interval_count": 1}
        assert cycle["pricing_scheme"]["fixed_price"] == {"value": "30.00", "currency_code": "USD"}


class TestSubscription:
    @pytest.mark.asyncio
    async def test_create_subscription_payload(self):
        service, requests = _service(
            lambda r: httpx.Response(201, json={"id": "I-1", "links": []})
        )

        data = await service.create_subscription(
            "tok",
            plan_id="P-PRO",
            email="ada@example.com",
            given_name="Ada",
            surname="Lovelace",
            brand_name="Knowledge Forge",
            return_url="https://app/subscription-success",
            cancel_url="https://app/subscription-cancelled",
            custom_id="pro:user-1",
        )

        assert data["id"] == "I-1"
        body = json.loads(requests[0].content)
        assert body["plan_id"] == "P-PRO"
        assert body["custom_id"] == "pro:user-1"
        assert body["subscriber"]["email_address"] == "ada@example.com"
        assert body["application_context"]["return_url"] == "https://app/subscription-success"
        assert requests[0].headers["authorization"] == "Bearer tok"


class TestWebhookVerification:
    HEADERS = {
        "paypal-auth-algo": "SHA256withRSA",
        "paypal-cert-id": "cert",
        "paypal-transmission-id": "tid",
        "paypal-transmission-sig": "sig",
        "paypal-transmission-time": "2025-01-01T00:00:00Z",
    }

    @pytest.mark.asyncio
    async def test_returns_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/v1/oauth2/token":
                return httpx.Response(200, json={"access_token": "tok"})
            return httpx.Response(200, json={"verification_status": "FAILURE"})

        service, requests = _service(handler)
        status = await service.verify_webhook_signature(self.HEADERS, "WH-1", {"id": "evt"})

        assert status == "FAILURE"
        body = json.loads(requests[1].content)
        assert body["webhook_id"] == "WH-1"
        assert body["transmission_sig"] == "sig"
        assert body["webhook_event"] == {"id": "evt"}

    @pytest.mark.asyncio
    async def test_request_failure_returns_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/v1/oauth2/token":
                return httpx.Response(200, json={"access_token": "tok"})
            return httpx.Response(503, text="unavailable")

        service, _ = _service(handler)
        assert await service.verify_webhook_signature(self.HEADERS, "WH-1", {}) is None

    @pytest.mark.asyncio
    async def test_token_failure_returns_none(self):
        service, _ = _service(lambda r: httpx.Response(401, text="nope"))
        assert await service.verify_webhook_signature(self.HEADERS, "WH-1", {}) is None
