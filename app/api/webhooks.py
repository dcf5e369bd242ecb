"""Webhook handler for PayPal subscription events.

Registered WITHOUT auth middleware: authenticity comes from PayPal's
signature verification when a webhook id is configured.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse

from app.api.deps import get_subscription_manager
from app.core.logging import get_logger
from app.services.subscription_manager import SubscriptionManager, WebhookVerificationError

logger = get_logger(__name__)

router = APIRouter()

PAYPAL_HEADERS = (
    "paypal-auth-algo",
    "paypal-cert-id",
    "paypal-transmission-id",
    "paypal-transmission-sig",
    "paypal-transmission-time",
)


@router.post("/paypal-webhook", response_class=PlainTextResponse)
async def paypal_webhook(
    request: Request,
    manager: SubscriptionManager = Depends(get_subscription_manager),
) -> PlainTextResponse:
    """
    Apply a PayPal subscription lifecycle event to the subscriber table.

    Raises:
        HTTPException 400: If PayPal reports the signature as invalid
        HTTPException 500: If the body is unreadable or the update fails
    """
    try:
        event = await request.json()
    except ValueError as e:
        logger.warning(f"PayPal webhook: unreadable body: {e}")
        raise HTTPException(status_code=500, detail="Invalid webhook body") from e

    headers = {name: request.headers.get(name) for name in PAYPAL_HEADERS}

    try:
        await manager.handle_webhook(event, headers)
    except WebhookVerificationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        logger.exception("PayPal webhook processing failed")
        raise HTTPException(status_code=500, detail=str(e)) from e

    return PlainTextResponse("Webhook processed")
