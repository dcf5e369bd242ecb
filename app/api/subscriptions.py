"""API endpoints for PayPal subscription checkout and status."""

from fastapi import APIRouter, Depends, HTTPException, Request

from app.api.deps import get_subscription_manager
from app.core.auth_middleware import AuthenticatedUser, get_authenticated_user
from app.core.logging import get_logger
from app.core.schemas_billing import (
    CreateSubscriptionRequest,
    CreateSubscriptionResponse,
    SubscriptionStatus,
)
from app.services.paypal_service import PayPalError
from app.services.subscription_manager import SubscriptionManager

logger = get_logger(__name__)

router = APIRouter()


@router.post("/create-paypal-subscription", response_model=CreateSubscriptionResponse)
async def create_paypal_subscription(
    body: CreateSubscriptionRequest,
    request: Request,
    user: AuthenticatedUser = Depends(get_authenticated_user),
    manager: SubscriptionManager = Depends(get_subscription_manager),
) -> CreateSubscriptionResponse:
    """
    Start a PayPal subscription for the signed-in user.

    Returns the PayPal approval URL; the subscriber row stays inactive until
    the activation webhook arrives.

    Raises:
        HTTPException 401: If the bearer token is missing or invalid
        HTTPException 500: If PayPal is not configured or a PayPal call fails
    """
    origin = request.headers.get("origin")
    try:
        return await manager.create_subscription(user, body.tier, origin)
    except PayPalError as e:
        logger.error(f"Subscription creation failed: {e}", extra={"user_id": user.id})
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.post("/check-paypal-subscription", response_model=SubscriptionStatus)
def check_paypal_subscription(
    user: AuthenticatedUser = Depends(get_authenticated_user),
    manager: SubscriptionManager = Depends(get_subscription_manager),
) -> SubscriptionStatus:
    try:
        return manager.get_status(user.id)
    except Exception as e:
        logger.exception("Subscription check failed", extra={"user_id": user.id})
        raise HTTPException(status_code=500, detail=str(e)) from e
