"""API router for v1 endpoints."""

from fastapi import APIRouter

from app.api import brainstorming, chat, knowledge, subscriptions, webhooks

router = APIRouter()

# Knowledge capture, deletion and browsing
router.include_router(knowledge.router, tags=["knowledge"])

# Chat over stored knowledge
router.include_router(chat.router, tags=["chat"])

# Cross-scope brainstorming
router.include_router(brainstorming.router, tags=["brainstorming"])

# PayPal checkout and status (bearer auth)
router.include_router(subscriptions.router, tags=["subscriptions"])

# PayPal lifecycle events (signature verified, no auth)
router.include_router(webhooks.router, tags=["webhooks"])
