"""Tests for settings and structured logging."""

import logging

from app.core.config import Settings
from app.core.logging import StructuredFormatter


def _settings(**overrides) -> Settings:
    return Settings(
        SUPABASE_URL="https://test.supabase.co",
        SUPABASE_SERVICE_ROLE_KEY="test-key",
        **overrides,
    )


def test_defaults():
    settings = _settings()

    assert settings.EMBEDDING_DIM == 768
    assert settings.CHUNK_SIZE == 500
    assert settings.RAG_MATCH_THRESHOLD == 0.4
    assert settings.RAG_MATCH_COUNT == 15


def test_paypal_base_url():
    assert _settings().paypal_base_url == "https://api-m.sandbox.paypal.com"
    assert _settings(PAYPAL_ENVIRONMENT="live").paypal_base_url == "https://api-m.paypal.com"


def test_structured_formatter_includes_context():
    record = logging.LogRecord("forge", logging.INFO, __file__, 1, "Stored entry", None, None)
    record.user_id = "u-1"
    record.extra_data = {"chunks": 3}

    line = StructuredFormatter().format(record)

    assert "level=INFO" in line
    assert "message=Stored entry" in line
    assert "user_id=u-1" in line
    assert "chunks=3" in line
