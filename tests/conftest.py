"""Pytest configuration and fixtures."""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

from tests.fakes.fake_supabase import FakeSupabase


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["SUPABASE_URL"] = "https://test.supabase.co"
    os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-key"
    os.environ["FORGE_ENV"] = "test"
    # Model-backed steps are exercised through mocked generators only
    os.environ.pop("OPENAI_API_KEY", None)


@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def mock_generator():
    """GenerationClient double whose async completion is an AsyncMock."""
    generator = MagicMock()
    generator.complete_async = AsyncMock()
    return generator
