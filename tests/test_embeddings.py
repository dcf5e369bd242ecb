"""Tests for embeddings generation with mocked OpenAI API."""

from unittest.mock import MagicMock

import pytest

from app.core.embeddings import EmbeddingClient, random_embedding

DIM = 768


@pytest.fixture
def mock_openai_response():
    """Create a mock OpenAI embeddings response."""

    def _create_response(dimension: int = DIM, value: float = 0.1):
        mock_response = MagicMock()
        mock_embedding = MagicMock()
        mock_embedding.embedding = [value] * dimension
        mock_response.data = [mock_embedding]
        return mock_response

    return _create_response


def test_embed_uses_provider(mock_openai_response):
    mock_client = MagicMock()
    mock_client.embeddings.create.return_value = mock_openai_response()

    client = EmbeddingClient(mock_client, model="text-embedding-3-small", dimension=DIM)
    embedding = client.embed("Hello world")

    assert embedding == [0.1] * DIM
    kwargs = mock_client.embeddings.create.call_args.kwargs
    assert kwargs["dimensions"] == DIM
    assert kwargs["input"] == "Hello world"


def test_embed_without_client_returns_placeholder():
    client = EmbeddingClient(None, model="text-embedding-3-small", dimension=DIM)
    embedding = client.embed("Hello world")

    assert len(embedding) == DIM
    assert all(-0.5 <= v < 0.5 for v in embedding)


def test_embed_api_failure_falls_back():
    """Provider errors never reach the caller."""
    mock_client = MagicMock()
    mock_client.embeddings.create.side_effect = Exception("API Error")

    client = EmbeddingClient(mock_client, model="text-embedding-3-small", dimension=DIM)
    embedding = client.embed("Test text")

    assert len(embedding) == DIM


def test_embed_dimension_mismatch_falls_back(mock_openai_response):
    mock_client = MagicMock()
    mock_client.embeddings.create.return_value = mock_openai_response(dimension=512)

    client = EmbeddingClient(mock_client, model="text-embedding-3-small", dimension=DIM)
    embedding = client.embed("Test text")

    assert len(embedding) == DIM
    assert embedding != [0.1] * DIM


def test_random_embedding_shape():
    assert len(random_embedding(16)) == 16


@pytest.mark.asyncio
async def test_embed_many_preserves_order(mock_openai_response):
    mock_client = MagicMock()
    mock_client.embeddings.create.side_effect = lambda **kwargs: mock_openai_response(
        value=float(len(kwargs["input"]))
    )

    client = EmbeddingClient(mock_client, model="text-embedding-3-small", dimension=DIM)
    embeddings = await client.embed_many(["a", "bb", "ccc"])

    assert [e[0] for e in embeddings] == [1.0, 2.0, 3.0]


@pytest.mark.asyncio
async def test_embed_many_falls_back_per_chunk(mock_openai_response):
    """One failing chunk does not affect the others."""

    def _create(**kwargs):
        if kwargs["input"] == "bad":
            raise Exception("API Error")
        return mock_openai_response()

    mock_client = MagicMock()
    mock_client.embeddings.create.side_effect = _create

    client = EmbeddingClient(mock_client, model="text-embedding-3-small", dimension=DIM)
    embeddings = await client.embed_many(["good", "bad", "good"])

    assert embeddings[0] == [0.1] * DIM
    assert embeddings[2] == [0.1] * DIM
    assert len(embeddings[1]) == DIM
    assert embeddings[1] != [0.1] * DIM


@pytest.mark.asyncio
async def test_embed_many_empty():
    client = EmbeddingClient(None, model="text-embedding-3-small", dimension=DIM)
    assert await client.embed_many([]) == []
