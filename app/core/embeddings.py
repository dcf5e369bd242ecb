"""OpenAI embeddings with a shape-preserving random fallback."""

import asyncio
import random

from openai import OpenAI

from app.core.logging import get_logger

logger = get_logger(__name__)


def random_embedding(dimension: int) -> list[float]:
    """
    Build a placeholder vector with components uniform in [-0.5, 0.5).

    The vector has the right shape for storage but carries no meaning, so
    similarity scores against it are noise.
    """
    return [random.random() - 0.5 for _ in range(dimension)]


class EmbeddingClient:
    """Embeds text one chunk at a time, never raising on provider failure."""

    def __init__(self, client: OpenAI | None, model: str, dimension: int):
        self.client = client
        self.model = model
        self.dimension = dimension

    def embed(self, text: str) -> list[float]:
        """
        Generate an embedding for a single text.

        Args:
            text: Text to embed

        Returns:
            Embedding vector of length ``dimension``; a random placeholder
            when the provider is unavailable, fails, or returns the wrong
            dimension
        """
        if self.client is None:
            return random_embedding(self.dimension)

        try:
            response = self.client.embeddings.create(
                model=self.model,
                input=text,
                dimensions=self.dimension,
            )
            embedding = response.data[0].embedding

            if len(embedding) != self.dimension:
                raise ValueError(
                    f"Embedding dimension mismatch: expected {self.dimension}, got {len(embedding)}"
                )

            return list(embedding)

        except Exception as e:
            logger.warning(f"Embedding failed, using random placeholder vector: {e}")
            return random_embedding(self.dimension)

    async def embed_async(self, text: str) -> list[float]:
        """Async wrapper around embed using thread pool."""
        return await asyncio.to_thread(self.embed, text)

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        """
        Embed several texts concurrently.

        Each text falls back independently, so one failing chunk never
        affects the vectors of the others. Output order matches input order.
        """
        if not texts:
            return []

        embeddings = await asyncio.gather(*(self.embed_async(text) for text in texts))

        logger.info(
            f"Generated {len(embeddings)} embeddings using {self.model}",
            extra={"extra_data": {"model": self.model, "count": len(embeddings)}},
        )
        return list(embeddings)
