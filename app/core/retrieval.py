"""Tiered knowledge retrieval for chat.

Three tiers, each consulted only when the previous one came up short:

1. vector search over chunk embeddings (``match_knowledge_embeddings``)
2. keyword search over entry titles and content, when tier 1 found fewer
   than ``min_vector_results`` rows
3. the user's most recent entries, when nothing was found at all

Tiers are concatenated in that order, never re-sorted together.

Usage:
    retriever = Retriever(store, embedding_client)
    chunks = await retriever.retrieve(user_id, "What did I save about pricing?")
"""

import re
from dataclasses import dataclass

from app.core.embeddings import EmbeddingClient
from app.core.logging import get_logger
from app.core.schemas_knowledge import RetrievedChunk
from app.db.knowledge import KnowledgeStore

logger = get_logger(__name__)

KEYWORD_SIMILARITY = 0.3
RECENT_SIMILARITY = 0.2
SNIPPET_CHARS = 500


@dataclass
class RetrievalSettings:
    match_threshold: float = 0.4
    match_count: int = 15
    min_vector_results: int = 5
    text_result_limit: int = 10
    recent_limit: int = 8
    max_keywords: int = 3


def extract_keywords(query: str, max_keywords: int = 3) -> list[str]:
    """Lowercased word tokens longer than two characters, in query order."""
    tokens = re.sub(r"[^\w\s]", " ", query.lower()).split()
    return [token for token in tokens if len(token) > 2][:max_keywords]


def _scope_name(row: dict) -> str:
    scope = row.get("knowledge_scopes") or {}
    if isinstance(scope, list):
        scope = scope[0] if scope else {}
    return scope.get("name") or "Unknown"


def _entry_to_chunk(row: dict, similarity: float, match_type: str) -> RetrievedChunk:
    return RetrievedChunk(
        id=str(row["id"]),
        entry_id=str(row["id"]),
        content_chunk=(row.get("content") or "")[:SNIPPET_CHARS],
        similarity=similarity,
        title=row.get("title"),
        scope_name=_scope_name(row),
        match_type=match_type,
    )


class Retriever:
    """Finds the stored knowledge most relevant to a query, for one user only."""

    def __init__(
        self,
        store: KnowledgeStore,
        embedding_client: EmbeddingClient,
        settings: RetrievalSettings | None = None,
    ):
        self.store = store
        self.embedding_client = embedding_client
        self.settings = settings or RetrievalSettings()

    async def retrieve(self, user_id: str, query: str) -> list[RetrievedChunk]:
        """Embed ``query`` and run the tiered search."""
        query_embedding = await self.embedding_client.embed_async(query)
        return self.retrieve_with_embedding(user_id, query, query_embedding)

    def retrieve_with_embedding(
        self, user_id: str, query: str, query_embedding: list[float]
    ) -> list[RetrievedChunk]:
        cfg = self.settings

        rows = self.store.match_embeddings(
            user_id, query_embedding, cfg.match_threshold, cfg.match_count
        )
        results = [
            RetrievedChunk(
                id=str(row["id"]),
                entry_id=str(row["entry_id"]),
                content_chunk=row.get("content_chunk") or "",
                similarity=float(row.get("similarity") or 0.0),
                title=row.get("title"),
                scope_name=row.get("scope_name") or "Unknown",
                match_type="vector",
            )
            for row in rows
        ]

        if len(results) < cfg.min_vector_results:
            keywords = extract_keywords(query, cfg.max_keywords)
            remaining = cfg.text_result_limit - len(results)
            if keywords and remaining > 0:
                logger.info(
                    f"Vector search returned {len(results)} rows, adding keyword search",
                    extra={"user_id": user_id},
                )
                entries = self.store.search_entries_by_keywords(user_id, keywords, remaining)
                results.extend(
                    _entry_to_chunk(row, KEYWORD_SIMILARITY, "keyword") for row in entries
                )

        if not results:
            logger.info("No vector or keyword matches, using recent entries", extra={"user_id": user_id})
            entries = self.store.list_recent_entries(user_id, cfg.recent_limit)
            results = [_entry_to_chunk(row, RECENT_SIMILARITY, "recent") for row in entries]

        return results
