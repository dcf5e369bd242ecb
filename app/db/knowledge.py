"""Knowledge store: scopes, entries and embedding chunks in Supabase."""

from typing import Any

from supabase import Client

from app.core.logging import get_logger
from app.core.schemas_knowledge import KnowledgeInsights, ScopeResult, StoredKnowledge

logger = get_logger(__name__)

SCOPES_TABLE = "knowledge_scopes"
ENTRIES_TABLE = "knowledge_entries"
EMBEDDINGS_TABLE = "embeddings"


class StorageError(Exception):
    """Raised when a write completes without returning the expected rows."""


class KnowledgeStore:
    """Reads and writes a user's knowledge rows; every query is scoped by user_id."""

    def __init__(self, client: Client):
        self.client = client

    # =========================================================================
    # Write path
    # =========================================================================

    def get_or_create_scope(self, user_id: str, name: str, description: str | None) -> dict[str, Any]:
        """
        Return the (user_id, name) scope, creating it if needed.

        Creation goes through an upsert on the unique (user_id, name)
        constraint that ignores duplicates, so concurrent first submissions
        converge on one row.

        Returns:
            Scope row with at least ``id`` and ``name``

        Raises:
            StorageError: If the scope can neither be found nor created
        """
        existing = self._find_scope(user_id, name)
        if existing:
            return existing

        response = (
            self.client.table(SCOPES_TABLE)
            .upsert(
                {"user_id": user_id, "name": name, "description": description},
                on_conflict="user_id,name",
                ignore_duplicates=True,
            )
            .execute()
        )
        if response.data:
            logger.info(f"Created scope '{name}' for user {user_id}")
            return response.data[0]

        # Lost the race to a concurrent insert: the row exists now
        existing = self._find_scope(user_id, name)
        if not existing:
            raise StorageError(f"Failed to create scope '{name}'")
        return existing

    def _find_scope(self, user_id: str, name: str) -> dict[str, Any] | None:
        response = (
            self.client.table(SCOPES_TABLE)
            .select("id, name")
            .eq("user_id", user_id)
            .eq("name", name)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None

    def store(
        self,
        *,
        user_id: str,
        title: str,
        content: str,
        source_url: str | None,
        scope_result: ScopeResult,
        insights: KnowledgeInsights,
        chunks: list[dict[str, Any]],
    ) -> StoredKnowledge:
        """
        Persist a processed knowledge submission.

        Steps: get-or-create the scope, insert the entry, insert one embedding
        row per chunk. Any failing step raises and the caller treats the whole
        write as failed.

        Args:
            user_id: Owner of every row written
            title: Entry title
            content: Full entry content
            source_url: Optional source link
            scope_result: Classifier output (scope name and reasoning)
            insights: Extracted insights, stored as processed_content
            chunks: Dicts with ``chunk_index``, ``content`` and ``embedding``

        Returns:
            StoredKnowledge with the new entry id and scope
        """
        scope = self.get_or_create_scope(user_id, scope_result.scope, scope_result.reasoning)

        entry_response = (
            self.client.table(ENTRIES_TABLE)
            .insert(
                {
                    "user_id": user_id,
                    "scope_id": scope["id"],
                    "title": title,
                    "content": content,
                    "source_url": source_url,
                    "processed_content": insights.model_dump(by_alias=True),
                }
            )
            .execute()
        )
        if not entry_response.data:
            raise StorageError("Knowledge entry insert returned no row")
        entry_id = entry_response.data[0]["id"]

        if chunks:
            rows = [
                {
                    "entry_id": entry_id,
                    "user_id": user_id,
                    "content_chunk": chunk["content"],
                    "embedding": chunk["embedding"],
                    "chunk_index": chunk["chunk_index"],
                }
                for chunk in chunks
            ]
            self.client.table(EMBEDDINGS_TABLE).insert(rows).execute()

        logger.info(
            f"Stored entry {entry_id} in scope '{scope['name']}' with {len(chunks)} chunks",
            extra={"user_id": user_id},
        )

        return StoredKnowledge(
            entry_id=entry_id,
            scope_id=scope["id"],
            scope_name=scope["name"],
            chunk_count=len(chunks),
        )

    def delete_entry(self, user_id: str, entry_id: str) -> bool:
        """
        Delete one of the user's entries; embedding rows cascade.

        Returns:
            True if a row was deleted
        """
        response = (
            self.client.table(ENTRIES_TABLE)
            .delete()
            .eq("id", entry_id)
            .eq("user_id", user_id)
            .execute()
        )
        deleted = bool(response.data)
        if deleted:
            logger.info(f"Deleted entry {entry_id}", extra={"user_id": user_id})
        else:
            logger.warning(f"Entry {entry_id} not found for deletion", extra={"user_id": user_id})
        return deleted

    # =========================================================================
    # Read path
    # =========================================================================

    def match_embeddings(
        self,
        user_id: str,
        query_embedding: list[float],
        match_threshold: float,
        match_count: int,
    ) -> list[dict[str, Any]]:
        """
        Nearest chunks by cosine similarity via ``match_knowledge_embeddings``.

        Returns:
            Rows (id, content_chunk, similarity, entry_id, title, scope_name)
            ordered by descending similarity
        """
        response = self.client.rpc(
            "match_knowledge_embeddings",
            {
                "query_embedding": query_embedding,
                "match_threshold": match_threshold,
                "match_count": match_count,
                "user_id": user_id,
            },
        ).execute()
        return response.data or []

    def search_entries_by_keywords(
        self, user_id: str, keywords: list[str], limit: int
    ) -> list[dict[str, Any]]:
        """Entries whose title or content contains any keyword (case-insensitive)."""
        if not keywords or limit <= 0:
            return []

        conditions = ",".join(
            f"{column}.ilike.%{keyword}%" for keyword in keywords for column in ("title", "content")
        )
        response = (
            self.client.table(ENTRIES_TABLE)
            .select("id, title, content, created_at, knowledge_scopes!inner(name)")
            .eq("user_id", user_id)
            .or_(conditions)
            .limit(limit)
            .execute()
        )
        return response.data or []

    def list_recent_entries(self, user_id: str, limit: int) -> list[dict[str, Any]]:
        """Most recent entries first, with their scope name and color."""
        response = (
            self.client.table(ENTRIES_TABLE)
            .select("id, title, content, created_at, knowledge_scopes(name, color)")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return response.data or []

    def list_scopes_with_entries(self, user_id: str) -> list[dict[str, Any]]:
        """Scopes newest first, each with its entries (title, processed content)."""
        response = (
            self.client.table(SCOPES_TABLE)
            .select(
                "id, name, description, color, created_at, "
                "knowledge_entries(id, title, processed_content, created_at)"
            )
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    def count_scopes(self, user_id: str) -> int:
        response = (
            self.client.table(SCOPES_TABLE)
            .select("id", count="exact", head=True)
            .eq("user_id", user_id)
            .execute()
        )
        return response.count or 0

    def count_entries(self, user_id: str) -> int:
        response = (
            self.client.table(ENTRIES_TABLE)
            .select("id", count="exact", head=True)
            .eq("user_id", user_id)
            .execute()
        )
        return response.count or 0
