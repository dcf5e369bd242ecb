"""Pydantic models for knowledge processing, retrieval and brainstorming.

Wire payloads keep the camelCase keys the web client sends and expects
(``userId``, ``keyPoints``...), exposed in Python under snake_case names.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    """Base model accepting both field names and camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Capability outputs
# =============================================================================


class ScopeResult(BaseModel):
    """Scope classification for a piece of content."""

    scope: str = Field(..., min_length=1)
    confidence: float = 0.5
    reasoning: str = ""


class KnowledgeInsights(CamelModel):
    """Structured insights extracted from content (stored as processed_content)."""

    summary: str = ""
    key_points: list[str] = Field(default_factory=list, alias="keyPoints")
    entities: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    actionable_insights: list[str] = Field(default_factory=list, alias="actionableInsights")


class BrainstormIdea(CamelModel):
    """One idea connecting several of the user's knowledge areas."""

    title: str
    description: str = ""
    related_scopes: list[str] = Field(default_factory=list, alias="relatedScopes")
    action_items: list[str] = Field(default_factory=list, alias="actionItems")


class RetrievedChunk(BaseModel):
    """A piece of stored knowledge returned by the retriever."""

    id: str
    entry_id: str
    content_chunk: str
    similarity: float
    title: str | None = None
    scope_name: str = "Unknown"
    match_type: Literal["vector", "keyword", "recent"] = "vector"


class RagAnswer(BaseModel):
    """Generated answer plus the heuristic confidence attached to it."""

    content: str
    confidence: float


# =============================================================================
# process-knowledge
# =============================================================================


class ProcessKnowledgeRequest(CamelModel):
    title: str | None = None
    content: str = Field(..., min_length=1)
    source_url: str | None = Field(default=None, alias="sourceUrl")
    user_id: UUID = Field(..., alias="userId")
    generate_brainstorming: bool = Field(default=False, alias="generateBrainstorming")


class ProcessKnowledgeResponse(CamelModel):
    success: bool = True
    entry_id: str = Field(..., alias="entryId")
    scope_name: str = Field(..., alias="scopeName")
    insights: KnowledgeInsights
    brainstorming: list[BrainstormIdea] | None = None


class DeleteKnowledgeRequest(CamelModel):
    entry_id: UUID = Field(..., alias="entryId")
    user_id: UUID = Field(..., alias="userId")


class DeleteKnowledgeResponse(BaseModel):
    success: bool


class StoredKnowledge(CamelModel):
    """Identifiers produced by the knowledge store write path."""

    entry_id: str = Field(..., alias="entryId")
    scope_id: str = Field(..., alias="scopeId")
    scope_name: str = Field(..., alias="scopeName")
    chunk_count: int = Field(..., alias="chunkCount")


# =============================================================================
# chat-rag
# =============================================================================


class ChatRequest(CamelModel):
    message: str = Field(..., min_length=1)
    user_id: UUID = Field(..., alias="userId")


class ChatResponse(BaseModel):
    response: str
    sources: list[str] = Field(default_factory=list)
    confidence: float


# =============================================================================
# generate-brainstorming
# =============================================================================


class BrainstormRequest(CamelModel):
    user_id: UUID = Field(..., alias="userId")


class BrainstormResponse(BaseModel):
    ideas: list[BrainstormIdea] = Field(default_factory=list)
    message: str | None = None


# =============================================================================
# Browsing (dashboard and scopes views)
# =============================================================================


class EntrySummary(CamelModel):
    id: str
    title: str
    created_at: datetime | None = Field(default=None, alias="createdAt")
    scope_name: str | None = Field(default=None, alias="scopeName")
    scope_color: str | None = Field(default=None, alias="scopeColor")


class DashboardResponse(CamelModel):
    total_scopes: int = Field(..., alias="totalScopes")
    total_entries: int = Field(..., alias="totalEntries")
    recent_entries: list[EntrySummary] = Field(default_factory=list, alias="recentEntries")


class ScopeSummary(CamelModel):
    id: str
    name: str
    description: str | None = None
    color: str | None = None
    created_at: datetime | None = Field(default=None, alias="createdAt")
    entry_count: int = Field(default=0, alias="entryCount")
    entries: list[EntrySummary] = Field(default_factory=list)
