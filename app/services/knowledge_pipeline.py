"""Knowledge processing pipeline.

A submission is chunked, then title, scope, insights and chunk embeddings
are produced concurrently (they do not depend on each other) and joined
before a single store call.
"""

from __future__ import annotations

import asyncio
import logging

from app.chains.classify_scope import ScopeClassifier
from app.chains.extract_insights import InsightExtractor
from app.chains.generate_brainstorming import BrainstormGenerator
from app.chains.generate_title import TitleGenerator
from app.core.chunking import chunk_text
from app.core.embeddings import EmbeddingClient
from app.core.logging import get_logger, log_with_context
from app.core.schemas_knowledge import (
    BrainstormResponse,
    ProcessKnowledgeRequest,
    ProcessKnowledgeResponse,
)
from app.db.knowledge import KnowledgeStore

logger = get_logger(__name__)

NO_KNOWLEDGE_MESSAGE = (
    "Add some knowledge to your database first to get AI-generated brainstorming ideas!"
)


class KnowledgePipeline:
    def __init__(
        self,
        *,
        classifier: ScopeClassifier,
        extractor: InsightExtractor,
        title_generator: TitleGenerator,
        embedding_client: EmbeddingClient,
        brainstormer: BrainstormGenerator,
        store: KnowledgeStore,
        chunk_size: int = 500,
    ):
        self.classifier = classifier
        self.extractor = extractor
        self.title_generator = title_generator
        self.embedding_client = embedding_client
        self.brainstormer = brainstormer
        self.store = store
        self.chunk_size = chunk_size

    async def _resolve_title(self, request: ProcessKnowledgeRequest) -> str:
        if request.title and request.title.strip():
            return request.title.strip()
        return await self.title_generator.generate(request.content)

    async def process(self, request: ProcessKnowledgeRequest) -> ProcessKnowledgeResponse:
        """
        Classify, summarize, embed and store one submission.

        Errors from the scope or insight model calls and from storage
        propagate; the whole submission is then treated as failed.
        """
        user_id = str(request.user_id)
        content = request.content
        log_with_context(logger, logging.INFO, "Processing knowledge", user_id=user_id, chars=len(content))

        chunks = chunk_text(content, self.chunk_size)

        title, scope_result, insights, embeddings = await asyncio.gather(
            self._resolve_title(request),
            self.classifier.classify(content),
            self.extractor.extract(content),
            self.embedding_client.embed_many([chunk["content"] for chunk in chunks]),
        )

        for chunk, embedding in zip(chunks, embeddings):
            chunk["embedding"] = embedding

        stored = self.store.store(
            user_id=user_id,
            title=title,
            content=content,
            source_url=request.source_url,
            scope_result=scope_result,
            insights=insights,
            chunks=chunks,
        )

        brainstorming = None
        if request.generate_brainstorming:
            brainstorming = (await self.brainstorm(user_id)).ideas

        return ProcessKnowledgeResponse(
            success=True,
            entry_id=stored.entry_id,
            scope_name=stored.scope_name,
            insights=insights,
            brainstorming=brainstorming,
        )

    def delete(self, user_id: str, entry_id: str) -> bool:
        return self.store.delete_entry(user_id, entry_id)

    async def brainstorm(self, user_id: str) -> BrainstormResponse:
        """Ideas connecting the user's scopes; a hint message when there are none."""
        scopes = self.store.list_scopes_with_entries(user_id)
        if not scopes:
            return BrainstormResponse(ideas=[], message=NO_KNOWLEDGE_MESSAGE)

        ideas = await self.brainstormer.generate(scopes)
        return BrainstormResponse(ideas=ideas)
