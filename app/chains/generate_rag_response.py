"""Answer generation grounded in retrieved knowledge chunks."""

from app.core.llm import GenerationClient
from app.core.logging import get_logger
from app.core.schemas_knowledge import RagAnswer, RetrievedChunk

logger = get_logger(__name__)

NO_CONTEXT_MESSAGE = (
    "I couldn't find relevant information in your knowledge base to answer that question. "
    "Try adding more content related to this topic to get better answers!"
)
PROCESSING_ERROR_MESSAGE = (
    "I found some relevant information but had trouble processing it. "
    "Could you try rephrasing your question?"
)

RAG_SYSTEM = """You are a personal knowledge assistant for a user. Answer their question based ONLY on the provided context from their personal knowledge base.

IMPORTANT RULES:
1. Only use information from the provided context
2. If the context doesn't contain relevant information, say so clearly
3. Be professional and helpful
4. Reference specific sources when possible
5. Don't make up information not in the context"""

RAG_USER = """Context from user's knowledge base:
{context}

User's Question: {query}

Provide a helpful response based on the context above. If the context doesn't contain relevant information, suggest what type of knowledge they might need to add to get better answers."""


def build_context(chunks: list[RetrievedChunk]) -> str:
    """Render retrieved chunks as numbered sources separated by rules."""
    blocks = []
    for index, chunk in enumerate(chunks, start=1):
        blocks.append(
            f"Source {index}: {chunk.title or 'Untitled'}\n"
            f"Content: {chunk.content_chunk}\n"
            f"Scope: {chunk.scope_name or 'Unknown'}"
        )
    return "\n---\n".join(blocks)


def extract_sources(chunks: list[RetrievedChunk]) -> list[str]:
    """Distinct scope names of the retrieved chunks, in retrieval order."""
    sources: list[str] = []
    for chunk in chunks:
        if chunk.scope_name and chunk.scope_name not in sources:
            sources.append(chunk.scope_name)
    return sources


class ResponseGenerator:
    """Generates an answer to a query from retrieved context only."""

    def __init__(self, generator: GenerationClient | None):
        self.generator = generator

    async def generate(self, query: str, chunks: list[RetrievedChunk]) -> RagAnswer:
        """
        Answer ``query`` from ``chunks``.

        Confidence is 0.8 when any context was retrieved and 0.3 otherwise.
        If generation fails (or no model is configured) a fixed message is
        returned instead: 0.1 without context, 0.2 with context.
        """
        prompt = RAG_USER.format(context=build_context(chunks), query=query)

        try:
            if self.generator is None:
                raise RuntimeError("No generation model configured")
            content = await self.generator.complete_async(prompt, system=RAG_SYSTEM)
        except Exception as e:
            logger.error(f"RAG response generation failed: {e}")
            if not chunks:
                return RagAnswer(content=NO_CONTEXT_MESSAGE, confidence=0.1)
            return RagAnswer(content=PROCESSING_ERROR_MESSAGE, confidence=0.2)

        return RagAnswer(content=content, confidence=0.8 if chunks else 0.3)
