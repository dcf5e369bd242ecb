"""Chat over stored knowledge: retrieve, then answer from what was found."""

from app.chains.generate_rag_response import ResponseGenerator, extract_sources
from app.core.logging import get_logger
from app.core.retrieval import Retriever
from app.core.schemas_knowledge import ChatResponse

logger = get_logger(__name__)


class ChatService:
    def __init__(self, retriever: Retriever, response_generator: ResponseGenerator):
        self.retriever = retriever
        self.response_generator = response_generator

    async def answer(self, user_id: str, message: str) -> ChatResponse:
        chunks = await self.retriever.retrieve(user_id, message)
        logger.info(f"Found {len(chunks)} relevant chunks", extra={"user_id": user_id})

        answer = await self.response_generator.generate(message, chunks)
        return ChatResponse(
            response=answer.content,
            sources=extract_sources(chunks),
            confidence=answer.confidence,
        )
