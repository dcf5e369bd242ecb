"""API endpoint for chatting with the knowledge base."""

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_chat_service
from app.core.logging import get_logger
from app.core.schemas_knowledge import ChatRequest, ChatResponse
from app.services.chat_service import ChatService

logger = get_logger(__name__)

router = APIRouter()


@router.post("/chat-rag", response_model=ChatResponse)
async def chat_rag(
    request: ChatRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    """
    Answer a question from the user's stored knowledge.

    Retrieval falls back from vector search to keyword search to recent
    entries; the answer carries the scope names it drew on.

    Raises:
        HTTPException 500: If retrieval fails
    """
    user_id = str(request.user_id)
    try:
        return await chat_service.answer(user_id, request.message)
    except Exception as e:
        logger.exception("RAG chat failed", extra={"user_id": user_id})
        raise HTTPException(status_code=500, detail=str(e)) from e
