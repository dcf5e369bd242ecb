"""API endpoint for brainstorming across knowledge scopes."""

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_knowledge_pipeline
from app.core.logging import get_logger
from app.core.schemas_knowledge import BrainstormRequest, BrainstormResponse
from app.services.knowledge_pipeline import KnowledgePipeline

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/generate-brainstorming",
    response_model=BrainstormResponse,
    response_model_exclude_none=True,
)
async def generate_brainstorming(
    request: BrainstormRequest,
    pipeline: KnowledgePipeline = Depends(get_knowledge_pipeline),
) -> BrainstormResponse:
    try:
        return await pipeline.brainstorm(str(request.user_id))
    except Exception as e:
        logger.exception("Brainstorming failed", extra={"user_id": str(request.user_id)})
        raise HTTPException(status_code=500, detail=str(e)) from e
