"""API endpoints for knowledge processing, deletion and browsing."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from app.api.deps import get_knowledge_pipeline, get_knowledge_store
from app.core.logging import get_logger
from app.core.schemas_knowledge import (
    DashboardResponse,
    DeleteKnowledgeRequest,
    DeleteKnowledgeResponse,
    ProcessKnowledgeRequest,
    ProcessKnowledgeResponse,
    ScopeSummary,
)
from app.db.knowledge import KnowledgeStore
from app.services.knowledge_pipeline import KnowledgePipeline
from app.services.knowledge_views import build_dashboard, build_scope_summaries

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/process-knowledge",
    response_model=ProcessKnowledgeResponse,
    response_model_exclude_none=True,
)
async def process_knowledge(
    request: ProcessKnowledgeRequest,
    pipeline: KnowledgePipeline = Depends(get_knowledge_pipeline),
) -> ProcessKnowledgeResponse:
    """
    Classify, summarize, embed and store a piece of knowledge.

    Raises:
        HTTPException 500: If a model call or storage fails
    """
    try:
        return await pipeline.process(request)
    except Exception as e:
        logger.exception("Knowledge processing failed", extra={"user_id": str(request.user_id)})
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.delete("/process-knowledge", response_model=DeleteKnowledgeResponse)
def delete_knowledge(
    request: DeleteKnowledgeRequest,
    pipeline: KnowledgePipeline = Depends(get_knowledge_pipeline),
):
    """Delete one of the user's entries; its embeddings go with it."""
    try:
        deleted = pipeline.delete(str(request.user_id), str(request.entry_id))
    except Exception as e:
        logger.exception("Knowledge deletion failed", extra={"user_id": str(request.user_id)})
        raise HTTPException(status_code=500, detail=str(e)) from e

    if not deleted:
        return JSONResponse(status_code=404, content={"success": False})
    return DeleteKnowledgeResponse(success=True)


@router.get("/knowledge/dashboard", response_model=DashboardResponse)
def get_dashboard(
    user_id: UUID = Query(..., alias="userId"),
    store: KnowledgeStore = Depends(get_knowledge_store),
) -> DashboardResponse:
    try:
        return build_dashboard(store, str(user_id))
    except Exception as e:
        logger.exception("Failed to load dashboard", extra={"user_id": str(user_id)})
        raise HTTPException(status_code=500, detail=str(e)) from e


@router.get("/knowledge/scopes", response_model=list[ScopeSummary])
def list_scopes(
    user_id: UUID = Query(..., alias="userId"),
    store: KnowledgeStore = Depends(get_knowledge_store),
) -> list[ScopeSummary]:
    try:
        return build_scope_summaries(store, str(user_id))
    except Exception as e:
        logger.exception("Failed to list scopes", extra={"user_id": str(user_id)})
        raise HTTPException(status_code=500, detail=str(e)) from e
