"""Run a prompt against one or more models and detect tracked entities in the answers."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.analysis.mention_detector import highlight_mentions
from app.backends.base import BackendInvoker
from app.backends.openrouter import AVAILABLE_MODELS
from app.core.config import settings
from app.core.dependencies import get_backend_invoker, get_current_user
from app.core.rate_limit import limiter
from app.db.postgres import get_db
from app.models.user import User
from app.schemas.execute import (
    BackendFailureOut,
    ExecuteRequest,
    ExecuteResponse,
    MentionOut,
    ModelListResponse,
    ModelOption,
    ModelResultOut,
)
from app.services.execution_service import (
    ExecutionOrchestrator,
    ExecutionRequest,
    ModelResult,
    SqlExecutionStore,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/execute", tags=["execute"])


def _result_out(result: ModelResult) -> ModelResultOut:
    return ModelResultOut(
        id=result.id,
        model=result.model,
        response=result.response,
        prompt_id=result.prompt_id,
        keywords_mentioned=[
            MentionOut(
                keyword=m.entity.id,
                keyword_id=m.entity.id,
                keyword_name=m.entity.name,
                position=m.position,
                sentiment=m.sentiment.value,
                context=m.context,
            )
            for m in result.mentions
        ],
        highlighted_response=highlight_mentions(result.response, result.mentions),
        created_at=result.created_at,
    )


@router.post("/", response_model=ExecuteResponse, status_code=201)
@limiter.limit(settings.execute_rate_limit)
async def execute_prompt(
    request: Request,
    body: ExecuteRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    invoker: BackendInvoker = Depends(get_backend_invoker),
):
    orchestrator = ExecutionOrchestrator(
        SqlExecutionStore(db), invoker, call_timeout=settings.backend_timeout_seconds
    )
    outcome = await orchestrator.execute(
        ExecutionRequest(
            model=body.model,
            prompt_id=body.prompt_id,
            prompt_content=body.prompt_content,
            compare_models=body.compare_models,
            keyword_ids=body.keyword_ids,
        ),
        user,
    )
    return ExecuteResponse(
        results=[_result_out(r) for r in outcome.results],
        errors=[BackendFailureOut(model=f.model, detail=f.detail) for f in outcome.errors],
    )


@router.get("/models", response_model=ModelListResponse)
async def list_models():
    return ModelListResponse(models=[ModelOption(**m) for m in AVAILABLE_MODELS])
