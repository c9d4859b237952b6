"""Result history, filtered by the caller's tier retention window."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user
from app.core.exceptions import NotFoundError
from app.core.tier_limits import get_retention_cutoff
from app.db.postgres import get_db
from app.models.keyword import Keyword
from app.models.prompt import Prompt
from app.models.result import Result
from app.models.user import User
from app.schemas.result import ResultListResponse, ResultResponse, StoredMention

router = APIRouter(prefix="/results", tags=["results"])


async def _lookup_names(db: AsyncSession, user: User, rows: list[Result]) -> tuple[dict[int, str], dict[int, str]]:
    """Keyword names and prompt titles referenced by *rows*."""
    keyword_ids = {m.get("keyword") for r in rows for m in (r.keywords_mentioned or []) if m.get("keyword")}
    prompt_ids = {r.prompt_id for r in rows if r.prompt_id}

    keyword_names: dict[int, str] = {}
    if keyword_ids:
        kw_rows = await db.execute(
            select(Keyword.id, Keyword.name).where(Keyword.user_id == user.id, Keyword.id.in_(list(keyword_ids)))
        )
        keyword_names = {kid: name for kid, name in kw_rows.all()}

    prompt_titles: dict[int, str] = {}
    if prompt_ids:
        p_rows = await db.execute(
            select(Prompt.id, Prompt.title).where(Prompt.user_id == user.id, Prompt.id.in_(list(prompt_ids)))
        )
        prompt_titles = {pid: title for pid, title in p_rows.all()}

    return keyword_names, prompt_titles


def _to_response(row: Result, keyword_names: dict[int, str], prompt_titles: dict[int, str]) -> ResultResponse:
    return ResultResponse(
        id=row.id,
        prompt_id=row.prompt_id,
        prompt_title=prompt_titles.get(row.prompt_id) if row.prompt_id else None,
        llm_model=row.llm_model,
        response=row.response,
        keywords_mentioned=[
            StoredMention(
                keyword=m.get("keyword"),
                keyword_name=keyword_names.get(m.get("keyword")),
                position=m.get("position", 0),
                sentiment=m.get("sentiment", "neutral"),
                context=m.get("context", ""),
            )
            for m in (row.keywords_mentioned or [])
        ],
        created_at=row.created_at,
    )


@router.get("/", response_model=ResultListResponse)
async def list_results(
    limit: int = Query(50, ge=1, le=500),
    skip: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    retention_cutoff = get_retention_cutoff(user)
    base_where = (Result.user_id == user.id) & (Result.created_at >= retention_cutoff)

    count_result = await db.execute(select(func.count(Result.id)).where(base_where))
    total = count_result.scalar() or 0

    result = await db.execute(
        select(Result).where(base_where).order_by(Result.created_at.desc(), Result.id.desc()).offset(skip).limit(limit)
    )
    rows = list(result.scalars().all())
    keyword_names, prompt_titles = await _lookup_names(db, user, rows)

    return ResultListResponse(
        results=[_to_response(r, keyword_names, prompt_titles) for r in rows],
        total=total,
        limit=limit,
        skip=skip,
        retention_cutoff=retention_cutoff,
    )


@router.get("/{result_id}", response_model=ResultResponse)
async def get_result(
    result_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    retention_cutoff = get_retention_cutoff(user)
    result = await db.execute(
        select(Result).where(
            Result.id == result_id,
            Result.user_id == user.id,
            Result.created_at >= retention_cutoff,
        )
    )
    row = result.scalar_one_or_none()
    if not row:
        raise NotFoundError("Result not found")

    keyword_names, prompt_titles = await _lookup_names(db, user, [row])
    return _to_response(row, keyword_names, prompt_titles)
