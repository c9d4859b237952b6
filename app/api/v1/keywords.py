"""Entity catalog: the keywords/products a user tracks in LLM answers."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user
from app.core.exceptions import NotFoundError
from app.db.postgres import get_db
from app.models.keyword import Keyword
from app.models.user import User
from app.schemas.keyword import KeywordCreate, KeywordResponse, KeywordUpdate

router = APIRouter(prefix="/keywords", tags=["keywords"])


async def _get_keyword(keyword_id: int, user: User, db: AsyncSession) -> Keyword:
    result = await db.execute(select(Keyword).where(Keyword.id == keyword_id, Keyword.user_id == user.id))
    keyword = result.scalar_one_or_none()
    if not keyword:
        raise NotFoundError("Keyword not found")
    return keyword


@router.get("/", response_model=list[KeywordResponse])
async def list_keywords(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await db.execute(
        select(Keyword).where(Keyword.user_id == user.id).order_by(Keyword.created_at.desc(), Keyword.id.desc())
    )
    return result.scalars().all()


@router.post("/", response_model=KeywordResponse, status_code=201)
async def create_keyword(
    body: KeywordCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    keyword = Keyword(user_id=user.id, **body.model_dump())
    db.add(keyword)
    await db.flush()
    await db.refresh(keyword)
    return keyword


@router.get("/{keyword_id}", response_model=KeywordResponse)
async def get_keyword(
    keyword_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await _get_keyword(keyword_id, user, db)


@router.put("/{keyword_id}", response_model=KeywordResponse)
async def update_keyword(
    keyword_id: int,
    body: KeywordUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    keyword = await _get_keyword(keyword_id, user, db)

    update_data = body.model_dump(exclude_unset=True)
    if update_data.get("name") is None:
        update_data.pop("name", None)
    if update_data.get("aliases") is None:
        update_data.pop("aliases", None)
    for field, value in update_data.items():
        setattr(keyword, field, value)

    await db.flush()
    await db.refresh(keyword)
    return keyword


@router.delete("/{keyword_id}", status_code=204)
async def delete_keyword(
    keyword_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    keyword = await _get_keyword(keyword_id, user, db)
    await db.delete(keyword)
