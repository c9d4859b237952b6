from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user
from app.core.exceptions import NotFoundError
from app.db.postgres import get_db
from app.models.prompt import Prompt
from app.models.user import User
from app.schemas.prompt import PromptCreate, PromptResponse, PromptUpdate

router = APIRouter(prefix="/prompts", tags=["prompts"])


async def _get_prompt(prompt_id: int, user: User, db: AsyncSession) -> Prompt:
    result = await db.execute(select(Prompt).where(Prompt.id == prompt_id, Prompt.user_id == user.id))
    prompt = result.scalar_one_or_none()
    if not prompt:
        raise NotFoundError("Prompt not found")
    return prompt


@router.get("/", response_model=list[PromptResponse])
async def list_prompts(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await db.execute(
        select(Prompt).where(Prompt.user_id == user.id).order_by(Prompt.created_at.desc(), Prompt.id.desc())
    )
    return result.scalars().all()


@router.post("/", response_model=PromptResponse, status_code=201)
async def create_prompt(
    body: PromptCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    prompt = Prompt(user_id=user.id, title=body.title, content=body.content)
    db.add(prompt)
    await db.flush()
    await db.refresh(prompt)
    return prompt


@router.get("/{prompt_id}", response_model=PromptResponse)
async def get_prompt(
    prompt_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return await _get_prompt(prompt_id, user, db)


@router.put("/{prompt_id}", response_model=PromptResponse)
async def update_prompt(
    prompt_id: int,
    body: PromptUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    prompt = await _get_prompt(prompt_id, user, db)

    update_data = body.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(prompt, field, value)

    await db.flush()
    await db.refresh(prompt)
    return prompt


@router.delete("/{prompt_id}", status_code=204)
async def delete_prompt(
    prompt_id: int,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    prompt = await _get_prompt(prompt_id, user, db)
    await db.delete(prompt)
