from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel


class PromptCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1, max_length=20000)


class PromptUpdate(CamelModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    content: str | None = Field(None, min_length=1, max_length=20000)


class PromptResponse(CamelModel):
    id: int
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
