from datetime import datetime

from app.schemas.common import CamelModel


class StoredMention(CamelModel):
    keyword: int | None
    keyword_name: str | None = None  # None when the keyword was deleted since
    position: int
    sentiment: str
    context: str


class ResultResponse(CamelModel):
    id: int
    prompt_id: int | None
    prompt_title: str | None = None
    llm_model: str
    response: str
    keywords_mentioned: list[StoredMention]
    created_at: datetime


class ResultListResponse(CamelModel):
    results: list[ResultResponse]
    total: int
    limit: int
    skip: int
    retention_cutoff: datetime
