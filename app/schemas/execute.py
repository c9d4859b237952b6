"""Schemas for POST /execute."""

from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel


class ExecuteRequest(CamelModel):
    # model / prompt presence is checked by the orchestrator so the caller
    # gets the same validation_error kind as for every other input problem
    model: str | None = None
    prompt_id: int | None = None
    prompt_content: str | None = Field(None, max_length=20000)
    compare_models: list[str] = Field(default_factory=list, max_length=10)
    keyword_ids: list[int] | None = None


class MentionOut(CamelModel):
    keyword: int | None  # entity reference, same as the stored record
    keyword_id: int | None
    keyword_name: str
    position: int
    sentiment: str
    context: str


class ModelResultOut(CamelModel):
    id: int | None
    model: str
    response: str
    prompt_id: int | None = None
    keywords_mentioned: list[MentionOut]
    highlighted_response: str
    created_at: datetime


class BackendFailureOut(CamelModel):
    model: str
    detail: str


class ExecuteResponse(CamelModel):
    results: list[ModelResultOut]
    errors: list[BackendFailureOut] = []


class ModelOption(CamelModel):
    id: str
    name: str


class ModelListResponse(CamelModel):
    models: list[ModelOption]
