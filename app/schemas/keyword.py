from datetime import datetime

from pydantic import Field, field_validator

from app.schemas.common import CamelModel


def normalize_aliases(value: list[str] | None) -> list[str] | None:
    if value is None:
        return None
    # keep order, drop blanks and exact duplicates
    return list(dict.fromkeys(a.strip() for a in value if a and a.strip()))


class KeywordCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    aliases: list[str] = Field(default_factory=list, max_length=100)
    description: str | None = Field(None, max_length=5000)
    category: str | None = Field(None, max_length=255)
    price: float | None = Field(None, ge=0)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("aliases")
    @classmethod
    def _clean_aliases(cls, v: list[str] | None) -> list[str] | None:
        return normalize_aliases(v)


class KeywordUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    aliases: list[str] | None = Field(None, max_length=100)
    description: str | None = Field(None, max_length=5000)
    category: str | None = Field(None, max_length=255)
    price: float | None = Field(None, ge=0)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("aliases")
    @classmethod
    def _clean_aliases(cls, v: list[str] | None) -> list[str] | None:
        return normalize_aliases(v)


class KeywordResponse(CamelModel):
    id: int
    name: str
    aliases: list[str]
    description: str | None
    category: str | None
    price: float | None
    created_at: datetime
    updated_at: datetime
