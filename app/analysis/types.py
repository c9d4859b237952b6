"""Core types for mention detection."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum


class Sentiment(str, Enum):
    """Coarse sentiment bucket for a mention context."""

    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class TrackedEntity:
    """A keyword/product the user tracks, detached from the ORM row.

    ``aliases`` are extra literal terms that count as a mention of the entity.
    """

    id: int | None
    name: str
    aliases: tuple[str, ...] = ()
    owner_id: uuid.UUID | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Entity name must not be empty")
        # Accept any iterable of strings (lists from JSON columns included)
        object.__setattr__(self, "aliases", tuple(self.aliases or ()))

    @property
    def search_terms(self) -> list[str]:
        """Case-folded candidate terms in match priority order: name first, then aliases."""
        terms = [self.name, *self.aliases]
        return [t.lower() for t in terms if t and t.strip()]


@dataclass
class Mention:
    """First occurrence of one entity in one response."""

    entity: TrackedEntity
    position: int  # char offset in the response
    sentiment: Sentiment = Sentiment.NEUTRAL
    context: str = ""
    matched_term: str = field(default="", compare=False)

    def to_record(self) -> dict:
        """Stored shape inside ``results.keywords_mentioned``."""
        return {
            "keyword": self.entity.id,
            "position": self.position,
            "sentiment": self.sentiment.value,
            "context": self.context,
        }
