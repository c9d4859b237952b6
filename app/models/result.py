import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, BigInteger, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Result(Base):
    """One model's answer to a prompt, with the tracked entities it mentions.

    Written once by the execution service and never updated.
    """

    __tablename__ = "results"
    __table_args__ = (
        Index("ix_results_user_created", "user_id", "created_at"),
        Index("ix_results_user_model", "user_id", "llm_model"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    prompt_id: Mapped[int | None] = mapped_column(ForeignKey("prompts.id", ondelete="SET NULL"), nullable=True)
    llm_model: Mapped[str] = mapped_column(String(100), nullable=False)  # openai/gpt-4o, anthropic/claude-3-haiku, ...
    response: Mapped[str] = mapped_column(Text, nullable=False)
    # [{"keyword": 12, "position": 40, "sentiment": "positive", "context": "..."}]
    keywords_mentioned: Mapped[list] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True
    )
