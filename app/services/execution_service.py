"""Execution orchestrator: run one prompt against one or more models.

Flow per request:
  1. Validate input and resolve the prompt text
  2. Tier gate (cooldown); no backend call when it fails
  3. Load the user's entity catalog
  4. Fan out to [primary, *comparison] models, scan each answer for mentions
  5. Persist one Result per model and advance ``last_execution_at``

Two fan-out policies (``settings.fan_out_policy``):
  best_effort: models run concurrently, each success is stored as soon as it
                is scanned, failures are reported next to the successes.
  fail_fast:   models run in order, the first failure aborts the request and
                nothing is stored.
"""

import asyncio
import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.analysis.mention_detector import detect_mentions
from app.analysis.types import Mention, TrackedEntity
from app.backends.base import BackendInvoker
from app.core.config import settings
from app.core.exceptions import (
    AppError,
    BackendInvocationError,
    NotFoundError,
    PersistenceError,
    RateLimitError,
    ValidationError,
)
from app.core.metrics import BACKEND_CALLS, EXECUTIONS
from app.core.tier_limits import can_execute, format_retry_after
from app.models.keyword import Keyword
from app.models.prompt import Prompt
from app.models.result import Result
from app.models.user import User

logger = logging.getLogger(__name__)

FAIL_FAST = "fail_fast"
BEST_EFFORT = "best_effort"


@dataclass
class ExecutionRequest:
    model: str | None
    prompt_id: int | None = None
    prompt_content: str | None = None
    compare_models: list[str] = field(default_factory=list)
    keyword_ids: list[int] | None = None  # restrict matching to these entities

    @property
    def models(self) -> list[str]:
        """Primary first, then comparisons in requested order. Duplicates are kept."""
        return [self.model, *self.compare_models]


@dataclass
class ModelResult:
    """One model's answer plus the mentions found in it."""

    model: str
    response: str
    mentions: list[Mention]
    created_at: datetime
    id: int | None = None
    prompt_id: int | None = None


@dataclass
class BackendFailure:
    model: str
    detail: str


@dataclass
class ExecutionOutcome:
    results: list[ModelResult] = field(default_factory=list)
    errors: list[BackendFailure] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Storage seam
# ---------------------------------------------------------------------------


class ExecutionStore(ABC):
    """Storage operations the orchestrator needs. All are owner-scoped."""

    @abstractmethod
    async def get_prompt_content(self, prompt_id: int, user_id: uuid.UUID) -> str | None:
        """Content of the user's prompt, or None if missing / not owned."""
        ...

    @abstractmethod
    async def load_entities(self, user_id: uuid.UUID, keyword_ids: list[int] | None = None) -> list[TrackedEntity]:
        ...

    @abstractmethod
    async def save_result(
        self,
        *,
        user_id: uuid.UUID,
        prompt_id: int | None,
        model: str,
        response: str,
        mentions: list[Mention],
    ) -> ModelResult:
        """Persist one result. Raises PersistenceError on failure."""
        ...

    @abstractmethod
    async def mark_executed(self, user, executed_at: datetime) -> None:
        ...


class SqlExecutionStore(ExecutionStore):
    """ExecutionStore on top of the request's AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_prompt_content(self, prompt_id: int, user_id: uuid.UUID) -> str | None:
        result = await self.db.execute(select(Prompt.content).where(Prompt.id == prompt_id, Prompt.user_id == user_id))
        return result.scalar_one_or_none()

    async def load_entities(self, user_id: uuid.UUID, keyword_ids: list[int] | None = None) -> list[TrackedEntity]:
        stmt = select(Keyword).where(Keyword.user_id == user_id)
        if keyword_ids:
            stmt = stmt.where(Keyword.id.in_(keyword_ids))
        result = await self.db.execute(stmt.order_by(Keyword.id))
        return [kw.to_entity() for kw in result.scalars().all()]

    async def save_result(
        self,
        *,
        user_id: uuid.UUID,
        prompt_id: int | None,
        model: str,
        response: str,
        mentions: list[Mention],
    ) -> ModelResult:
        row = Result(
            user_id=user_id,
            prompt_id=prompt_id,
            llm_model=model,
            response=response,
            keywords_mentioned=[m.to_record() for m in mentions],
            created_at=datetime.now(timezone.utc),
        )
        try:
            self.db.add(row)
            await self.db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to store result for model=%s: %s", model, e)
            raise PersistenceError(f"Failed to store result for {model}") from e

        return ModelResult(
            id=row.id,
            model=model,
            response=response,
            mentions=mentions,
            created_at=row.created_at,
            prompt_id=prompt_id,
        )

    async def mark_executed(self, user: User, executed_at: datetime) -> None:
        try:
            user.last_execution_at = executed_at
            await self.db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to update last_execution_at for user %s: %s", user.id, e)
            raise PersistenceError("Failed to record execution time") from e


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExecutionOrchestrator:
    """Coordinates validation, tier gate, fan-out, mention scan and persistence."""

    def __init__(
        self,
        store: ExecutionStore,
        invoker: BackendInvoker,
        *,
        policy: str | None = None,
        concurrency: int | None = None,
        call_timeout: float | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.invoker = invoker
        self.policy = policy or settings.fan_out_policy
        if self.policy not in (BEST_EFFORT, FAIL_FAST):
            raise ValueError(f"Unknown fan-out policy: {self.policy}")
        self.concurrency = max(1, concurrency or settings.backend_concurrency)
        self.call_timeout = call_timeout
        self.clock = clock

    async def execute(self, request: ExecutionRequest, user) -> ExecutionOutcome:
        """Run *request* for *user*. Results come back in declared model order."""
        try:
            prompt_text = await self._resolve_prompt(request, user)
            self._check_tier(user)

            entities = await self.store.load_entities(user.id, request.keyword_ids)
            models = request.models

            logger.info(
                "Executing prompt for user %s: models=%s entities=%d policy=%s",
                user.id,
                models,
                len(entities),
                self.policy,
            )

            if self.policy == FAIL_FAST:
                outcome = await self._run_fail_fast(models, prompt_text, entities, request, user)
            else:
                outcome = await self._run_best_effort(models, prompt_text, entities, request, user)

            # any stored result counts as a run, whichever model produced it
            if outcome.results:
                await self.store.mark_executed(user, self.clock())
        except AppError as e:
            EXECUTIONS.labels(status=e.kind).inc()
            raise

        EXECUTIONS.labels(status="partial" if outcome.errors else "success").inc()
        logger.info(
            "Execution done for user %s: %d results, %d failed models",
            user.id,
            len(outcome.results),
            len(outcome.errors),
        )
        return outcome

    # --- steps ---

    async def _resolve_prompt(self, request: ExecutionRequest, user) -> str:
        if not request.model or not request.model.strip():
            raise ValidationError("Model is required")
        if any(not m or not m.strip() for m in request.compare_models):
            raise ValidationError("Comparison model ids must not be empty")

        has_id = request.prompt_id is not None
        has_content = request.prompt_content is not None and request.prompt_content != ""
        if not has_id and not has_content:
            raise ValidationError("Prompt ID or content is required")
        if has_id and has_content:
            raise ValidationError("Provide either a prompt ID or prompt content, not both")

        if has_id:
            content = await self.store.get_prompt_content(request.prompt_id, user.id)
            if content is None:
                raise NotFoundError("Prompt not found")
        else:
            content = request.prompt_content

        if not content.strip():
            raise ValidationError("Prompt content must not be empty")
        return content

    def _check_tier(self, user) -> None:
        check = can_execute(user, now=self.clock())
        if not check.allowed:
            wait = format_retry_after(check.retry_after, now=self.clock())
            logger.info("User %s is in cooldown (tier=%s), retry in %s", user.id, user.tier, wait)
            raise RateLimitError(f"Rate limit reached. You can run another prompt in {wait}.", check.retry_after)

    async def _invoke(self, model: str, prompt_text: str):
        try:
            if self.call_timeout is not None:
                resp = await asyncio.wait_for(self.invoker.invoke(model, prompt_text), timeout=self.call_timeout)
            else:
                resp = await self.invoker.invoke(model, prompt_text)
        except asyncio.TimeoutError as e:
            BACKEND_CALLS.labels(model=model, status="error").inc()
            raise BackendInvocationError(model, f"timed out after {self.call_timeout:.0f}s") from e
        except BackendInvocationError:
            BACKEND_CALLS.labels(model=model, status="error").inc()
            raise
        BACKEND_CALLS.labels(model=model, status="success").inc()
        return resp

    async def _run_best_effort(
        self,
        models: list[str],
        prompt_text: str,
        entities: list[TrackedEntity],
        request: ExecutionRequest,
        user,
    ) -> ExecutionOutcome:
        semaphore = asyncio.Semaphore(self.concurrency)
        # one AsyncSession must not be used by two coroutines at once
        save_lock = asyncio.Lock()

        async def _run_one(model: str) -> ModelResult:
            async with semaphore:
                llm_resp = await self._invoke(model, prompt_text)
            mentions = detect_mentions(llm_resp.text, entities)
            async with save_lock:
                return await self.store.save_result(
                    user_id=user.id,
                    prompt_id=request.prompt_id,
                    model=model,
                    response=llm_resp.text,
                    mentions=mentions,
                )

        outcomes = await asyncio.gather(*[_run_one(m) for m in models], return_exceptions=True)

        outcome = ExecutionOutcome()
        failures: list[BackendInvocationError] = []
        for model, item in zip(models, outcomes):
            if isinstance(item, BackendInvocationError):
                logger.warning("Model %s failed: %s", model, item.reason, extra={"llm_model": model})
                failures.append(item)
                outcome.errors.append(BackendFailure(model=model, detail=item.reason))
            elif isinstance(item, BaseException):
                raise item
            else:
                outcome.results.append(item)

        if not outcome.results:
            raise failures[0]
        return outcome

    async def _run_fail_fast(
        self,
        models: list[str],
        prompt_text: str,
        entities: list[TrackedEntity],
        request: ExecutionRequest,
        user,
    ) -> ExecutionOutcome:
        scanned: list[tuple[str, str, list[Mention]]] = []
        for model in models:
            llm_resp = await self._invoke(model, prompt_text)
            scanned.append((model, llm_resp.text, detect_mentions(llm_resp.text, entities)))

        outcome = ExecutionOutcome()
        for model, text, mentions in scanned:
            outcome.results.append(
                await self.store.save_result(
                    user_id=user.id,
                    prompt_id=request.prompt_id,
                    model=model,
                    response=text,
                    mentions=mentions,
                )
            )
        return outcome
