import os
import tempfile
import uuid
from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from pathlib import Path

# Settings are read at import time, so the environment must be ready first
_TEST_DB_PATH = Path(tempfile.gettempdir()) / f"mention_tracker_test_{os.getpid()}.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_PATH}"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-that-is-at-least-32-bytes-long"
os.environ["FAN_OUT_POLICY"] = "best_effort"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from app.backends.base import BackendInvoker, LlmResponse  # noqa: E402
from app.core.config import settings  # noqa: E402
from app.core.dependencies import get_backend_invoker  # noqa: E402
from app.core.exceptions import BackendInvocationError  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.postgres import get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import Keyword, Prompt, User  # noqa: E402

settings.app_env = "development"

# NullPool: every session gets its own connection to the file database
test_engine = create_async_engine(settings.database_url, echo=False, poolclass=NullPool)
test_session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


class FakeInvoker(BackendInvoker):
    """Scripted backend: model id -> response text, or an exception to raise."""

    def __init__(self, responses: dict[str, str | Exception] | None = None, default: str | None = None):
        self.responses = dict(responses or {})
        self.default = default
        self.calls: list[tuple[str, str]] = []

    async def invoke(self, model: str, prompt: str) -> LlmResponse:
        self.calls.append((model, prompt))
        outcome = self.responses.get(model, self.default)
        if outcome is None:
            raise BackendInvocationError(model, "invalid model or request: unknown model")
        if isinstance(outcome, Exception):
            raise outcome
        return LlmResponse(text=outcome, model=model, tokens=len(outcome.split()))


@pytest.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test and drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with test_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def fake_invoker():
    invoker = FakeInvoker(default="A generic answer with nothing of interest.")
    app.dependency_overrides[get_backend_invoker] = lambda: invoker
    yield invoker
    app.dependency_overrides.pop(get_backend_invoker, None)


@pytest.fixture
async def client(fake_invoker) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def make_user(
    db: AsyncSession,
    *,
    email: str = "test@example.com",
    tier: str = "free",
    is_admin: bool = False,
    last_execution_at: datetime | None = None,
) -> User:
    user = User(
        external_uid=uuid.uuid4().hex,
        email=email,
        tier=tier,
        is_admin=is_admin,
        last_execution_at=last_execution_at,
        created_at=datetime.now(timezone.utc),
    )
    db.add(user)
    await db.commit()
    return user


def headers_for(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
async def user(db: AsyncSession) -> User:
    """A free-tier user that has never executed."""
    return await make_user(db)


@pytest.fixture
async def auth_headers(user: User) -> dict[str, str]:
    return headers_for(user)


@pytest.fixture
async def admin_user(db: AsyncSession) -> User:
    return await make_user(db, email="admin@example.com", tier="admin", is_admin=True)


@pytest.fixture
async def admin_headers(admin_user: User) -> dict[str, str]:
    return headers_for(admin_user)


@pytest.fixture
async def keywords(db: AsyncSession, user: User) -> list[Keyword]:
    """Two tracked products for the default user."""
    rows = [
        Keyword(user_id=user.id, name="Sony WH-1000XM5", aliases=["XM5"], category="Headphones"),
        Keyword(user_id=user.id, name="Bose QC45", aliases=[], category="Headphones"),
    ]
    db.add_all(rows)
    await db.commit()
    return rows


@pytest.fixture
async def prompt(db: AsyncSession, user: User) -> Prompt:
    row = Prompt(user_id=user.id, title="Best headphones", content="What are the best noise cancelling headphones?")
    db.add(row)
    await db.commit()
    return row
