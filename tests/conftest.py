import asyncio
import os
import sys
from pathlib import Path

# Settings are cached on first import, so the environment must be ready before any app module loads
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-unit-tests"
os.environ["BCRYPT_ROUNDS"] = "10"
os.environ["LOG_TO_FILE"] = "false"
os.environ["FRONTEND_URL"] = "http://localhost:3001"
os.environ["NOTIFICATION_TIMEOUT_SECONDS"] = "2"
for key in ("SMTP_USER", "SMTP_PASS", "SLACK_BOT_TOKEN", "ADMIN_USERNAME", "ADMIN_EMAIL", "ADMIN_PASSWORD"):
    os.environ.pop(key, None)

API_DIR = Path(__file__).resolve().parents[1] / "api"
if str(API_DIR) not in sys.path:
    sys.path.insert(0, str(API_DIR))

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from models.database import Base, User
from utils.password_utils import hash_password


class FakeDispatcher:
    """Records reset notifications instead of sending them"""

    def __init__(self, error: Exception = None, delay: float = 0):
        self.error = error
        self.delay = delay
        self.sent = []

    async def send_password_reset(self, recipient, raw_token):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        self.sent.append((recipient, raw_token))
        return {"email": True}

    @property
    def last_token(self):
        return self.sent[-1][1] if self.sent else None


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_dispatcher():
    return FakeDispatcher


@pytest.fixture
def fake_dispatcher():
    return FakeDispatcher()


@pytest.fixture
def make_user(session_factory):
    async def _make_user(username, email, password, role="agent", is_active=True):
        async with session_factory() as session:
            user = User(
                username=username,
                email=email,
                hashed_password=hash_password(password),
                role=role,
                is_active=is_active,
            )
            session.add(user)
            await session.commit()
            return user
    return _make_user


@pytest_asyncio.fixture
async def client(session_factory, fake_dispatcher):
    from main import app
    from config.database import get_db
    from services.notifications.dispatcher import get_notification_dispatcher

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: fake_dispatcher

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
