"""Test configuration and fixtures."""

import os

# Settings are read from the environment on first use, so these must be in
# place before any ibcrm import.
os.environ.update(
    {
        "ENVIRONMENT": "development",
        "DATABASE_URL": "sqlite+aiosqlite://",
        "JWT_ACCESS_SECRET": "test-access-secret-0123456789abcdef",
        "JWT_REFRESH_SECRET": "test-refresh-secret-0123456789abcdef",
        "JWT_RESET_SECRET": "test-reset-secret-0123456789abcdef",
        "BCRYPT_ROUNDS": "4",
        "RATE_LIMIT_ENABLED": "false",
        "DB_AUTO_CREATE": "false",
    }
)

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ibcrm.api.dependencies import get_auth_service, get_user_service
from ibcrm.api.main import create_app
from ibcrm.modules.auth import (
    AuthService,
    CredentialStore,
    LockoutPolicy,
    PasswordHasher,
    TokenIssuer,
)
from ibcrm.modules.user import UserService
from ibcrm.shared import database
from ibcrm.shared.config import get_settings

STRONG_PASSWORD = "Sup3rSecret"
NEW_PASSWORD = "N3wSecretPass"


class RecordingNotifier:
    """Captures password-reset hand-offs instead of sending them."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    async def send_password_reset(self, email: str, token: str) -> None:
        self.sent.append((email, token))

    @property
    def last_token(self) -> str:
        return self.sent[-1][1]


@pytest.fixture(autouse=True)
async def reset_db_engine():
    """Dispose of engines created through the application settings after each test."""
    yield
    await database.close_db()


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite engine with the schema created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ibcrm-test.db'}")
    await database.init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def store(session_factory):
    return CredentialStore(session_factory)


@pytest.fixture
def tokens():
    return TokenIssuer.from_settings(get_settings())


@pytest.fixture
def lockout():
    return LockoutPolicy()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def auth_service(store, tokens, lockout, notifier):
    return AuthService(
        store=store,
        hasher=PasswordHasher(rounds=4),
        tokens=tokens,
        lockout=lockout,
        notifier=notifier,
        max_refresh_tokens=5,
    )


@pytest.fixture
def user_service(store, lockout):
    return UserService(store=store, lockout=lockout)


@pytest.fixture
def app(auth_service, user_service):
    application = create_app()
    application.dependency_overrides[get_auth_service] = lambda: auth_service
    application.dependency_overrides[get_user_service] = lambda: user_service
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
