import os
from types import SimpleNamespace

import httpx
import pytest
import pytest_asyncio

# === Настройка переменных окружения ===
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test_secret_key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("APP_ENV", "test")

from app.db.base import Base
from app.db.database import build_engine, build_session_factory, get_db
from app.db.user.requests import create_user
from app.main import get_application
from app.middleware.jwt import create_access_token, TOKEN_COOKIE
from app.services import users as users_service
from app.services.security import hash_password


# === Database ===

@pytest_asyncio.fixture
async def db_engine():
    """Отдельная in-memory база на каждый тест"""
    engine = build_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def users(session_factory):
    """Админ и два обычных пользователя"""
    async with session_factory() as session:
        admin = await create_user(session, "Admin", "admin@acquisitions.io", hash_password("admin-pass"), role="admin")
        alice = await create_user(session, "Alice", "alice@acquisitions.io", hash_password("alice-pass"))
        bob = await create_user(session, "Bob", "bob@acquisitions.io", hash_password("bob-pass"))
    return SimpleNamespace(admin=admin, alice=alice, bob=bob)


# === Logger ===

@pytest.fixture
def fake_logger(monkeypatch):
    """
    Подмена логгера сервиса:
    - ничего не пишет «наружу»
    - можно проверять, какие сообщения залогировались.
    """
    class FakeLogger:
        def __init__(self):
            self.infos = []
            self.errors = []
            self.warnings = []

        def info(self, msg, *args, **kwargs):
            self.infos.append(msg)

        def error(self, msg, *args, **kwargs):
            self.errors.append(msg)

        def warning(self, msg, *args, **kwargs):
            self.warnings.append(msg)

    logger = FakeLogger()
    monkeypatch.setattr(users_service, "logger", logger)
    return logger


# === API ===

def token_for(user) -> str:
    return create_access_token(user.id, user.email, user.role)


@pytest.fixture
def api_app(session_factory):
    application = get_application()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest_asyncio.fixture
async def make_client(api_app):
    """Фабрика httpx-клиентов; make_client(user) кладёт токен пользователя в cookie"""
    clients = []

    def _make(user=None, token=None):
        if user is not None:
            token = token_for(user)
        cookies = {TOKEN_COOKIE: token} if token is not None else None
        client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=api_app),
            base_url="http://test",
            cookies=cookies,
        )
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()
