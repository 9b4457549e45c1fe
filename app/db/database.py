from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine, AsyncSession
from sqlalchemy.pool import StaticPool

from app.config.config import get_settings

settings = get_settings()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Async-движок под URL: sqlite держит одно соединение, остальным - pre-ping пула"""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        # in-memory база живёт только внутри одного соединения
        return create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(url, echo=echo, pool_pre_ping=True)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.async_database_url, echo=settings.DEBUG)
SessionLocal = build_session_factory(engine)


async def get_db():
    """Сессия на время одного запроса"""
    async with SessionLocal() as session:
        yield session
