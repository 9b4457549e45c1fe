import uvicorn
from contextlib import asynccontextmanager
from fastapi import FastAPI

from app.config.config import get_settings
from app.db.base import Base
from app.db.database import engine
from app.middleware.errors import register_exception_handlers
from app.middleware.logging import LoggingMiddleware
from app.routers.router import router


async def init_models():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def lifespan(_: FastAPI):
    await init_models()  # создаём таблицы асинхронно
    yield
    await engine.dispose()


def get_application():
    application = FastAPI(
        title="Acquisitions Service",
        description="User account management API",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    application.include_router(router)
    register_exception_handlers(application)
    application.add_middleware(LoggingMiddleware)

    return application


app = get_application()

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
