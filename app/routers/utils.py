from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from app.middleware.auth import optional_auth
from app.middleware.jwt import TokenPayload
from app.models.response_model import HealthResponse


class UtilsRouter:
    def __init__(self, router: APIRouter):
        self.router = router
        self._register_routes()

    def _register_routes(self):
        self.router.get("/", response_class=PlainTextResponse)(self.welcome)
        self.router.get("/health", response_model=HealthResponse)(self.health)

    @staticmethod
    async def welcome():
        return "Welcome to the Acquisitions Service"

    @staticmethod
    async def health(user: Optional[TokenPayload] = Depends(optional_auth)):
        """Проверка здоровья"""
        return {"status": "ok", "authenticated": user is not None}
