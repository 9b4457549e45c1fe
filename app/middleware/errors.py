import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config.config import get_settings

logger = logging.getLogger(__name__)


class AppError(HTTPException):
    """Базовая ошибка API: статус, заголовок `error` и необязательные message/details"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Internal server error"

    def __init__(
            self,
            error: Optional[str] = None,
            message: Optional[str] = None,
            details: Optional[Any] = None,
            headers: Optional[dict] = None,
    ):
        super().__init__(status_code=type(self).status_code, detail=message, headers=headers)
        self.error = error or type(self).error
        self.message = message
        self.details = details

    def to_content(self) -> dict:
        content = {"error": self.error}
        if self.message is not None:
            content["message"] = self.message
        if self.details is not None:
            content["details"] = self.details
        return content


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Validation failed"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    error = "Conflict"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Internal server error"

    @classmethod
    def from_exception(cls, error: str, exc: BaseException, settings) -> "InternalError":
        """В production прячем текст исключения от клиента"""
        message = "Internal server error" if settings.is_production else str(exc)
        return cls(error=error, message=message)


def format_validation_errors(errors) -> list[dict]:
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "path", "query", "cookie", "header")]
        message = err.get("msg", "")
        ctx_error = (err.get("ctx") or {}).get("error")
        if err.get("type") == "value_error":
            message = str(ctx_error) if ctx_error is not None else message.removeprefix("Value error, ")
        details.append({"field": ".".join(loc) or "body", "message": message})
    return details


async def app_error_handler(_: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_content(),
        headers=exc.headers,
    )


async def request_validation_handler(_: Request, exc: RequestValidationError):
    error = ValidationError(details=format_validation_errors(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_content())


async def unhandled_error_handler(_: Request, exc: Exception):
    logger.error(f"Unhandled error: {exc}")
    error = InternalError.from_exception("Internal server error", exc, get_settings())
    return JSONResponse(status_code=error.status_code, content=error.to_content())


def register_exception_handlers(application: FastAPI):
    application.add_exception_handler(AppError, app_error_handler)
    application.add_exception_handler(RequestValidationError, request_validation_handler)
    application.add_exception_handler(Exception, unhandled_error_handler)
