from typing import Optional

from fastapi import Request, Response
from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from pydantic import BaseModel, PositiveInt, ValidationError

import logging

from app.config.config import get_settings
from app.models.request_model import UserRole

settings = get_settings()
logger = logging.getLogger(__name__)

TOKEN_COOKIE = "token"


class InvalidTokenError(Exception):
    """Токен не прошёл проверку: подпись, срок действия или содержимое"""


class TokenPayload(BaseModel):
    id: PositiveInt
    email: str
    role: UserRole


def create_access_token(user_id: int, email: str, role: str) -> str:
    """Создать JWT токен сессии"""
    now = datetime.now(timezone.utc)
    expire = now + timedelta(
        days=settings.ACCESS_TOKEN_EXPIRE_DAYS
    )
    to_encode = {
        "id": user_id,
        "email": email,
        "role": str(getattr(role, "value", role)),
        "iat": now,
        "exp": expire,
    }
    encoded_jwt = jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    return encoded_jwt


def decode_access_token(token: str) -> TokenPayload:
    """Проверить JWT токен и вернуть данные пользователя"""
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
    except JWTError as e:
        logger.error(f"JWT decode error: {e}")
        raise InvalidTokenError("Failed to authenticate token") from e

    try:
        return TokenPayload.model_validate(payload)
    except ValidationError as e:
        logger.error(f"JWT payload error: {e}")
        raise InvalidTokenError("Malformed token payload") from e


def get_auth_cookie(request: Request) -> Optional[str]:
    return request.cookies.get(TOKEN_COOKIE) or None


def set_auth_cookie(response: Response, token: str):
    """Установить токен в cookie"""
    response.set_cookie(
        key=TOKEN_COOKIE,
        value=token,
        httponly=True,
        secure=settings.SECURE_COOKIES,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_DAYS * 24 * 60 * 60
    )


def clear_auth_cookie(response: Response):
    """Удалить токен из cookies"""
    response.delete_cookie(
        key=TOKEN_COOKIE,
        httponly=True,
        secure=settings.SECURE_COOKIES,
        samesite="lax",
    )
