import logging
from typing import Optional

from fastapi import Depends, Request

from app.middleware.errors import AuthenticationError, AuthorizationError
from app.middleware.jwt import InvalidTokenError, TokenPayload, decode_access_token, get_auth_cookie

logger = logging.getLogger(__name__)


async def optional_auth(request: Request) -> Optional[TokenPayload]:
    """Пользователь из cookie, если токен есть и валиден; иначе None"""
    token = get_auth_cookie(request)
    if not token:
        return None

    try:
        user = decode_access_token(token)
    except InvalidTokenError:
        return None

    request.state.user = user
    return user


async def require_auth(request: Request) -> TokenPayload:
    """Требует валидный токен в cookie, иначе 401"""
    token = get_auth_cookie(request)
    if not token:
        raise AuthenticationError(error="Unauthorized", message="Missing token")

    try:
        user = decode_access_token(token)
    except InvalidTokenError as e:
        logger.error(f"Error in require auth: {e}")
        raise AuthenticationError(error="Unauthorized", message="Invalid or expired token")

    request.state.user = user
    return user


async def authenticate_token(request: Request) -> TokenPayload:
    """Аутентификация для /api/users: то же, что require_auth, но с другими текстами ошибок"""
    token = get_auth_cookie(request)
    if not token:
        raise AuthenticationError(
            error="Authentication required",
            message="No access token provided",
        )

    try:
        user = decode_access_token(token)
    except InvalidTokenError as e:
        logger.error(f"Authentication error: {e}")
        raise AuthenticationError(
            error="Authentication failed",
            message="Invalid or expired token",
        )

    request.state.user = user
    logger.info(f"User authenticated: {user.email} ({user.role.value})")
    return user


class RoleChecker:
    """Пропускает запрос, только если роль пользователя входит в allowed_roles"""

    def __init__(self, allowed_roles):
        self.allowed_roles = {str(getattr(role, "value", role)) for role in allowed_roles}
        if not self.allowed_roles:
            raise ValueError("RoleChecker needs at least one allowed role")

    async def __call__(self, user: TokenPayload = Depends(authenticate_token)) -> TokenPayload:
        # без токена сюда не дойти: authenticate_token уже ответил 401
        if user.role.value not in self.allowed_roles:
            logger.warning(
                f"Access denied for user {user.email} with role {user.role.value}. "
                f"Required: {', '.join(sorted(self.allowed_roles))}"
            )
            raise AuthorizationError(
                error="Access denied",
                message="Insufficient permissions",
            )

        return user


def require_role(allowed_roles) -> RoleChecker:
    return RoleChecker(allowed_roles)
