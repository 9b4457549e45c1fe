import logging

from fastapi import APIRouter, Depends, Path, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.config import Settings, get_settings
from app.db.database import get_db
from app.db.errors import UserNotFoundError, UniqueViolationError
from app.middleware.auth import authenticate_token, require_auth, require_role
from app.middleware.errors import AuthorizationError, ConflictError, InternalError, NotFoundError
from app.middleware.jwt import TokenPayload, clear_auth_cookie
from app.models.request_model import UpdateUserRequest, UserRole
from app.models.response_model import UserEnvelope, UsersEnvelope
from app.services.users import list_users, get_user, update_user, delete_user

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

require_admin = require_role([UserRole.ADMIN])


# users.id - 32-битный INTEGER
MAX_USER_ID = 2**31 - 1


def user_id_param(id: int = Path(..., gt=0, le=MAX_USER_ID, description="Идентификатор пользователя")) -> int:
    return id


def _check_admin_or_self(user: TokenPayload, user_id: int) -> bool:
    """Доступ есть у админа и у самого пользователя; возвращает признак "сам себе" """
    is_admin = user.role == UserRole.ADMIN
    is_self = user.id == user_id
    if not is_admin and not is_self:
        raise AuthorizationError()
    return is_self


class UsersRouter:
    def __init__(self, router: APIRouter):
        self.router = router
        self._register_routes()

    def _register_routes(self):
        self.router.get("/api/users", response_model=UsersEnvelope)(self.fetch_all_users)
        # /me регистрируется раньше /{id}
        self.router.get("/api/users/me", response_model=UserEnvelope)(self.get_me)
        self.router.get("/api/users/{id}", response_model=UserEnvelope)(self.get_user_by_id)
        self.router.put("/api/users/{id}", response_model=UserEnvelope)(self.update_user_endpoint)
        self.router.delete("/api/users/{id}", response_model=UserEnvelope)(self.delete_user_endpoint)

    @staticmethod
    async def fetch_all_users(
            user: TokenPayload = Depends(require_admin),
            db: AsyncSession = Depends(get_db),
            settings: Settings = Depends(get_settings),
    ):
        """Список всех пользователей (только для админа)"""
        try:
            logger.info("Getting users...")
            users = await list_users(db)
        except Exception as e:
            logger.error(f"Failed to fetch users: {e}")
            raise InternalError.from_exception("Failed to fetch users", e, settings)

        return {
            "message": "Successfully fetched all users",
            "users": users,
            "count": len(users),
        }

    @staticmethod
    async def get_me(
            user: TokenPayload = Depends(require_auth),
            db: AsyncSession = Depends(get_db),
            settings: Settings = Depends(get_settings),
    ):
        """Получить информацию о текущем пользователе"""
        try:
            current = await get_user(db, user.id)
        except UserNotFoundError:
            raise NotFoundError(error="User not found")
        except Exception as e:
            logger.error(f"Failed to fetch user: {e}")
            raise InternalError.from_exception("Failed to fetch user", e, settings)

        return {"message": "Successfully fetched user", "user": current}

    @staticmethod
    async def get_user_by_id(
            user_id: int = Depends(user_id_param),
            user: TokenPayload = Depends(authenticate_token),
            db: AsyncSession = Depends(get_db),
            settings: Settings = Depends(get_settings),
    ):
        """Получить пользователя (админ или сам пользователь)"""
        _check_admin_or_self(user, user_id)

        try:
            logger.info(f"Getting user: {user_id}")
            found = await get_user(db, user_id)
        except UserNotFoundError:
            raise NotFoundError(error="User not found")
        except Exception as e:
            logger.error(f"Failed to fetch user: {e}")
            raise InternalError.from_exception("Failed to fetch user", e, settings)

        return {"message": "Successfully fetched user", "user": found}

    @staticmethod
    async def update_user_endpoint(
            payload: UpdateUserRequest,
            user_id: int = Depends(user_id_param),
            user: TokenPayload = Depends(authenticate_token),
            db: AsyncSession = Depends(get_db),
            settings: Settings = Depends(get_settings),
    ):
        """Обновить пользователя; роль может менять только админ"""
        _check_admin_or_self(user, user_id)

        if user.role != UserRole.ADMIN and payload.role is not None:
            raise AuthorizationError(message="Only admins can change user roles")

        try:
            logger.info(f"Updating user: {user_id}")
            updated = await update_user(db, user_id, payload)
        except UserNotFoundError:
            raise NotFoundError(error="User not found")
        except UniqueViolationError:
            raise ConflictError(error="Email already exists")
        except Exception as e:
            logger.error(f"Failed to update user: {e}")
            raise InternalError.from_exception("Failed to update user", e, settings)

        return {"message": "User updated", "user": updated}

    @staticmethod
    async def delete_user_endpoint(
            response: Response,
            user_id: int = Depends(user_id_param),
            user: TokenPayload = Depends(authenticate_token),
            db: AsyncSession = Depends(get_db),
            settings: Settings = Depends(get_settings),
    ):
        """Удалить пользователя; при удалении самого себя сбрасываем cookie"""
        is_self = _check_admin_or_self(user, user_id)

        try:
            logger.info(f"Deleting user: {user_id}")
            deleted = await delete_user(db, user_id)
        except UserNotFoundError:
            raise NotFoundError(error="User not found")
        except Exception as e:
            logger.error(f"Failed to delete user: {e}")
            raise InternalError.from_exception("Failed to delete user", e, settings)

        if is_self:
            clear_auth_cookie(response)

        return {"message": "User deleted", "user": deleted}
