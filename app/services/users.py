import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.user import requests as user_requests
from app.models.request_model import UpdateUserRequest
from app.services.security import hash_password

logger = logging.getLogger(__name__)


async def list_users(db: AsyncSession) -> list[dict]:
    try:
        return await user_requests.get_users(db)
    except Exception as e:
        logger.error(f"Error getting users: {e}")
        raise


async def get_user(db: AsyncSession, user_id: int) -> dict:
    try:
        return await user_requests.get_user_by_id(db, user_id)
    except Exception as e:
        logger.error(f"Error getting user by id {user_id}: {e}")
        raise


async def update_user(db: AsyncSession, user_id: int, updates: UpdateUserRequest) -> dict:
    """Обновить пользователя; новый пароль сохраняется только в виде хэша"""
    values = updates.to_values()

    password = values.pop("password", None)
    if password:
        values["password_hash"] = hash_password(password)

    try:
        return await user_requests.update_user(db, user_id, values)
    except Exception as e:
        logger.error(f"Error updating user {user_id}: {e}")
        raise


async def delete_user(db: AsyncSession, user_id: int) -> dict:
    try:
        return await user_requests.delete_user(db, user_id)
    except Exception as e:
        logger.error(f"Error deleting user {user_id}: {e}")
        raise
