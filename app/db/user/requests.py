from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.errors import UserNotFoundError, UniqueViolationError
from app.db.user.models import User

# Проекция пользователя: пароль никогда не выбирается
USER_COLUMNS = (
    User.id,
    User.name,
    User.email,
    User.role,
    User.created_at,
    User.updated_at,
)


async def get_users(session: AsyncSession) -> list[dict]:
    stmt = select(*USER_COLUMNS).order_by(User.id)
    result = await session.execute(stmt)
    return [dict(row) for row in result.mappings().all()]


async def get_user_by_id(session: AsyncSession, user_id: int) -> dict:
    stmt = select(*USER_COLUMNS).where(User.id == user_id).limit(1)
    result = await session.execute(stmt)
    row = result.mappings().first()
    if row is None:
        raise UserNotFoundError(user_id)
    return dict(row)


async def update_user(session: AsyncSession, user_id: int, values: dict) -> dict:
    stmt = (
        update(User)
        .where(User.id == user_id)
        .values(**values)
        .returning(*USER_COLUMNS)
        .execution_options(synchronize_session=False)
    )
    try:
        result = await session.execute(stmt)
        row = result.mappings().first()
        if row is None:
            await session.rollback()
            raise UserNotFoundError(user_id)
        await session.commit()
    except IntegrityError as e:
        # на users единственное ограничение, которое можно нарушить апдейтом, - уникальный email
        await session.rollback()
        raise UniqueViolationError(str(e.orig)) from e
    return dict(row)


async def delete_user(session: AsyncSession, user_id: int) -> dict:
    stmt = (
        delete(User)
        .where(User.id == user_id)
        .returning(*USER_COLUMNS)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    row = result.mappings().first()
    if row is None:
        await session.rollback()
        raise UserNotFoundError(user_id)
    await session.commit()
    return dict(row)


async def create_user(
        session: AsyncSession,
        name,
        email,
        password_hash,
        role="user",
):
    user = User(
        name=name,
        email=email,
        password_hash=password_hash,
        role=role,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user
