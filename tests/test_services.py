import bcrypt
import pytest
from unittest.mock import AsyncMock, patch

from app.models.request_model import UpdateUserRequest
from app.services.security import hash_password, verify_password
from app.services.users import list_users, update_user, delete_user


# ============================================================================
# Пароли
# ============================================================================

def test_hash_password_is_salted_bcrypt():
    first = hash_password("secret123")
    second = hash_password("secret123")

    assert first != "secret123"
    assert first != second
    assert first.startswith("$2")
    assert bcrypt.checkpw(b"secret123", first.encode())


def test_verify_password():
    hashed = hash_password("secret123")

    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)
    assert not verify_password("secret123", "plain-text-in-db")


# ============================================================================
# Сервис пользователей
# ============================================================================

@pytest.mark.asyncio
async def test_update_user_hashes_password(fake_logger):
    updates = UpdateUserRequest.model_validate({"password": "new-secret", "name": "Bee"})

    with patch('app.services.users.user_requests.update_user', new_callable=AsyncMock) as mock_update:
        mock_update.return_value = {"id": 5, "name": "Bee"}

        result = await update_user(AsyncMock(), 5, updates)

        assert result == {"id": 5, "name": "Bee"}
        _, user_id, values = mock_update.call_args.args
        assert user_id == 5
        assert "password" not in values
        assert values["name"] == "Bee"
        assert bcrypt.checkpw(b"new-secret", values["password_hash"].encode())


@pytest.mark.asyncio
async def test_update_user_passes_role_as_string(fake_logger):
    updates = UpdateUserRequest.model_validate({"role": "admin"})

    with patch('app.services.users.user_requests.update_user', new_callable=AsyncMock) as mock_update:
        await update_user(AsyncMock(), 1, updates)

        assert mock_update.call_args.args[2] == {"role": "admin"}


@pytest.mark.asyncio
async def test_list_users_logs_and_reraises(fake_logger):
    with patch('app.services.users.user_requests.get_users', new_callable=AsyncMock) as mock_get_users:
        mock_get_users.side_effect = Exception("DB error")

        with pytest.raises(Exception, match="DB error"):
            await list_users(AsyncMock())

        assert any("DB error" in msg for msg in fake_logger.errors)


@pytest.mark.asyncio
async def test_delete_user_logs_and_reraises(fake_logger):
    with patch('app.services.users.user_requests.delete_user', new_callable=AsyncMock) as mock_delete:
        mock_delete.side_effect = RuntimeError("connection lost")

        with pytest.raises(RuntimeError):
            await delete_user(AsyncMock(), 3)

        assert fake_logger.errors == ["Error deleting user 3: connection lost"]
