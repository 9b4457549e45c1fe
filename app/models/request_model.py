import enum
from typing import Annotated, Optional

from pydantic import BaseModel, EmailStr, Field, StringConstraints, field_validator, model_validator


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class UpdateUserRequest(BaseModel):
    """Частичное обновление пользователя: любое подмножество полей, но хотя бы одно"""

    name: Optional[Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=255)]] = None
    email: Optional[EmailStr] = None
    password: Optional[Annotated[str, Field(min_length=6, max_length=128)]] = None
    role: Optional[UserRole] = None

    @field_validator("name", "email", "password", "role", mode="before")
    @classmethod
    def reject_null(cls, value):
        # поле можно не передавать, но явный null - ошибка
        if value is None:
            raise ValueError("Field must not be null")
        return value

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("email")
    @classmethod
    def check_email_length(cls, value):
        if value is not None and len(value) > 255:
            raise ValueError("Email must be at most 255 characters")
        return value

    @model_validator(mode="after")
    def check_not_empty(self):
        if all(getattr(self, field) is None for field in type(self).model_fields):
            raise ValueError("At least one field must be provided")
        return self

    def to_values(self) -> dict:
        """Только переданные поля, роль как строка"""
        return self.model_dump(exclude_none=True, mode="json")
