from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserEnvelope(BaseModel):
    message: str
    user: UserResponse


class UsersEnvelope(BaseModel):
    message: str
    users: list[UserResponse]
    count: int


class HealthResponse(BaseModel):
    status: str
    authenticated: bool
