"""User schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ..models.enums import UserRole

USERNAME_PATTERN = r"^[a-zA-Z0-9_-]+$"
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PHONE_PATTERN = r"^\+?[1-9]\d{0,15}$"


class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=100, pattern=USERNAME_PATTERN)
    email: str = Field(min_length=3, max_length=100, pattern=EMAIL_PATTERN)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone_number: str | None = Field(default=None, max_length=20, pattern=PHONE_PATTERN)
    bio: str | None = Field(default=None, max_length=500)
    role: str = "User"
    password: str | None = Field(default=None, min_length=8)

    @field_validator("role")
    @classmethod
    def _role(cls, value: str) -> str:
        role = UserRole.parse(value)
        if role is None:
            raise ValueError("Role must be one of: User, Manager, Admin")
        return role.value


class UserUpdate(BaseModel):
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    phone_number: str | None = Field(default=None, max_length=20, pattern=PHONE_PATTERN)
    bio: str | None = Field(default=None, max_length=500)
    profile_picture_url: str | None = None
    is_active: bool | None = None


class UserResponse(BaseModel):
    id: uuid.UUID
    username: str
    email: str
    first_name: str
    last_name: str
    phone_number: str | None = None
    created_at: datetime | None = None
    last_login_at: datetime | None = None
    is_active: bool
    role: str
    bio: str | None = None
    profile_picture_url: str | None = None
    task_count: int = 0

    model_config = {"from_attributes": True}
