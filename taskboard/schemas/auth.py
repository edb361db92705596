"""Auth request/response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from .user import UserResponse


class RegisterRequest(BaseModel):
    # Blank values are reported by the auth service itself, not rejected here.
    username: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    first_name: str = ""
    last_name: str = ""


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class TokenRequest(BaseModel):
    token: str = ""


class RefreshRequest(BaseModel):
    refresh_token: str = ""


class AuthResponse(BaseModel):
    success: bool
    message: str
    token: str | None = None
    refresh_token: str | None = None
    expires_at: datetime | None = None
    user: UserResponse | None = None

    model_config = {"from_attributes": True}


class TokenValidationResponse(BaseModel):
    valid: bool
