"""User account model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin, utcnow
from .enums import UserRole


class User(UUIDMixin, Base):
    __tablename__ = "user_account"

    username: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    first_name: Mapped[str] = mapped_column(String(100), default="")
    last_name: Mapped[str] = mapped_column(String(100), default="")
    phone_number: Mapped[str | None] = mapped_column(String(20), default=None)
    bio: Mapped[str | None] = mapped_column(String(500), default=None)
    profile_picture_url: Mapped[str | None] = mapped_column(Text, default=None)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=20), default=UserRole.User
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # Empty for accounts provisioned without a password; such accounts cannot log in.
    password_hash: Mapped[str] = mapped_column(String(255), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<User {self.username!r} ({self.role.value})>"
