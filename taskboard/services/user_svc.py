"""User service - account CRUD and summaries."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import as_utc, utcnow
from ..models.category import Category
from ..models.enums import UserRole
from ..models.task import Task
from ..models.user import User
from . import task_svc
from .security import hash_password_async

logger = logging.getLogger(__name__)

_UPDATE_FIELDS = frozenset({
    "first_name", "last_name", "phone_number", "bio", "profile_picture_url", "is_active",
})


class DuplicateUser(ValueError):
    """Raised when a username or email is already taken."""


class DeleteRestricted(RuntimeError):
    """Raised when a user still owns categories and cannot be deleted."""


@dataclass
class UserSummary:
    id: uuid.UUID
    username: str
    email: str
    first_name: str
    last_name: str
    role: str
    is_active: bool
    created_at: datetime | None
    last_login_at: datetime | None = None
    phone_number: str | None = None
    bio: str | None = None
    profile_picture_url: str | None = None
    task_count: int = 0


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def summarize(user: User, task_count: int = 0) -> UserSummary:
    return UserSummary(
        id=user.id,
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role.value,
        is_active=user.is_active,
        created_at=as_utc(user.created_at),
        last_login_at=as_utc(user.last_login_at),
        phone_number=user.phone_number,
        bio=user.bio,
        profile_picture_url=user.profile_picture_url,
        task_count=task_count,
    )


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    return (await db.execute(select(User).where(User.id == user_id))).scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    stmt = select(User).where(User.username == (username or "").strip())
    return (await db.execute(stmt)).scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    stmt = select(User).where(User.email == normalize_email(email))
    return (await db.execute(stmt)).scalar_one_or_none()


async def list_users(db: AsyncSession) -> list[UserSummary]:
    """All users ordered by username, each with a live task count."""
    users = list((await db.execute(select(User).order_by(User.username))).scalars().all())
    if not users:
        return []

    names = [u.username for u in users]
    counts: dict[str, set] = {}
    for column in (Task.assigned_to, Task.created_by):
        rows = (
            await db.execute(
                select(column, Task.id).where(column.in_(names))
            )
        ).all()
        for name, task_id in rows:
            counts.setdefault(name, set()).add(task_id)
    return [summarize(u, len(counts.get(u.username, ()))) for u in users]


async def summarize_with_count(db: AsyncSession, user: User) -> UserSummary:
    return summarize(user, await task_svc.count_tasks_for_user(db, user.username))


async def create_user(
    db: AsyncSession,
    *,
    username: str,
    email: str,
    first_name: str = "",
    last_name: str = "",
    phone_number: str | None = None,
    bio: str | None = None,
    role: str | UserRole = UserRole.User,
    password: str | None = None,
) -> User:
    username = (username or "").strip()
    email_norm = normalize_email(email)
    if not username or not email_norm:
        raise ValueError("Username and email are required")

    role_value = UserRole.parse(role)
    if role_value is None:
        raise ValueError(f"Invalid role: {role!r}")

    if await get_user_by_username(db, username):
        raise DuplicateUser("Username already exists")
    if await get_user_by_email(db, email_norm):
        raise DuplicateUser("Email already exists")

    user = User(
        username=username,
        email=email_norm,
        first_name=first_name or "",
        last_name=last_name or "",
        phone_number=phone_number,
        bio=bio,
        role=role_value,
        is_active=True,
        created_at=utcnow(),
        password_hash=await hash_password_async(password) if password else "",
    )
    db.add(user)
    await db.commit()

    logger.info("User created: %s - %s", user.id, user.username)
    return user


async def update_user(db: AsyncSession, user_id: uuid.UUID, **fields) -> User | None:
    """Partial profile update; ``None`` values and blank names are ignored."""
    unknown = set(fields) - _UPDATE_FIELDS
    if unknown:
        raise TypeError(f"Unknown user field(s): {', '.join(sorted(unknown))}")

    user = await get_user(db, user_id)
    if not user:
        return None

    for key, value in fields.items():
        if value is None:
            continue
        if key in ("first_name", "last_name") and not str(value).strip():
            continue
        setattr(user, key, value)
    await db.commit()

    logger.info("User updated: %s", user_id)
    return user


async def set_user_active(db: AsyncSession, user_id: uuid.UUID, active: bool) -> bool:
    user = await get_user(db, user_id)
    if not user:
        return False
    user.is_active = bool(active)
    await db.commit()

    logger.info("User %s: %s", "activated" if active else "deactivated", user_id)
    return True


async def delete_user(db: AsyncSession, user_id: uuid.UUID) -> bool:
    """Delete a user. Linked tasks keep existing with ``user_id`` cleared."""
    user = await get_user(db, user_id)
    if not user:
        return False

    owned = (
        await db.execute(select(func.count(Category.id)).where(Category.created_by_id == user_id))
    ).scalar_one()
    if owned:
        raise DeleteRestricted(f"User {user.username} still owns {owned} categories")

    await db.execute(update(Task).where(Task.user_id == user_id).values(user_id=None))
    await db.delete(user)
    await db.commit()

    logger.info("User deleted: %s", user_id)
    return True
