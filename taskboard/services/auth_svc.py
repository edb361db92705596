"""Registration, login and token validation.

Every public coroutine returns an ``AuthResult``; unexpected failures are
logged and reported as a generic error instead of propagating.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..models.base import utcnow
from ..models.enums import UserRole
from ..models.user import User
from . import user_svc
from .security import (
    hash_password_async,
    issue_access_token,
    issue_refresh_token,
    require_signing_secret,
    verify_access_token,
    verify_password_async,
)
from .user_svc import UserSummary

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password."

_dummy_hash: str | None = None


class AuthOutcome(str, enum.Enum):
    ok = "ok"
    validation_failed = "validation_failed"
    conflict = "conflict"
    unauthorized = "unauthorized"
    forbidden = "forbidden"
    not_implemented = "not_implemented"
    error = "error"


@dataclass
class AuthResult:
    success: bool
    outcome: AuthOutcome
    message: str
    token: str | None = None
    refresh_token: str | None = None
    user: UserSummary | None = None
    expires_at: datetime | None = None


def _failure(outcome: AuthOutcome, message: str) -> AuthResult:
    return AuthResult(success=False, outcome=outcome, message=message)


def _blank(value: str | None) -> bool:
    return not (value or "").strip()


def _success(settings_obj, user: User, summary: UserSummary, message: str) -> AuthResult:
    issued = issue_access_token(settings_obj, user)
    return AuthResult(
        success=True,
        outcome=AuthOutcome.ok,
        message=message,
        token=issued.token,
        refresh_token=issue_refresh_token(),
        user=summary,
        expires_at=issued.expires_at,
    )


async def _burn_password_check(password: str) -> None:
    """Spend a hash verification on unknown usernames so timing does not reveal them."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = await hash_password_async("not-a-real-password")
    await verify_password_async(password, _dummy_hash)


async def register(
    db: AsyncSession,
    *,
    username: str,
    email: str,
    password: str,
    confirm_password: str,
    first_name: str = "",
    last_name: str = "",
    settings_obj=settings,
) -> AuthResult:
    try:
        if _blank(username) or _blank(email) or _blank(password):
            return _failure(
                AuthOutcome.validation_failed, "Username, email, and password are required."
            )
        if password != confirm_password:
            return _failure(AuthOutcome.validation_failed, "Passwords do not match.")

        require_signing_secret(settings_obj)

        username = username.strip()
        if await user_svc.get_user_by_username(db, username):
            return _failure(AuthOutcome.conflict, "Username already exists.")
        if await user_svc.get_user_by_email(db, email):
            return _failure(AuthOutcome.conflict, "Email already exists.")

        user = User(
            username=username,
            email=user_svc.normalize_email(email),
            password_hash=await hash_password_async(password),
            first_name=(first_name or "").strip(),
            last_name=(last_name or "").strip(),
            created_at=utcnow(),
            is_active=True,
            role=UserRole.User,
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name.
            await db.rollback()
            return _failure(AuthOutcome.conflict, "Username or email already exists.")

        logger.info("User registered successfully: %s", user.username)
        return _success(
            settings_obj, user, user_svc.summarize(user, task_count=0), "Registration successful."
        )
    except Exception:
        logger.exception("Error during user registration")
        await _safe_rollback(db)
        return _failure(AuthOutcome.error, "An error occurred during registration.")


async def login(
    db: AsyncSession,
    *,
    username: str,
    password: str,
    settings_obj=settings,
) -> AuthResult:
    try:
        if _blank(username) or _blank(password):
            return _failure(AuthOutcome.validation_failed, "Username and password are required.")

        user = await user_svc.get_user_by_username(db, username)
        if user is None:
            await _burn_password_check(password)
            return _failure(AuthOutcome.unauthorized, INVALID_CREDENTIALS)

        if not await verify_password_async(password, user.password_hash):
            return _failure(AuthOutcome.unauthorized, INVALID_CREDENTIALS)

        # Deactivation is only reported once the password has matched.
        if not user.is_active:
            return _failure(AuthOutcome.forbidden, "Account is deactivated.")

        require_signing_secret(settings_obj)

        user.last_login_at = utcnow()
        await db.commit()

        summary = await user_svc.summarize_with_count(db, user)
        logger.info("User logged in successfully: %s", user.username)
        return _success(settings_obj, user, summary, "Login successful.")
    except Exception:
        logger.exception("Error during user login")
        await _safe_rollback(db)
        return _failure(AuthOutcome.error, "An error occurred during login.")


def validate_token(token: str, settings_obj=settings) -> bool:
    return verify_access_token(settings_obj, token)


async def refresh(refresh_token: str) -> AuthResult:
    # Refresh tokens are handed out but never stored, so there is nothing to redeem against.
    return _failure(
        AuthOutcome.not_implemented, "Refresh token functionality not implemented yet."
    )


async def _safe_rollback(db: AsyncSession) -> None:
    try:
        await db.rollback()
    except Exception:
        logger.warning("Rollback after auth failure did not complete", exc_info=True)
