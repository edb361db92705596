"""Password hashing and signed access tokens."""

from __future__ import annotations

import asyncio
import base64
import binascii
import hashlib
import hmac
import json
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from ..models.base import as_utc, utcnow

PASSWORD_SCHEME = "pbkdf2_sha256"
PASSWORD_ITERATIONS = 200_000
TOKEN_ALGORITHM = "HS256"
REFRESH_TOKEN_BYTES = 64


class TokenConfigurationError(RuntimeError):
    """Raised when tokens cannot be signed because the secret is missing."""


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    username: str
    email: str
    role: str
    first_name: str
    last_name: str
    expires_at: datetime


def hash_password(password: str, iterations: int = PASSWORD_ITERATIONS) -> str:
    """Hash a password using PBKDF2-SHA256 with a per-hash random salt."""
    if not password:
        raise ValueError("Password is required")
    salt = secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return (
        f"{PASSWORD_SCHEME}${iterations}$"
        f"{binascii.hexlify(salt).decode('ascii')}$"
        f"{binascii.hexlify(digest).decode('ascii')}"
    )


def verify_password(password: str, stored_hash: str) -> bool:
    """Verify a PBKDF2-SHA256 password hash."""
    if not password or not stored_hash:
        return False
    try:
        scheme, iterations_raw, salt_hex, digest_hex = stored_hash.split("$", 3)
        if scheme != PASSWORD_SCHEME:
            return False
        iterations = int(iterations_raw)
        salt = binascii.unhexlify(salt_hex.encode("ascii"))
        expected = binascii.unhexlify(digest_hex.encode("ascii"))
    except (ValueError, binascii.Error):
        return False

    actual = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(actual, expected)


async def hash_password_async(password: str) -> str:
    return await asyncio.to_thread(hash_password, password)


async def verify_password_async(password: str, stored_hash: str) -> bool:
    return await asyncio.to_thread(verify_password, password, stored_hash)


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def _b64url_decode(data: str) -> bytes:
    padding = "=" * ((4 - (len(data) % 4)) % 4)
    return base64.urlsafe_b64decode((data + padding).encode("utf-8"))


def _json_segment(value: dict) -> str:
    return _b64url_encode(json.dumps(value, separators=(",", ":"), sort_keys=True).encode("utf-8"))


def _secret(settings_obj) -> str:
    return str(getattr(settings_obj, "jwt_secret", "") or "").strip()


def require_signing_secret(settings_obj) -> str:
    secret = _secret(settings_obj)
    if not secret:
        raise TokenConfigurationError("jwt_secret must be configured to issue access tokens")
    return secret


def _sign(secret: str, signing_input: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), signing_input.encode("utf-8"), hashlib.sha256).digest()
    return _b64url_encode(digest)


def issue_access_token(settings_obj, user, now: datetime | None = None) -> IssuedToken:
    """Sign a compact HS256 JWT carrying the user's identity claims."""
    secret = require_signing_secret(settings_obj)
    issued_at = as_utc(now) or utcnow()
    expires_at = issued_at + timedelta(seconds=settings_obj.jwt_expiration_seconds)

    header = {"alg": TOKEN_ALGORITHM, "typ": "JWT"}
    payload = {
        "sub": str(user.id),
        "unique_name": user.username,
        "email": user.email,
        "role": user.role.value,
        "given_name": user.first_name or "",
        "family_name": user.last_name or "",
        "iss": settings_obj.jwt_issuer,
        "aud": settings_obj.jwt_audience,
        "iat": int(issued_at.timestamp()),
        "nbf": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    signing_input = f"{_json_segment(header)}.{_json_segment(payload)}"
    token = f"{signing_input}.{_sign(secret, signing_input)}"
    return IssuedToken(token=token, expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc))


def decode_access_token(settings_obj, token: str, now: datetime | None = None) -> TokenClaims | None:
    """Return the claims of a valid token, or ``None`` for any failure.

    Signature, algorithm, issuer, audience and lifetime are all checked; no
    clock skew is tolerated.
    """
    secret = _secret(settings_obj)
    if not secret or not token or not isinstance(token, str):
        return None

    parts = token.strip().split(".")
    if len(parts) != 3:
        return None
    header_raw, payload_raw, provided_sig = parts

    expected_sig = _sign(secret, f"{header_raw}.{payload_raw}")
    if not hmac.compare_digest(provided_sig.encode("utf-8"), expected_sig.encode("utf-8")):
        return None

    try:
        header = json.loads(_b64url_decode(header_raw))
        payload = json.loads(_b64url_decode(payload_raw))
    except (ValueError, binascii.Error):
        return None
    if not isinstance(header, dict) or not isinstance(payload, dict):
        return None
    if header.get("alg") != TOKEN_ALGORITHM:
        return None

    if payload.get("iss") != settings_obj.jwt_issuer:
        return None
    if payload.get("aud") != settings_obj.jwt_audience:
        return None

    current = int((as_utc(now) or utcnow()).timestamp())
    exp = payload.get("exp")
    if not isinstance(exp, int) or exp <= current:
        return None
    nbf = payload.get("nbf")
    if isinstance(nbf, int) and nbf > current:
        return None

    sub = payload.get("sub")
    username = payload.get("unique_name")
    if not isinstance(sub, str) or not sub or not isinstance(username, str) or not username:
        return None

    return TokenClaims(
        user_id=sub,
        username=username,
        email=str(payload.get("email") or ""),
        role=str(payload.get("role") or ""),
        first_name=str(payload.get("given_name") or ""),
        last_name=str(payload.get("family_name") or ""),
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
    )


def verify_access_token(settings_obj, token: str, now: datetime | None = None) -> bool:
    return decode_access_token(settings_obj, token, now=now) is not None


def issue_refresh_token() -> str:
    """Random opaque refresh token.

    Not persisted and not redeemable: refresh is an unfinished feature.
    """
    return base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")
