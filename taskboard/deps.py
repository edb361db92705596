"""FastAPI dependencies for resolving the calling user from a bearer token."""

from __future__ import annotations

from fastapi import HTTPException, Request

from .config import settings
from .services.security import TokenClaims, decode_access_token


def _bearer_token(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        return auth[7:].strip()
    return ""


async def get_token_claims(request: Request) -> TokenClaims | None:
    """Claims of a valid bearer token, or None when absent/invalid."""
    return decode_access_token(settings, _bearer_token(request))


async def get_actor(request: Request) -> str:
    """Username recorded as ``created_by`` for new tasks.

    Falls back to ``settings.default_actor`` unless ``auth_required`` is set.
    """
    claims = await get_token_claims(request)
    if claims:
        return claims.username
    if settings.auth_required:
        raise HTTPException(status_code=401, detail="Authentication required")
    return settings.default_actor
