"""Auth routes: register, login, token validation, refresh."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.auth import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenRequest,
    TokenValidationResponse,
)
from ..services import auth_svc
from ..services.auth_svc import AuthOutcome, AuthResult

router = APIRouter(prefix="/api/auth", tags=["auth"])

_STATUS_CODES = {
    AuthOutcome.ok: 200,
    AuthOutcome.validation_failed: 400,
    AuthOutcome.conflict: 409,
    AuthOutcome.unauthorized: 401,
    AuthOutcome.forbidden: 403,
    AuthOutcome.not_implemented: 501,
    AuthOutcome.error: 500,
}


def _respond(result: AuthResult) -> JSONResponse:
    body = AuthResponse.model_validate(result, from_attributes=True)
    return JSONResponse(
        status_code=_STATUS_CODES.get(result.outcome, 500),
        content=jsonable_encoder(body),
    )


@router.post("/register", response_model=AuthResponse)
async def register(payload: RegisterRequest, db: AsyncSession = Depends(get_db)):
    return _respond(await auth_svc.register(db, **payload.model_dump()))


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    return _respond(await auth_svc.login(db, **payload.model_dump()))


@router.post("/validate", response_model=TokenValidationResponse)
async def validate(payload: TokenRequest):
    return TokenValidationResponse(valid=auth_svc.validate_token(payload.token))


@router.post("/refresh", response_model=AuthResponse)
async def refresh(payload: RefreshRequest):
    return _respond(await auth_svc.refresh(payload.refresh_token))
