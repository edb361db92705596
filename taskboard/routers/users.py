"""User management routes."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.user import UserCreate, UserResponse, UserUpdate
from ..services import user_svc

router = APIRouter(prefix="/api/users", tags=["users"])


def _not_found(user_id: object) -> HTTPException:
    return HTTPException(status_code=404, detail=f"User with ID {user_id} not found")


@router.get("", response_model=list[UserResponse])
async def list_users(db: AsyncSession = Depends(get_db)):
    return await user_svc.list_users(db)


@router.get("/username/{username}", response_model=UserResponse)
async def get_user_by_username(username: str, db: AsyncSession = Depends(get_db)):
    user = await user_svc.get_user_by_username(db, username)
    if not user:
        raise HTTPException(status_code=404, detail=f"User '{username}' not found")
    return await user_svc.summarize_with_count(db, user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    user = await user_svc.get_user(db, user_id)
    if not user:
        raise _not_found(user_id)
    return await user_svc.summarize_with_count(db, user)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(payload: UserCreate, db: AsyncSession = Depends(get_db)):
    try:
        user = await user_svc.create_user(db, **payload.model_dump())
    except user_svc.DuplicateUser as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return user_svc.summarize(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(user_id: uuid.UUID, payload: UserUpdate, db: AsyncSession = Depends(get_db)):
    user = await user_svc.update_user(db, user_id, **payload.model_dump(exclude_unset=True))
    if not user:
        raise _not_found(user_id)
    return await user_svc.summarize_with_count(db, user)


@router.delete("/{user_id}", status_code=204)
async def delete_user(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    try:
        deleted = await user_svc.delete_user(db, user_id)
    except user_svc.DeleteRestricted as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    if not deleted:
        raise _not_found(user_id)
    return Response(status_code=204)


@router.patch("/{user_id}/activate")
async def activate_user(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await user_svc.set_user_active(db, user_id, True):
        raise _not_found(user_id)
    return {"message": "User activated"}


@router.patch("/{user_id}/deactivate")
async def deactivate_user(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await user_svc.set_user_active(db, user_id, False):
        raise _not_found(user_id)
    return {"message": "User deactivated"}
