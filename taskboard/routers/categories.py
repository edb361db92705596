"""Category routes."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from ..services import category_svc, user_svc

router = APIRouter(prefix="/api/categories", tags=["categories"])


def _not_found(category_id: uuid.UUID) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Category with ID {category_id} not found")


@router.get("", response_model=list[CategoryResponse])
async def list_categories(include_inactive: bool = False, db: AsyncSession = Depends(get_db)):
    categories = await category_svc.list_categories(db, include_inactive=include_inactive)
    counts = await category_svc.task_counts(db)
    return [CategoryResponse.from_category(c, counts.get(c.id, 0)) for c in categories]


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    category = await category_svc.get_category(db, category_id)
    if not category:
        raise _not_found(category_id)
    counts = await category_svc.task_counts(db)
    return CategoryResponse.from_category(category, counts.get(category.id, 0))


@router.post("", response_model=CategoryResponse, status_code=201)
async def create_category(payload: CategoryCreate, db: AsyncSession = Depends(get_db)):
    if not await user_svc.get_user(db, payload.created_by_id):
        raise HTTPException(status_code=400, detail=f"User with ID {payload.created_by_id} not found")
    try:
        category = await category_svc.create_category(
            db,
            payload.created_by_id,
            name=payload.name,
            description=payload.description,
            color=payload.color,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return CategoryResponse.from_category(category)


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: uuid.UUID, payload: CategoryUpdate, db: AsyncSession = Depends(get_db)
):
    category = await category_svc.update_category(
        db, category_id, **payload.model_dump(exclude_unset=True)
    )
    if not category:
        raise _not_found(category_id)
    counts = await category_svc.task_counts(db)
    return CategoryResponse.from_category(category, counts.get(category.id, 0))


@router.delete("/{category_id}", status_code=204)
async def delete_category(category_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await category_svc.delete_category(db, category_id):
        raise _not_found(category_id)
    return Response(status_code=204)
