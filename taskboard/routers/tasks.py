"""Task routes."""

from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..deps import get_actor
from ..schemas.task import (
    TaskCreate,
    TaskPage,
    TaskResponse,
    TaskStatisticsResponse,
    TaskUpdate,
)
from ..services import category_svc, task_svc
from ..services.task_query import DEFAULT_PAGE_SIZE, DEFAULT_SORT_BY, TaskFilter, page_window

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def _not_found(task_id: uuid.UUID) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Task with ID {task_id} not found")


async def _ensure_category(db: AsyncSession, category_id: uuid.UUID | None) -> None:
    if category_id is not None and not await category_svc.get_category(db, category_id):
        raise HTTPException(status_code=400, detail=f"Category with ID {category_id} not found")


def task_filter_params(
    status: str | None = None,
    priority: str | None = None,
    assigned_to: str | None = Query(None, alias="assignedTo"),
    created_by: str | None = Query(None, alias="createdBy"),
    due_date_from: datetime | None = Query(None, alias="dueDateFrom"),
    due_date_to: datetime | None = Query(None, alias="dueDateTo"),
    tags: list[str] | None = Query(None),
    category_id: uuid.UUID | None = Query(None, alias="categoryId"),
    page: int = 1,
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize"),
    sort_by: str | None = Query(DEFAULT_SORT_BY, alias="sortBy"),
    sort_descending: bool = Query(True, alias="sortDescending"),
) -> TaskFilter:
    return TaskFilter(
        status=status,
        priority=priority,
        assigned_to=assigned_to,
        created_by=created_by,
        due_date_from=due_date_from,
        due_date_to=due_date_to,
        tags=tags,
        category_id=category_id,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        sort_descending=sort_descending,
    )


@router.get("", response_model=list[TaskResponse])
async def list_tasks(db: AsyncSession = Depends(get_db)):
    return [TaskResponse.from_task(t) for t in await task_svc.list_tasks(db)]


@router.get("/filter", response_model=TaskPage)
async def filter_tasks(
    filters: TaskFilter = Depends(task_filter_params),
    db: AsyncSession = Depends(get_db),
):
    tasks, total = await task_svc.filter_tasks(db, filters, max_page_size=settings.max_page_size)
    offset, limit = page_window(filters.page, filters.page_size, settings.max_page_size)
    return TaskPage(
        items=[TaskResponse.from_task(t) for t in tasks],
        total=total,
        page=offset // limit + 1,
        page_size=limit,
    )


@router.get("/overdue", response_model=list[TaskResponse])
async def overdue_tasks(db: AsyncSession = Depends(get_db)):
    return [TaskResponse.from_task(t) for t in await task_svc.list_overdue_tasks(db)]


@router.get("/statistics", response_model=TaskStatisticsResponse)
async def task_statistics(db: AsyncSession = Depends(get_db)):
    return TaskStatisticsResponse.model_validate(await task_svc.task_statistics(db))


@router.get("/user/{username}", response_model=list[TaskResponse])
async def tasks_for_user(username: str, db: AsyncSession = Depends(get_db)):
    return [TaskResponse.from_task(t) for t in await task_svc.list_tasks_for_user(db, username)]


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    task = await task_svc.get_task(db, task_id)
    if not task:
        raise _not_found(task_id)
    return TaskResponse.from_task(task)


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    payload: TaskCreate,
    response: Response,
    actor: str = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    await _ensure_category(db, payload.category_id)
    try:
        task = await task_svc.create_task(db, actor, **payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    response.headers["Location"] = f"{router.prefix}/{task.id}"
    return TaskResponse.from_task(task)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(task_id: uuid.UUID, payload: TaskUpdate, db: AsyncSession = Depends(get_db)):
    changes = payload.model_dump(exclude_unset=True)
    await _ensure_category(db, changes.get("category_id"))
    try:
        task = await task_svc.update_task(db, task_id, **changes)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if not task:
        raise _not_found(task_id)
    return TaskResponse.from_task(task)


@router.delete("/{task_id}", status_code=204)
async def delete_task(task_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await task_svc.delete_task(db, task_id):
        raise _not_found(task_id)
    return Response(status_code=204)


@router.patch("/{task_id}/complete")
async def complete_task(task_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await task_svc.complete_task(db, task_id):
        raise _not_found(task_id)
    return {"message": "Task marked as completed"}
