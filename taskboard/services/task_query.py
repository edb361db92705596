"""Translate a task filter into SQL conditions, an ordering and a page window.

Pure functions only: nothing here touches the database.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy import case

from ..models.base import as_utc
from ..models.enums import TaskPriority, TaskStatus
from ..models.task import Task, TaskTag

DEFAULT_PAGE_SIZE = 10
DEFAULT_SORT_BY = "createdAt"


@dataclass
class TaskFilter:
    status: str | None = None
    priority: str | None = None
    assigned_to: str | None = None
    created_by: str | None = None
    due_date_from: datetime | None = None
    due_date_to: datetime | None = None
    tags: list[str] | None = None
    category_id: uuid.UUID | None = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    sort_by: str | None = DEFAULT_SORT_BY
    sort_descending: bool = True


@dataclass
class TaskQuery:
    conditions: list[Any] = field(default_factory=list)
    order_by: Any = None
    offset: int = 0
    limit: int = DEFAULT_PAGE_SIZE


def _enum_rank(column, enum_cls):
    # Sort by declaration order rather than by the stored name.
    return case(enum_cls.rank(), value=column, else_=len(enum_cls))


_SORT_KEYS = {
    "title": lambda: Task.title,
    "duedate": lambda: Task.due_date,
    "priority": lambda: _enum_rank(Task.priority, TaskPriority),
    "status": lambda: _enum_rank(Task.status, TaskStatus),
}


def sort_key(sort_by: str | None):
    """Column expression for ``sort_by``; unknown or missing keys sort by creation time."""
    key = (sort_by or "").strip().lower()
    factory = _SORT_KEYS.get(key)
    return factory() if factory else Task.created_at


def page_window(page: int | None, page_size: int | None, max_page_size: int | None = None) -> tuple[int, int]:
    """Return ``(offset, limit)``; page is clamped to >= 1 and page_size to >= 1."""
    page = max(1, int(page or 1))
    size = max(1, int(page_size or 1))
    if max_page_size:
        size = min(size, max(1, int(max_page_size)))
    return (page - 1) * size, size


def build_conditions(filters: TaskFilter) -> list[Any]:
    conditions: list[Any] = []

    # Unparsable enum values are dropped on purpose, callers rely on best-effort filtering.
    if filters.status:
        status = TaskStatus.parse(filters.status)
        if status is not None:
            conditions.append(Task.status == status)

    if filters.priority:
        priority = TaskPriority.parse(filters.priority)
        if priority is not None:
            conditions.append(Task.priority == priority)

    if filters.assigned_to:
        conditions.append(Task.assigned_to == filters.assigned_to)

    if filters.created_by:
        conditions.append(Task.created_by == filters.created_by)

    # Stored due dates are UTC; SQLite compares them as text without the offset.
    if filters.due_date_from is not None:
        conditions.append(Task.due_date >= as_utc(filters.due_date_from))

    if filters.due_date_to is not None:
        conditions.append(Task.due_date <= as_utc(filters.due_date_to))

    tags = [t for t in (filters.tags or []) if t]
    if tags:
        conditions.append(Task.tag_links.any(TaskTag.name.in_(tags)))

    if filters.category_id is not None:
        conditions.append(Task.category_id == filters.category_id)

    return conditions


def build_task_query(filters: TaskFilter, *, max_page_size: int | None = None) -> TaskQuery:
    key = sort_key(filters.sort_by)
    offset, limit = page_window(filters.page, filters.page_size, max_page_size)
    return TaskQuery(
        conditions=build_conditions(filters),
        order_by=key.desc() if filters.sort_descending else key.asc(),
        offset=offset,
        limit=limit,
    )
