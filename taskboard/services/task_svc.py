"""Task service - CRUD, filtered listing, overdue detection and statistics."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import as_utc, utcnow
from ..models.category import Category
from ..models.enums import CLOSED_STATUSES, TaskPriority, TaskStatus
from ..models.task import Task
from . import task_lifecycle
from .task_query import TaskFilter, build_task_query

logger = logging.getLogger(__name__)

UNCATEGORIZED = "Uncategorized"

_CREATE_FIELDS = frozenset({
    "title", "description", "priority", "due_date", "assigned_to", "tags",
    "estimated_hours", "notes", "category_id",
})
_UPDATE_FIELDS = _CREATE_FIELDS | {"status", "actual_hours"}


class TaskNotFound(LookupError):
    """Raised when a task that must exist cannot be read back."""


@dataclass
class TaskStatistics:
    total_tasks: int = 0
    completed_tasks: int = 0
    pending_tasks: int = 0
    in_progress_tasks: int = 0
    overdue_tasks: int = 0
    completion_rate: float = 0.0
    status_breakdown: dict[str, int] = field(default_factory=dict)
    priority_breakdown: dict[str, int] = field(default_factory=dict)
    category_breakdown: dict[str, int] = field(default_factory=dict)


def _coerce_datetime(value: object) -> datetime | None:
    """Coerce common date/time representations into an aware UTC datetime.

    Values are stored in UTC so that SQL comparisons against "now" hold on
    backends that drop the offset (SQLite).
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return as_utc(value)

    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)

    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            return as_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
        except ValueError:
            raise ValueError(f"Invalid date value: {value!r}") from None

    raise ValueError(f"Invalid date value: {value!r}")


def _parse_priority(value: object) -> TaskPriority:
    priority = TaskPriority.parse(value)
    if priority is None:
        raise ValueError(f"Invalid priority: {value!r}")
    return priority


def _parse_status(value: object) -> TaskStatus:
    status = TaskStatus.parse(value)
    if status is None:
        raise ValueError(f"Invalid status: {value!r}")
    return status


def _check_fields(fields: dict, allowed: frozenset[str]) -> None:
    unknown = set(fields) - allowed
    if unknown:
        raise TypeError(f"Unknown task field(s): {', '.join(sorted(unknown))}")


def _overdue_conditions(now: datetime) -> list:
    return [
        Task.due_date.is_not(None),
        Task.due_date < now,
        Task.status.not_in(list(CLOSED_STATUSES)),
    ]


async def _scalars(db: AsyncSession, stmt) -> list[Task]:
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_tasks(db: AsyncSession) -> list[Task]:
    """All tasks, newest first."""
    return await _scalars(db, select(Task).order_by(Task.created_at.desc()))


async def get_task(db: AsyncSession, task_id: uuid.UUID) -> Task | None:
    stmt = select(Task).where(Task.id == task_id).execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def filter_tasks(
    db: AsyncSession,
    filters: TaskFilter,
    *,
    max_page_size: int | None = None,
) -> tuple[list[Task], int]:
    """Filtered, sorted page of tasks. Returns (tasks, total matching)."""
    query = build_task_query(filters, max_page_size=max_page_size)
    stmt = select(Task).where(*query.conditions)

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = (await db.execute(count_stmt)).scalar() or 0

    stmt = stmt.order_by(query.order_by).offset(query.offset).limit(query.limit)
    return await _scalars(db, stmt), total


async def create_task(db: AsyncSession, created_by: str, **fields) -> Task:
    """Create a Pending task. Input validation happens before this call."""
    _check_fields(fields, _CREATE_FIELDS)
    tags = list(fields.pop("tags", None) or [])
    priority = fields.pop("priority", None)
    if "due_date" in fields:
        fields["due_date"] = _coerce_datetime(fields["due_date"])

    task = Task(
        **fields,
        priority=_parse_priority(priority) if priority is not None else TaskPriority.Medium,
        status=TaskStatus.Pending,
        created_by=created_by,
        created_at=utcnow(),
        updated_at=None,
        completed_at=None,
    )
    task.tags = tags
    db.add(task)
    await db.commit()

    logger.info("Task created: %s by %s", task.id, created_by)

    created = await get_task(db, task.id)
    if created is None:
        raise TaskNotFound(f"Failed to retrieve created task {task.id}")
    return created


async def update_task(db: AsyncSession, task_id: uuid.UUID, **fields) -> Task | None:
    """Apply the supplied fields; ``None`` values and a blank title are no-ops."""
    _check_fields(fields, _UPDATE_FIELDS)
    task = await get_task(db, task_id)
    if not task:
        return None

    for key, value in fields.items():
        if value is None:
            continue
        if key == "title":
            if value.strip():
                task.title = value
        elif key == "status":
            task_lifecycle.overwrite_status(task, _parse_status(value))
        elif key == "priority":
            task.priority = _parse_priority(value)
        elif key == "due_date":
            task.due_date = _coerce_datetime(value)
        elif key == "tags":
            task.tags = list(value)
        else:
            setattr(task, key, value)

    task.updated_at = utcnow()
    await db.commit()

    logger.info("Task updated: %s", task_id)
    return await get_task(db, task_id)


async def delete_task(db: AsyncSession, task_id: uuid.UUID) -> bool:
    task = await get_task(db, task_id)
    if not task:
        return False
    await db.delete(task)
    await db.commit()

    logger.info("Task deleted: %s", task_id)
    return True


async def complete_task(db: AsyncSession, task_id: uuid.UUID, now: datetime | None = None) -> bool:
    """Mark a task Completed. Completing an already-completed task is a no-op success."""
    task = await get_task(db, task_id)
    if not task:
        return False

    if task_lifecycle.complete(task, as_utc(now) or utcnow()):
        await db.commit()
        logger.info("Task completed: %s", task_id)
    return True


def _user_condition(username: str):
    return or_(Task.assigned_to == username, Task.created_by == username)


async def list_tasks_for_user(db: AsyncSession, username: str) -> list[Task]:
    """Tasks assigned to or created by ``username``, newest first."""
    stmt = select(Task).where(_user_condition(username)).order_by(Task.created_at.desc())
    return await _scalars(db, stmt)


async def count_tasks_for_user(db: AsyncSession, username: str) -> int:
    stmt = select(func.count(Task.id)).where(_user_condition(username))
    return int((await db.execute(stmt)).scalar_one() or 0)


async def list_overdue_tasks(db: AsyncSession, now: datetime | None = None) -> list[Task]:
    """Open tasks whose due date has passed, earliest due first."""
    stmt = (
        select(Task)
        .where(*_overdue_conditions(as_utc(now) or utcnow()))
        .order_by(Task.due_date.asc())
    )
    return await _scalars(db, stmt)


async def task_statistics(db: AsyncSession, now: datetime | None = None) -> TaskStatistics:
    now = as_utc(now) or utcnow()

    total = int((await db.execute(select(func.count(Task.id)))).scalar_one() or 0)

    status_rows = (
        await db.execute(select(Task.status, func.count(Task.id)).group_by(Task.status))
    ).all()
    by_status = {status.value: 0 for status in TaskStatus}
    for status, count in status_rows:
        by_status[status.value] = int(count)

    overdue = int(
        (await db.execute(select(func.count(Task.id)).where(*_overdue_conditions(now)))).scalar_one()
        or 0
    )

    priority_rows = (
        await db.execute(select(Task.priority, func.count(Task.id)).group_by(Task.priority))
    ).all()
    rank = TaskPriority.rank()
    by_priority = {
        priority.value: int(count)
        for priority, count in sorted(priority_rows, key=lambda row: rank[row[0]])
    }

    category_rows = (
        await db.execute(
            select(Category.name, func.count(Task.id))
            .select_from(Task)
            .outerjoin(Category, Task.category_id == Category.id)
            .group_by(Category.name)
        )
    ).all()
    by_category: dict[str, int] = {}
    for name, count in category_rows:
        label = name or UNCATEGORIZED
        by_category[label] = by_category.get(label, 0) + int(count)

    completed = by_status[TaskStatus.Completed.value]
    return TaskStatistics(
        total_tasks=total,
        completed_tasks=completed,
        pending_tasks=by_status[TaskStatus.Pending.value],
        in_progress_tasks=by_status[TaskStatus.InProgress.value],
        overdue_tasks=overdue,
        completion_rate=(completed / total * 100) if total > 0 else 0.0,
        status_breakdown=by_status,
        priority_breakdown=by_priority,
        category_breakdown=by_category,
    )
