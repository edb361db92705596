"""Task schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ..models.base import as_utc, utcnow
from ..models.enums import TaskPriority, TaskStatus
from ..models.task import Task


def _check_priority(value: str | None) -> str | None:
    if value is None:
        return None
    priority = TaskPriority.parse(value)
    if priority is None:
        raise ValueError("Priority must be one of: Low, Medium, High, Critical")
    return priority.value


def _check_status(value: str | None) -> str | None:
    if value is None:
        return None
    status = TaskStatus.parse(value)
    if status is None:
        raise ValueError("Status must be one of: " + ", ".join(s.value for s in TaskStatus))
    return status.value


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    priority: str = "Medium"
    due_date: datetime | None = None
    assigned_to: str | None = Field(default=None, max_length=100)
    tags: list[str] = Field(default_factory=list)
    estimated_hours: int | None = Field(default=None, gt=0)
    notes: str | None = Field(default=None, max_length=500)
    category_id: uuid.UUID | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Title is required")
        return value

    @field_validator("priority")
    @classmethod
    def _priority(cls, value: str) -> str:
        return _check_priority(value)

    @field_validator("due_date")
    @classmethod
    def _due_in_future(cls, value: datetime | None) -> datetime | None:
        if value is not None and as_utc(value) <= utcnow():
            raise ValueError("Due date must be in the future")
        return value


class TaskUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    status: str | None = None
    priority: str | None = None
    due_date: datetime | None = None
    assigned_to: str | None = Field(default=None, max_length=100)
    tags: list[str] | None = None
    estimated_hours: int | None = Field(default=None, gt=0)
    actual_hours: int | None = Field(default=None, ge=0)
    notes: str | None = Field(default=None, max_length=500)
    category_id: uuid.UUID | None = None

    @field_validator("priority")
    @classmethod
    def _priority(cls, value: str | None) -> str | None:
        return _check_priority(value)

    @field_validator("status")
    @classmethod
    def _status(cls, value: str | None) -> str | None:
        return _check_status(value)


class TaskResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: str | None = None
    status: str
    priority: str
    due_date: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None
    completed_at: datetime | None = None
    assigned_to: str | None = None
    created_by: str
    tags: list[str] = Field(default_factory=list)
    estimated_hours: int | None = None
    actual_hours: int | None = None
    notes: str | None = None
    category_id: uuid.UUID | None = None
    category_name: str | None = None
    category_color: str | None = None

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        category = task.category
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            status=task.status.value,
            priority=task.priority.value,
            due_date=as_utc(task.due_date),
            created_at=as_utc(task.created_at),
            updated_at=as_utc(task.updated_at),
            completed_at=as_utc(task.completed_at),
            assigned_to=task.assigned_to,
            created_by=task.created_by,
            tags=list(task.tags),
            estimated_hours=task.estimated_hours,
            actual_hours=task.actual_hours,
            notes=task.notes,
            category_id=task.category_id,
            category_name=category.name if category else None,
            category_color=category.color if category else None,
        )


class TaskPage(BaseModel):
    items: list[TaskResponse]
    total: int
    page: int
    page_size: int


class TaskStatisticsResponse(BaseModel):
    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    in_progress_tasks: int
    overdue_tasks: int
    completion_rate: float
    status_breakdown: dict[str, int]
    priority_breakdown: dict[str, int]
    category_breakdown: dict[str, int]

    model_config = {"from_attributes": True}
