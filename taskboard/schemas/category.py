"""Category schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from ..models.base import as_utc
from ..models.category import Category

COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    color: str | None = Field(default=None, pattern=COLOR_PATTERN)
    created_by_id: uuid.UUID


class CategoryUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    color: str | None = Field(default=None, pattern=COLOR_PATTERN)
    is_active: bool | None = None


class CategoryResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None = None
    color: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_active: bool
    created_by: str
    task_count: int = 0

    @classmethod
    def from_category(cls, category: Category, task_count: int = 0) -> "CategoryResponse":
        return cls(
            id=category.id,
            name=category.name,
            description=category.description,
            color=category.color,
            created_at=as_utc(category.created_at),
            updated_at=as_utc(category.updated_at),
            is_active=category.is_active,
            created_by=category.created_by.username if category.created_by else "",
            task_count=task_count,
        )
