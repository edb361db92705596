"""Task model and its ordered tag rows."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Uuid
from sqlalchemy.ext.associationproxy import association_proxy
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UUIDMixin, as_utc, utcnow
from .enums import CLOSED_STATUSES, TaskPriority, TaskStatus


class TaskTag(Base):
    """One tag of a task; ``position`` keeps the list order."""

    __tablename__ = "task_tag"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("task.id", ondelete="CASCADE"), index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)
    name: Mapped[str] = mapped_column(String(100), index=True)

    def __repr__(self) -> str:
        return f"<TaskTag {self.name!r}>"


class Task(UUIDMixin, Base):
    __tablename__ = "task"

    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(String(1000), default=None)
    status: Mapped[TaskStatus] = mapped_column(
        Enum(TaskStatus, native_enum=False, length=20), default=TaskStatus.Pending, index=True
    )
    priority: Mapped[TaskPriority] = mapped_column(
        Enum(TaskPriority, native_enum=False, length=20), default=TaskPriority.Medium, index=True
    )
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)

    # Plain username copies, not foreign keys: renaming a user does not touch them.
    assigned_to: Mapped[str | None] = mapped_column(String(100), default=None, index=True)
    created_by: Mapped[str] = mapped_column(String(100), default="", index=True)

    estimated_hours: Mapped[int | None] = mapped_column(Integer, default=None)
    actual_hours: Mapped[int | None] = mapped_column(Integer, default=None)
    notes: Mapped[str | None] = mapped_column(String(500), default=None)

    category_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("category.id", ondelete="SET NULL"), default=None, index=True
    )
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("user_account.id", ondelete="SET NULL"), default=None, index=True
    )

    category: Mapped["Category | None"] = relationship(lazy="selectin")  # noqa: F821
    tag_links: Mapped[list[TaskTag]] = relationship(
        order_by=TaskTag.position,
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    tags = association_proxy("tag_links", "name", creator=lambda name: TaskTag(name=name))

    def is_overdue(self, now: datetime) -> bool:
        due = as_utc(self.due_date)
        return due is not None and due < as_utc(now) and self.status not in CLOSED_STATUSES

    def __repr__(self) -> str:
        return f"<Task {self.title!r} ({self.status.value})>"
