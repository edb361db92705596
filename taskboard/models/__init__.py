"""Taskboard models - re-exports all models and Base.metadata."""

from .base import Base, UUIDMixin
from .enums import TaskPriority, TaskStatus, UserRole
from .user import User
from .category import Category
from .task import Task, TaskTag

__all__ = [
    "Base",
    "UUIDMixin",
    "TaskPriority",
    "TaskStatus",
    "UserRole",
    "User",
    "Category",
    "Task",
    "TaskTag",
]
