"""Enumerations shared by models, services and schemas."""

from __future__ import annotations

import enum


class _ParseableEnum(str, enum.Enum):
    """String enum whose members can be looked up case-insensitively by name."""

    @classmethod
    def parse(cls, value: object):
        """Return the member matching ``value`` (case-insensitive) or ``None``."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        raw = value.strip().lower()
        if not raw:
            return None
        for member in cls:
            if member.name.lower() == raw:
                return member
        return None

    @classmethod
    def rank(cls) -> dict:
        """Declaration order, used when sorting by the enum."""
        return {member: index for index, member in enumerate(cls)}


class TaskStatus(_ParseableEnum):
    Pending = "Pending"
    InProgress = "InProgress"
    Completed = "Completed"
    Cancelled = "Cancelled"
    OnHold = "OnHold"


class TaskPriority(_ParseableEnum):
    Low = "Low"
    Medium = "Medium"
    High = "High"
    Critical = "Critical"


class UserRole(_ParseableEnum):
    User = "User"
    Manager = "Manager"
    Admin = "Admin"


# Statuses that never count as overdue.
CLOSED_STATUSES = frozenset({TaskStatus.Completed, TaskStatus.Cancelled})
