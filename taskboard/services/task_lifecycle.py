"""Task status transitions.

Only completion is a guarded transition. Every other status change is a
plain field overwrite made through ``update_task``; that permissive behavior
is kept as-is.
"""

from __future__ import annotations

import logging
from datetime import datetime

from ..models.enums import TaskStatus
from ..models.task import Task

logger = logging.getLogger(__name__)

# target status -> statuses it may be entered from
TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.Completed: frozenset(
        {TaskStatus.Pending, TaskStatus.InProgress, TaskStatus.OnHold, TaskStatus.Cancelled}
    ),
}


def can_transition(current: TaskStatus, target: TaskStatus) -> bool:
    allowed = TRANSITIONS.get(target)
    return allowed is not None and current in allowed


def complete(task: Task, now: datetime) -> bool:
    """Move ``task`` to Completed, stamping both timestamps with ``now``.

    Returns False when the table has no edge from the current status (the
    task is already completed); the task is left untouched.
    """
    if not can_transition(task.status, TaskStatus.Completed):
        return False
    if task.status == TaskStatus.Cancelled:
        logger.info("Completing cancelled task %s", task.id)
    task.status = TaskStatus.Completed
    task.completed_at = now
    task.updated_at = now
    return True


def overwrite_status(task: Task, status: TaskStatus) -> None:
    """Direct status write used by partial updates; no transition checks."""
    task.status = status
