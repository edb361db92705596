"""Test task service."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.models.base import as_utc
from taskboard.models.enums import TaskPriority, TaskStatus
from taskboard.models.task import Task, TaskTag
from taskboard.models.user import User
from taskboard.services import category_svc, task_svc
from taskboard.services.task_query import TaskFilter


def _titles(tasks) -> list[str]:
    return [t.title for t in tasks]


@pytest.mark.asyncio
async def test_create_and_get_task(db: AsyncSession, tomorrow):
    task = await task_svc.create_task(
        db,
        "alice",
        title="Write report",
        description="Quarterly numbers",
        priority="high",
        due_date=tomorrow,
        assigned_to="bob",
        tags=["finance", "q3"],
        estimated_hours=4,
        notes="Ask Carol for the data",
    )

    fetched = await task_svc.get_task(db, task.id)
    assert fetched is not None
    assert fetched.title == "Write report"
    assert fetched.description == "Quarterly numbers"
    assert fetched.priority == TaskPriority.High
    assert as_utc(fetched.due_date) == tomorrow
    assert fetched.assigned_to == "bob"
    assert list(fetched.tags) == ["finance", "q3"]
    assert fetched.estimated_hours == 4
    assert fetched.notes == "Ask Carol for the data"
    assert fetched.created_by == "alice"
    assert fetched.status == TaskStatus.Pending
    assert fetched.created_at is not None
    assert fetched.updated_at is None
    assert fetched.completed_at is None


@pytest.mark.asyncio
async def test_create_defaults_priority_to_medium(db: AsyncSession):
    task = await task_svc.create_task(db, "alice", title="Plain")
    assert task.priority == TaskPriority.Medium
    assert list(task.tags) == []


@pytest.mark.asyncio
async def test_create_rejects_unknown_priority(db: AsyncSession):
    with pytest.raises(ValueError):
        await task_svc.create_task(db, "alice", title="Bad", priority="urgent")


@pytest.mark.asyncio
async def test_get_missing_task_returns_none(db: AsyncSession):
    assert await task_svc.get_task(db, uuid.uuid4()) is None


@pytest.mark.asyncio
async def test_list_tasks_newest_first(db: AsyncSession):
    for title in ("first", "second", "third"):
        await task_svc.create_task(db, "alice", title=title)

    tasks = await task_svc.list_tasks(db)
    assert _titles(tasks) == ["third", "second", "first"]


@pytest.mark.asyncio
async def test_empty_filter_matches_list_all_first_page(db: AsyncSession):
    for i in range(12):
        await task_svc.create_task(db, "alice", title=f"Task {i:02d}")

    page, total = await task_svc.filter_tasks(db, TaskFilter())
    everything = await task_svc.list_tasks(db)

    assert total == 12
    assert [t.id for t in page] == [t.id for t in everything[:10]]


@pytest.mark.asyncio
async def test_filter_priority_case_insensitive_sorted_by_title(db: AsyncSession):
    await task_svc.create_task(db, "alice", title="Charlie", priority="High")
    await task_svc.create_task(db, "alice", title="Alpha", priority="High")
    await task_svc.create_task(db, "alice", title="Bravo", priority="Low")
    await task_svc.create_task(db, "alice", title="Delta", priority="High")

    tasks, total = await task_svc.filter_tasks(
        db, TaskFilter(priority="HIGH", sort_by="title", sort_descending=False)
    )
    assert total == 3
    assert _titles(tasks) == ["Alpha", "Charlie", "Delta"]
    assert all(t.priority == TaskPriority.High for t in tasks)


@pytest.mark.asyncio
async def test_filter_ignores_unparsable_status(db: AsyncSession):
    await task_svc.create_task(db, "alice", title="One")
    await task_svc.create_task(db, "alice", title="Two")

    tasks, total = await task_svc.filter_tasks(db, TaskFilter(status="not-a-status"))
    assert total == 2
    assert len(tasks) == 2


@pytest.mark.asyncio
async def test_filter_by_status(db: AsyncSession):
    a = await task_svc.create_task(db, "alice", title="Started")
    await task_svc.create_task(db, "alice", title="Waiting")
    await task_svc.update_task(db, a.id, status="InProgress")

    tasks, _ = await task_svc.filter_tasks(db, TaskFilter(status="inprogress"))
    assert _titles(tasks) == ["Started"]


@pytest.mark.asyncio
async def test_filter_by_assignee_and_creator(db: AsyncSession):
    await task_svc.create_task(db, "alice", title="A", assigned_to="bob")
    await task_svc.create_task(db, "carol", title="B", assigned_to="bob")
    await task_svc.create_task(db, "alice", title="C", assigned_to="dave")

    tasks, total = await task_svc.filter_tasks(
        db, TaskFilter(assigned_to="bob", created_by="alice")
    )
    assert total == 1
    assert _titles(tasks) == ["A"]


@pytest.mark.asyncio
async def test_filter_by_any_tag(db: AsyncSession):
    await task_svc.create_task(db, "alice", title="Api", tags=["backend", "api"])
    await task_svc.create_task(db, "alice", title="Css", tags=["frontend"])
    await task_svc.create_task(db, "alice", title="Docs", tags=["docs"])
    await task_svc.create_task(db, "alice", title="Untagged")

    tasks, total = await task_svc.filter_tasks(
        db, TaskFilter(tags=["api", "frontend"], sort_by="title", sort_descending=False)
    )
    assert total == 2
    assert _titles(tasks) == ["Api", "Css"]


@pytest.mark.asyncio
async def test_filter_by_due_date_range_is_inclusive(db: AsyncSession, now):
    start = now + timedelta(days=1)
    end = now + timedelta(days=3)
    await task_svc.create_task(db, "alice", title="Start", due_date=start)
    await task_svc.create_task(db, "alice", title="Middle", due_date=now + timedelta(days=2))
    await task_svc.create_task(db, "alice", title="End", due_date=end)
    await task_svc.create_task(db, "alice", title="Later", due_date=now + timedelta(days=9))
    await task_svc.create_task(db, "alice", title="Undated")

    tasks, total = await task_svc.filter_tasks(
        db,
        TaskFilter(due_date_from=start, due_date_to=end, sort_by="dueDate", sort_descending=False),
    )
    assert total == 3
    assert _titles(tasks) == ["Start", "Middle", "End"]


@pytest.mark.asyncio
async def test_filter_by_category(db: AsyncSession, owner: User):
    work = await category_svc.create_category(db, owner.id, name="Work")
    await task_svc.create_task(db, "alice", title="Filed", category_id=work.id)
    await task_svc.create_task(db, "alice", title="Loose")

    tasks, total = await task_svc.filter_tasks(db, TaskFilter(category_id=work.id))
    assert total == 1
    assert tasks[0].category.name == "Work"


@pytest.mark.asyncio
async def test_sort_by_priority_uses_enum_order(db: AsyncSession):
    for title, priority in [("c", "Critical"), ("l", "Low"), ("h", "High"), ("m", "Medium")]:
        await task_svc.create_task(db, "alice", title=title, priority=priority)

    ascending, _ = await task_svc.filter_tasks(db, TaskFilter(sort_by="priority", sort_descending=False))
    descending, _ = await task_svc.filter_tasks(db, TaskFilter(sort_by="PRIORITY", sort_descending=True))
    assert _titles(ascending) == ["l", "m", "h", "c"]
    assert _titles(descending) == ["c", "h", "m", "l"]


@pytest.mark.asyncio
async def test_pagination_and_clamping(db: AsyncSession):
    for i in range(7):
        await task_svc.create_task(db, "alice", title=f"T{i}")

    second, total = await task_svc.filter_tasks(
        db, TaskFilter(page=2, page_size=3, sort_by="title", sort_descending=False)
    )
    assert total == 7
    assert _titles(second) == ["T3", "T4", "T5"]

    clamped, _ = await task_svc.filter_tasks(
        db, TaskFilter(page=0, page_size=0, sort_by="title", sort_descending=False)
    )
    assert _titles(clamped) == ["T0"]


@pytest.mark.asyncio
async def test_update_applies_only_supplied_fields(db: AsyncSession):
    task = await task_svc.create_task(
        db, "alice", title="Original", description="keep me", assigned_to="bob", tags=["a"]
    )

    updated = await task_svc.update_task(db, task.id, priority="critical", notes="new note")
    assert updated.title == "Original"
    assert updated.description == "keep me"
    assert updated.assigned_to == "bob"
    assert list(updated.tags) == ["a"]
    assert updated.priority == TaskPriority.Critical
    assert updated.notes == "new note"
    assert updated.updated_at is not None


@pytest.mark.asyncio
async def test_update_none_and_blank_title_are_no_ops(db: AsyncSession):
    task = await task_svc.create_task(db, "alice", title="Stay", description="text")

    updated = await task_svc.update_task(db, task.id, title="   ", description=None)
    assert updated.title == "Stay"
    assert updated.description == "text"


@pytest.mark.asyncio
async def test_update_replaces_tags_in_order(db: AsyncSession):
    task = await task_svc.create_task(db, "alice", title="Tagged", tags=["one", "two"])

    updated = await task_svc.update_task(db, task.id, tags=["three", "one"])
    assert list(updated.tags) == ["three", "one"]
    remaining = (await db.execute(select(func.count(TaskTag.id)))).scalar_one()
    assert remaining == 2


@pytest.mark.asyncio
async def test_update_allows_any_status_change(db: AsyncSession):
    task = await task_svc.create_task(db, "alice", title="Flexible")
    await task_svc.update_task(db, task.id, status="Cancelled")
    reopened = await task_svc.update_task(db, task.id, status="pending")
    assert reopened.status == TaskStatus.Pending


@pytest.mark.asyncio
async def test_update_missing_task_returns_none(db: AsyncSession):
    assert await task_svc.update_task(db, uuid.uuid4(), title="Nope") is None


@pytest.mark.asyncio
async def test_update_rejects_unknown_field(db: AsyncSession):
    task = await task_svc.create_task(db, "alice", title="Strict")
    with pytest.raises(TypeError):
        await task_svc.update_task(db, task.id, created_by="mallory")


@pytest.mark.asyncio
async def test_delete_task(db: AsyncSession):
    task = await task_svc.create_task(db, "alice", title="Doomed", tags=["x"])

    assert await task_svc.delete_task(db, task.id) is True
    assert await task_svc.get_task(db, task.id) is None
    assert (await db.execute(select(func.count(TaskTag.id)))).scalar_one() == 0
    assert await task_svc.delete_task(db, task.id) is False


@pytest.mark.asyncio
async def test_complete_missing_task_mutates_nothing(db: AsyncSession):
    task = await task_svc.create_task(db, "alice", title="Bystander")

    assert await task_svc.complete_task(db, uuid.uuid4()) is False
    unchanged = await task_svc.get_task(db, task.id)
    assert unchanged.status == TaskStatus.Pending
    assert unchanged.updated_at is None


@pytest.mark.asyncio
async def test_complete_stamps_one_timestamp_and_is_idempotent(db: AsyncSession):
    task = await task_svc.create_task(db, "alice", title="Finish me")

    assert await task_svc.complete_task(db, task.id) is True
    done = await task_svc.get_task(db, task.id)
    assert done.status == TaskStatus.Completed
    assert done.completed_at is not None
    assert done.completed_at == done.updated_at
    first_stamp = done.completed_at

    assert await task_svc.complete_task(db, task.id) is True
    again = await task_svc.get_task(db, task.id)
    assert again.status == TaskStatus.Completed
    assert again.completed_at == first_stamp
    assert again.updated_at == first_stamp


@pytest.mark.asyncio
async def test_list_tasks_for_user_matches_assignee_or_creator(db: AsyncSession):
    await task_svc.create_task(db, "alice", title="Mine")
    await task_svc.create_task(db, "bob", title="Given to me", assigned_to="alice")
    await task_svc.create_task(db, "bob", title="Not mine", assigned_to="carol")

    tasks = await task_svc.list_tasks_for_user(db, "alice")
    assert _titles(tasks) == ["Given to me", "Mine"]
    assert await task_svc.count_tasks_for_user(db, "alice") == 2


@pytest.mark.asyncio
async def test_overdue_scenario(db: AsyncSession, yesterday, tomorrow):
    a = await task_svc.create_task(db, "alice", title="A", due_date=yesterday)
    b = await task_svc.create_task(db, "alice", title="B", due_date=yesterday)
    await task_svc.create_task(db, "alice", title="C", due_date=tomorrow)
    await task_svc.update_task(db, b.id, status="Completed")

    overdue = await task_svc.list_overdue_tasks(db)
    assert [t.id for t in overdue] == [a.id]


@pytest.mark.asyncio
async def test_overdue_matches_invariant_for_every_task(db: AsyncSession, now):
    statuses = list(TaskStatus)
    for i, status in enumerate(statuses):
        for offset in (-3, 2):
            task = await task_svc.create_task(
                db, "alice", title=f"{status.value}{offset}", due_date=now + timedelta(days=offset + i * 0.01)
            )
            await task_svc.update_task(db, task.id, status=status.value)
    await task_svc.create_task(db, "alice", title="no due date")

    overdue = await task_svc.list_overdue_tasks(db, now=now)
    expected = {t.id for t in await task_svc.list_tasks(db) if t.is_overdue(now)}
    assert {t.id for t in overdue} == expected
    assert len(expected) == 3
    due_dates = [as_utc(t.due_date) for t in overdue]
    assert due_dates == sorted(due_dates)


@pytest.mark.asyncio
async def test_statistics_on_empty_store(db: AsyncSession):
    stats = await task_svc.task_statistics(db)
    assert stats.total_tasks == 0
    assert stats.completion_rate == 0
    assert stats.overdue_tasks == 0
    assert stats.priority_breakdown == {}
    assert stats.category_breakdown == {}


@pytest.mark.asyncio
async def test_statistics_breakdowns(db: AsyncSession, owner: User, yesterday):
    work = await category_svc.create_category(db, owner.id, name="Work")
    done = await task_svc.create_task(db, "alice", title="Done", priority="High", category_id=work.id)
    await task_svc.create_task(db, "alice", title="Late", priority="High", due_date=yesterday)
    started = await task_svc.create_task(db, "alice", title="Started", priority="Low", category_id=work.id)
    await task_svc.create_task(db, "alice", title="Idle")
    await task_svc.complete_task(db, done.id)
    await task_svc.update_task(db, started.id, status="InProgress")

    stats = await task_svc.task_statistics(db)
    assert stats.total_tasks == 4
    assert stats.completed_tasks == 1
    assert stats.pending_tasks == 2
    assert stats.in_progress_tasks == 1
    assert stats.overdue_tasks == 1
    assert stats.completion_rate == pytest.approx(25.0)
    assert stats.status_breakdown["OnHold"] == 0
    assert stats.priority_breakdown == {"Low": 1, "Medium": 1, "High": 2}
    assert stats.category_breakdown == {"Work": 2, "Uncategorized": 2}


@pytest.mark.asyncio
async def test_deleting_category_keeps_tasks_uncategorized(db: AsyncSession, owner: User):
    work = await category_svc.create_category(db, owner.id, name="Work")
    task = await task_svc.create_task(db, "alice", title="Survivor", category_id=work.id)

    assert await category_svc.delete_category(db, work.id) is True
    survivor = await task_svc.get_task(db, task.id)
    assert survivor is not None
    assert survivor.category_id is None
    assert survivor.category is None
    assert (await db.execute(select(func.count(Task.id)))).scalar_one() == 1


@pytest.mark.asyncio
async def test_filter_due_date_bounds_with_utc_offset(db: AsyncSession):
    plus_five = timezone(timedelta(hours=5))
    await task_svc.create_task(
        db, "alice", title="Noon UTC", due_date=datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)
    )

    # 15:00+05:00 is 10:00 UTC, before the task is due.
    tasks, total = await task_svc.filter_tasks(
        db, TaskFilter(due_date_from=datetime(2030, 1, 1, 15, 0, tzinfo=plus_five))
    )
    assert total == 1
    assert _titles(tasks) == ["Noon UTC"]

    # 16:00+05:00 is 11:00 UTC, so nothing is due by then.
    tasks, total = await task_svc.filter_tasks(
        db, TaskFilter(due_date_to=datetime(2030, 1, 1, 16, 0, tzinfo=plus_five))
    )
    assert total == 0
