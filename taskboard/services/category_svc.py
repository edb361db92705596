"""Category service."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.base import utcnow
from ..models.category import DEFAULT_CATEGORY_COLOR, Category
from ..models.task import Task

logger = logging.getLogger(__name__)

_UPDATE_FIELDS = frozenset({"name", "description", "color", "is_active"})


async def list_categories(db: AsyncSession, *, include_inactive: bool = False) -> list[Category]:
    stmt = select(Category)
    if not include_inactive:
        stmt = stmt.where(Category.is_active.is_(True))
    result = await db.execute(stmt.order_by(Category.name))
    return list(result.scalars().all())


async def get_category(db: AsyncSession, category_id: uuid.UUID) -> Category | None:
    stmt = select(Category).where(Category.id == category_id)
    return (await db.execute(stmt)).scalar_one_or_none()


async def task_counts(db: AsyncSession) -> dict[uuid.UUID, int]:
    """Number of tasks per category id."""
    rows = (
        await db.execute(
            select(Task.category_id, func.count(Task.id))
            .where(Task.category_id.is_not(None))
            .group_by(Task.category_id)
        )
    ).all()
    return {category_id: int(count) for category_id, count in rows}


async def create_category(
    db: AsyncSession,
    created_by_id: uuid.UUID,
    *,
    name: str,
    description: str | None = None,
    color: str | None = None,
) -> Category:
    name = (name or "").strip()
    if not name:
        raise ValueError("Category name is required")
    category = Category(
        name=name,
        description=description,
        color=color or DEFAULT_CATEGORY_COLOR,
        created_by_id=created_by_id,
        created_at=utcnow(),
        is_active=True,
    )
    db.add(category)
    await db.commit()

    logger.info("Category created: %s (%s)", category.id, category.name)
    return await get_category(db, category.id)


async def update_category(db: AsyncSession, category_id: uuid.UUID, **fields) -> Category | None:
    unknown = set(fields) - _UPDATE_FIELDS
    if unknown:
        raise TypeError(f"Unknown category field(s): {', '.join(sorted(unknown))}")

    category = await get_category(db, category_id)
    if not category:
        return None
    for key, value in fields.items():
        if value is None:
            continue
        if key == "name" and not value.strip():
            continue
        setattr(category, key, value)
    category.updated_at = utcnow()
    await db.commit()

    logger.info("Category updated: %s", category_id)
    return category


async def delete_category(db: AsyncSession, category_id: uuid.UUID) -> bool:
    """Delete a category; its tasks survive uncategorized."""
    category = await get_category(db, category_id)
    if not category:
        return False

    await db.execute(
        update(Task).where(Task.category_id == category_id).values(category_id=None)
    )
    await db.delete(category)
    await db.commit()

    logger.info("Category deleted: %s", category_id)
    return True
