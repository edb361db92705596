"""Development seed data: two accounts and three starter categories."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models.base import utcnow
from .models.category import Category
from .models.enums import UserRole
from .models.user import User

logger = logging.getLogger(__name__)

SEED_USERS = [
    {"username": "admin", "email": "admin@taskmanager.com", "first_name": "Admin",
     "last_name": "User", "role": UserRole.Admin},
    {"username": "user", "email": "user@taskmanager.com", "first_name": "Regular",
     "last_name": "User", "role": UserRole.User},
]

SEED_CATEGORIES = [
    {"name": "Work", "description": "Work-related tasks", "color": "#007bff"},
    {"name": "Personal", "description": "Personal tasks", "color": "#28a745"},
    {"name": "Urgent", "description": "Urgent tasks that need immediate attention", "color": "#dc3545"},
]


async def seed_demo_data(db: AsyncSession) -> bool:
    """Insert seed rows into an empty database. Returns False if users already exist."""
    existing = (await db.execute(select(func.count(User.id)))).scalar_one()
    if existing:
        return False

    now = utcnow()
    users = [User(**row, is_active=True, created_at=now) for row in SEED_USERS]
    db.add_all(users)
    await db.flush()

    owner = users[0]
    db.add_all(
        Category(**row, created_by_id=owner.id, created_at=now, is_active=True)
        for row in SEED_CATEGORIES
    )
    await db.commit()

    logger.info("Seeded %d users and %d categories", len(SEED_USERS), len(SEED_CATEGORIES))
    return True
