"""FastAPI application for the Taskboard API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings
from .logging_setup import setup_logging
from .services.security import require_signing_secret

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level, settings.log_file)
    # A missing signing secret is unrecoverable: refuse to start.
    require_signing_secret(settings)

    # Auto-create tables; schema migrations are managed outside the service.
    from .database import async_session_factory, create_tables

    await create_tables()
    if settings.seed_demo_data and not settings.is_production:
        from .seed import seed_demo_data

        async with async_session_factory() as session:
            await seed_demo_data(session)

    logger.info("Starting %s (%s)", settings.app_title, settings.environment)
    yield


app = FastAPI(title=settings.app_title, lifespan=lifespan)

from .routers import auth, categories, health, tasks, users  # noqa: E402

app.include_router(tasks.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(categories.router)
app.include_router(health.router)
