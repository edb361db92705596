"""Taskboard configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class TaskboardSettings(BaseSettings):
    environment: str = "development"
    database_url: str = "sqlite+aiosqlite:///taskboard.db"
    echo_sql: bool = False
    app_title: str = "Task Manager API"

    # Signed access tokens (HS256). The secret has no default: startup fails without it.
    jwt_secret: str = ""
    jwt_issuer: str = "taskboard"
    jwt_audience: str = "taskboard-clients"
    jwt_expiration_minutes: int = 60

    # When false, task creation without a bearer token is attributed to default_actor.
    auth_required: bool = False
    default_actor: str = "admin"

    seed_demo_data: bool = True
    max_page_size: int = 100

    log_level: str = "INFO"
    log_file: str | None = None

    model_config = {"env_prefix": "TASKBOARD_", "env_file": ".env", "extra": "ignore"}

    @property
    def base_dir(self) -> Path:
        return Path(__file__).resolve().parent

    @property
    def project_dir(self) -> Path:
        return self.base_dir.parent

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}

    @property
    def jwt_expiration_seconds(self) -> int:
        return max(60, int(self.jwt_expiration_minutes) * 60)


settings = TaskboardSettings()
