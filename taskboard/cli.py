"""Taskboard CLI - operator commands."""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict

import typer
from rich.console import Console
from rich.table import Table

from .config import settings
from .logging_setup import setup_logging

app = typer.Typer(
    name="taskboard",
    help="Taskboard - task tracking backend",
    no_args_is_help=True,
)
console = Console()


def _run(coro):
    return asyncio.run(coro)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")):
    setup_logging("DEBUG" if verbose else settings.log_level, settings.log_file)


@app.command("serve")
def serve(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the HTTP API."""
    import uvicorn

    console.print(f"[bold cyan]Starting {settings.app_title} at http://{host}:{port}[/bold cyan]")
    uvicorn.run("taskboard.app:app", host=host, port=port, reload=reload)


@app.command("init-db")
def init_db():
    """Create all tables."""
    from .database import create_tables

    _run(create_tables())
    console.print("[green]Database tables created[/green]")


@app.command("seed")
def seed():
    """Insert development accounts and categories into an empty database."""
    from .database import async_session_factory, create_tables
    from .seed import seed_demo_data

    async def _seed() -> bool:
        await create_tables()
        async with async_session_factory() as db:
            return await seed_demo_data(db)

    if _run(_seed()):
        console.print("[green]Seed data inserted[/green]")
    else:
        console.print("[yellow]Users already exist; nothing seeded[/yellow]")


@app.command("stats")
def stats(json_output: bool = typer.Option(False, "--json", help="Output as JSON")):
    """Show task statistics."""
    from .database import async_session_factory
    from .services import task_svc

    async def _stats():
        async with async_session_factory() as db:
            return await task_svc.task_statistics(db)

    result = _run(_stats())
    if json_output:
        console.print_json(json.dumps(asdict(result)))
        return

    table = Table(title="Task statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Total", str(result.total_tasks))
    table.add_row("Completed", str(result.completed_tasks))
    table.add_row("Pending", str(result.pending_tasks))
    table.add_row("In progress", str(result.in_progress_tasks))
    table.add_row("Overdue", str(result.overdue_tasks))
    table.add_row("Completion rate", f"{result.completion_rate:.1f}%")
    for name, count in result.priority_breakdown.items():
        table.add_row(f"Priority: {name}", str(count))
    for name, count in result.category_breakdown.items():
        table.add_row(f"Category: {name}", str(count))
    console.print(table)


@app.command("overdue")
def overdue():
    """List overdue tasks, earliest due first."""
    from .database import async_session_factory
    from .models.base import as_utc
    from .services import task_svc

    async def _overdue():
        async with async_session_factory() as db:
            return await task_svc.list_overdue_tasks(db)

    tasks = _run(_overdue())
    if not tasks:
        console.print("[green]No overdue tasks[/green]")
        return

    table = Table(title=f"Overdue tasks ({len(tasks)})")
    table.add_column("Due", style="red")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Assigned to")
    for task in tasks:
        table.add_row(
            as_utc(task.due_date).strftime("%Y-%m-%d %H:%M"),
            task.title,
            task.status.value,
            task.assigned_to or "-",
        )
    console.print(table)


@app.command("create-user")
def create_user(
    username: str = typer.Argument(..., help="Login name"),
    email: str = typer.Argument(..., help="Email address"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
    role: str = typer.Option("User", "--role", "-r", help="User, Manager or Admin"),
    first_name: str = typer.Option("", "--first-name"),
    last_name: str = typer.Option("", "--last-name"),
):
    """Create an account that can log in."""
    from .database import async_session_factory, create_tables
    from .services import user_svc

    async def _create():
        await create_tables()
        async with async_session_factory() as db:
            return await user_svc.create_user(
                db,
                username=username,
                email=email,
                password=password,
                role=role,
                first_name=first_name,
                last_name=last_name,
            )

    try:
        user = _run(_create())
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Created {user.role.value} account {user.username}[/green]")
