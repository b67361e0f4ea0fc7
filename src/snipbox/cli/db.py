"""Relational store schema commands."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from snipbox.settings import Settings

db_app = typer.Typer(help="Manage the relational snippet store.")
console = Console()


@db_app.command("migrate")
def migrate(
    url: Annotated[str | None, typer.Option(help="Database URL (defaults to DATABASE_URL).")] = None,
) -> None:
    """Apply Alembic migrations up to head."""
    from snipbox.db.migrations import run_migrations

    db_url = url or Settings.from_env().database_url
    console.print("Running migrations...")
    run_migrations(db_url)
    console.print("[green]Database schema is up to date.[/green]")
