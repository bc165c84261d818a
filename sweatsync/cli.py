"""SweatSync command line.

Commands:
- serve: run the API with uvicorn
- init-db: create database tables
- validate-plan: check a plan JSON file the same way uploads are checked
- create-account: register an account without going through the API
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from sweatsync.config.settings import settings
from sweatsync.core.errors import PlanValidationError, UsernameTakenError
from sweatsync.core.logger import setup_logger
from sweatsync.core.password import MIN_PASSWORD_LENGTH, hash_password
from sweatsync.db.store import Store
from sweatsync.plans.upload import extract_plan_candidate
from sweatsync.plans.validators import validate_plan_document
from sweatsync.users.account_repository import AccountRepository

app = typer.Typer(help="SweatSync workout tracker", no_args_is_help=True)
console = Console()


@app.callback()
def main(log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level")) -> None:
    setup_logger(level=log_level.upper(), log_file=settings.log_file, json_file=settings.log_json)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
) -> None:
    """Run the API server."""
    uvicorn.run("sweatsync.main:app", host=host, port=port, reload=reload)


@app.command("init-db")
def init_db() -> None:
    """Create all database tables."""
    store = Store(settings.database_url).open()
    try:
        store.create_all()
    finally:
        store.close()
    console.print(f"[green]Database ready[/green] at {settings.database_url}")


@app.command("validate-plan")
def validate_plan(path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True)) -> None:
    """Validate a plan JSON file and print its schedule."""
    try:
        body = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Not valid JSON:[/red] {e}")
        raise typer.Exit(code=1) from e
    if not isinstance(body, dict):
        console.print("[red]Plan file must contain a JSON object[/red]")
        raise typer.Exit(code=1)

    name, schedule = extract_plan_candidate(body)
    try:
        plan = validate_plan_document(name, schedule)
    except PlanValidationError as e:
        console.print(f"[red]Invalid plan:[/red] {e}")
        raise typer.Exit(code=1) from e

    table = Table(title=plan.name)
    table.add_column("Day")
    table.add_column("Workout")
    table.add_column("Exercises")
    for day, workout in plan.schedule.items():
        if workout is None:
            table.add_row(day, "[dim]rest[/dim]", "")
            continue
        exercises = ", ".join(f"{ex.name} ({ex.sets}x {ex.kind})" for ex in workout.exercises)
        table.add_row(day, workout.name, exercises)
    console.print(table)
    console.print("[green]Plan is valid[/green]")


@app.command("create-account")
def create_account(
    username: str = typer.Argument(...),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
) -> None:
    """Register an account directly in the database."""
    if len(password) < MIN_PASSWORD_LENGTH:
        console.print(f"[red]Password must be at least {MIN_PASSWORD_LENGTH} characters[/red]")
        raise typer.Exit(code=1)

    store = Store(settings.database_url).open()
    try:
        store.create_all()
        with store.session("create_account") as session:
            account = AccountRepository.create(session, username.strip(), hash_password(password))
            account_id = account.id
    except UsernameTakenError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        store.close()
    console.print(f"[green]Created account[/green] {username} (id={account_id})")


if __name__ == "__main__":
    app()
