"""Roster CLI application using Typer.

Command-line utilities for running the API, maintaining its database and
generating deployment secrets.
"""

import asyncio
import secrets

import typer
from rich.console import Console
from rich.table import Table

from roster.application.services import DatabaseMaintenanceService
from roster.infrastructure.persistence.sqlalchemy.database import (
    create_engine_for_url,
    create_session_maker,
    create_tables,
    drop_tables,
)
from roster.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyRepositoryFactory,
)
from roster_config.settings import Settings, get_settings

app = typer.Typer(
    name="roster",
    help="Roster - People & Roles administration CLI",
    no_args_is_help=True,
)
console = Console()

db_app = typer.Typer(
    name="db",
    help="Database schema and test data maintenance",
    no_args_is_help=True,
)
app.add_typer(db_app)

secrets_app = typer.Typer(
    name="secrets",
    help="Secret generation utilities",
    no_args_is_help=True,
)
app.add_typer(secrets_app)


@app.command("serve")
def serve(
    host: str = typer.Option(None, help="Bind address (default: API_HOST)"),
    port: int = typer.Option(None, help="Port (default: API_PORT)"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "roster.presentation.api.app:create_app",
        factory=True,
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


async def _with_service(settings: Settings, action):
    engine = create_engine_for_url(settings.database_url)
    try:
        await create_tables(engine)
        session_maker = create_session_maker(engine)
        async with session_maker() as session:
            factory = SQLAlchemyRepositoryFactory(session)
            database_path = settings.database_path
            service = DatabaseMaintenanceService.from_factory(
                factory,
                environment=settings.app_env,
                database_location=str(database_path) if database_path else None,
            )
            result = await action(service)
            await session.commit()
            return result
    finally:
        await engine.dispose()


async def _recreate_schema(settings: Settings, drop: bool) -> None:
    engine = create_engine_for_url(settings.database_url)
    try:
        if drop:
            await drop_tables(engine)
        await create_tables(engine)
    finally:
        await engine.dispose()


@db_app.command("init")
def db_init(
    drop: bool = typer.Option(False, "--drop", help="Drop all tables first"),
) -> None:
    """Create missing tables."""
    settings = get_settings()
    if drop and not typer.confirm("Drop every table including users?", default=False):
        raise typer.Abort
    asyncio.run(_recreate_schema(settings, drop))
    console.print(f"[green]Schema ready[/green] at {settings.database_url}")


@db_app.command("reset")
def db_reset(
    worker_index: int = typer.Option(0, "--worker", help="Worker index to log"),
) -> None:
    """Delete all people and roles."""
    result = asyncio.run(
        _with_service(get_settings(), lambda service: service.reset(worker_index)),
    )
    for table, count in result.deleted.items():
        console.print(f"  deleted [cyan]{count}[/cyan] row(s) from {table}")
    console.print(f"[green]Database reset[/green] in {result.duration_ms:.1f}ms")


@db_app.command("seed")
def db_seed(
    worker_index: int = typer.Option(0, "--worker", help="Worker index to log"),
) -> None:
    """Insert the default roles and people into empty tables."""
    result = asyncio.run(
        _with_service(get_settings(), lambda service: service.seed(worker_index)),
    )
    console.print(
        f"[green]Database seeded[/green]: {result.roles_created} role(s), "
        f"{result.people_created} person(s)",
    )


@db_app.command("status")
def db_status() -> None:
    """Show connectivity and row counts."""
    status = asyncio.run(
        _with_service(get_settings(), lambda service: service.status()),
    )

    table = Table(title="Database status")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Environment", status.environment)
    table.add_row("Database", status.database or "(not a file)")
    table.add_row(
        "Connected",
        "[green]yes[/green]" if status.can_connect else "[red]no[/red]",
    )
    table.add_row("People", str(status.people_count))
    table.add_row("Roles", str(status.roles_count))
    table.add_row("Users", str(status.users_count))
    console.print(table)


@secrets_app.command("generate")
def generate_secrets() -> None:
    """Generate a JWT signing secret.

    Copy the output to your .env file.
    """
    console.print("\n[bold green]Roster Secret Generation[/bold green]")
    console.print("=" * 60)

    # 64 bytes is ample for HS256
    jwt_secret = secrets.token_urlsafe(64)
    console.print(f"[cyan]JWT_SECRET_KEY[/cyan]={jwt_secret}")

    console.print("\n" + "=" * 60)
    console.print(
        "[yellow]Keep this secret secure and never commit it "
        "to version control![/yellow]"
    )
    console.print(
        "[dim]Copy the value to your config/.env or config/.env.dev file.[/dim]\n"
    )


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
