"""Command line for running E2E worker servers outside of pytest.

    roster-e2e setup --workers 4        # start, print env, wait for Ctrl+C
    roster-e2e status                   # what the state file knows
    roster-e2e teardown                 # stop servers from another shell
"""

import asyncio
import logging
import sys

import typer
from rich.console import Console
from rich.table import Table

from roster_e2e.databases import cleanup_all_databases, cleanup_stale_databases
from roster_e2e.health import check_http
from roster_e2e.orchestration import global_setup, global_teardown
from roster_e2e.ports import PortAllocator
from roster_e2e.settings import E2ESettings, get_e2e_settings
from roster_e2e.state_file import RecordedServer, ServerStateFile

app = typer.Typer(
    name="roster-e2e",
    help="Per-worker API servers for end-to-end tests",
    no_args_is_help=True,
)
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    _configure_logging(verbose)


async def _run_until_interrupted(
    workers: int,
    settings: E2ESettings,
    with_frontend: bool,
) -> None:
    env = await global_setup(workers, settings=settings, with_frontend=with_frontend)
    for key, value in sorted(env.items()):
        console.print(f"[cyan]{key}[/cyan]={value}")
    console.print("\n[green]Servers are running.[/green] Press Ctrl+C to stop.")
    try:
        await asyncio.Event().wait()
    finally:
        stopped = await global_teardown(settings)
        console.print(f"[yellow]Stopped {stopped} worker(s)[/yellow]")


@app.command("setup")
def setup(
    workers: int = typer.Option(1, "--workers", "-w", min=1, help="Worker count"),
    frontend: bool = typer.Option(False, "--frontend", help="Also start frontends"),
) -> None:
    """Start the servers of every worker and keep them running."""
    settings = get_e2e_settings()
    try:
        asyncio.run(_run_until_interrupted(workers, settings, frontend))
    except KeyboardInterrupt:
        pass


@app.command("teardown")
def teardown() -> None:
    """Stop the servers recorded in the state file and delete their databases."""
    stopped = asyncio.run(global_teardown(get_e2e_settings()))
    console.print(f"[green]Stopped {stopped} worker(s)[/green]")


async def _check_all(
    servers: list[RecordedServer],
    request_timeout: float,
) -> list[bool]:
    return list(
        await asyncio.gather(
            *(
                check_http(f"{server.api_url}/health", request_timeout=request_timeout)
                for server in servers
            ),
        ),
    )


@app.command("status")
def status() -> None:
    """Show the recorded servers and whether they answer their health check."""
    settings = get_e2e_settings()
    servers = sorted(
        ServerStateFile(settings.state_file).read(),
        key=lambda server: server.worker_index,
    )
    if not servers:
        console.print(f"[yellow]No servers recorded in {settings.state_file}[/yellow]")
        raise typer.Exit(0)

    healthy = asyncio.run(_check_all(servers, settings.request_timeout))

    table = Table(title="E2E worker servers")
    table.add_column("Worker", justify="right")
    table.add_column("API")
    table.add_column("Frontend")
    table.add_column("Database")
    table.add_column("Age", justify="right")
    table.add_column("Health")
    for server, ok in zip(servers, healthy):
        table.add_row(
            str(server.worker_index),
            server.api_url,
            server.frontend_url or "-",
            server.database_path.name,
            f"{server.age() / 60:.1f}m",
            "[green]healthy[/green]" if ok else "[red]down[/red]",
        )
    console.print(table)


@app.command("ports")
def ports(
    workers: int = typer.Option(1, "--workers", "-w", min=1, help="Worker count"),
    frontend: bool = typer.Option(False, "--frontend", help="Include frontends"),
) -> None:
    """Show the planned ports and which of them are busy."""
    settings = get_e2e_settings()
    allocator = PortAllocator(
        api_base_port=settings.api_base_port,
        frontend_base_port=settings.frontend_base_port,
        frontend_port_stride=settings.frontend_port_stride,
        search_range=settings.port_search_range,
        host=settings.host,
    )
    busy = {
        (conflict.worker_index, conflict.role): conflict
        for conflict in allocator.scan(workers, frontend)
    }

    table = Table(title="Planned ports")
    table.add_column("Worker", justify="right")
    table.add_column("Role")
    table.add_column("Port", justify="right")
    table.add_column("Status")
    for index in range(workers):
        plan = allocator.plan(index, frontend)
        roles = [("api", plan.api_port)]
        if plan.frontend_port is not None:
            roles.append(("frontend", plan.frontend_port))
        for role, port in roles:
            conflict = busy.get((index, role))
            if conflict is None:
                state = "[green]free[/green]"
            else:
                pids = ", ".join(str(pid) for pid in conflict.pids) or "unknown"
                state = f"[red]busy[/red] (pid {pids})"
            table.add_row(str(index), role, str(port), state)
    console.print(table)
    if busy:
        raise typer.Exit(1)


@app.command("cleanup-dbs")
def cleanup_dbs(
    older_than_hours: float = typer.Option(
        None,
        "--older-than-hours",
        help="Only delete databases older than this (default: all)",
    ),
) -> None:
    """Delete leftover per-worker database files."""
    settings = get_e2e_settings()
    if older_than_hours is None:
        deleted = cleanup_all_databases(settings.db_prefix, settings.temp_dir)
    else:
        deleted = cleanup_stale_databases(
            older_than_hours=older_than_hours,
            prefix=settings.db_prefix,
            temp_dir=settings.temp_dir,
        )
    for path in deleted:
        console.print(f"  deleted {path}")
    console.print(f"[green]Deleted {len(deleted)} database(s)[/green]")


def cli() -> None:
    """Entry point for the roster-e2e command."""
    app()


if __name__ == "__main__":
    cli()
