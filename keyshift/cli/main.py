"""keyshift CLI — inspect and migrate a client state store.

`keyshift status` shows where a store is, `keyshift migrate` brings it
to the current version, `keyshift downgrade N` walks it back where the
migrations allow it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import orjson
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from keyshift.cli.context import configure_logging, open_storage, run_async
from keyshift.config import settings
from keyshift.exceptions import IrreversibleMigrationError, MigrationError
from keyshift.migrations.helper import MigrationHelper
from keyshift.migrations.registry import CURRENT_VERSION, MIN_VERSION
from keyshift.migrations import runner
from keyshift.migrations.runner import MigrationRunner, current_version
from keyshift.types import ClientType

console = Console()

app = typer.Typer(
    name="keyshift",
    help="keyshift -- versioned state migrations for client key-value stores.",
    no_args_is_help=True,
)

BackendOption = typer.Option(None, "--backend", "-b", help="sqlite, json or memory")
PathOption = typer.Option(None, "--path", "-p", help="Database or data file path")


@app.callback()
def _main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level"),
):
    configure_logging(log_level)


@app.command()
def status(
    backend: Optional[str] = BackendOption,
    path: Optional[Path] = PathOption,
):
    """Show the stored version and known accounts."""

    async def _status():
        storage = await open_storage(backend, path)
        version = await current_version(storage)
        user_ids: list[str] = []
        if version >= 0:
            helper = MigrationHelper(version, storage, client_type=settings.client_type)
            user_ids = await helper.get_known_user_ids()
        return version, user_ids

    version, user_ids = run_async(_status())

    if version < 0:
        state = "[dim]empty[/dim]"
    elif version < MIN_VERSION:
        state = "[red]too old to migrate[/red]"
    elif version < CURRENT_VERSION:
        state = "[yellow]pending migrations[/yellow]"
    else:
        state = "[green]up to date[/green]"

    console.print(Panel(
        f"Stored version:  {version}\n"
        f"Current version: {CURRENT_VERSION}\n"
        f"Minimum version: {MIN_VERSION}\n"
        f"State:           {state}",
        title="State Store",
        border_style="cyan",
    ))

    if user_ids:
        table = Table(title="Known accounts")
        table.add_column("#", style="dim")
        table.add_column("User id", style="cyan")
        for i, user_id in enumerate(user_ids, 1):
            table.add_row(str(i), user_id)
        console.print(table)


@app.command()
def migrate(
    backend: Optional[str] = BackendOption,
    path: Optional[Path] = PathOption,
    client: ClientType = typer.Option(settings.client_type, "--client", "-c", help="Client type"),
):
    """Apply all pending migrations."""

    async def _migrate():
        storage = await open_storage(backend, path)
        before = await current_version(storage)
        after = await MigrationRunner(storage, client).run()
        return before, after

    try:
        before, after = run_async(_migrate())
    except MigrationError as e:
        console.print(f"[red]Migration failed:[/red] {e}")
        raise typer.Exit(1)

    if before == after:
        console.print(f"[dim]Already at version {after}.[/dim]")
    else:
        console.print(f"[green]Migrated from version {before} to {after}.[/green]")


@app.command("downgrade")
def downgrade(
    target: int = typer.Argument(help="Version to roll back to"),
    backend: Optional[str] = BackendOption,
    path: Optional[Path] = PathOption,
    client: ClientType = typer.Option(settings.client_type, "--client", "-c", help="Client type"),
):
    """Roll the store back to an older version."""

    async def _downgrade():
        storage = await open_storage(backend, path)
        return await runner.downgrade(storage, target, client)

    try:
        version = run_async(_downgrade())
    except IrreversibleMigrationError:
        console.print(f"[red]Cannot downgrade to version {target}: a migration on the way is irreversible.[/red]")
        raise typer.Exit(1)
    except MigrationError as e:
        console.print(f"[red]Downgrade failed:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]Store is at version {version}.[/green]")


@app.command()
def show(
    key: str = typer.Argument(help="Storage key to print"),
    backend: Optional[str] = BackendOption,
    path: Optional[Path] = PathOption,
):
    """Print the value stored at a key."""

    async def _show():
        storage = await open_storage(backend, path)
        return await storage.has(key), await storage.get(key)

    exists, value = run_async(_show())
    if not exists:
        console.print(f"[dim]No value stored at '{key}'.[/dim]")
        raise typer.Exit(1)
    console.print_json(orjson.dumps(value).decode())


def main():
    app()
