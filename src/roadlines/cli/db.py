"""
CLI: ``roadlines db`` - database lifecycle commands.
"""

from __future__ import annotations

import sqlite3
from contextlib import closing

import typer
from rich.table import Table

from roadlines.cli.utils import (
    console,
    fail,
    make_manager,
    print_json,
    print_report,
    print_rows,
    print_write_result,
)
from roadlines.core.errors import RoadlinesError
from roadlines.core.migrations import MigrationRunner, discover_scripts
from roadlines.core.settings import get_settings

app = typer.Typer(no_args_is_help=True)

DatabaseOpt = typer.Option(None, "--database", "-d", help="Database file path")
MigrationsOpt = typer.Option(None, "--migrations", help="Migrations directory")
SeedersOpt = typer.Option(None, "--seeders", help="Seeders directory")


@app.command()
def init(
    database: str | None = DatabaseOpt,
    migrations: str | None = MigrationsOpt,
    seeders: str | None = SeedersOpt,
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Create the database, apply migrations and seeds."""
    manager = make_manager(database, migrations, seeders)
    try:
        report = manager.initialize()
    except RoadlinesError as exc:
        fail(exc)
    finally:
        manager.close()
    print_report(report, as_json=json_out)


@app.command()
def status(
    database: str | None = DatabaseOpt,
    migrations: str | None = MigrationsOpt,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show applied and pending migrations without applying anything."""
    manager = make_manager(database, migrations)
    path = manager.database_path

    if path.exists():
        uri = f"{path.resolve().as_uri()}?mode=ro"
        try:
            with closing(sqlite3.connect(uri, uri=True)) as conn:
                result = MigrationRunner(
                    conn,
                    manager.layout.migrations_dir,
                    track=get_settings().track_migrations,
                    create_table=False,
                ).status()
        except sqlite3.Error as exc:
            fail(f"Cannot read {path}: {exc}")
        applied = [(r.filename, r.applied_at) for r in result.applied]
        pending = result.pending
    else:
        applied = []
        pending = [p.name for p in discover_scripts(manager.layout.migrations_dir)]

    if json_out:
        print_json(
            {
                "database_path": str(path),
                "applied": [{"filename": f, "applied_at": a} for f, a in applied],
                "pending": pending,
            }
        )
        return

    table = Table(title=f"Migrations ({path})")
    table.add_column("Migration")
    table.add_column("Status")
    table.add_column("Applied at")
    for filename, applied_at in applied:
        table.add_row(filename, "[green]applied[/green]", applied_at)
    for filename in pending:
        table.add_row(filename, "[yellow]pending[/yellow]", "")
    console.print(table)


@app.command()
def seed(
    database: str | None = DatabaseOpt,
    migrations: str | None = MigrationsOpt,
    seeders: str | None = SeedersOpt,
    force: bool = typer.Option(False, "--force", help="Log seeds as forced re-runs"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Initialize and (re-)run seed scripts."""
    manager = make_manager(database, migrations, seeders)
    try:
        report = manager.initialize(force_seeds=force)
    except RoadlinesError as exc:
        fail(exc)
    finally:
        manager.close()
    print_report(report, as_json=json_out)


@app.command("reset-seeds")
def reset_seeds(
    database: str | None = DatabaseOpt,
    migrations: str | None = MigrationsOpt,
    seeders: str | None = SeedersOpt,
) -> None:
    """Clear seeder history."""
    manager = make_manager(database, migrations, seeders)
    try:
        manager.initialize()
        ok = manager.reset_seed_history()
    except RoadlinesError as exc:
        fail(exc)
    finally:
        manager.close()
    if not ok:
        fail("Failed to reset seeder history")
    console.print("[green]Seeder history reset[/green]")


@app.command()
def query(
    sql: str = typer.Argument(..., help="SQL statement"),
    param: list[str] = typer.Option([], "--param", "-p", help="Positional parameter (repeatable)"),
    database: str | None = DatabaseOpt,
    migrations: str | None = MigrationsOpt,
    seeders: str | None = SeedersOpt,
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run one statement through the query dispatcher."""
    manager = make_manager(database, migrations, seeders)
    try:
        manager.initialize()
        result = manager.query(sql, param)
    except RoadlinesError as exc:
        fail(exc)
    finally:
        manager.close()

    if isinstance(result, list):
        print_rows(result, as_json=json_out)
    else:
        print_write_result(result, as_json=json_out)


@app.command()
def path(database: str | None = DatabaseOpt) -> None:
    """Print the resolved database file path."""
    manager = make_manager(database)
    typer.echo(str(manager.database_path))


@app.command()
def relocate(
    directory: str = typer.Argument(..., help="New folder for the database file"),
    database: str | None = DatabaseOpt,
    migrations: str | None = MigrationsOpt,
    seeders: str | None = SeedersOpt,
    no_copy: bool = typer.Option(False, "--no-copy", help="Start fresh instead of copying"),
) -> None:
    """Move the database to another folder and re-open it there."""
    from roadlines.ops.relocate import relocate_database

    manager = make_manager(database, migrations, seeders)
    try:
        result = relocate_database(manager, directory, copy_existing=not no_copy)
    finally:
        manager.close()
    if not result.success:
        fail(result.message)
    console.print(f"[green]{result.message}[/green] ({result.path})")


@app.command()
def settings() -> None:
    """Show effective settings."""
    print_json(get_settings().model_dump(mode="json"))
