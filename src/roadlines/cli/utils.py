"""
CLI utility helpers: output formatting and manager construction.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from roadlines.core.database import DatabaseManager, InitializationReport
from roadlines.core.errors import RoadlinesError
from roadlines.core.statements import WriteResult

console = Console()
err_console = Console(stderr=True)


# ── Manager helper ───────────────────────────────────────────────────────


def make_manager(
    database: str | None = None,
    migrations: str | None = None,
    seeders: str | None = None,
) -> DatabaseManager:
    """Build a manager from settings plus any command-line overrides."""
    return DatabaseManager(
        database_path=Path(database) if database else None,
        migrations_dir=Path(migrations) if migrations else None,
        seeders_dir=Path(seeders) if seeders else None,
    )


def fail(error: RoadlinesError | str) -> None:
    """Print an error and exit with status 1."""
    if isinstance(error, RoadlinesError):
        err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
    else:
        err_console.print(f"[bold red]Error[/bold red]: {error}")
    raise typer.Exit(code=1)


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> Any:
    if isinstance(obj, WriteResult):
        return obj.to_dict()
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    return obj


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


def print_rows(rows: Sequence[dict[str, Any]], *, as_json: bool = False, title: str = "") -> None:
    """Render query rows as a table (or JSON)."""
    if as_json:
        print_json(list(rows))
        return
    if not rows:
        console.print("[dim]No rows.[/dim]")
        return
    table = Table(title=title or None)
    for column in rows[0]:
        table.add_column(str(column))
    for row in rows:
        table.add_row(*("" if v is None else str(v) for v in row.values()))
    console.print(table)


def print_write_result(result: WriteResult, *, as_json: bool = False) -> None:
    if as_json:
        print_json(_to_dict(result))
        return
    console.print(
        f"[green]OK[/green] changes={result.changes} last_insert_rowid={result.last_insert_rowid}"
    )


def print_report(report: InitializationReport, *, as_json: bool = False) -> None:
    """Summarise an initialization run."""
    if as_json:
        print_json(
            {
                "database_path": str(report.database_path),
                "journal_mode": report.journal_mode,
                "migrations": {
                    "applied": report.migrations.applied,
                    "skipped": report.migrations.skipped,
                },
                "seeds": {
                    "executed": report.seeds.executed,
                    "failed": [w.to_dict() for w in report.seeds.warnings],
                },
            }
        )
        return

    console.print(f"[bold]Database[/bold] {report.database_path} ({report.journal_mode})")
    console.print(
        f"  migrations: {len(report.migrations.applied)} applied, "
        f"{len(report.migrations.skipped)} already applied"
    )
    for name in report.migrations.applied:
        console.print(f"    [green]+[/green] {name}")
    console.print(
        f"  seeds: {len(report.seeds.executed)} executed, {len(report.seeds.warnings)} failed"
    )
    for warning in report.seeds.warnings:
        console.print(f"    [yellow]![/yellow] {warning.script}: {warning.cause}")
