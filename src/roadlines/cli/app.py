"""
Root Typer application for the roadlines CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from roadlines.cli.db import app as db_app
from roadlines.core.errors import ConfigError
from roadlines.core.logging import configure_logging
from roadlines.core.settings import get_settings

app = Typer(
    name="roadlines",
    help="roadlines - local database lifecycle for the Roadlines app.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        from roadlines import __version__

        typer.echo(f"roadlines {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override ROADLINES_LOG_LEVEL"),
) -> None:
    """roadlines CLI - initialize, migrate, seed and query the database."""
    try:
        settings = get_settings()
    except ConfigError as exc:
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(code=1) from exc
    configure_logging(
        level=log_level or settings.log_level,
        json_format=settings.log_format == "json",
    )


app.add_typer(db_app, name="db", help="Database operations.")


if __name__ == "__main__":
    app()
