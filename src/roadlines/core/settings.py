"""Configuration management using Pydantic Settings.

Every value can be overridden from the environment (``ROADLINES_`` prefix)
or a ``.env`` file::

    ROADLINES_DATA_DIR=/srv/roadlines
    ROADLINES_TRACK_MIGRATIONS=false
    ROADLINES_LOG_FORMAT=json
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from roadlines.core.errors import ConfigError

# Bundled script directories live next to the package
_PACKAGE_SCRIPTS_DIR = Path(__file__).resolve().parent.parent / "database"

JOURNAL_MODES = ("DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ROADLINES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage ──────────────────────────────────────────────────
    data_dir: Path = Field(
        default_factory=lambda: Path.home() / "Documents" / "Roadlines",
        description="Directory holding the database file",
    )
    database_name: str = "roadlines.db"

    # ── Scripts ──────────────────────────────────────────────────
    scripts_dir: Path = _PACKAGE_SCRIPTS_DIR
    migrations_dir: Path | None = None
    seeders_dir: Path | None = None

    # ── SQLite ───────────────────────────────────────────────────
    journal_mode: str = "WAL"
    foreign_keys: bool = True
    track_migrations: bool = True
    busy_timeout: float = 5.0

    # ── Logging ──────────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "console"] = "console"

    @field_validator("journal_mode")
    @classmethod
    def _check_journal_mode(cls, value: str) -> str:
        mode = value.strip().upper()
        if mode not in JOURNAL_MODES:
            raise ValueError(f"journal_mode must be one of {', '.join(JOURNAL_MODES)}, got {value!r}")
        return mode

    @property
    def database_path(self) -> Path:
        """Full path of the database file."""
        return self.data_dir / self.database_name

    @property
    def resolved_migrations_dir(self) -> Path:
        return self.migrations_dir or self.scripts_dir / "migrations"

    @property
    def resolved_seeders_dir(self) -> Path:
        return self.seeders_dir or self.scripts_dir / "seeders"


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create settings instance."""
    global _settings
    if _settings is None:
        try:
            _settings = Settings()
        except ValidationError as exc:
            raise ConfigError(f"Invalid roadlines settings: {exc}", cause=exc) from exc
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
