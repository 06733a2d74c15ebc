"""Tests for roadlines.core.settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from roadlines.core.errors import ConfigError
from roadlines.core.paths import ensure_data_dir, resolve_layout
from roadlines.core.settings import Settings, get_settings, reset_settings


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.database_name == "roadlines.db"
        assert s.journal_mode == "WAL"
        assert s.track_migrations is True
        assert s.database_path == s.data_dir / "roadlines.db"

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ROADLINES_DATA_DIR", str(tmp_path / "store"))
        monkeypatch.setenv("ROADLINES_TRACK_MIGRATIONS", "false")
        s = Settings()
        assert s.data_dir == tmp_path / "store"
        assert s.track_migrations is False

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("ROADLINES_DATABASE_NAME=fleet.db\n")
        assert Settings().database_name == "fleet.db"

    def test_journal_mode_normalized(self):
        assert Settings(journal_mode=" wal ").journal_mode == "WAL"

    def test_journal_mode_rejected(self):
        with pytest.raises(ValidationError):
            Settings(journal_mode="FAST")

    def test_script_dirs_derived_from_scripts_dir(self, tmp_path):
        s = Settings(scripts_dir=tmp_path)
        assert s.resolved_migrations_dir == tmp_path / "migrations"
        assert s.resolved_seeders_dir == tmp_path / "seeders"

    def test_explicit_script_dirs_win(self, tmp_path):
        s = Settings(scripts_dir=tmp_path, migrations_dir=tmp_path / "m")
        assert s.resolved_migrations_dir == tmp_path / "m"
        assert s.resolved_seeders_dir == tmp_path / "seeders"

    def test_bundled_script_dirs_exist(self):
        s = Settings()
        assert s.resolved_migrations_dir.is_dir()
        assert s.resolved_seeders_dir.is_dir()
        assert not list(s.resolved_migrations_dir.glob("*.sql"))


class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_reset(self):
        first = get_settings()
        reset_settings()
        assert get_settings() is not first

    def test_invalid_env_raises_config_error(self, monkeypatch):
        monkeypatch.setenv("ROADLINES_JOURNAL_MODE", "turbo")
        with pytest.raises(ConfigError) as excinfo:
            get_settings()
        assert isinstance(excinfo.value.cause, ValidationError)


class TestLayout:
    def test_resolve_from_settings(self, settings):
        layout = resolve_layout(settings)
        assert layout.database_path == settings.database_path
        assert layout.migrations_dir == settings.resolved_migrations_dir
        assert layout.data_dir == settings.data_dir

    def test_explicit_path_overrides(self, settings, tmp_path):
        layout = resolve_layout(settings, tmp_path / "elsewhere" / "x.db")
        assert layout.database_path == tmp_path / "elsewhere" / "x.db"
        assert layout.seeders_dir == settings.resolved_seeders_dir

    def test_with_database_path_keeps_scripts(self, settings, tmp_path):
        layout = resolve_layout(settings).with_database_path(str(tmp_path / "y.db"))
        assert layout.database_path == Path(tmp_path / "y.db")
        assert layout.migrations_dir == settings.resolved_migrations_dir

    def test_ensure_data_dir_is_idempotent(self, settings, tmp_path):
        layout = resolve_layout(settings, tmp_path / "a" / "b" / "c" / "x.db")
        ensure_data_dir(layout)
        ensure_data_dir(layout)
        assert (tmp_path / "a" / "b" / "c").is_dir()
