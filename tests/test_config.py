"""
Tests for Letterbox configuration and the config command
"""

from pathlib import Path
from types import SimpleNamespace

import pytest

from letterbox.cli.config_cmd import config_to_toml, run_config, set_config_value
from letterbox.config import Config, load_config
from letterbox.core.board import create_store
from letterbox.db.rest import RestStore
from letterbox.db.store import SQLiteStore
from letterbox.errors import ConfigError


class TestLoadConfig:
    """Tests for reading configuration files."""

    def test_missing_file_gives_defaults(self, tmp_path):
        """Test a missing file yields the default config."""
        config = load_config(tmp_path / "nope.toml")
        assert config.store.backend == "sqlite"
        assert config.board.max_body_length == 2000

    def test_sections_are_read(self, tmp_path):
        """Test TOML sections map onto the config dataclasses."""
        path = tmp_path / "config.toml"
        path.write_text(
            '[board]\nname = "Class of 2024"\nrecipients = ["Ann", "Ben"]\n\n'
            '[store]\nbackend = "rest"\n\n'
            '[remote]\nurl = "https://x.supabase.co"\napi_key = "k"\n'
        )

        config = load_config(path)

        assert config.board.name == "Class of 2024"
        assert config.board.recipients == ["Ann", "Ben"]
        assert config.store.backend == "rest"
        assert config.remote.url == "https://x.supabase.co"
        assert config.web.port == 8080

    def test_save_and_reload(self, tmp_path):
        """Test a saved config loads back the same."""
        path = tmp_path / "config.toml"
        config = Config()
        config.board.recipients = ["Ann"]
        config.rate_limits.likes_per_minute = 7
        config.save(path)

        loaded = load_config(path)
        assert loaded.board.recipients == ["Ann"]
        assert loaded.rate_limits.likes_per_minute == 7


class TestValidate:
    """Tests for config validation."""

    def test_default_secret_flagged(self):
        """Test the default web secret is reported."""
        errors = Config().validate()
        assert any("secret_key" in e for e in errors)

    def test_valid_config(self):
        """Test a sensible config has no errors."""
        config = Config()
        config.web.secret_key = "s3cret"
        assert config.validate() == []

    def test_rest_backend_needs_remote(self):
        """Test the rest backend requires url and api_key."""
        config = Config()
        config.web.secret_key = "s3cret"
        config.store.backend = "rest"

        errors = config.validate()
        assert any("remote.url" in e for e in errors)
        assert any("remote.api_key" in e for e in errors)

    def test_unknown_backend(self):
        """Test an unknown backend is reported."""
        config = Config()
        config.store.backend = "mongo"
        assert any("store.backend" in e for e in config.validate())


class TestCreateStore:
    """Tests for building the configured store."""

    def test_sqlite_seeds_roster(self):
        """Test the sqlite backend seeds the configured roster."""
        config = Config()
        config.database.path = ":memory:"
        config.board.recipients = ["Zoe", "Amy"]

        store = create_store(config)

        assert isinstance(store, SQLiteStore)
        assert [r.name for r in store.list_recipients()] == ["Amy", "Zoe"]

    def test_rest_backend(self):
        """Test the rest backend is built from remote settings."""
        config = Config()
        config.store.backend = "rest"
        config.remote.url = "https://x.supabase.co"
        config.remote.api_key = "k"

        store = create_store(config)
        assert isinstance(store, RestStore)
        store.close()

    def test_rest_backend_missing_settings(self):
        """Test the rest backend without a URL is a ConfigError."""
        config = Config()
        config.store.backend = "rest"

        with pytest.raises(ConfigError):
            create_store(config)

    def test_unknown_backend(self):
        """Test an unknown backend is a ConfigError."""
        config = Config()
        config.store.backend = "mongo"

        with pytest.raises(ConfigError):
            create_store(config)


class TestConfigCommand:
    """Tests for the config subcommand."""

    def test_set_value(self, tmp_path, capsys):
        """Test setting typed values by dotted key."""
        path = tmp_path / "config.toml"

        assert set_config_value(path, "web.port", "9000") == 0
        assert set_config_value(path, "board.recipients", "Ann, Ben") == 0

        config = load_config(path)
        assert config.web.port == 9000
        assert config.board.recipients == ["Ann", "Ben"]

    def test_set_invalid_key(self, tmp_path, capsys):
        """Test unknown keys are refused."""
        assert set_config_value(tmp_path / "config.toml", "web.nope", "1") == 1
        assert "Invalid config key" in capsys.readouterr().out

    def test_set_invalid_value(self, tmp_path, capsys):
        """Test values of the wrong type are refused."""
        assert set_config_value(tmp_path / "config.toml", "web.port", "eighty") == 1

    def test_show_masks_secrets(self):
        """Test secrets are masked when showing config."""
        config = Config()
        config.remote.api_key = "very-secret"
        config.web.secret_key = "also-secret"

        text = config_to_toml(config)
        assert "very-secret" not in text
        assert "also-secret" not in text

    def test_init_and_validate(self, tmp_path, capsys):
        """Test init writes a file that validate then checks."""
        path = tmp_path / "config.toml"
        args = SimpleNamespace(config=path, init=True, validate=False, backup=False, set=None, show=False)

        assert run_config(args) == 0
        assert Path(path).exists()
        assert run_config(args) == 1  # already exists

        args.init = False
        args.validate = True
        assert run_config(args) == 1  # default secret key
        assert "secret_key" in capsys.readouterr().out
