"""Tests for config.py - layered configuration loading."""

import os

import pytest

from migration_ledger.config import MigrationConfig, load_config
from migration_ledger.exceptions import (
    ConfigFileError,
    ConfigurationError,
    InvalidConfigError,
    MigrationLedgerError,
)


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    for key in list(os.environ):
        if key.startswith("MIGRATION_LEDGER_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


class TestMigrationConfig:
    """Test MigrationConfig defaults and validation."""

    def test_defaults(self):
        config = MigrationConfig()
        assert config.output_dir == ".migration-ledger"
        assert config.lookback_window == 5
        assert config.checkpoint_limit == 50
        assert config.list_limit == 10
        assert config.fail_on == ["error"]
        assert config.rules_enabled == []

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"lookback_window": 0},
            {"checkpoint_limit": -1},
            {"list_limit": 0},
            {"fail_on": ["fatal"]},
            {"rules_enabled": ["a", "a"]},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(InvalidConfigError):
            MigrationConfig(**kwargs)


class TestLoadConfig:
    """Test load_config layering."""

    def test_no_sources(self):
        assert load_config() == MigrationConfig()

    def test_project_config_discovered(self, tmp_path):
        (tmp_path / "migration-ledger.toml").write_text(
            'lookback_window = 3\nrules_enabled = ["no-any"]\n', encoding="utf-8"
        )
        config = load_config()
        assert config.lookback_window == 3
        assert config.rules_enabled == ["no-any"]

    def test_explicit_file_overrides_project(self, tmp_path):
        (tmp_path / "migration-ledger.toml").write_text("lookback_window = 3\n", encoding="utf-8")
        explicit = tmp_path / "other.toml"
        explicit.write_text("lookback_window = 7\n", encoding="utf-8")

        assert load_config(config_file=explicit).lookback_window == 7

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / "migration-ledger.toml").write_text("checkpoint_limit = 20\n", encoding="utf-8")
        monkeypatch.setenv("MIGRATION_LEDGER_CHECKPOINT_LIMIT", "30")
        monkeypatch.setenv("MIGRATION_LEDGER_OUTPUT_DIR", "ledger")

        config = load_config()
        assert config.checkpoint_limit == 30
        assert config.output_dir == "ledger"

    def test_overrides_win_and_none_ignored(self, monkeypatch):
        monkeypatch.setenv("MIGRATION_LEDGER_LOOKBACK_WINDOW", "4")
        config = load_config(lookback_window=2, output_dir=None)
        assert config.lookback_window == 2
        assert config.output_dir == ".migration-ledger"

    def test_bad_env_integer(self, monkeypatch):
        monkeypatch.setenv("MIGRATION_LEDGER_LIST_LIMIT", "many")
        with pytest.raises(InvalidConfigError):
            load_config()

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigFileError):
            load_config(config_file=tmp_path / "absent.toml")

    def test_unparsable_file(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("lookback_window = = 3\n", encoding="utf-8")
        with pytest.raises(ConfigFileError):
            load_config(config_file=path)

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "extra.toml"
        path.write_text("colour = 'blue'\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="colour"):
            load_config(config_file=path)

    def test_list_field_type_checked(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text('fail_on = "error"\n', encoding="utf-8")
        with pytest.raises(InvalidConfigError):
            load_config(config_file=path)


class TestErrorRendering:
    """Library errors render their details."""

    def test_details_in_message(self):
        error = InvalidConfigError("lookback_window", 0, "must be at least 1")
        assert isinstance(error, MigrationLedgerError)
        assert str(error) == (
            "Invalid configuration for lookback_window: 0 "
            "(key=lookback_window, value=0, reason=must be at least 1)"
        )
