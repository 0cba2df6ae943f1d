"""Tests for asset_config: YAML loading, validation, environment overrides."""

import pytest
import yaml

from asset_config import DEFAULT_DATABASE_URL, LedgerConfig, get_active_config
from asset_config.loader import apply_env_overrides, parse_config


def _write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return path


class TestGetActiveConfig:
    """Resolution of the active configuration."""

    def test_packaged_defaults(self):
        config = get_active_config(env={})

        assert config == LedgerConfig()
        assert config.database_url == DEFAULT_DATABASE_URL
        assert config.namespace == "fabcar"
        assert config.atomic_init is False

    def test_default_database_persists_across_runs(self):
        config = get_active_config(env={})

        assert config.database_url.startswith("sqlite")
        assert ":memory:" not in config.database_url

    def test_explicit_path(self, tmp_path):
        path = _write(tmp_path, "namespace: cars\natomic_init: true\n")

        config = get_active_config(path, env={})

        assert config.namespace == "cars"
        assert config.atomic_init is True
        assert config.channel_id == "mychannel"

    def test_path_from_environment(self, tmp_path):
        path = _write(tmp_path, "channel_id: ch2\n")

        config = get_active_config(env={"ASSET_LEDGER_CONFIG": str(path)})

        assert config.channel_id == "ch2"

    def test_env_overrides_values(self, tmp_path):
        path = _write(tmp_path, "database_url: sqlite:///a.db\n")

        config = get_active_config(
            path,
            env={
                "ASSET_LEDGER_DATABASE_URL": "sqlite:///b.db",
                "ASSET_LEDGER_LOG_LEVEL": "debug",
            },
        )

        assert config.database_url == "sqlite:///b.db"
        assert config.log_level == "DEBUG"

    def test_empty_file_uses_defaults(self, tmp_path):
        assert get_active_config(_write(tmp_path, ""), env={}) == LedgerConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml", env={})

    def test_malformed_yaml(self, tmp_path):
        with pytest.raises(yaml.YAMLError):
            get_active_config(_write(tmp_path, "namespace: [unclosed\n"), env={})

    def test_non_mapping_document(self, tmp_path):
        with pytest.raises(ValueError):
            get_active_config(_write(tmp_path, "- a\n- b\n"), env={})


class TestParseConfig:
    """Validation of parsed values."""

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown configuration keys"):
            parse_config({"namespace": "x", "retries": 3})

    @pytest.mark.parametrize(
        "data",
        [
            {"echo": "yes"},
            {"atomic_init": 1},
            {"pool_size": "5"},
            {"pool_size": True},
            {"namespace": 7},
        ],
    )
    def test_wrong_types(self, data):
        with pytest.raises(ValueError):
            parse_config(data)

    def test_log_level_normalized(self):
        assert parse_config({"log_level": "warning"}).log_level == "WARNING"

    def test_unknown_log_level(self):
        with pytest.raises(ValueError, match="log level"):
            parse_config({"log_level": "LOUD"})

    def test_env_override_bad_level(self):
        with pytest.raises(ValueError):
            apply_env_overrides(LedgerConfig(), {"ASSET_LEDGER_LOG_LEVEL": "LOUD"})

    def test_config_is_frozen(self):
        config = LedgerConfig()
        with pytest.raises(AttributeError):
            config.namespace = "other"
