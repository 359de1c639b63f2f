"""Tests for configuration validation with pydantic."""

import json
import os

import pytest
from pydantic import ValidationError

from gobbler.config import _format_validation_errors, _merge_config, load_config
from gobbler.models import CheckConfig, Config, FetchConfig


def write_config(home, data):
    path = os.path.join(home, ".gobbler", "config.json")
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)
    return path


class TestCheckConfig:
    def test_default_values(self):
        cfg = CheckConfig()
        assert cfg.weeks == 4
        assert cfg.limit == 10
        assert cfg.run_days == 1

    @pytest.mark.parametrize("field", ["weeks", "limit", "run_days"])
    def test_must_be_positive(self, field):
        with pytest.raises(ValidationError) as exc_info:
            CheckConfig(**{field: 0})
        assert "must be positive" in str(exc_info.value)


class TestFetchConfig:
    def test_default_values(self):
        cfg = FetchConfig()
        assert cfg.timeout == 30.0
        assert cfg.connect_timeout == 10.0
        assert cfg.max_redirects == 5
        assert cfg.user_agent.startswith("gobbler/")

    def test_timeout_positive(self):
        with pytest.raises(ValidationError):
            FetchConfig(timeout=0)
        with pytest.raises(ValidationError):
            FetchConfig(connect_timeout=-1)

    def test_timeout_from_string(self):
        assert FetchConfig(timeout="12.5").timeout == 12.5


class TestConfig:
    def test_default_values(self):
        cfg = Config()
        assert cfg.base_dir == "~/.gobbler"
        assert cfg.log_level == "WARNING"
        assert isinstance(cfg.check, CheckConfig)
        assert isinstance(cfg.fetch, FetchConfig)

    def test_log_level_normalised(self):
        assert Config(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError) as exc_info:
            Config(log_level="chatty")
        assert "unknown log level" in str(exc_info.value)


class TestLoadConfig:
    def test_defaults_derive_paths_from_base_dir(self, isolated_home):
        cfg = load_config()
        base = os.path.join(isolated_home, ".gobbler")
        assert cfg.base_dir == base
        assert cfg.subscriptions_file == os.path.join(base, "subscriptions.db")
        assert cfg.state_db == os.path.join(base, "gobbler.db")

    def test_config_file_is_merged(self, isolated_home):
        write_config(isolated_home, {"check": {"weeks": 2}, "fetch": {"timeout": 5}})
        cfg = load_config()
        assert cfg.check.weeks == 2
        assert cfg.check.limit == 10
        assert cfg.fetch.timeout == 5

    def test_base_dir_moves_default_paths(self, isolated_home):
        other = os.path.join(isolated_home, "elsewhere")
        write_config(isolated_home, {"base_dir": other})
        cfg = load_config()
        assert cfg.subscriptions_file == os.path.join(other, "subscriptions.db")

    def test_env_overrides(self, isolated_home, monkeypatch):
        monkeypatch.setenv("GOBBLER_SUBSCRIPTIONS_FILE", "~/feeds.db")
        monkeypatch.setenv("GOBBLER_LOG_LEVEL", "info")
        monkeypatch.setenv("GOBBLER_FETCH_TIMEOUT", "7")
        cfg = load_config()
        assert cfg.subscriptions_file == os.path.join(isolated_home, "feeds.db")
        assert cfg.log_level == "INFO"
        assert cfg.fetch.timeout == 7.0

    def test_explicit_overrides_win(self, isolated_home, monkeypatch):
        monkeypatch.setenv("GOBBLER_SUBSCRIPTIONS_FILE", "/from/env.db")
        cfg = load_config({"subscriptions_file": "/from/cli.db"})
        assert cfg.subscriptions_file == "/from/cli.db"

    def test_invalid_values_reported(self, isolated_home):
        write_config(isolated_home, {"check": {"weeks": -1}})
        with pytest.raises(ValueError) as exc_info:
            load_config()
        assert "Configuration validation failed" in str(exc_info.value)
        assert "  - check.weeks: " in str(exc_info.value)
        assert "(got -1)" in str(exc_info.value)

    def test_unreadable_config_file(self, isolated_home):
        path = os.path.join(isolated_home, ".gobbler", "config.json")
        os.makedirs(os.path.dirname(path))
        with open(path, "w", encoding="utf-8") as f:
            f.write("{not json")
        with pytest.raises(ValueError, match="Unable to read config file"):
            load_config()


class TestHelpers:
    def test_merge_config_nested(self):
        merged = _merge_config({"a": 1, "b": {"c": 2, "d": 3}}, {"b": {"c": 4}, "e": 5})
        assert merged == {"a": 1, "b": {"c": 4, "d": 3}, "e": 5}

    def test_merge_config_does_not_mutate(self):
        base = {"a": {"b": 1}}
        _merge_config(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}

    def test_format_validation_errors(self):
        try:
            CheckConfig(weeks=0)
        except ValidationError as e:
            message = _format_validation_errors(e)
        assert message == "  - weeks: Value error, must be positive (got 0)"
