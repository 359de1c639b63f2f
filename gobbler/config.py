"""Configuration management for gobbler."""

import json
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from .models import Config

DEFAULT_CONFIG = Config()
SUBSCRIPTIONS_FILE_NAME = "subscriptions.db"
STATE_DB_NAME = "gobbler.db"


def config_path() -> Path:
    return Path.home() / ".gobbler" / "config.json"


def load_config(overrides: dict | None = None) -> Config:
    """Load config from ~/.gobbler/config.json, merge with defaults, env vars and overrides."""
    load_dotenv()

    config_data: dict = {}

    path = config_path()
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                user_cfg = json.load(f)
            config_data = _merge_config(config_data, user_cfg)
        except (OSError, json.JSONDecodeError) as e:
            raise ValueError(f"Unable to read config file {path}: {e}") from e

    _apply_env_overrides(config_data)

    if overrides:
        config_data = _merge_config(config_data, overrides)

    base_dir = os.path.expanduser(config_data.get("base_dir", DEFAULT_CONFIG.base_dir))
    config_data["base_dir"] = base_dir

    if config_data.get("subscriptions_file"):
        config_data["subscriptions_file"] = os.path.expanduser(config_data["subscriptions_file"])
    else:
        config_data["subscriptions_file"] = os.path.join(base_dir, SUBSCRIPTIONS_FILE_NAME)

    if config_data.get("state_db"):
        config_data["state_db"] = os.path.expanduser(config_data["state_db"])
    else:
        config_data["state_db"] = os.path.join(base_dir, STATE_DB_NAME)

    try:
        return Config(**config_data)
    except ValidationError as e:
        error_messages = _format_validation_errors(e)
        raise ValueError(f"Configuration validation failed:\n{error_messages}") from e


def _merge_config(base: dict, override: dict) -> dict:
    """Layer ``override`` over a copy of ``base``. Config sections merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            value = _merge_config(current, value)
        merged[key] = value
    return merged


def _apply_env_overrides(cfg: dict) -> None:
    """Apply environment variable overrides to config dict."""
    env_mappings = [
        ("GOBBLER_BASE_DIR", None, "base_dir"),
        ("GOBBLER_SUBSCRIPTIONS_FILE", None, "subscriptions_file"),
        ("GOBBLER_STATE_DB", None, "state_db"),
        ("GOBBLER_LOG_LEVEL", None, "log_level"),
        ("GOBBLER_USER_AGENT", "fetch", "user_agent"),
        ("GOBBLER_FETCH_TIMEOUT", "fetch", "timeout"),
    ]

    for env_var, section, key in env_mappings:
        value = os.environ.get(env_var)
        if value is None:
            continue

        if section is None:
            cfg[key] = value
        else:
            if section not in cfg:
                cfg[section] = {}
            cfg[section][key] = value


def _format_validation_errors(error: ValidationError) -> str:
    """One line per invalid setting, named by its dotted config path."""
    lines = []
    for err in error.errors():
        setting = ".".join(str(part) for part in err["loc"])
        lines.append(f"  - {setting}: {err['msg']} (got {err.get('input')!r})")
    return "\n".join(lines)
