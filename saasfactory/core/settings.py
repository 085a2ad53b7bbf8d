"""Load application settings from ~/.saasfactory/settings.yaml."""

import os
from pathlib import Path
from typing import Any

import yaml

_DEFAULTS: dict[str, Any] = {
    "assistant": {
        "command": "claude",
        "heartbeat_interval": 5.0,
        "kill_grace_period": 0.5,
        "timeouts": {
            "generate": 120,
            "refine": 60,
            "name_research": 120,
            "analyze": 60,
            "content": 120,
            "discovery": 600,
            "follow_up": 120,
            "compete_quick": 300,
            "compete_full": 900,
            "compete_url": 600,
        },
        "max_turns": {
            "discovery": 25,
            "compete_quick": 15,
            "compete_full": 30,
            "compete_url": 20,
        },
    },
    "wizard": {
        # Second ESC within this many seconds means "go back"
        "double_escape_window": 1.0,
        "discovery_count": 5,
    },
    "logging": {
        "file": "logs/saasfactory.log",
        "level": "INFO",
        "log_to_console": False,
        "max_bytes": 10485760,  # 10 MB
        "backup_count": 3,
    },
}

_cached: dict[str, Any] | None = None


def get_home() -> Path:
    """Config directory: $SAASFACTORY_HOME or ~/.saasfactory."""
    override = os.environ.get("SAASFACTORY_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".saasfactory"


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge overlay into base recursively. Mutates base."""
    for key, value in overlay.items():
        if value is None:
            continue
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def get_default_settings() -> dict[str, Any]:
    """Return a deep copy of default settings."""
    return _deep_copy_nested(_DEFAULTS)


def get_setting(settings: dict[str, Any], path: str, default: Any = None) -> Any:
    """Get a nested value by dot path (e.g. 'assistant.timeouts.refine')."""
    current: Any = settings
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def reload_settings() -> None:
    """Clear the settings cache. Call after config files change."""
    global _cached
    _cached = None


def load_settings(config_dir: Path | None = None) -> dict[str, Any]:
    """Load settings.yaml from the config directory. Returns merged defaults + file values."""
    global _cached
    if _cached is not None:
        return _cached

    path = (config_dir or get_home()) / "settings.yaml"

    result = get_default_settings()
    if path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                _deep_merge(result, data)
        except (yaml.YAMLError, OSError):
            pass

    _cached = result
    return result


def _deep_copy_nested(obj: Any) -> Any:
    """Return a deep copy of nested dicts/lists for defaults."""
    if isinstance(obj, dict):
        return {k: _deep_copy_nested(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_deep_copy_nested(x) for x in obj]
    return obj
