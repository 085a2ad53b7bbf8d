"""Tests for settings.yaml loading and logging setup."""

import logging
from pathlib import Path

from saasfactory.core.logging_config import setup_logging
from saasfactory.core.settings import get_home, get_setting, load_settings, reload_settings


def test_get_home_honours_env(isolated_home: Path) -> None:
    assert get_home() == isolated_home


def test_defaults_without_file() -> None:
    """No settings.yaml yields the built-in defaults."""
    settings = load_settings()
    assert get_setting(settings, "assistant.command") == "claude"
    assert get_setting(settings, "assistant.timeouts.discovery") == 600
    assert get_setting(settings, "wizard.double_escape_window") == 1.0


def test_file_values_merge_over_defaults(isolated_home: Path) -> None:
    """Nested keys from settings.yaml override defaults without dropping siblings."""
    isolated_home.mkdir(parents=True)
    (isolated_home / "settings.yaml").write_text(
        "assistant:\n  timeouts:\n    refine: 5\n  command: my-assistant\n",
        encoding="utf-8",
    )
    settings = load_settings()
    assert get_setting(settings, "assistant.timeouts.refine") == 5
    assert get_setting(settings, "assistant.timeouts.generate") == 120
    assert get_setting(settings, "assistant.command") == "my-assistant"


def test_settings_are_cached_until_reload(isolated_home: Path) -> None:
    first = load_settings()
    isolated_home.mkdir(parents=True)
    (isolated_home / "settings.yaml").write_text("wizard:\n  discovery_count: 3\n", encoding="utf-8")
    assert load_settings() is first
    reload_settings()
    assert get_setting(load_settings(), "wizard.discovery_count") == 3


def test_invalid_yaml_falls_back_to_defaults(isolated_home: Path) -> None:
    isolated_home.mkdir(parents=True)
    (isolated_home / "settings.yaml").write_text("assistant: [unclosed", encoding="utf-8")
    assert get_setting(load_settings(), "assistant.command") == "claude"


def test_get_setting_missing_path_returns_default() -> None:
    assert get_setting({"a": {"b": 1}}, "a.c", "fallback") == "fallback"
    assert get_setting({"a": 1}, "a.b") is None


def test_setup_logging_writes_under_home(isolated_home: Path) -> None:
    """The rotating log file lives under the config directory."""
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    try:
        setup_logging(isolated_home, load_settings())
        logging.getLogger("saasfactory.test").info("hello log")
        for handler in root.handlers:
            handler.flush()
        log_file = isolated_home / "logs" / "saasfactory.log"
        assert log_file.exists()
        assert "hello log" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()
        for handler in saved[0]:
            root.addHandler(handler)
        root.setLevel(saved[1])
