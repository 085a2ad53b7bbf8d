"""User defaults persisted as config.json in the config directory."""

import json
import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from saasfactory.core.settings import get_home

logger = logging.getLogger(__name__)


class UserDefaults(BaseModel):
    package_manager: Literal["npm", "pnpm", "yarn", "bun"] = "npm"
    analytics: Literal["plausible", "posthog", "none"] = "plausible"
    email_provider: Literal["resend", "sendgrid"] = "resend"


class UserConfig(BaseModel):
    """Persisted user preferences. Never holds wizard progress."""

    defaults: UserDefaults = Field(default_factory=UserDefaults)
    templates_path: str | None = None


def config_path() -> Path:
    return get_home() / "config.json"


def load_config(path: Path | None = None) -> UserConfig:
    """Load config.json; a missing or invalid file yields defaults."""
    path = path or config_path()
    if not path.exists():
        return UserConfig()
    try:
        return UserConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, ValidationError, OSError) as e:
        logger.warning("Ignoring invalid config %s: %s", path, e)
        return UserConfig()


def save_config(config: UserConfig, path: Path | None = None) -> None:
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
