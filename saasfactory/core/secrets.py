"""Credential storage: OS keyring first, then credentials.json, then environment."""

import json
import logging
import os
from pathlib import Path

import keyring
from keyring.errors import KeyringError

from saasfactory.core.settings import get_home

logger = logging.getLogger(__name__)
SERVICE_NAME = "saasfactory"

# Credentials the CLI knows how to use, in display order.
CREDENTIAL_KEYS: dict[str, str] = {
    "GITHUB_TOKEN": "GitHub Token",
    "VERCEL_TOKEN": "Vercel Token",
    "GOOGLE_API_KEY": "Google API Key",
}


def _is_fail_backend() -> bool:
    """True when the active backend is the fail stub (no real keyring)."""
    try:
        from keyring.backends.fail import Keyring as FailKeyring

        backend = keyring.get_keyring()
        return isinstance(backend, FailKeyring)
    except Exception:
        return True


def is_keyring_available() -> bool:
    """True when a real OS keyring backend is active (not the fail stub)."""
    return not _is_fail_backend()


def credentials_path() -> Path:
    return get_home() / "credentials.json"


def _read_file_store() -> dict[str, str]:
    path = credentials_path()
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        logger.warning("Ignoring unreadable credentials file %s", path)
        return {}
    if not isinstance(data, dict):
        return {}
    return {k: v for k, v in data.items() if isinstance(v, str) and v}


def _write_file_store(values: dict[str, str]) -> None:
    path = credentials_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(values, indent=2), encoding="utf-8")
    try:
        path.chmod(0o600)
    except OSError:
        pass


def get_secret(name: str) -> str | None:
    """Resolve secret: keyring -> credentials.json -> os.environ."""
    try:
        value = keyring.get_password(SERVICE_NAME, name)
        if value:
            return value
    except KeyringError:
        logger.debug("keyring lookup failed for %s, falling back to file/env", name)
    value = _read_file_store().get(name)
    if value:
        return value
    return os.environ.get(name) or None


def set_secret(name: str, value: str) -> None:
    """Store secret in the OS keyring, or credentials.json when no keyring exists."""
    if is_keyring_available():
        try:
            keyring.set_password(SERVICE_NAME, name, value)
            return
        except KeyringError as e:
            logger.warning("Failed to store %s in keyring: %s. Writing to credentials.json.", name, e)
    else:
        logger.warning("Keyring unavailable (headless/CI). Storing %s in credentials.json.", name)
    values = _read_file_store()
    values[name] = value
    _write_file_store(values)


def delete_secret(name: str) -> None:
    """Remove secret from keyring and file store. No-op if absent."""
    try:
        keyring.delete_password(SERVICE_NAME, name)
    except KeyringError:
        pass
    values = _read_file_store()
    if values.pop(name, None) is not None:
        _write_file_store(values)


def has_secret(name: str) -> bool:
    return bool(get_secret(name))
