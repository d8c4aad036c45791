"""Data persistence: auth token and user settings as JSON files."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from crypto_wallet.config import constants
from crypto_wallet.config.constants import DEFAULT_SETTINGS

logger = logging.getLogger(__name__)


def _ensure_parent(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def load_token() -> Optional[str]:
    """Return the stored auth token, or None if missing or unreadable."""
    if not os.path.exists(constants.TOKEN_FILE):
        return None
    try:
        with open(constants.TOKEN_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable token file %s: %s", constants.TOKEN_FILE, e)
        return None
    token = data.get("token") if isinstance(data, dict) else None
    return token or None


def save_token(token: str) -> None:
    """Persist the auth token. Raises on I/O error (caller may show UI message)."""
    _ensure_parent(constants.TOKEN_FILE)
    with open(constants.TOKEN_FILE, "w", encoding="utf-8") as f:
        json.dump({"token": token}, f, indent=4)


def clear_token() -> None:
    """Forget the stored token. No error if nothing was stored."""
    try:
        os.remove(constants.TOKEN_FILE)
    except FileNotFoundError:
        pass


def get_default_settings() -> Dict[str, Any]:
    """Return a fresh default settings structure (no file I/O)."""
    return dict(DEFAULT_SETTINGS)


def load_settings() -> Dict[str, Any]:
    """
    Load user settings, filling in defaults for missing keys.
    Returns defaults on missing or invalid file.
    """
    settings = get_default_settings()
    if not os.path.exists(constants.SETTINGS_FILE):
        return settings
    try:
        with open(constants.SETTINGS_FILE, "r", encoding="utf-8") as f:
            stored = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", constants.SETTINGS_FILE, e)
        return settings
    if isinstance(stored, dict):
        settings.update(stored)
    return settings


def save_settings(settings: Dict[str, Any]) -> None:
    """Save user settings. Raises on I/O error."""
    _ensure_parent(constants.SETTINGS_FILE)
    with open(constants.SETTINGS_FILE, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=4)


def update_setting(key: str, value: Any) -> Dict[str, Any]:
    """Set one setting and save. Returns the updated settings."""
    settings = load_settings()
    settings[key] = value
    save_settings(settings)
    return settings
