"""Configuration management for tagdiary."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

TAGDIARY_HOME = Path(os.environ.get("TAGDIARY_HOME", Path.home() / "tagdiary"))
CONFIG_FILE = TAGDIARY_HOME / "config" / "tagdiary.conf"
DATA_DIR = TAGDIARY_HOME / "data"

STORE_BACKENDS = ("file", "http", "memory")


@dataclass
class Config:
    """tagdiary configuration."""

    owner: str = ""
    store_backend: str = "file"
    entries_dir: str = ""
    store_url: str = ""
    store_token: str = ""
    store_timeout: float = 10.0
    autosave_cooldown: float = 1.0
    tag_marker: str = "#"
    timezone: str = "America/Toronto"
    # Telegram bot settings
    telegram_bot_token: str = ""
    telegram_allowed_users: list[int] = field(default_factory=list)


def _parse_float(key: str, value: str, default: float) -> float:
    try:
        return float(value)
    except ValueError:
        logger.warning(f"Invalid number for {key.upper()}: {value!r}, using {default}")
        return default


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        if end_quote != -1:
            return value[1:end_quote]
        return value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def load_config() -> Config:
    """Load configuration from tagdiary.conf file."""
    config = Config()

    if not CONFIG_FILE.exists():
        return config

    for line in CONFIG_FILE.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        raw = value.strip()
        value = _unquote(raw)

        match key:
            case "owner":
                config.owner = value
            case "store_backend":
                if value.lower() in STORE_BACKENDS:
                    config.store_backend = value.lower()
                else:
                    logger.warning(f"Unknown STORE_BACKEND {value!r}, using {config.store_backend}")
            case "entries_dir":
                config.entries_dir = value
            case "store_url":
                config.store_url = value
            case "store_token":
                config.store_token = value
            case "store_timeout":
                config.store_timeout = _parse_float(key, value, config.store_timeout)
            case "autosave_cooldown":
                config.autosave_cooldown = _parse_float(key, value, config.autosave_cooldown)
            case "tag_marker":
                # Markers may contain "#", so unquoted ones skip comment stripping.
                if raw.startswith(('"', "'")):
                    marker = value
                else:
                    marker = raw.split()[0] if raw else ""
                if marker:
                    config.tag_marker = marker
            case "timezone":
                config.timezone = value
            case "telegram_bot_token":
                config.telegram_bot_token = value
            case "telegram_allowed_users":
                try:
                    config.telegram_allowed_users = [int(u.strip()) for u in value.split(",") if u.strip()]
                except ValueError:
                    logger.warning(f"Invalid TELEGRAM_ALLOWED_USERS: {value!r}")

    return config
