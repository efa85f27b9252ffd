"""
Configuration management for Besto.

Uses XDG base directories:
- Config: ~/.config/besto/config.toml
- Data: ~/besto/ (storage slots and exports)
"""

import copy
import os
from pathlib import Path
from typing import Any

# XDG defaults
DEFAULT_CONFIG_HOME = Path.home() / ".config"
DEFAULT_DATA_HOME = Path.home() / "besto"

DEFAULT_MODEL = "meta-llama/llama-3.1-8b-instruct:free"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"


def get_config_dir() -> Path:
    """Get the config directory (XDG_CONFIG_HOME/besto)."""
    base = Path(os.environ.get("XDG_CONFIG_HOME", DEFAULT_CONFIG_HOME))
    return base / "besto"


def get_besto_home() -> Path:
    """Get the besto data directory (~/besto or BESTO_HOME)."""
    if env_home := os.environ.get("BESTO_HOME"):
        return Path(env_home)
    return DEFAULT_DATA_HOME


def get_config_path() -> Path:
    """Get the path to config.toml."""
    return get_config_dir() / "config.toml"


def get_storage_dir() -> Path:
    """Get the directory holding the storage slots."""
    return get_besto_home() / "storage"


def ensure_dirs() -> None:
    """Ensure all required directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_storage_dir().mkdir(parents=True, exist_ok=True)


def load_config() -> dict[str, Any]:
    """
    Load configuration from config.toml.

    Sections found in the file are merged over the defaults, so a partial
    file only overrides what it mentions.
    """
    config = get_default_config()
    config_path = get_config_path()

    if not config_path.exists():
        return config

    # Lazy import tomli only when needed
    import tomli

    with open(config_path, "rb") as f:
        loaded = tomli.load(f)

    for section, values in loaded.items():
        if isinstance(values, dict) and isinstance(config.get(section), dict):
            config[section].update(values)
        else:
            config[section] = values
    return config


def get_default_config() -> dict[str, Any]:
    """Return default configuration."""
    return copy.deepcopy({
        "besto": {
            "home": str(get_besto_home()),
        },
        "llm": {
            "base_url": DEFAULT_BASE_URL,
            "model": DEFAULT_MODEL,
            "referer": "https://besto.local",
            "title": "Besto Voice Assistant",
            "timeout": 30.0,
        },
        "speech": {
            "language": "en-US",
            "energy_threshold": 300,
            "phrase_time_limit": 10.0,
        },
        "server": {
            "host": "127.0.0.1",
            "port": 8000,
        },
        "logging": {
            "level": "INFO",
        },
    })


def get_api_key(config: dict[str, Any]) -> str | None:
    """API key from config, falling back to OPENROUTER_API_KEY."""
    return config.get("llm", {}).get("api_key") or os.environ.get("OPENROUTER_API_KEY")
