"""Configuration file management for finplan."""

import os
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

STORAGE_BACKENDS = ("sqlite", "snapshot")

DEFAULT_CONFIG: dict[str, Any] = {
    "storage": "sqlite",
    "currency_symbol": "£",
    "savings_goal": 1000.0,
    "savings_goal_description": "Savings goal",
}


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "finplan" / "config.toml"


def create_default_config(config_path: Path | None = None, storage: str = "sqlite") -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
        storage: Storage backend to record in the new config.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    default_config = dict(DEFAULT_CONFIG, storage=storage)

    with open(config_path, "wb") as f:
        tomli_w.dump(default_config, f)

    os.chmod(config_path, 0o600)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def load_settings(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration merged over the defaults.

    A missing config file yields the defaults.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary with every default key present.

    Raises:
        ValueError: If the storage backend is unknown.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        config = {}

    settings = {**DEFAULT_CONFIG, **config}
    if settings["storage"] not in STORAGE_BACKENDS:
        raise ValueError(f"Unknown storage backend '{settings['storage']}'. Use one of: {', '.join(STORAGE_BACKENDS)}")
    return settings


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def set_option(key: str, value: Any, config_path: Path | None = None) -> None:
    """Set a single configuration option, keeping the rest of the file.

    Args:
        key: Option name.
        value: Option value.
        config_path: Path to config file. If None, uses default location.
    """
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        config = dict(DEFAULT_CONFIG)

    config[key] = value
    save_config(config, config_path)
