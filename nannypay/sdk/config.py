"""Configuration management for Nanny Pay.

Configuration is split into two files:

1. settings.json - Machine-specific settings
   - data_dir: where the workbook lives (optional)
   - workbook: explicit path to workbook.json (optional)
   - default_view: weekly, biweekly, monthly or historical

2. profile.yaml - Household configuration
   - employer: label/value lines printed on the pay stub
   - employee: name, last_four, address

Config directory resolution:
1. NANNY_PAY_CONFIG_PATH environment variable (if set)
2. ~/.config/nanny-pay/ (XDG_CONFIG_HOME fallback)

Data directory resolution:
1. settings.json "data_dir" key
2. XDG_DATA_HOME/nanny-pay/ or ~/.local/share/nanny-pay/

Rates and withholdings are NOT stored here. They live in the workbook's
Config and Withholdings tables and are read fresh for every calculation.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml


APP_NAME = "nanny-pay"
SETTINGS_FILENAME = "settings.json"
PROFILE_FILENAME = "profile.yaml"
WORKBOOK_FILENAME = "workbook.json"


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. NANNY_PAY_CONFIG_PATH environment variable
    2. ~/.config/nanny-pay/ (XDG_CONFIG_HOME)
    """
    env_path = os.environ.get("NANNY_PAY_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load machine-specific settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        return json.load(f)


def save_settings(settings: dict) -> Path:
    """Save machine-specific settings to settings.json.

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value from settings.json."""
    settings = load_settings()
    return settings.get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json."""
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def get_profile_path() -> Path:
    """Get the path to profile.yaml (may not exist yet)."""
    return get_config_dir() / PROFILE_FILENAME


def load_profile() -> dict:
    """Load household profile from profile.yaml.

    Returns:
        Profile dictionary (empty dict if the file doesn't exist)
    """
    profile_path = get_profile_path()

    if not profile_path.exists():
        return {}

    with open(profile_path, "r") as f:
        return yaml.safe_load(f) or {}


def save_profile(profile: dict, path: Optional[Path] = None) -> Path:
    """Save household profile to profile.yaml."""
    if path is None:
        path = get_profile_path()

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.dump(profile, f, default_flow_style=False, sort_keys=False)

    return path


def get_profile_value(key: str, default: Any = None) -> Any:
    """Get a profile value by dot-notation key (e.g., "employee.name")."""
    value = load_profile()

    for part in key.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return default

    return value


def set_profile_value(key: str, value: Any) -> Path:
    """Set a profile value by dot-notation key, creating parents as needed."""
    profile = load_profile()

    parts = key.split(".")
    current = profile

    for part in parts[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]

    current[parts[-1]] = value

    return save_profile(profile)


def get_default_data_path() -> Path:
    """XDG_DATA_HOME/nanny-pay/, used when settings.json has no data_dir."""
    xdg_data_home = os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
    return Path(xdg_data_home) / APP_NAME


def get_data_path() -> Path:
    """Get the data directory path.

    Uses settings.json "data_dir" when set, otherwise get_default_data_path().

    Returns:
        Path to the data directory (created if doesn't exist)
    """
    custom = get_setting("data_dir")
    data_path = Path(custom).expanduser() if custom else get_default_data_path()
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path


def get_workbook_path() -> Path:
    """Get the path to workbook.json.

    settings.json "workbook" wins over the data directory default.
    """
    custom = get_setting("workbook")
    if custom:
        return Path(custom).expanduser()
    return get_data_path() / WORKBOOK_FILENAME
