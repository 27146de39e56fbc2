"""Configuration loading for the CLI.

Hides where credentials come from:
- a JSON file (default ~/.slk.json) readable by its owner only
- environment variables (and a .env file) overriding individual keys
"""

import os
import stat
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError

DEFAULT_CONFIG_PATH = Path("~/.slk.json")
REQUIRED_MODE = 0o600

# Environment variable -> config key
ENV_OVERRIDES = {
    "SLACK_API_TOKEN": "api_token",
    "SLACK_APP_TOKEN": "app_token",
    "SLACK_COOKIE": "cookie",
}


class ConfigError(Exception):
    """Configuration file missing, unsafe, or invalid."""


class SlkConfig(BaseModel):
    """Credentials for one workspace."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    api_token: str = ""
    app_token: str = ""
    cookie: str = ""


def default_config_path() -> Path:
    """Config path from SLK_CONFIG, else ~/.slk.json."""
    return Path(os.getenv("SLK_CONFIG") or DEFAULT_CONFIG_PATH).expanduser()


def read_config_file(path: Path) -> SlkConfig:
    """Read and validate a config file.

    Args:
        path: JSON file with api_token, app_token and cookie keys

    Returns:
        Parsed configuration

    Raises:
        ConfigError: If the file is missing, not 0600, or not valid JSON
    """
    try:
        mode = stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError as e:
        raise ConfigError(f"config file {path} not found") from e
    except OSError as e:
        raise ConfigError(f"cannot stat {path}: {e}") from e

    if mode != REQUIRED_MODE:
        raise ConfigError(
            f"{path} has permissions {mode:04o}, expected {REQUIRED_MODE:04o} "
            f"(run: chmod 600 {path})"
        )

    try:
        return SlkConfig.model_validate_json(path.read_bytes())
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"invalid config file {path}: {e}") from e


def apply_env_overrides(config: SlkConfig) -> SlkConfig:
    """Replace config values with any set environment variables."""
    updates = {}
    for env_name, key in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            updates[key] = value
    if not updates:
        return config
    return config.model_copy(update=updates)


def load_config(path: Path | None = None) -> SlkConfig:
    """Load configuration from file and environment.

    A missing file is accepted when the environment supplies the API token;
    a file that exists must still pass the permission check.

    Raises:
        ConfigError: If no API token can be found, or the file is unusable
    """
    path = (path or default_config_path()).expanduser()

    if path.exists():
        config = apply_env_overrides(read_config_file(path))
    else:
        config = apply_env_overrides(SlkConfig())
        if not config.api_token:
            raise ConfigError(
                f"config file {path} not found and SLACK_API_TOKEN is not set"
            )

    if not config.api_token:
        raise ConfigError(f"api_token missing from {path}")
    return config
