"""Configuration loading for EDD API credentials."""

import logging
import os
from pathlib import Path
from typing import Mapping

from dotenv import find_dotenv, load_dotenv, set_key

from .models import EDDClientConfig, ConfigError

logger = logging.getLogger(__name__)

REQUIRED_SETTINGS = ("EDD_API_URL", "EDD_API_KEY", "EDD_API_TOKEN")

_SETTINGS_HELP = (
    "Please set the following environment variables:\n"
    "  EDD_API_URL   - Your EDD store API URL (e.g., https://example.com/edd-api/)\n"
    "  EDD_API_KEY   - Your EDD API public key\n"
    "  EDD_API_TOKEN - Your EDD API token\n"
    "\n"
    "You can set these in a .env file, with 'edd-mcp configure', "
    "or as system environment variables."
)


def get_config_dir() -> Path:
    """
    Get the directory holding the user's edd-mcp settings.

    The directory is determined by:
    1. Environment variable EDD_MCP_HOME if set
    2. Otherwise, ~/.config/edd-mcp

    Returns:
        Path to the configuration directory (not created)
    """
    env_home = os.environ.get("EDD_MCP_HOME")
    if env_home:
        return Path(env_home)
    return Path.home() / ".config" / "edd-mcp"


def env_search_paths() -> list[Path]:
    """Return candidate .env files in priority order."""
    return [
        Path.cwd() / ".env",
        Path.home() / ".edd-mcp.env",
        get_config_dir() / ".env",
    ]


def load_env() -> Path | None:
    """
    Load settings from the first .env file found.

    Values already present in the process environment are not overridden.

    Returns:
        Path of the file that was loaded, or None if no file was found
    """
    for path in env_search_paths():
        if path.is_file():
            load_dotenv(path, override=False)
            logger.debug(f"Loaded settings from {path}")
            return path

    fallback = find_dotenv(usecwd=True)
    if fallback:
        load_dotenv(fallback, override=False)
        logger.debug(f"Loaded settings from {fallback}")
        return Path(fallback)

    logger.debug("No .env file found; using process environment only")
    return None


def validate_env(environ: Mapping[str, str] | None = None) -> EDDClientConfig:
    """
    Build client configuration from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        EDDClientConfig with a normalized API URL

    Raises:
        ConfigError: If any required setting is missing or empty
    """
    if environ is None:
        environ = os.environ

    missing = [name for name in REQUIRED_SETTINGS if not environ.get(name)]
    if missing:
        raise ConfigError(
            f"Missing required environment variables: {', '.join(missing)}\n\n"
            + _SETTINGS_HELP
        )

    return EDDClientConfig(
        api_url=environ["EDD_API_URL"],
        api_key=environ["EDD_API_KEY"],
        api_token=environ["EDD_API_TOKEN"],
    )


def save_env_file(values: Mapping[str, str], path: Path | None = None) -> Path:
    """
    Write settings to a dotenv file, keeping any unrelated entries.

    Args:
        values: Setting names and values
        path: Target file (default: <config dir>/.env)

    Returns:
        Path to the saved file
    """
    if path is None:
        path = get_config_dir() / ".env"

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)
        for key, value in values.items():
            set_key(str(path), key, value, quote_mode="never")
    except OSError as e:
        raise ConfigError(f"Failed to save settings to {path}: {e}")

    logger.debug(f"Saved settings to {path}")
    return path
