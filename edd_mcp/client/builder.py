"""
Builder module for creating EDD clients from the environment.

This module provides the generate_client function that combines .env
discovery, settings validation and client construction.
"""

import logging
from typing import Any, Mapping

from ..core import load_env, validate_env
from .edd_client import EDDClient

logger = logging.getLogger(__name__)


def generate_client(environ: Mapping[str, str] | None = None, **client_kwargs: Any) -> EDDClient:
    """
    Create a client configured from environment settings.

    Args:
        environ: Settings to read instead of the process environment. When
            given, no .env file is loaded.
        **client_kwargs: Passed through to EDDClient (timeout_seconds, ...)

    Returns:
        Configured EDDClient ready to use

    Raises:
        ConfigError: If EDD_API_URL, EDD_API_KEY or EDD_API_TOKEN is missing

    Example:
        >>> client = generate_client()
        >>> sales = client.list_sales(number=5)
        >>> client.close()
    """
    if environ is None:
        load_env()

    config = validate_env(environ)
    logger.info(f"Using EDD API at {config.api_url}")
    return EDDClient(config, **client_kwargs)
