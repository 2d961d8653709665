"""
EDD API client.

This module provides the request/retry client for the Easy Digital
Downloads REST API and a builder that configures it from the environment.
"""

from .edd_client import EDDClient, STATS_DATE_PRESETS
from .builder import generate_client

__all__ = [
    "EDDClient",
    "STATS_DATE_PRESETS",
    "generate_client",
]
