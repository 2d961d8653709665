"""Core components for the EDD MCP server."""

from .models import (
    StatsType,
    StatsDatePreset,
    RetryState,
    EDDClientConfig,
    Product,
    ProductInfo,
    ProductLicensing,
    Customer,
    Sale,
    Discount,
    DownloadLog,
    ProductStat,
    ConfigError,
    APIError,
    TransportError,
    HTTPStatusError,
    ApplicationError,
)
from .config_store import (
    get_config_dir,
    env_search_paths,
    load_env,
    validate_env,
    save_env_file,
)

__all__ = [
    "StatsType",
    "StatsDatePreset",
    "RetryState",
    "EDDClientConfig",
    "Product",
    "ProductInfo",
    "ProductLicensing",
    "Customer",
    "Sale",
    "Discount",
    "DownloadLog",
    "ProductStat",
    "ConfigError",
    "APIError",
    "TransportError",
    "HTTPStatusError",
    "ApplicationError",
    "get_config_dir",
    "env_search_paths",
    "load_env",
    "validate_env",
    "save_env_file",
]
