"""MCP tool surface for the EDD client."""

from .handlers import EDDToolHandlers, to_text
from .server import create_server, resolve_handler, tool_names, TOOL_DEFINITIONS

__all__ = [
    "EDDToolHandlers",
    "to_text",
    "create_server",
    "resolve_handler",
    "tool_names",
    "TOOL_DEFINITIONS",
]
