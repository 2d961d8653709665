"""MCP server exposing the EDD tools."""

import logging

from mcp.server.fastmcp import FastMCP

from ..client.edd_client import EDDClient
from .handlers import EDDToolHandlers

logger = logging.getLogger(__name__)

SERVER_NAME = "edd-mcp"

SERVER_INSTRUCTIONS = """
Read-only access to an Easy Digital Downloads store: products, sales,
customers, earnings and sales statistics, discount codes and file download
logs. Dates are 8-digit YYYYMMDD strings.
"""

# (tool name, handler method, title, description)
TOOL_DEFINITIONS = [
    (
        "edd_list_products",
        "list_products",
        "List EDD Products",
        "List all products from the Easy Digital Downloads store with pricing and stats",
    ),
    (
        "edd_get_product",
        "get_product",
        "Get EDD Product",
        "Get detailed information about a specific product by ID",
    ),
    (
        "edd_list_sales",
        "list_sales",
        "List EDD Sales",
        "List recent sales/transactions with optional filtering by email or date range",
    ),
    (
        "edd_get_sale",
        "get_sale",
        "Get EDD Sale",
        "Get detailed information about a specific sale by ID or purchase key",
    ),
    (
        "edd_list_customers",
        "list_customers",
        "List EDD Customers",
        "List customers with their purchase statistics",
    ),
    (
        "edd_get_customer",
        "get_customer",
        "Get EDD Customer",
        "Get detailed customer information by ID or email",
    ),
    (
        "edd_get_stats",
        "get_stats",
        "Get EDD Stats",
        "Get earnings or sales statistics (current month, last month, and all-time totals)",
    ),
    (
        "edd_get_stats_by_date",
        "get_stats_by_date",
        "Get EDD Stats by Date Range",
        "Get daily earnings or sales statistics for a custom date range",
    ),
    (
        "edd_get_stats_by_product",
        "get_stats_by_product",
        "Get EDD Stats by Product",
        "Get earnings or sales statistics broken down by product",
    ),
    (
        "edd_list_discounts",
        "list_discounts",
        "List EDD Discounts",
        "List all discount codes with their usage statistics",
    ),
    (
        "edd_get_discount",
        "get_discount",
        "Get EDD Discount",
        "Get detailed information about a specific discount code",
    ),
    (
        "edd_get_download_logs",
        "get_download_logs",
        "Get EDD Download Logs",
        "Get file download history, optionally filtered by product or customer",
    ),
]


def tool_names() -> list[str]:
    """Return the names of all registered tools, in registration order."""
    return [name for name, _, _, _ in TOOL_DEFINITIONS]


def resolve_handler(handlers: EDDToolHandlers, tool_name: str):
    """
    Look up the handler method for a tool.

    Args:
        handlers: Handler set bound to a client
        tool_name: Tool name, with or without the "edd_" prefix

    Returns:
        Bound handler method

    Raises:
        KeyError: If no tool has that name
    """
    if not tool_name.startswith("edd_"):
        tool_name = f"edd_{tool_name}"

    for name, method_name, _, _ in TOOL_DEFINITIONS:
        if name == tool_name:
            return getattr(handlers, method_name)

    raise KeyError(f"Unknown tool '{tool_name}'. Available: {', '.join(tool_names())}")


def create_server(client: EDDClient) -> FastMCP:
    """
    Build the MCP server with every EDD tool registered.

    Exceptions raised by a tool (API errors once retries are exhausted)
    are returned to the agent as tool errors; the server keeps running.

    Args:
        client: Configured EDD client shared by all tools

    Returns:
        FastMCP server ready to run
    """
    server = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)
    handlers = EDDToolHandlers(client)

    for name, method_name, title, description in TOOL_DEFINITIONS:
        server.add_tool(
            getattr(handlers, method_name),
            name=name,
            title=title,
            description=description,
        )
        logger.debug(f"Registered tool: {name}")

    logger.info(f"Registered {len(TOOL_DEFINITIONS)} tools")
    return server
