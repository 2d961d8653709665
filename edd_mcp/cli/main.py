"""Main CLI entry point for the EDD MCP server."""

import argparse
import logging
import sys
from pathlib import Path

from edd_mcp.core import (
    ConfigError,
    APIError,
    load_env,
    validate_env,
    save_env_file,
)
from edd_mcp.client import generate_client
from edd_mcp.tools import EDDToolHandlers, create_server, resolve_handler, tool_names

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging for the CLI. Logs go to stderr; stdout carries MCP traffic."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    # Suppress httpx INFO logs, they would print every request URL with credentials
    logging.getLogger("httpx").setLevel(logging.WARNING)


def parse_tool_arguments(pairs: list[str]) -> dict:
    """
    Parse 'key=value' pairs into tool arguments.

    Values made only of digits are passed as integers.
    """
    arguments = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Invalid argument '{pair}'. Use key=value.")
        key, value = pair.split("=", 1)
        value = value.strip()
        # Dates are digit strings too
        if value.isdigit() and not key.strip().lower().endswith("date"):
            arguments[key.strip()] = int(value)
        else:
            arguments[key.strip()] = value
    return arguments


def cmd_serve(args):
    """Handle the serve command - run the MCP server on stdio."""
    try:
        client = generate_client(timeout_seconds=args.timeout)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    server = create_server(client)
    logger.info("Starting EDD MCP server on stdio")

    try:
        server.run(transport="stdio")
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)
    finally:
        client.close()


def cmd_check(args):
    """Handle the check command - validate and show configuration."""
    path = load_env()
    try:
        config = validate_env()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    print("✓ Configuration is complete")
    if path:
        print(f"  Loaded from: {path}")
    for key, value in config.masked().items():
        print(f"  {key:10s} {value}")


def cmd_configure(args):
    """Handle the configure command - write settings to an env file."""
    values = {
        "EDD_API_URL": args.api_url,
        "EDD_API_KEY": args.api_key,
        "EDD_API_TOKEN": args.api_token,
    }
    try:
        path = save_env_file(values, args.path)
    except ConfigError as e:
        print(f"Error saving settings: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Settings saved to: {path}")


def cmd_call(args):
    """Handle the call command - invoke a single tool and print its output."""
    try:
        arguments = parse_tool_arguments(args.arguments)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        client = generate_client(timeout_seconds=args.timeout)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        handler = resolve_handler(EDDToolHandlers(client), args.tool)
        print(handler(**arguments))
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        sys.exit(1)
    except TypeError as e:
        print(f"Error: Invalid arguments for {args.tool}: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except APIError as e:
        print(f"API error: {e}", file=sys.stderr)
        if e.status_code:
            print(f"HTTP Status: {e.status_code}", file=sys.stderr)
        sys.exit(1)
    finally:
        client.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="edd-mcp",
        description="MCP server for the Easy Digital Downloads REST API",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="HTTP timeout in seconds (default: 30)",
    )
    parser.set_defaults(func=cmd_serve)

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the MCP server on stdio (default)")
    serve_parser.set_defaults(func=cmd_serve)

    # Check command
    check_parser = subparsers.add_parser("check", help="Validate configuration")
    check_parser.set_defaults(func=cmd_check)

    # Configure command
    configure_parser = subparsers.add_parser("configure", help="Save API settings to an env file")
    configure_parser.add_argument("--api-url", required=True, help="Store API URL (e.g., https://example.com/edd-api/)")
    configure_parser.add_argument("--api-key", required=True, help="EDD API public key")
    configure_parser.add_argument("--api-token", required=True, help="EDD API token")
    configure_parser.add_argument("--path", type=Path, help="Env file to write (default: ~/.config/edd-mcp/.env)")
    configure_parser.set_defaults(func=cmd_configure)

    # Call command
    call_parser = subparsers.add_parser("call", help="Invoke one tool and print its output")
    call_parser.add_argument("tool", help=f"Tool name, one of: {', '.join(tool_names())}")
    call_parser.add_argument("arguments", nargs="*", help="Tool arguments as key=value")
    call_parser.set_defaults(func=cmd_call)

    return parser


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    args.func(args)


if __name__ == "__main__":
    main()
