"""Tests for the edd-mcp command line."""

import json
import pytest
from unittest.mock import Mock, patch

from edd_mcp.core.models import ConfigError, HTTPStatusError, EDDClientConfig
from edd_mcp.client.edd_client import EDDClient
from edd_mcp.cli.main import build_parser, main, parse_tool_arguments


@pytest.fixture
def mock_client():
    client = Mock(spec=EDDClient)
    client.get_discount.return_value = None
    return client


def test_parse_tool_arguments():
    """Test integers are converted but dates stay strings."""
    arguments = parse_tool_arguments(["saleId=123", "email=a@b.c", "startDate=20250101", "type=earnings"])

    assert arguments == {
        "saleId": 123,
        "email": "a@b.c",
        "startDate": "20250101",
        "type": "earnings",
    }


def test_parse_tool_arguments_invalid():
    with pytest.raises(ValueError):
        parse_tool_arguments(["saleId"])


def test_default_command_is_serve():
    args = build_parser().parse_args([])
    assert args.func.__name__ == "cmd_serve"
    assert args.timeout == 30.0


def test_serve_missing_config_exits(capsys):
    """Test startup stops with the list of missing settings."""
    error = ConfigError("Missing required environment variables: EDD_API_TOKEN")
    with patch("edd_mcp.cli.main.generate_client", side_effect=error):
        with pytest.raises(SystemExit) as exc_info:
            main(["serve"])

    assert exc_info.value.code == 1
    assert "EDD_API_TOKEN" in capsys.readouterr().err


def test_serve_runs_stdio_server(mock_client):
    server = Mock()
    with patch("edd_mcp.cli.main.generate_client", return_value=mock_client), \
            patch("edd_mcp.cli.main.create_server", return_value=server) as create:
        main([])

    create.assert_called_once_with(mock_client)
    server.run.assert_called_once_with(transport="stdio")
    mock_client.close.assert_called_once()


def test_call_prints_tool_output(mock_client, capsys):
    with patch("edd_mcp.cli.main.generate_client", return_value=mock_client):
        main(["call", "edd_get_discount", "discountId=9"])

    assert capsys.readouterr().out.strip() == "Discount 9 not found"
    mock_client.get_discount.assert_called_once_with(9)
    mock_client.close.assert_called_once()


def test_call_unknown_tool(mock_client, capsys):
    with patch("edd_mcp.cli.main.generate_client", return_value=mock_client):
        with pytest.raises(SystemExit) as exc_info:
            main(["call", "edd_refund_everything"])

    assert exc_info.value.code == 1
    assert "Unknown tool" in capsys.readouterr().err


def test_call_api_error(mock_client, capsys):
    mock_client.list_discounts.side_effect = HTTPStatusError("HTTP 500: Internal Server Error", status_code=500)
    with patch("edd_mcp.cli.main.generate_client", return_value=mock_client):
        with pytest.raises(SystemExit):
            main(["call", "list_discounts"])

    err = capsys.readouterr().err
    assert "HTTP 500" in err
    assert "HTTP Status: 500" in err


def test_check_prints_masked_config(capsys):
    config = EDDClientConfig("https://example.com/edd-api/", "abcdef123456", "token9876")
    with patch("edd_mcp.cli.main.load_env", return_value=None), \
            patch("edd_mcp.cli.main.validate_env", return_value=config):
        main(["check"])

    out = capsys.readouterr().out
    assert "Configuration is complete" in out
    assert "3456" in out
    assert "abcdef123456" not in out


def test_configure_writes_env_file(tmp_path, capsys):
    path = tmp_path / "edd.env"

    main([
        "configure",
        "--api-url", "https://example.com/edd-api/",
        "--api-key", "key",
        "--api-token", "token",
        "--path", str(path),
    ])

    content = path.read_text()
    assert "EDD_API_URL=https://example.com/edd-api/" in content
    assert "EDD_API_TOKEN=token" in content
    assert str(path) in capsys.readouterr().out


def test_call_invalid_stats_type(mock_client, capsys):
    """Test an unknown stats type reaching the client exits cleanly."""
    mock_client.get_stats.side_effect = ValueError("'refunds' is not a valid StatsType")
    with patch("edd_mcp.cli.main.generate_client", return_value=mock_client):
        with pytest.raises(SystemExit) as exc_info:
            main(["call", "get_stats", "type=refunds"])

    assert exc_info.value.code == 1
    assert "not a valid StatsType" in capsys.readouterr().err
    mock_client.close.assert_called_once()
