"""Tests for the declared dependency ranges."""

from pathlib import Path


def test_mcp_dependency_has_major_bound():
    """Test the mcp requirement stops before the next major release."""
    pyproject = Path(__file__).resolve().parent.parent / "pyproject.toml"

    assert '"mcp>=1.10,<2"' in pyproject.read_text()
