"""Spindle Diagnostics MCP Server - Harmonic fault and ISO 10816 severity classification."""

from .server import mcp


def main():
    """Entry point for the MCP server."""
    mcp.run(transport="stdio")


__all__ = ["main", "mcp"]
