"""Courier MCP: run scripts and debug commands on remote collectors."""

__version__ = "0.1.0"
