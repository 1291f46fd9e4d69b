"""MCP tools for Courier MCP."""

from courier_mcp.tools.courier import cancel_execution, run_debug_command, run_script

__all__ = ["cancel_execution", "run_debug_command", "run_script"]
