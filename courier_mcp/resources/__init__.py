"""MCP resources for Courier MCP."""

from courier_mcp.resources.portals import list_portals_resource

__all__ = ["list_portals_resource"]
