"""Configuration module for Courier MCP.

Provides focused classes for different configuration concerns:
- Config: Main configuration class (aggregates all components)
- PortalsFileParser: Parses the portals token file
- Settings: Environment variable configuration
"""

from courier_mcp.config.main import Config
from courier_mcp.config.parser import PortalsFileParser
from courier_mcp.config.settings import Settings

__all__ = ["Config", "PortalsFileParser", "Settings"]
