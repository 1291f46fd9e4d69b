"""Utilities for Courier MCP."""

from courier_mcp.utils.commands import (
    build_debug_command,
    build_groovy_preamble,
    build_script_command,
    encode_base64,
    quote_arg,
)
from courier_mcp.utils.console import ColorfulFormatter
from courier_mcp.utils.tokens import (
    SubstitutionResult,
    extract_tokens,
    has_tokens,
    substitute_tokens,
    substitute_with_empty,
)

__all__ = [
    "build_debug_command",
    "build_groovy_preamble",
    "build_script_command",
    "ColorfulFormatter",
    "encode_base64",
    "extract_tokens",
    "has_tokens",
    "quote_arg",
    "substitute_tokens",
    "substitute_with_empty",
    "SubstitutionResult",
]
