"""Global state management for Courier MCP."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from courier_mcp.dependencies import Dependencies

# Global state (initialized on first access)
_deps: "Dependencies | None" = None


def get_dependencies() -> "Dependencies":
    """Get or create the dependency container."""
    global _deps
    if _deps is None:
        from courier_mcp.dependencies import Dependencies

        _deps = Dependencies.create()
    return _deps


def set_dependencies(deps: "Dependencies") -> None:
    """Set the global dependency container.

    Allows tests to inject fakes without modifying module internals.

    Args:
        deps: Dependencies instance to use globally.
    """
    global _deps
    _deps = deps


def reset_state() -> None:
    """Reset global state for testing.

    Should only be used in test fixtures.
    """
    global _deps
    _deps = None
