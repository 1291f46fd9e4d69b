"""Portals resource for listing configured portals."""

from courier_mcp.services import get_dependencies


def _format_age(seconds: float) -> str:
    if seconds < 60:
        return f"{int(seconds)}s"
    if seconds < 3600:
        return f"{int(seconds // 60)}m"
    return f"{int(seconds // 3600)}h"


async def list_portals_resource() -> str:
    """List configured portals with the age of their session token.

    Returns:
        Formatted list of portals, marking tokens past the refresh age.
    """
    deps = get_dependencies()
    credentials = deps.config.parser.parse()
    max_age = deps.config.settings.credential_max_age

    if not credentials:
        return f"No portals configured in {deps.config.settings.portals_file}."

    lines = ["Configured Portals", "=" * 40, ""]

    for name, credential in sorted(credentials.items()):
        stale = bool(max_age) and credential.age > max_age
        status_icon = "✗" if stale else "✓"
        status = "stale" if stale else "fresh"
        lines.append(f"[{status_icon}] {name} ({status}, token age {_format_age(credential.age)})")

    lines.append("")
    lines.append(f"{len(credentials)} portal(s)")
    return "\n".join(lines)
