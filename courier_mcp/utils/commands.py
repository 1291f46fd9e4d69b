"""Collector command line builders."""

import base64
import re

from courier_mcp.models import Dialect, ExecutionContext

GROOVY_MARKER = "!groovy hostId=null \n"
POWERSHELL_MARKER = "!posh \n"

# Placeholders carry base64 so arbitrary hostnames/wildvalues never need
# escaping inside the groovy string literals.
GROOVY_PREAMBLE = """import com.santaba.agent.collector3.CollectorDb;
def hostProps = [:];
def instanceProps = [:];
def datasourceinstanceProps = [:];
def taskProps = ["pollinterval": "180"];
try {
  def collectorDb = CollectorDb.getInstance();
  def hostname = new String("##HOSTNAMEBASE64##".decodeBase64());
  def host = collectorDb.getHost(hostname);
  if (host != null) {
    hostProps = host.getProperties();
    instanceProps["wildvalue"] = new String("##WILDVALUEBASE64##".decodeBase64());
    def dsId = new String("##DATASOURCEIDBASE64##".decodeBase64());
    if (dsId) {
      def dsParam = dsId.isInteger() ? dsId.toInteger() : dsId;
      datasourceinstanceProps = collectorDb.getDatasourceInstanceProps(hostname, dsParam);
    }
  }
} catch(Exception e) {};
"""

_NEEDS_QUOTING = re.compile(r"[\s\"'\\]")


def encode_base64(value: str) -> str:
    """Base64-encode a UTF-8 string."""
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def build_groovy_preamble(context: ExecutionContext) -> str:
    """Render the groovy preamble for a device context.

    Args:
        context: Context with at least ``hostname`` set

    Returns:
        Preamble defining hostProps, instanceProps, datasourceinstanceProps
        and taskProps.
    """
    return (
        GROOVY_PREAMBLE.replace("##HOSTNAMEBASE64##", encode_base64(context.hostname or ""))
        .replace("##WILDVALUEBASE64##", encode_base64(context.wildvalue or ""))
        .replace("##DATASOURCEIDBASE64##", encode_base64(context.datasource_id or ""))
    )


def build_script_command(
    dialect: Dialect,
    body: str,
    context: ExecutionContext | None = None,
) -> str:
    """Build the debug command line for a script.

    Groovy scripts get the device preamble when a hostname is known.
    PowerShell scripts are sent as-is; token substitution happens before
    this point.
    """
    if dialect is Dialect.GROOVY:
        script = body
        if context is not None and context.hostname:
            script = build_groovy_preamble(context) + body
        return GROOVY_MARKER + script

    return POWERSHELL_MARKER + body


def quote_arg(arg: str) -> str:
    """Quote a debug command argument if it contains whitespace or quotes.

    Args:
        arg: Argument to quote

    Returns:
        The argument unchanged, or wrapped in double quotes with backslashes
        and double quotes escaped.
    """
    if not _NEEDS_QUOTING.search(arg):
        return arg
    escaped = arg.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_debug_command(
    command: str,
    parameters: dict[str, str] | None = None,
    positional_args: list[str] | None = None,
) -> str:
    """Build a collector debug command such as ``!tlist c=snmp``.

    A missing leading ``!`` is added. Positional arguments come first, then
    ``key=value`` pairs in insertion order.

    Examples:
        build_debug_command("!tlist", {"c": "snmp"}) -> '!tlist c=snmp'
        build_debug_command("!tlist", {}, ["win proc"]) -> '!tlist "win proc"'
        build_debug_command("tlist") -> '!tlist'
    """
    if not command.startswith("!"):
        command = "!" + command
    parts = [command]
    parts.extend(quote_arg(arg) for arg in positional_args or [])
    parts.extend(f"{key}={quote_arg(value)}" for key, value in (parameters or {}).items())
    return " ".join(parts)
