"""Device property prefetch from a collector's local cache.

The portal REST API redacts sensitive property values, so properties for
token substitution are read from the collector itself by running a small
groovy script through the debug endpoint.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from courier_mcp.models import Credential, Dialect, Target
from courier_mcp.services.errors import CourierError, ExecutionCancelledError
from courier_mcp.utils.commands import build_script_command, encode_base64

if TYPE_CHECKING:
    from courier_mcp.services.cancellation import CancellationToken
    from courier_mcp.services.jobs import JobClient

logger = logging.getLogger(__name__)

PREFETCH_SCRIPT_TEMPLATE = """import groovy.json.JsonOutput
import com.santaba.agent.collector3.CollectorDb

def hostname = new String("##HOSTNAMEBASE64##".decodeBase64())
def host = CollectorDb.getInstance().getHost(hostname)
if (host == null) {
  println "{}"
  return 0
}
def props = [:]
def hostProps = host.getProperties()
for (key in hostProps.keySet()) {
  props[key] = hostProps.get(key)?.toString() ?: ""
}
println JsonOutput.toJson(props)
return 0
"""


@dataclass
class PrefetchResult:
    """Properties fetched for a device, or why they could not be."""

    success: bool
    properties: dict[str, str] = field(default_factory=dict)
    error: str | None = None


def build_prefetch_script(hostname: str) -> str:
    return PREFETCH_SCRIPT_TEMPLATE.replace("##HOSTNAMEBASE64##", encode_base64(hostname))


def _first_json_object(text: str) -> str | None:
    """Return the first balanced ``{...}`` span, ignoring braces in strings."""
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def parse_properties_output(output: str) -> dict[str, str]:
    """Parse prefetch output into a property map.

    Leading and trailing non-JSON text is ignored. Anything unparseable
    yields an empty map.
    """
    span = _first_json_object(output.strip())
    if span is None:
        if output.strip():
            logger.warning("Property prefetch output did not contain JSON")
        return {}

    try:
        parsed = json.loads(span)
    except ValueError as e:
        logger.warning("Failed to parse property prefetch JSON: %s", e)
        return {}

    if not isinstance(parsed, dict):
        return {}
    return {str(key): _stringify(value) for key, value in parsed.items()}


async def fetch_properties(
    job_client: "JobClient",
    target: Target,
    hostname: str,
    credential: Credential,
    cancel_token: "CancellationToken | None" = None,
) -> PrefetchResult:
    """Fetch a device's cached properties from a collector.

    Failures are reported in the result instead of raised; only
    cancellation propagates.
    """
    command = build_script_command(Dialect.GROOVY, build_prefetch_script(hostname))
    try:
        output = await job_client.execute_and_poll(
            target, command, credential, cancel_token=cancel_token
        )
    except ExecutionCancelledError:
        raise
    except CourierError as e:
        logger.warning("Property prefetch for %s on %s failed: %s", hostname, target.label, e)
        return PrefetchResult(success=False, error=str(e))

    properties = parse_properties_output(output)
    logger.debug(
        "Prefetched %d properties for %s from %s",
        len(properties),
        hostname,
        target.label,
    )
    return PrefetchResult(success=True, properties=properties)
