"""##PROPERTY.NAME## token substitution for PowerShell scripts."""

import re
from dataclasses import dataclass, field

# Letters, digits, underscores, dots and hyphens, e.g. ##SYSTEM.HOSTNAME##,
# ##snmp.community##, ##auto.instance_name##
TOKEN_PATTERN = re.compile(r"##([A-Za-z0-9_.-]+)##")


@dataclass
class SubstitutionResult:
    """Script with tokens resolved, plus what was and was not found."""

    script: str
    substitutions: list[tuple[str, str]] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)


def has_tokens(text: str) -> bool:
    """Check whether text contains any ##TOKEN## marker."""
    return TOKEN_PATTERN.search(text) is not None


def extract_tokens(text: str) -> list[str]:
    """Return unique token names, lowercased, in order of first appearance."""
    seen: dict[str, None] = {}
    for match in TOKEN_PATTERN.finditer(text):
        seen.setdefault(match.group(1).lower(), None)
    return list(seen)


def substitute_tokens(text: str, props: dict[str, str]) -> SubstitutionResult:
    """Replace every ##TOKEN## with its property value.

    Lookup is case-insensitive. Tokens without a matching property are
    replaced with an empty string and listed in ``missing``.

    Args:
        text: Script containing ##TOKEN## markers
        props: Property map; keys are matched case-insensitively

    Returns:
        SubstitutionResult with no token markers left in ``script``.
    """
    props_lower = {key.lower(): value for key, value in props.items()}
    result = SubstitutionResult(script="")

    def replace(match: re.Match[str]) -> str:
        token = match.group(1)
        value = props_lower.get(token.lower())
        if value is None:
            result.missing.append(token)
            return ""
        result.substitutions.append((token, value))
        return value

    result.script = TOKEN_PATTERN.sub(replace, text)
    return result


def substitute_with_empty(text: str) -> SubstitutionResult:
    """Resolve every token to an empty string."""
    return substitute_tokens(text, {})
