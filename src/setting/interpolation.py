"""Expansion of ``#{config.NAME}`` references between settings."""

import json
import re
from typing import Any, Mapping

PLACEHOLDER = re.compile(r"#\{config\.(.+?)\}")


def stringify(value: Any) -> str:
    """Render a raw value the way it appears inside an interpolated string."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def interpolate(value: Any, raw: Mapping[str, Any]) -> Any:
    """Replace every placeholder in ``value`` with the referenced raw value.

    Only strings are touched. Substituted text is not scanned again, so a
    referenced value that itself holds a placeholder is inserted verbatim.
    """
    if not isinstance(value, str):
        return value
    return PLACEHOLDER.sub(lambda match: stringify(raw.get(match.group(1))), value)


def resolve_all(raw: Mapping[str, Any]) -> dict[str, Any]:
    """One interpolation pass over every raw value."""
    return {name: interpolate(value, raw) for name, value in raw.items()}
