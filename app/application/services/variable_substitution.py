"""Template variable substitution for workflow action text.

Replaces {{identifier}} tokens with values from the trigger payload.
Unknown identifiers are left untouched so a broken template is visible
in the delivered text instead of silently blanked.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

_TOKEN_RE = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


def stringify(value: Any) -> str:
    """String form of a payload value as it appears in rendered text.

    Booleans render lowercase, mappings and lists as compact JSON,
    everything else through str().
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str, separators=(",", ":"))
    return str(value)


def replace_variables(template: str | None, data: Mapping[str, Any]) -> str:
    """Return template with each {{identifier}} replaced by data[identifier].

    Tokens whose key is absent (or maps to None) are kept literally.
    """
    if not template:
        return ""
    if "{{" not in template:
        return template

    def _sub(match: re.Match[str]) -> str:
        key = match.group(1)
        value = data.get(key)
        if value is None:
            return match.group(0)
        return stringify(value)

    return _TOKEN_RE.sub(_sub, template)


def replace_variables_in(value: Any, data: Mapping[str, Any]) -> Any:
    """Apply replace_variables to every string leaf of a nested structure."""
    if isinstance(value, str):
        return replace_variables(value, data)
    if isinstance(value, Mapping):
        return {k: replace_variables_in(v, data) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [replace_variables_in(v, data) for v in value]
    return value
