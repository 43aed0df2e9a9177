"""
Message template rendering.

Templates contain ``{name}`` placeholders resolved against a field mapping.
Braces do not nest and there is no escape syntax: a placeholder runs from an
opening brace to the first closing brace. Text that does not form a complete
placeholder (a lone ``{`` or ``}``, or an empty ``{}``) is kept as literal text.
"""

import re
from collections.abc import Mapping
from typing import Any

MISSING_FIELD_PLACEHOLDER = ""

_PLACEHOLDER_RE = re.compile(r"\{([^}]+)\}")


def _to_text(value: Any) -> str:
    # JSON-ish spelling for booleans and null so messages read the same as the record
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    return str(value)


def render_message(template: str, fields: Mapping[str, Any]) -> str:
    """Render ``template`` against ``fields``.

    Missing fields render as ``MISSING_FIELD_PLACEHOLDER``; this function never
    raises for a missing key.
    """
    if not template or "{" not in template:
        return template or ""

    def substitute(match: re.Match) -> str:
        name = match.group(1)
        if name not in fields:
            return MISSING_FIELD_PLACEHOLDER
        return _to_text(fields[name])

    return _PLACEHOLDER_RE.sub(substitute, template)
