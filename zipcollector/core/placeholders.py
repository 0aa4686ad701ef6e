"""``${a.b.c}`` placeholder substitution for location templates.

Tokens are resolved by walking the variable bag one dotted segment at a
time.  The bag always carries an ``env`` entry bound to the process
environment.  A token that does not resolve to a truthy value is left in
place verbatim.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from typing import Any

_TOKEN = re.compile(r"\$\{(.*?)\}")


def _lookup(variables: Any, name: str) -> Any:
    result = variables
    for part in name.split("."):
        if not result:
            break
        if isinstance(result, Mapping):
            result = result.get(part)
        else:
            result = getattr(result, part, None)
    return result


def resolve_placeholders(
    template: str | None, variables: Mapping[str, Any] | None = None
) -> str | None:
    """Substitute every ``${...}`` token in *template*.

    Empty or ``None`` templates are returned unchanged.
    """
    if not template:
        return template
    bag: dict[str, Any] = dict(variables or {})
    bag["env"] = os.environ

    def _replace(match: re.Match[str]) -> str:
        value = _lookup(bag, match.group(1))
        return str(value) if value else match.group(0)

    return _TOKEN.sub(_replace, template)


def resolve_header_placeholders(
    headers: Mapping[str, str], variables: Mapping[str, Any] | None = None
) -> dict[str, str]:
    """Resolve placeholders in each header value."""
    return {
        key: resolve_placeholders(value, variables) or ""
        for key, value in headers.items()
    }
