from __future__ import annotations

import re
from typing import Any

_TOKEN_PATTERN = re.compile(r"{{\s*([A-Za-z_][A-Za-z0-9_]*)\s*}}")


def interpolate_text(template: str, variables: dict[str, Any], path: str = "$") -> str:
    def replace(match: re.Match[str]) -> str:
        token = match.group(1)
        if token not in variables:
            raise ValueError(f"Unresolved variable '{token}' at {path}")
        return str(variables[token])

    return _TOKEN_PATTERN.sub(replace, template)


def template_tokens(template: str) -> list[str]:
    return [match.group(1) for match in _TOKEN_PATTERN.finditer(template)]
