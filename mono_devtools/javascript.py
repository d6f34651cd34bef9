"""Rendering of configuration dicts as JavaScript source.

webpack and Karma read their configuration from JavaScript modules, and
some values (regular expressions, ``Infinity``) have no JSON form. Configs
are built as plain dicts and rendered here:

- ``re.Pattern`` → regular expression literal
- ``math.inf`` → ``Infinity``
- ``None`` → ``null``

Everything else is rendered the way ``json.dumps`` would.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any

INDENT = "\t"
UNESCAPED_SLASH_RE = re.compile(r"(?<!\\)/")


def to_javascript(value: Any, level: int = 0) -> str:
    """Render a config value as a JavaScript expression.

    Raises:
        TypeError: For values with no JavaScript literal form.
    """
    pad = INDENT * (level + 1)
    end = INDENT * level

    if isinstance(value, re.Pattern):
        flags = "i" if value.flags & re.IGNORECASE else ""
        source = UNESCAPED_SLASH_RE.sub(r"\\/", value.pattern)
        return f"/{source}/{flags}"
    if isinstance(value, float) and math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if isinstance(value, dict):
        if not value:
            return "{}"
        items = [
            f"{pad}{json.dumps(str(key))}: {to_javascript(item, level + 1)}"
            for key, item in value.items()
        ]
        return "{\n" + ",\n".join(items) + f"\n{end}}}"
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        items = [f"{pad}{to_javascript(v, level + 1)}" for v in value]
        return "[\n" + ",\n".join(items) + f"\n{end}]"
    if value is None or isinstance(value, (bool, int, float, str)):
        return json.dumps(value)
    raise TypeError(f"Cannot render {type(value).__name__} as JavaScript")


def render_module(config: dict[str, Any]) -> str:
    """Render a config as a CommonJS module exporting it (webpack style)."""
    return f"'use strict';\n\nmodule.exports = {to_javascript(config)};\n"


def render_karma_module(config: dict[str, Any]) -> str:
    """Render a config as a Karma configuration module.

    Karma expects the module to export a function that receives its config
    object and applies the settings with ``config.set()``.
    """
    return (
        "'use strict';\n\n"
        "module.exports = function( config ) {\n"
        f"\tconfig.set( {to_javascript(config, 1)} );\n"
        "};\n"
    )
