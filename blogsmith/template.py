"""Minimal templating used for every generated page.

Templates understand three constructs, processed as three sequential passes
over the whole text:

1. ``{{#each KEY}}...{{/each}}`` repeats the body for every mapping in
   ``context[KEY]``, replacing ``{{prop}}`` tokens with the element's scalar
   properties.
2. ``{{#if KEY}}...{{/if}}`` keeps the body when ``context[KEY]`` is truthy.
3. ``{{KEY}}`` is replaced with ``context[KEY]``; unknown keys are left as is.

Blocks do not nest. A ``{{#each}}`` inside another loop body is plain text
for the loop pass and may still be picked up by the later passes. Nothing is
HTML-escaped.
"""

from __future__ import annotations

import pathlib
import re
from typing import Any, Mapping

from .errors import TemplateNotFoundError

__all__ = ["TemplateLoader", "render"]

EACH_RE = re.compile(r"\{\{#each (\w+)\}\}(.*?)\{\{/each\}\}", re.ASCII | re.DOTALL)
IF_RE = re.compile(r"\{\{#if (\w+)\}\}(.*?)\{\{/if\}\}", re.ASCII | re.DOTALL)
VAR_RE = re.compile(r"\{\{(\w+)\}\}", re.ASCII)

_SCALARS = (str, int, float, bool)


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else _stringify(item) for item in value)
    return str(value)


def _render_item(body: str, item: Any) -> str:
    if not isinstance(item, Mapping):
        return body
    result = body
    for key, value in item.items():
        if value is None or not isinstance(value, _SCALARS):
            continue
        result = result.replace("{{" + str(key) + "}}", _stringify(value))
    return result


def _iter_items(value: Any) -> list[Any]:
    if isinstance(value, (str, bytes, Mapping)) or value is None:
        return []
    try:
        return list(value)
    except TypeError:
        return []


def render(template: str, context: Mapping[str, Any]) -> str:
    def each(match: re.Match[str]) -> str:
        key, body = match.group(1), match.group(2)
        return "".join(_render_item(body, item) for item in _iter_items(context.get(key)))

    def cond(match: re.Match[str]) -> str:
        return match.group(2) if context.get(match.group(1)) else ""

    def var(match: re.Match[str]) -> str:
        value = context.get(match.group(1))
        if value is None:
            return match.group(0)
        return _stringify(value)

    result = EACH_RE.sub(each, template)
    result = IF_RE.sub(cond, result)
    return VAR_RE.sub(var, result)


class TemplateLoader:
    """Read ``<name>.html`` templates from a directory, caching their text."""

    def __init__(self, templates_dir: pathlib.Path) -> None:
        self.templates_dir = pathlib.Path(templates_dir)
        self._cache: dict[str, str] = {}

    def load(self, name: str) -> str:
        cached = self._cache.get(name)
        if cached is not None:
            return cached
        path = self.templates_dir / f"{name}.html"
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise TemplateNotFoundError(f"Template missing: {path.as_posix()}") from exc
        self._cache[name] = text
        return text
