# src/templates/engine.py — v2
"""Minimal template language used for every rendered markdown file.

Syntax:
    ``{{name}}``                  value of ``name``, or "" when absent.
    ``{{#if name}}…{{/if}}``      body kept only when ``name`` is non-empty.

Conditionals are not nested. After substitution, runs of three or more
newlines collapse to one blank line and the output ends with exactly one
newline.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

_IF_BLOCK = re.compile(r"\{\{#if\s+(\w+)\}\}([\s\S]*?)\{\{/if\}\}")
_VARIABLE = re.compile(r"\{\{(\w+)\}\}")
_BLANK_RUNS = re.compile(r"\n{3,}")
_FRONTMATTER = re.compile(r"\A---\r?\n.*?\r?\n---[ \t]*(?:\r?\n|\Z)(?:[ \t]*\r?\n)*", re.DOTALL)


def render_template(template: str, variables: Mapping[str, str | None]) -> str:
    """Render ``template`` against a flat variable map."""

    pieces: list[str] = []
    pos = 0
    for match in _IF_BLOCK.finditer(template):
        pieces.append(template[pos:match.start()])
        pos = match.end()
        name, body = match.group(1), match.group(2)
        if variables.get(name):
            pieces.append(body)
            continue
        # A dropped block that opened a line mid-line still ends that line
        previous = next((p for p in reversed(pieces) if p), "")
        starts_mid_line = bool(previous) and not previous.endswith("\n")
        if starts_mid_line and body.startswith("\n"):
            pieces.append("\n")
    pieces.append(template[pos:])

    result = "".join(pieces)
    result = _VARIABLE.sub(lambda m: variables.get(m.group(1)) or "", result)
    result = _BLANK_RUNS.sub("\n\n", result)
    return result.strip() + "\n"


def strip_frontmatter(markdown: str) -> str:
    """Remove a leading ``---`` YAML block and the blank lines after it.

    ``---`` rules further down the document are left alone.
    """
    return _FRONTMATTER.sub("", markdown, count=1)
