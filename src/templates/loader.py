# src/templates/loader.py — v1
"""Resolve a template name or file path to template source text."""

from __future__ import annotations

import logging
from pathlib import Path

from m2md.templates.builtins import BUILTIN_TEMPLATES, DEFAULT_TEMPLATE

logger = logging.getLogger(__name__)


class TemplateNotFoundError(ValueError):
    """Raised when a name is neither a built-in nor a readable file."""

    def __init__(self, name_or_path: str) -> None:
        self.name_or_path = name_or_path
        super().__init__(
            f'Template not found: "{name_or_path}". '
            f"Built-in templates: {', '.join(BUILTIN_TEMPLATES)}. "
            "Or provide a path to a template file."
        )


def load_template(name_or_path: str | None = None) -> str:
    """Return template source.

    Built-in names take precedence over files of the same name.

    Raises:
        TemplateNotFoundError: Unknown name and no readable file.
    """
    if not name_or_path:
        return DEFAULT_TEMPLATE
    if name_or_path in BUILTIN_TEMPLATES:
        return BUILTIN_TEMPLATES[name_or_path]
    try:
        source = Path(name_or_path).expanduser().read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateNotFoundError(name_or_path) from e
    logger.debug("Loaded template from %s", name_or_path)
    return source
