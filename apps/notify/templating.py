"""Jinja2 templating for notification bodies.

Template spec accepted by render_template:
- None or empty -> returns None
- string starting with "file:<name>" -> loads apps/notify/templates/<name> (".j2" optional)
- dict: {"type": "inline"|"file", "template": "..."}
- any other string -> treated as an inline template

Channel configs may override a driver's default template with a "template"
key, so operators can reshape messages without code changes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import jinja2

TEMPLATES_DIR = Path(__file__).parent / "templates"

logger = logging.getLogger(__name__)

_ENV = jinja2.Environment(
    loader=jinja2.FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=False,
)


def _template_file_name(name: str) -> str:
    if (TEMPLATES_DIR / name).is_file():
        return name
    if (TEMPLATES_DIR / f"{name}.j2").is_file():
        return f"{name}.j2"
    raise ValueError(f"Template file not found: {name}")


def render_template(spec: Any, context: dict[str, Any]) -> str | None:
    """Render a template spec with the provided context.

    Raises:
        ValueError: If the spec is unsupported, names a missing file or fails to render.
    """
    if not spec:
        return None

    template_name: str | None = None
    template_str: str | None = None

    if isinstance(spec, dict):
        if spec.get("type", "inline") == "file":
            template_name = spec.get("template")
        else:
            template_str = spec.get("template")
    elif isinstance(spec, str):
        if spec.startswith("file:"):
            template_name = spec.split(":", 1)[1]
        else:
            template_str = spec
    else:
        raise ValueError("Unsupported template spec")

    try:
        if template_name:
            template = _ENV.get_template(_template_file_name(template_name))
        elif template_str:
            template = _ENV.from_string(template_str)
        else:
            return None
        rendered = template.render(**(context or {}))
    except jinja2.TemplateError as e:
        raise ValueError(f"Jinja2 render error: {e}") from e

    logger.debug("render_template: rendered len=%d", len(rendered))
    return rendered.strip()


def build_template_context(message_dict: dict[str, Any]) -> dict[str, Any]:
    """Flatten a notification message into template variables.

    The message's ``context`` entries (product, status, provider, ...) are
    exposed at top level next to title/message/severity.
    """
    context = dict(message_dict.get("context") or {})
    context.update(
        {
            "title": message_dict.get("title", ""),
            "message": message_dict.get("message", ""),
            "severity": message_dict.get("severity", "info"),
            "channel": message_dict.get("channel", "default"),
            "tags": message_dict.get("tags") or {},
        }
    )
    return context
