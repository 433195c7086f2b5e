"""Reporting helpers."""
from __future__ import annotations

import logging
from typing import Callable, Dict

from ..core.models import ScanResult
from .jsonout import to_json
from .markdown import to_markdown
from .sarif import to_sarif

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "markdown"

FORMATTERS: Dict[str, Callable[[ScanResult], str]] = {
    "markdown": to_markdown,
    "md": to_markdown,
    "sarif": to_sarif,
    "json": to_json,
}


def render(result: ScanResult, fmt: str) -> str:
    """Render ``result`` in ``fmt``; unknown formats fall back to Markdown."""

    formatter = FORMATTERS.get(fmt.lower() if isinstance(fmt, str) else "")
    if formatter is None:
        logger.debug("Unknown report format %r, using %s", fmt, DEFAULT_FORMAT)
        formatter = FORMATTERS[DEFAULT_FORMAT]
    return formatter(result)


__all__ = ["DEFAULT_FORMAT", "FORMATTERS", "render", "to_json", "to_markdown", "to_sarif"]
