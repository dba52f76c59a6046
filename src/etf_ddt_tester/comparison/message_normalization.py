"""Whitespace and line-break normalization of assertion messages."""

from __future__ import annotations

import re

_SPACE_RUNS = re.compile(r" +")
_LINE_BREAKS = re.compile(r"\r\n?|\n")


def normalize_message(message: str) -> str:
    """Trim, collapse runs of spaces and unify line breaks to ``\\n``."""
    collapsed = _SPACE_RUNS.sub(" ", message.strip())
    return _LINE_BREAKS.sub("\n", collapsed)
