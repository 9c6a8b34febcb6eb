"""
Text Normalizer
===============
Canonicalizes line endings and trailing whitespace on raw extracted text.
"""

from __future__ import annotations

import re

# Trailing spaces/tabs at the end of every line
TRAILING_WHITESPACE_PATTERN = re.compile(r"[ \t]+$", re.MULTILINE)


def normalize_text(text: str) -> str:
    """Drop carriage returns and strip trailing horizontal whitespace per line."""
    if not text:
        return ""
    return TRAILING_WHITESPACE_PATTERN.sub("", text.replace("\r", ""))


def slugify(value: str) -> str:
    """Lowercase identity slug: non-alphanumeric runs become single dashes."""
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
