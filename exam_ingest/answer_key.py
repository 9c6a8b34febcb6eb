"""
Answer Key Extractor
====================
Locates the answer-key region of a booklet and maps question numbers to
canonical answer strings.

Best-effort heuristic: body text containing number/letter pairs that look like
answer entries can produce false positives. When a number is matched more than
once, the last match in document order wins.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

# ─── Patterns ─────────────────────────────────────────────────────────────────

# Heading that opens the answer-key region
ANSWER_KEY_MARKER_PATTERN = re.compile(
    r"answer\s*key|key\s*to\s*the\s*test", re.IGNORECASE
)

# The same phrase standing alone on its own line
ANSWER_KEY_HEADING_PATTERN = re.compile(
    r"^[ \t]*(?:answer\s*key|key\s*to\s*the\s*test)[ \t]*:?[ \t]*$",
    re.IGNORECASE | re.MULTILINE,
)

# "12. B", "12: F", "12 B", "7. 350", "3. Yes"; cells joined as "1.B2.D" still split
ANSWER_ENTRY_PATTERN = re.compile(
    r"(?<!\d)(\d{1,3})\s*(?:[.:]\s*|\s+)(?:([A-J]|Yes|No)(?![A-Za-z])|(\d{1,4})(?!\d))",
    re.IGNORECASE,
)


@dataclass
class AnswerKey:
    """
    Question number → canonical answer.

    marker_index is the first mention of the key anywhere in the text and opens
    the scan window. heading_index is the last line that is only a key heading;
    section blocks end there.
    """
    answers: dict[int, str] = field(default_factory=dict)
    marker_index: Optional[int] = None
    heading_index: Optional[int] = None

    def get(self, question_number: int) -> Optional[str]:
        return self.answers.get(question_number)


def canonicalize_answer(token: str) -> str:
    """Uppercase letters, title-case Yes/No, keep numerals as-is."""
    token = token.strip()
    if token.isdigit():
        return token
    if len(token) == 1:
        return token.upper()
    return token.capitalize()


class AnswerKeyExtractor:
    """Builds an AnswerKey from normalized full-document text."""

    def extract(self, text: str) -> AnswerKey:
        key = AnswerKey()
        if not text:
            return key

        marker = ANSWER_KEY_MARKER_PATTERN.search(text)
        if marker:
            key.marker_index = marker.start()
            window = text[marker.start():]
            logger.info(f"Answer key heading found at offset {marker.start()}")
        else:
            window = text
            logger.info("No answer key heading found, scanning whole document")

        headings = list(ANSWER_KEY_HEADING_PATTERN.finditer(text))
        if headings:
            key.heading_index = headings[-1].start()

        for match in ANSWER_ENTRY_PATTERN.finditer(window):
            try:
                number = int(match.group(1))
            except ValueError:
                continue
            answer = canonicalize_answer(match.group(2) or match.group(3))
            if answer:
                key.answers[number] = answer

        logger.info(f"Answer key entries: {len(key.answers)}")
        return key


def extract_answer_key(text: str) -> dict[int, str]:
    """Convenience wrapper returning only the number → answer mapping."""
    return AnswerKeyExtractor().extract(text).answers
