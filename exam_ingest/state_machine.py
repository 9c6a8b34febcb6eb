"""
State Machine Parser
====================
Splits a section block into numbered question segments, then walks each
segment line by line to separate the free-text stem from lettered choices.

The stem/choice split is a two-state accumulator:
    STEM   → no choice is open; plain lines extend the stem
    CHOICE → a labeled choice is open; plain lines extend that choice
A choice-start line always closes the open choice and opens a new one.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

# ─── Anchor Patterns ──────────────────────────────────────────────────────────

# Matches "12. ", "7) " at the start of a line
QUESTION_PATTERN = re.compile(r"^(\d{1,3})[.)]\s+", re.MULTILINE)

# Matches "A. run", "F) runs", "(B) ran", "J- none", "C running", "d. walk"
# Uppercase labels may omit the delimiter if whitespace follows;
# lowercase labels need a delimiter.
CHOICE_PATTERN = re.compile(
    r"^\(?(?:([A-HJF])(?:[.)\-]|(?=\s)|$)|([a-hjf])[.)\-])\s*(.*)$"
)

WHITESPACE_PATTERN = re.compile(r"\s+")


# ─── Segmentation ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class QuestionSegment:
    """Raw text owned by one numbered question."""
    number: int
    body: str


@dataclass
class SegmentationResult:
    segments: list[QuestionSegment] = field(default_factory=list)
    duplicate_numbers: list[int] = field(default_factory=list)


class QuestionSegmenter:
    """Finds numbered-line boundaries inside a section block."""

    def segment(self, block: str) -> SegmentationResult:
        result = SegmentationResult()
        seen: set[int] = set()
        matches = list(QUESTION_PATTERN.finditer(block))

        for index, match in enumerate(matches):
            try:
                number = int(match.group(1))
            except (TypeError, ValueError):
                continue

            end = matches[index + 1].start() if index + 1 < len(matches) else len(block)
            body = block[match.end():end].strip()

            if number in seen:
                logger.debug(f"Duplicate question number {number} ignored")
                result.duplicate_numbers.append(number)
                continue

            seen.add(number)
            result.segments.append(QuestionSegment(number=number, body=body))

        return result


# ─── Stem / Choice Accumulator ────────────────────────────────────────────────


class ClassifierState(Enum):
    """Whether a lettered choice is currently open."""
    STEM = "STEM"
    CHOICE = "CHOICE"


@dataclass
class OpenChoice:
    """A choice being reconstructed from one or more source lines."""
    label: str
    parts: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return " ".join(p for p in self.parts if p).strip()


@dataclass(frozen=True)
class ParsedChoice:
    label: str
    text: str


@dataclass(frozen=True)
class ClassifiedQuestion:
    """Stem and choices recovered from one question segment."""
    stem: str
    choices: tuple[ParsedChoice, ...] = ()


class ChoiceAccumulator:
    """
    Finite state accumulator for the stem/choice split.
    Knows nothing about regular expressions; callers feed it already
    classified lines.
    """

    def __init__(self):
        self.state = ClassifierState.STEM
        self.current_choice: Optional[OpenChoice] = None
        self.stem_parts: list[str] = []
        self.choices: list[ParsedChoice] = []

    def reset(self):
        """Reset the accumulator for a fresh segment."""
        self.state = ClassifierState.STEM
        self.current_choice = None
        self.stem_parts = []
        self.choices = []

    def start_choice(self, label: str, text: str = ""):
        """Close any open choice and open a new one."""
        self._close_choice()
        self.current_choice = OpenChoice(label=label.upper())
        if text:
            self.current_choice.parts.append(text)
        self.state = ClassifierState.CHOICE

    def append_text(self, text: str):
        """Extend the open choice, or the stem when no choice is open."""
        if not text:
            return
        if self.state == ClassifierState.CHOICE and self.current_choice:
            self.current_choice.parts.append(text)
        else:
            self.stem_parts.append(text)

    def finalize(self) -> ClassifiedQuestion:
        """Close any pending choice and return the accumulated result."""
        self._close_choice()
        stem = WHITESPACE_PATTERN.sub(" ", " ".join(self.stem_parts)).strip()
        return ClassifiedQuestion(stem=stem, choices=tuple(self.choices))

    def _close_choice(self):
        if self.current_choice:
            self.choices.append(ParsedChoice(
                label=self.current_choice.label,
                text=self.current_choice.text,
            ))
        self.current_choice = None
        self.state = ClassifierState.STEM


def match_choice_start(line: str) -> Optional[tuple[str, str]]:
    """Return (label, text) if the line opens a lettered choice."""
    match = CHOICE_PATTERN.match(line)
    if not match:
        return None
    label = (match.group(1) or match.group(2)).upper()
    return label, match.group(3).strip()


class StemChoiceClassifier:
    """Classifies each line of a question body as choice start or continuation."""

    def classify(self, body: str) -> ClassifiedQuestion:
        accumulator = ChoiceAccumulator()

        for line in body.split("\n"):
            line_str = line.strip()
            if not line_str:
                continue

            choice = match_choice_start(line_str)
            if choice:
                accumulator.start_choice(*choice)
            else:
                accumulator.append_text(line_str)

        return accumulator.finalize()
