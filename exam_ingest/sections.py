"""
Section Segmenter
=================
Locates known test sections by alias and slices the document into
contiguous, position-ordered section blocks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionDefinition:
    """A catalog entry for one known test section."""
    id: str
    name: str
    aliases: tuple[str, ...]
    time_limit_minutes: int = 35

    @property
    def calculator_allowed(self) -> bool:
        return self.id == "math"


SECTION_DEFINITIONS: tuple[SectionDefinition, ...] = (
    SectionDefinition("english", "English", ("english test", "english section"), 45),
    SectionDefinition("math", "Math", ("math test", "mathematics"), 60),
    SectionDefinition("reading", "Reading", ("reading test", "reading passage")),
    SectionDefinition("science", "Science", ("science test", "science reasoning")),
    SectionDefinition("writing", "Writing", ("writing test", "writing prompt")),
)

SECTIONS_BY_ID = {d.id: d for d in SECTION_DEFINITIONS}


@dataclass(frozen=True)
class SectionBlock:
    """A detected section and the slice of text it owns."""
    definition: SectionDefinition
    order: int
    start: int
    end: int
    text: str

    @property
    def id(self) -> str:
        return self.definition.id

    @property
    def name(self) -> str:
        return self.definition.name


class SectionSegmenter:
    """
    Finds the first occurrence of each catalog section and orders the matches
    by position. Order is the detection rank, not the catalog order.
    """

    def __init__(self, definitions: tuple[SectionDefinition, ...] = SECTION_DEFINITIONS):
        self.definitions = definitions

    def locate(self, text: str) -> list[tuple[int, SectionDefinition]]:
        """Position of each definition's earliest alias, sorted ascending."""
        lowered = text.lower()
        found: list[tuple[int, SectionDefinition]] = []

        for definition in self.definitions:
            positions = [
                lowered.find(alias)
                for alias in definition.aliases
            ]
            positions = [p for p in positions if p >= 0]
            if not positions:
                logger.debug(f"Section not detected: {definition.name}")
                continue
            found.append((min(positions), definition))

        found.sort(key=lambda item: item[0])
        return found

    def segment(
        self,
        text: str,
        stop_at: Optional[int] = None,
    ) -> list[SectionBlock]:
        """
        Slice text into section blocks.

        Args:
            text: Normalized document text.
            stop_at: Offset of the answer-key heading line. A block that
                contains it is cut there so key entries are not read as
                questions.

        Returns:
            Blocks in document order with 1-based order indices.
        """
        located = self.locate(text)
        blocks: list[SectionBlock] = []

        for index, (start, definition) in enumerate(located):
            end = located[index + 1][0] if index + 1 < len(located) else len(text)
            if stop_at is not None and start < stop_at < end:
                end = stop_at

            blocks.append(SectionBlock(
                definition=definition,
                order=index + 1,
                start=start,
                end=end,
                text=text[start:end],
            ))
            logger.info(
                f"Detected section {index + 1}: {definition.name} "
                f"(offset {start}-{end})"
            )

        return blocks
