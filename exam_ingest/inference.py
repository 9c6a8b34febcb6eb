"""
Kind & Skill Inference
======================
Deterministic rules for question kind and skill tags.

Skill tags come from an ordered rule list evaluated exhaustively: every
matching rule contributes its tag. Sections fall back to a single tag when
nothing matches.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from .models import QuestionKind

# At or above this many parsed choices a question is always multiple-choice
MULTIPLE_CHOICE_THRESHOLD = 4

GRID_IN_HINT_PATTERN = re.compile(
    r"grid\s*-?\s*in|record\s+your\s+answer|enter\s+your\s+answer",
    re.IGNORECASE,
)


class SkillRule(NamedTuple):
    pattern: re.Pattern
    tag: str


SKILL_RULES: tuple[SkillRule, ...] = (
    SkillRule(re.compile(r"verb|subject|agreement", re.I),
              "Grammar::Subject-Verb Agreement"),
    SkillRule(re.compile(r"comb(?:ine|ination)|sentence", re.I),
              "Rhetoric::Sentence Combining"),
    SkillRule(re.compile(r"function|f\(x\)|evaluate", re.I),
              "Functions::Evaluation"),
    SkillRule(re.compile(r"solve|equation|linear", re.I),
              "Algebra::Linear Equations"),
    SkillRule(re.compile(r"tone|attitude|narrator", re.I),
              "Reading::Tone"),
    SkillRule(re.compile(r"experiment|data|graph|table|variable", re.I),
              "Science::Data Interpretation"),
    SkillRule(re.compile(r"geometry|triangle|angle", re.I),
              "Math::Geometry"),
    SkillRule(re.compile(r"probability|percent|ratio", re.I),
              "Math::Probability"),
    SkillRule(re.compile(r"passage|author|main idea", re.I),
              "Reading::Main Ideas"),
)

FALLBACK_SKILL_TAGS: dict[str, str] = {
    "english": "English::Conventions",
    "math": "Math::General",
    "reading": "Reading::Comprehension",
    "science": "Science::Reasoning",
    "writing": "Writing::Essay",
}


def infer_kind(section_id: str, body: str, choice_count: int) -> QuestionKind:
    """
    Multiple-choice at or above the choice threshold; otherwise grid-in when a
    hint phrase appears or the section is math; otherwise multiple-choice.
    """
    if choice_count >= MULTIPLE_CHOICE_THRESHOLD:
        return QuestionKind.MULTIPLE_CHOICE

    if GRID_IN_HINT_PATTERN.search(body) or section_id == "math":
        return QuestionKind.GRID_IN

    return QuestionKind.MULTIPLE_CHOICE


def infer_skill_tags(section_id: str, stem: str) -> list[str]:
    tags: list[str] = []

    for rule in SKILL_RULES:
        if rule.pattern.search(stem) and rule.tag not in tags:
            tags.append(rule.tag)

    if not tags and section_id in FALLBACK_SKILL_TAGS:
        tags.append(FALLBACK_SKILL_TAGS[section_id])

    return tags
