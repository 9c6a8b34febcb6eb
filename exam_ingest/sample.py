"""
Sample Exam
===========
A small, fixed ACT-style blueprint returned by the HTTP layer when ingestion
fails, so the frontend always has something to render.
"""

from __future__ import annotations

from .models import (
    ExamBlueprint,
    ExamBlueprintMetadata,
    ExamQuestion,
    ExamSection,
    QuestionChoice,
    QuestionKind,
)

SAMPLE_CREATED_AT = "2024-01-01T00:00:00+00:00"


def _choices(question_id: str, labels: str, texts: list[str]) -> list[QuestionChoice]:
    return [
        QuestionChoice(id=f"{question_id}-{label}-{idx}", label=label, text=text)
        for idx, (label, text) in enumerate(zip(labels, texts))
    ]


def sample_exam() -> ExamBlueprint:
    """Build a fresh copy of the sample blueprint."""
    english = ExamSection(
        id="english",
        name="English",
        description="Sample English section",
        order=1,
        time_limit_minutes=45,
        instructions=["Choose the best answer for each underlined portion."],
        questions=[
            ExamQuestion(
                id="english-1",
                order=1,
                kind=QuestionKind.MULTIPLE_CHOICE,
                stem="The team of researchers ___ studying the data since May.",
                choices=_choices(
                    "english-1", "ABCD",
                    ["have been", "has been", "were", "are being"],
                ),
                answer_key="B",
                skill_tags=["Grammar::Subject-Verb Agreement"],
                metadata={"confidence": 1.0},
            ),
            ExamQuestion(
                id="english-2",
                order=2,
                kind=QuestionKind.MULTIPLE_CHOICE,
                stem="Which choice most effectively combines the two sentences?",
                choices=_choices(
                    "english-2", "FGHJ",
                    [
                        "NO CHANGE",
                        "The storm passed, and the town was quiet.",
                        "The storm passed; quiet the town.",
                        "Passing, the storm quiet town.",
                    ],
                ),
                answer_key="G",
                skill_tags=["Rhetoric::Sentence Combining"],
                metadata={"confidence": 1.0},
            ),
        ],
    )

    math = ExamSection(
        id="math",
        name="Math",
        description="Sample Math section",
        order=2,
        time_limit_minutes=60,
        instructions=["Solve each problem. Calculators are permitted."],
        calculator_allowed=True,
        questions=[
            ExamQuestion(
                id="math-1",
                order=1,
                kind=QuestionKind.MULTIPLE_CHOICE,
                stem="If 3x + 5 = 20, what is the value of x?",
                choices=_choices("math-1", "ABCDE", ["3", "4", "5", "6", "15"]),
                answer_key="C",
                skill_tags=["Algebra::Linear Equations"],
                metadata={"confidence": 1.0},
            ),
            ExamQuestion(
                id="math-2",
                order=2,
                kind=QuestionKind.GRID_IN,
                stem="A right triangle has legs of 6 and 8. Record your answer for the hypotenuse.",
                answer_key="10",
                skill_tags=["Math::Geometry"],
                metadata={"confidence": 1.0},
            ),
        ],
    )

    return ExamBlueprint(
        id="sample-act-exam",
        title="Sample ACT Practice Exam",
        synopsis="Fallback sample exam shown when a PDF could not be ingested.",
        metadata=ExamBlueprintMetadata(
            version="sample",
            ingestion_confidence=1.0,
            created_at=SAMPLE_CREATED_AT,
            notes="Static sample data.",
        ),
        sections=[english, math],
    )
