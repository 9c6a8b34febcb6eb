"""
Data Models
===========
Pydantic models for the structured exam blueprint.
Attributes are snake_case in Python; JSON output uses camelCase aliases so the
payload can be handed to the rendering/editing frontend unchanged.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


# ─── Enums ────────────────────────────────────────────────────────────────────


class QuestionKind(str, Enum):
    """Supported question formats. Inference only produces the first two."""
    MULTIPLE_CHOICE = "multiple-choice"
    GRID_IN = "grid-in"
    MULTI_SELECT = "multi-select"
    ESSAY = "essay"


class WarningSeverity(str, Enum):
    """Severity of a parse warning."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ExamFamily(str, Enum):
    ACT = "ACT"
    SAT = "SAT"


# ─── Base ─────────────────────────────────────────────────────────────────────


class CamelModel(BaseModel):
    """Base model that serializes with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json_dict(self) -> dict:
        """Plain JSON-ready dict with camelCase keys and unset optionals dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ─── Extraction Models ────────────────────────────────────────────────────────


class DocumentInfo(BaseModel):
    """Document metadata reported by the text extractor."""
    title: Optional[str] = None
    author: Optional[str] = None


class ExtractedDocument(BaseModel):
    """Raw output of the PDF text-extraction collaborator."""
    text: str = ""
    info: DocumentInfo = Field(default_factory=DocumentInfo)
    page_count: int = 0


# ─── Question Models ──────────────────────────────────────────────────────────


class QuestionChoice(CamelModel):
    """A lettered answer option."""
    id: str
    label: str = Field(
        pattern=r"^[A-HJF]$",
        description="Single letter label (A-H, J, or F for ACT skip-lettering)",
    )
    text: str = ""
    rationale: Optional[str] = None


class ExamQuestion(CamelModel):
    """
    A single parsed question.
    `order` is the number observed in the source text, not a running index.
    """
    id: str
    order: int
    kind: QuestionKind = QuestionKind.MULTIPLE_CHOICE
    stem: str = Field(min_length=1)
    choices: Optional[list[QuestionChoice]] = None
    answer_key: Optional[Union[str, list[str]]] = None
    skill_tags: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def confidence(self) -> Optional[float]:
        value = self.metadata.get("confidence")
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        return None


class ExamSection(CamelModel):
    """An ordered block of questions belonging to one test section."""
    id: str
    name: str
    description: Optional[str] = None
    order: int = Field(ge=1)
    time_limit_minutes: int = Field(ge=0)
    instructions: list[str] = Field(default_factory=list)
    calculator_allowed: bool = False
    questions: list[ExamQuestion] = Field(default_factory=list)


# ─── Blueprint / Payload Models ───────────────────────────────────────────────


class ExamBlueprintMetadata(CamelModel):
    """Provenance and quality metadata for a parsed exam."""
    exam_family: ExamFamily = ExamFamily.ACT
    version: Optional[str] = None
    source_pdf_name: Optional[str] = None
    ingestion_confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    author: Optional[str] = None
    notes: Optional[str] = None


class ExamBlueprint(CamelModel):
    """The fully structured representation of one exam document."""
    id: str
    title: str
    synopsis: Optional[str] = None
    metadata: ExamBlueprintMetadata
    sections: list[ExamSection] = Field(default_factory=list)

    @property
    def question_count(self) -> int:
        return sum(len(s.questions) for s in self.sections)


class ParsedExamWarning(CamelModel):
    """A human-readable note about ambiguous or missing data."""
    message: str
    context: Optional[str] = None
    severity: WarningSeverity = WarningSeverity.WARNING


class ParsedExamPayload(CamelModel):
    """
    Complete output of an ingestion run.
    This is the top-level JSON structure returned to the frontend.
    """
    exam: ExamBlueprint
    warnings: list[ParsedExamWarning] = Field(default_factory=list)
    raw_text: Optional[str] = None


# ─── Validation Report ────────────────────────────────────────────────────────


class ValidationReport(BaseModel):
    """Post-parse report. Logged and displayed, never part of the payload."""
    total_sections: int = 0
    total_questions: int = 0
    questions_with_answer_key: int = 0
    questions_missing_answer_key: list[str] = Field(default_factory=list)
    questions_without_choices: list[str] = Field(default_factory=list)
    placeholder_stems: list[str] = Field(default_factory=list)
    section_confidence: dict[str, Optional[float]] = Field(default_factory=dict)
    warning_breakdown: dict[str, int] = Field(default_factory=dict)

    @computed_field
    @property
    def answer_key_coverage(self) -> float:
        if self.total_questions == 0:
            return 0.0
        return round(
            self.questions_with_answer_key / self.total_questions * 100,
            2
        )
