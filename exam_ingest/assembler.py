"""
Blueprint Assembler
===================
Builds questions and sections from segmented text, attaches answer keys, and
composes the final ParsedExamPayload.

Every recoverable problem becomes a ParsedExamWarning; nothing here raises on
malformed input.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Optional

from .answer_key import AnswerKey
from .inference import infer_kind, infer_skill_tags
from .models import (
    DocumentInfo,
    ExamBlueprint,
    ExamBlueprintMetadata,
    ExamFamily,
    ExamQuestion,
    ExamSection,
    ParsedExamPayload,
    ParsedExamWarning,
    QuestionChoice,
    WarningSeverity,
)
from .normalizer import slugify
from .sections import SectionBlock
from .state_machine import QuestionSegmenter, StemChoiceClassifier
from .validator import NO_TEXT_CONFIDENCE, ConfidenceAggregator

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "ACT Practice Exam"
RAW_TEXT_LIMIT = 25_000

SECTION_INSTRUCTIONS = [
    "Review the auto-detected questions and confirm accuracy.",
    "Use the editor to adjust passages, diagrams, or answer options if needed.",
]

NO_TEXT_MESSAGE = (
    "The PDF did not contain extractable text. "
    "Attempt OCR or upload a clearer scan."
)
NO_SECTIONS_MESSAGE = (
    "No ACT-style sections were detected. "
    "Confirm the PDF is a full practice test."
)


class BlueprintAssembler:
    """Turns detected section blocks into the final blueprint payload."""

    def __init__(
        self,
        exam_family: ExamFamily = ExamFamily.ACT,
        default_title: str = DEFAULT_TITLE,
        raw_text_limit: int = RAW_TEXT_LIMIT,
    ):
        self.exam_family = exam_family
        self.default_title = default_title
        self.raw_text_limit = raw_text_limit
        self.segmenter = QuestionSegmenter()
        self.classifier = StemChoiceClassifier()
        self.aggregator = ConfidenceAggregator()

    # ─── Sections ────────────────────────────────────────────────────────

    def build_section(
        self,
        block: SectionBlock,
    ) -> tuple[ExamSection, list[ParsedExamWarning]]:
        """Segment, classify and infer every question in one section block."""
        warnings: list[ParsedExamWarning] = []
        questions: list[ExamQuestion] = []
        section_id = block.id

        result = self.segmenter.segment(block.text)

        for number in result.duplicate_numbers:
            warnings.append(ParsedExamWarning(
                message=f"Duplicate question number {number} ignored",
                context=block.name,
                severity=WarningSeverity.WARNING,
            ))

        for segment in result.segments:
            classified = self.classifier.classify(segment.body)
            stem = classified.stem

            if not stem:
                warnings.append(ParsedExamWarning(
                    message=f"Question {segment.number} stem could not be parsed",
                    context=block.name,
                    severity=WarningSeverity.WARNING,
                ))

            choices = [
                QuestionChoice(
                    id=f"{section_id}-{segment.number}-{choice.label}-{idx}",
                    label=choice.label,
                    text=choice.text,
                )
                for idx, choice in enumerate(classified.choices)
            ]

            question = ExamQuestion(
                id=f"{section_id}-{segment.number}",
                order=segment.number,
                kind=infer_kind(section_id, f"{stem} {segment.body}", len(choices)),
                stem=stem or f"Question {segment.number}",
                choices=choices or None,
                skill_tags=infer_skill_tags(section_id, stem),
                metadata={
                    "confidence": self.aggregator.question_confidence(len(choices)),
                },
            )
            logger.debug(
                f"[{question.id}] kind={question.kind.value} "
                f"choices={len(choices)} tags={question.skill_tags}"
            )
            questions.append(question)

        if not questions:
            warnings.append(ParsedExamWarning(
                message=f"No questions detected in {block.name} section",
                context=block.name,
                severity=WarningSeverity.WARNING,
            ))

        section = ExamSection(
            id=section_id,
            name=block.name,
            description=f"{block.name} section parsed from PDF",
            order=block.order,
            time_limit_minutes=block.definition.time_limit_minutes,
            instructions=list(SECTION_INSTRUCTIONS),
            calculator_allowed=block.definition.calculator_allowed,
            questions=questions,
        )
        logger.info(f"Section {block.name}: {len(questions)} questions")
        return section, warnings

    @staticmethod
    def attach_answer_keys(sections: list[ExamSection], answer_key: AnswerKey):
        """Look up every question's number in the key; absence is silent."""
        for section in sections:
            for question in section.questions:
                answer = answer_key.get(question.order)
                if answer is not None:
                    question.answer_key = answer

    # ─── Payload ─────────────────────────────────────────────────────────

    def assemble(
        self,
        text: str,
        sections: list[ExamSection],
        warnings: list[ParsedExamWarning],
        file_name: Optional[str] = None,
        info: Optional[DocumentInfo] = None,
    ) -> ParsedExamPayload:
        info = info or DocumentInfo()
        warnings = list(warnings)

        if not sections:
            warnings.append(ParsedExamWarning(
                message=NO_SECTIONS_MESSAGE,
                severity=WarningSeverity.WARNING,
            ))

        question_count = sum(len(s.questions) for s in sections)

        blueprint = ExamBlueprint(
            id=self.exam_id(file_name),
            title=self.title(file_name),
            synopsis=(
                f"Auto-generated from {file_name or 'uploaded PDF'} "
                f"with {question_count} detected questions."
            ),
            metadata=ExamBlueprintMetadata(
                exam_family=self.exam_family,
                version=info.title or "unlabeled",
                source_pdf_name=file_name,
                ingestion_confidence=self.aggregator.document_confidence(sections),
                author=info.author,
                notes=(
                    f"Detected {len(sections)} sections and {question_count} "
                    f"questions via exam-ingest parser."
                ),
            ),
            sections=sections,
        )

        return ParsedExamPayload(
            exam=blueprint,
            warnings=warnings,
            raw_text=text[:self.raw_text_limit],
        )

    def empty_payload(self, file_name: Optional[str] = None) -> ParsedExamPayload:
        """Degraded result for a document with no extractable text."""
        logger.warning("No extractable text, returning empty blueprint")
        blueprint = ExamBlueprint(
            id=self.exam_id(file_name),
            title=self.title(file_name),
            metadata=ExamBlueprintMetadata(
                exam_family=self.exam_family,
                version="unknown",
                source_pdf_name=file_name,
                ingestion_confidence=NO_TEXT_CONFIDENCE,
            ),
            sections=[],
        )
        return ParsedExamPayload(
            exam=blueprint,
            warnings=[ParsedExamWarning(
                message=NO_TEXT_MESSAGE,
                severity=WarningSeverity.ERROR,
            )],
        )

    # ─── Identity ────────────────────────────────────────────────────────

    @staticmethod
    def exam_id(file_name: Optional[str] = None) -> str:
        slug = slugify(file_name) if file_name else ""
        return slug or f"exam-{int(time.time() * 1000)}"

    def title(self, file_name: Optional[str] = None) -> str:
        if not file_name:
            return self.default_title
        return re.sub(r"\.pdf$", "", file_name, flags=re.IGNORECASE) or self.default_title
