"""
Validation Engine
=================
Confidence aggregation and post-parse reporting.

Confidence:
    - Question: 0.9 when choices were parsed, 0.7 otherwise
    - Section:  mean of question confidences (None when empty)
    - Document: mean of non-empty section confidences

After parsing each document, generates a report:
    - Sections / Questions Detected
    - Answer Key Coverage
    - Questions Without Choices
    - Placeholder Stems
    - Per-section confidence
    - Warning breakdown by severity
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Optional

from .models import (
    ExamBlueprint,
    ExamQuestion,
    ExamSection,
    ParsedExamWarning,
    ValidationReport,
)

logger = logging.getLogger(__name__)

CHOICES_PARSED_CONFIDENCE = 0.9
NO_CHOICES_CONFIDENCE = 0.7
MISSING_SIGNAL_CONFIDENCE = 0.6
NO_SECTIONS_CONFIDENCE = 0.5
NO_TEXT_CONFIDENCE = 0.3


class ConfidenceAggregator:
    """Turns per-question confidence signals into section and document scores."""

    @staticmethod
    def question_confidence(choice_count: int) -> float:
        if choice_count > 0:
            return CHOICES_PARSED_CONFIDENCE
        return NO_CHOICES_CONFIDENCE

    def section_confidence(self, section: ExamSection) -> Optional[float]:
        if not section.questions:
            return None
        total = 0.0
        for question in section.questions:
            confidence = question.confidence
            total += MISSING_SIGNAL_CONFIDENCE if confidence is None else confidence
        return total / len(section.questions)

    def document_confidence(self, sections: list[ExamSection]) -> float:
        scores = [
            score for score in (self.section_confidence(s) for s in sections)
            if score is not None
        ]
        if not scores:
            return NO_SECTIONS_CONFIDENCE
        return min(1.0, max(0.0, sum(scores) / len(scores)))


class ValidationEngine:
    """
    Validates a parsed blueprint and produces a report.
    """

    def __init__(self, aggregator: Optional[ConfidenceAggregator] = None):
        self.aggregator = aggregator or ConfidenceAggregator()

    def validate(
        self,
        exam: ExamBlueprint,
        warnings: Optional[list[ParsedExamWarning]] = None,
    ) -> ValidationReport:
        """
        Run validation on a parsed blueprint.

        Args:
            exam: The assembled blueprint.
            warnings: Warnings collected during parsing.

        Returns:
            ValidationReport with coverage and confidence figures.
        """
        report = ValidationReport()
        report.warning_breakdown = dict(Counter(
            w.severity.value for w in (warnings or [])
        ))

        if not exam.sections:
            logger.warning("No sections to validate")
            return report

        report.total_sections = len(exam.sections)

        for section in exam.sections:
            report.section_confidence[section.id] = (
                self.aggregator.section_confidence(section)
            )
            for question in section.questions:
                self._check_question(question, report)

        self._log_report(report)
        return report

    def _check_question(self, question: ExamQuestion, report: ValidationReport):
        report.total_questions += 1

        if question.answer_key:
            report.questions_with_answer_key += 1
        else:
            report.questions_missing_answer_key.append(question.id)

        if not question.choices:
            report.questions_without_choices.append(question.id)

        if question.stem == f"Question {question.order}":
            report.placeholder_stems.append(question.id)

    def _log_report(self, report: ValidationReport):
        logger.info("=" * 60)
        logger.info("VALIDATION REPORT")
        logger.info("=" * 60)
        logger.info(f"Sections Detected: {report.total_sections}")
        logger.info(f"Questions Detected: {report.total_questions}")
        logger.info(
            f"Answer Key Coverage: {report.questions_with_answer_key} "
            f"({report.answer_key_coverage}%)"
        )
        logger.info(
            f"Questions Without Choices: "
            f"{len(report.questions_without_choices)}"
        )
        logger.info(f"Placeholder Stems: {len(report.placeholder_stems)}")

        for section_id, score in report.section_confidence.items():
            shown = "n/a" if score is None else f"{score:.2f}"
            logger.info(f"  • {section_id}: confidence {shown}")

        if report.warning_breakdown:
            logger.info("Warning Breakdown:")
            for severity, count in sorted(report.warning_breakdown.items()):
                logger.info(f"  • {severity}: {count}")

        logger.info("=" * 60)
