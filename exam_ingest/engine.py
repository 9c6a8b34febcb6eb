"""
Exam Ingest Engine
==================
Main orchestrator that runs text extraction, normalization, answer-key
extraction, section and question segmentation, inference, confidence
aggregation and blueprint assembly.

Usage:
    engine = ParserEngine(config)
    payload = engine.parse("path/to/booklet.pdf")
    # payload is a ParsedExamPayload; payload.to_json_dict() is the JSON body

Architecture:
    PDF bytes → TextExtractor → raw text → normalize_text →
    AnswerKeyExtractor + SectionSegmenter → BlueprintAssembler →
    ParsedExamPayload (JSON)
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .answer_key import AnswerKeyExtractor
from .assembler import DEFAULT_TITLE, RAW_TEXT_LIMIT, BlueprintAssembler
from .models import DocumentInfo, ExamFamily, ExtractedDocument, ParsedExamPayload
from .normalizer import normalize_text
from .sections import SectionSegmenter
from .text_extractor import TextExtractor
from .validator import ValidationEngine

logger = logging.getLogger(__name__)

Extractor = Callable[[bytes], ExtractedDocument]


@dataclass
class ParserConfig:
    """Configuration for the ingest engine."""

    # Blueprint defaults
    exam_family: str = "ACT"
    default_title: str = DEFAULT_TITLE
    raw_text_limit: int = RAW_TEXT_LIMIT

    # Extraction
    page_range: Optional[tuple[int, int]] = None

    # Output settings
    output_dir: str = "output"
    save_output: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None


class ParserEngine:
    """
    Main exam ingestion engine.

    Orchestrates the full pipeline:
        1. Text extraction (PDF only)
        2. Normalization
        3. Answer key extraction
        4. Section + question segmentation
        5. Kind / skill inference and confidence
        6. Blueprint assembly and validation

    Holds no per-document state, so one engine can serve many documents.
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        extractor: Optional[Extractor] = None,
    ):
        self.config = config or ParserConfig()
        self.extractor = extractor or TextExtractor(page_range=self.config.page_range)
        self.assembler = BlueprintAssembler(
            exam_family=ExamFamily(self.config.exam_family),
            default_title=self.config.default_title,
            raw_text_limit=self.config.raw_text_limit,
        )
        self._setup_logging()

    def _setup_logging(self):
        """Configure logging based on config."""
        log_level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        # Configure root logger for the package
        package_logger = logging.getLogger("exam_ingest")
        package_logger.setLevel(log_level)

        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        # Console handler
        if not package_logger.handlers:
            console = logging.StreamHandler()
            console.setLevel(log_level)
            console.setFormatter(formatter)
            package_logger.addHandler(console)

        # File handler
        if self.config.log_file:
            log_dir = Path(self.config.log_file).parent
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(
                self.config.log_file, encoding="utf-8"
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            package_logger.addHandler(file_handler)

    # ─── Entry Points ────────────────────────────────────────────────────

    def parse(self, pdf_path: str) -> ParsedExamPayload:
        """
        Parse a PDF file into a structured exam blueprint.

        Args:
            pdf_path: Path to the PDF file to parse.

        Returns:
            ParsedExamPayload with the blueprint, warnings and raw text.

        Raises:
            FileNotFoundError: If PDF file doesn't exist.
            RuntimeError: If PDF cannot be opened.
        """
        pdf_path = os.path.abspath(pdf_path)

        if not os.path.exists(pdf_path):
            raise FileNotFoundError(f"PDF not found: {pdf_path}")

        with open(pdf_path, "rb") as f:
            buffer = f.read()

        payload = self.parse_bytes(buffer, os.path.basename(pdf_path))

        if self.config.save_output:
            self.save(payload)

        return payload

    def parse_bytes(
        self,
        buffer: bytes,
        file_name: Optional[str] = None,
    ) -> ParsedExamPayload:
        """
        Extract text from PDF bytes and run the pipeline.

        Extraction failures propagate; the hosting layer decides the fallback.
        """
        start_time = time.time()
        logger.info(f"Phase 1: Text extraction ({file_name or 'upload'})")
        document = self.extractor(buffer)
        payload = self.parse_text(document.text, file_name, document.info)
        logger.info(f"Ingest complete in {time.time() - start_time:.2f}s")
        return payload

    def parse_text(
        self,
        text: Optional[str],
        file_name: Optional[str] = None,
        info: Optional[DocumentInfo] = None,
    ) -> ParsedExamPayload:
        """Run the pipeline on already-extracted text. Never raises on content."""
        # ── Step 1: Normalize ─────────────────────────────────────────
        text = normalize_text(text or "")
        if not text.strip():
            return self.assembler.empty_payload(file_name)

        # ── Step 2: Answer key ────────────────────────────────────────
        logger.info("Phase 2: Answer key extraction")
        answer_key = AnswerKeyExtractor().extract(text)

        # ── Step 3: Sections + questions ──────────────────────────────
        logger.info("Phase 3: Section segmentation")
        blocks = SectionSegmenter().segment(text, stop_at=answer_key.heading_index)

        sections = []
        warnings = []
        for block in blocks:
            section, section_warnings = self.assembler.build_section(block)
            sections.append(section)
            warnings.extend(section_warnings)

        self.assembler.attach_answer_keys(sections, answer_key)

        # ── Step 4: Assemble ──────────────────────────────────────────
        logger.info("Phase 4: Blueprint assembly")
        payload = self.assembler.assemble(text, sections, warnings, file_name, info)

        # ── Step 5: Validation ────────────────────────────────────────
        ValidationEngine().validate(payload.exam, payload.warnings)

        logger.info(
            f"Parsed {len(payload.exam.sections)} sections, "
            f"{payload.exam.question_count} questions, "
            f"confidence {payload.exam.metadata.ingestion_confidence:.2f}"
        )
        return payload

    # ─── Output ──────────────────────────────────────────────────────────

    def save(self, payload: ParsedExamPayload) -> Path:
        """Save the payload JSON into the configured output directory."""
        output_dir = Path(self.config.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = output_dir / f"{payload.exam.id}_parsed.json"
        self._save_json(payload.to_json_dict(), output_file)
        return output_file

    def _save_json(self, data: dict, filepath: Path):
        """Save a dict to JSON file."""
        try:
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False, default=str)
            logger.info(f"Saved JSON output: {filepath}")
        except OSError as e:
            logger.error(f"Failed to save JSON: {e}")


def parse_exam_text(
    text: Optional[str],
    file_name: Optional[str] = None,
    info: Optional[DocumentInfo] = None,
) -> ParsedExamPayload:
    """Parse already-extracted booklet text with the default configuration."""
    return ParserEngine().parse_text(text, file_name, info)


def parse_exam_pdf(
    buffer: bytes,
    file_name: Optional[str] = None,
) -> ParsedExamPayload:
    """Extract and parse an in-memory PDF with the default configuration."""
    return ParserEngine().parse_bytes(buffer, file_name)
