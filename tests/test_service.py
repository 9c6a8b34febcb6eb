"""
Test Suite for the Service Surfaces
===================================
HTTP endpoint, CLI and PyMuPDF extraction tests.
"""

from __future__ import annotations

import io
import json

import fitz
import pytest
from click.testing import CliRunner

from exam_ingest.cli import cli
from exam_ingest.engine import parse_exam_pdf
from exam_ingest.models import DocumentInfo, ExtractedDocument
from exam_ingest.server import create_app
from exam_ingest.text_extractor import TextExtractor


BOOKLET = (
    "ENGLISH TEST\n"
    "1. Choose the best word.\n"
    "A. run\n"
    "B. ran\n"
    "C. running\n"
    "D. runs\n"
    "ANSWER KEY\n"
    "1. C\n"
)


def _make_pdf(text: str, title: str = "", author: str = "") -> bytes:
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), text, fontsize=11)
    doc.set_metadata({"title": title, "author": author})
    data = doc.tobytes()
    doc.close()
    return data


def _make_multipage_pdf(pages: list[str]) -> bytes:
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        page.insert_text((72, 72), text, fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


# ═══════════════════════════════════════════════════════════════════════════════
# HTTP TESTS
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def client_factory():
    def factory(extractor):
        app = create_app({"TESTING": True, "TEXT_EXTRACTOR": extractor})
        return app.test_client()
    return factory


def _upload(name="booklet.pdf", content_type="application/pdf", data=b"%PDF-1.7"):
    return {"file": (io.BytesIO(data), name, content_type)}


class TestIngestEndpoint:
    """Test POST /api/ingest status codes and payloads."""

    def test_missing_file(self, client_factory):
        client = client_factory(lambda buffer: ExtractedDocument(text=BOOKLET))
        response = client.post("/api/ingest", data={}, content_type="multipart/form-data")
        assert response.status_code == 400
        assert response.get_json()["message"] == "A PDF file is required."

    def test_rejects_non_pdf(self, client_factory):
        client = client_factory(lambda buffer: ExtractedDocument(text=BOOKLET))
        response = client.post(
            "/api/ingest",
            data=_upload(name="notes.txt", content_type="text/plain"),
            content_type="multipart/form-data",
        )
        assert response.status_code == 415

    def test_success(self, client_factory):
        client = client_factory(lambda buffer: ExtractedDocument(
            text=BOOKLET, info=DocumentInfo(title="Form 9", author="ACT"),
        ))
        response = client.post(
            "/api/ingest",
            data=_upload(),
            content_type="multipart/form-data",
        )
        assert response.status_code == 200

        data = response.get_json()
        assert data["warnings"] == []
        assert data["exam"]["id"] == "booklet-pdf"
        assert data["exam"]["metadata"]["version"] == "Form 9"
        question = data["exam"]["sections"][0]["questions"][0]
        assert question["answerKey"] == "C"
        assert len(question["choices"]) == 4
        assert data["rawText"].startswith("ENGLISH TEST")

    def test_empty_text_is_successful_degraded_result(self, client_factory):
        client = client_factory(lambda buffer: ExtractedDocument(text=""))
        response = client.post(
            "/api/ingest",
            data=_upload(),
            content_type="multipart/form-data",
        )
        assert response.status_code == 200
        data = response.get_json()
        assert data["exam"]["sections"] == []
        assert data["exam"]["metadata"]["ingestionConfidence"] == 0.3

    def test_extraction_failure_returns_fallback(self, client_factory):
        def broken(buffer):
            raise RuntimeError("Cannot open PDF")

        client = client_factory(broken)
        response = client.post(
            "/api/ingest",
            data=_upload(),
            content_type="multipart/form-data",
        )
        assert response.status_code == 500

        data = response.get_json()
        assert "fallback" in data
        assert data["fallback"]["exam"]["id"] == "sample-act-exam"
        assert len(data["fallback"]["warnings"]) == 1
        assert data["fallback"]["warnings"][0]["severity"] == "error"

    def test_health(self, client_factory):
        client = client_factory(None)
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.get_json()["status"] == "healthy"

    def test_info(self, client_factory):
        client = client_factory(None)
        data = client.get("/api/info").get_json()
        assert data["supported_formats"] == ["pdf"]


# ═══════════════════════════════════════════════════════════════════════════════
# EXTRACTION TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestTextExtractor:
    """Test PyMuPDF text and metadata extraction."""

    def test_extracts_text_and_metadata(self):
        pdf = _make_pdf("ENGLISH TEST\n1. Choose the best word.", "Form 5", "ACT")
        document = TextExtractor().extract(pdf)
        assert "ENGLISH TEST" in document.text
        assert document.info.title == "Form 5"
        assert document.info.author == "ACT"
        assert document.page_count == 1

    def test_blank_metadata_is_none(self):
        document = TextExtractor()(_make_pdf("MATH TEST"))
        assert document.info.title is None
        assert document.info.author is None

    def test_invalid_bytes(self):
        with pytest.raises(RuntimeError):
            TextExtractor().extract(b"definitely not a pdf")

    def test_page_range(self):
        pdf = _make_multipage_pdf(["PAGE ONE", "PAGE TWO", "PAGE THREE"])
        document = TextExtractor(page_range=(2, 2)).extract(pdf)
        assert "PAGE TWO" in document.text
        assert "PAGE ONE" not in document.text
        assert "PAGE THREE" not in document.text
        assert document.page_count == 3

    def test_page_range_is_clamped(self):
        pdf = _make_multipage_pdf(["PAGE ONE", "PAGE TWO", "PAGE THREE"])
        document = TextExtractor(page_range=(0, 99)).extract(pdf)
        assert "PAGE ONE" in document.text
        assert "PAGE THREE" in document.text

    def test_parse_exam_pdf(self):
        pdf = _make_pdf(BOOKLET, "Form 5")
        payload = parse_exam_pdf(pdf, "form5.pdf")
        assert payload.exam.id == "form5-pdf"
        assert payload.exam.metadata.version == "Form 5"
        assert payload.exam.sections[0].id == "english"


# ═══════════════════════════════════════════════════════════════════════════════
# CLI TESTS
# ═══════════════════════════════════════════════════════════════════════════════


class TestCli:
    """Test click commands."""

    def test_text_command_json_output(self, tmp_path):
        dump = tmp_path / "form.txt"
        dump.write_text(BOOKLET, encoding="utf-8")

        result = CliRunner().invoke(cli, ["text", str(dump), "--json-output", "--no-save"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["exam"]["id"] == "form-txt"
        assert data["exam"]["sections"][0]["questions"][0]["answerKey"] == "C"

    def test_text_command_saves(self, tmp_path):
        dump = tmp_path / "form.txt"
        dump.write_text(BOOKLET, encoding="utf-8")
        out = tmp_path / "out"

        result = CliRunner().invoke(
            cli, ["text", str(dump), "--output", str(out), "--log-level", "ERROR"]
        )

        assert result.exit_code == 0
        assert (out / "form-txt_parsed.json").exists()

    def test_parse_command_page_start(self, tmp_path):
        pdf = tmp_path / "booklet.pdf"
        pdf.write_bytes(_make_multipage_pdf(["Cover sheet", BOOKLET]))

        result = CliRunner().invoke(
            cli,
            ["parse", str(pdf), "--page-start", "2", "--json-output", "--no-save"],
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["exam"]["sections"][0]["id"] == "english"
        assert "Cover" not in data["rawText"]

    def test_parse_missing_path(self, tmp_path):
        result = CliRunner().invoke(cli, ["parse", str(tmp_path / "nope.pdf")])
        assert result.exit_code != 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
