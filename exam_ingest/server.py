"""
HTTP Microservice
=================
Flask-based HTTP API for the exam ingest engine.

Endpoints:
    POST   /api/ingest        → Parse an uploaded PDF into a blueprint
    GET    /api/health        → Health check
    GET    /api/info          → Parser version info
"""

from __future__ import annotations

import logging

from flask import Flask, jsonify, request
from flask_cors import CORS

from . import __version__
from .engine import ParserConfig, ParserEngine
from .models import ParsedExamWarning, WarningSeverity
from .sample import sample_exam

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"

app = Flask(__name__)
CORS(app)


def create_app(config: dict = None) -> Flask:
    """Create and configure the Flask app."""
    if config:
        app.config.update(config)

    app.config.setdefault("MAX_CONTENT_LENGTH", 50 * 1024 * 1024)  # 50MB
    app.config.setdefault("EXAM_FAMILY", "ACT")
    app.config.setdefault("LOG_LEVEL", "INFO")
    # Optional callable(bytes) -> ExtractedDocument replacing PyMuPDF
    app.config.setdefault("TEXT_EXTRACTOR", None)

    return app


def _build_engine() -> ParserEngine:
    config = ParserConfig(
        exam_family=app.config.get("EXAM_FAMILY", "ACT"),
        log_level=app.config.get("LOG_LEVEL", "INFO"),
    )
    return ParserEngine(config, extractor=app.config.get("TEXT_EXTRACTOR"))


def _fallback_response():
    warning = ParsedExamWarning(
        message="An error occurred during parsing. Sample data returned instead.",
        severity=WarningSeverity.ERROR,
    )
    return jsonify({
        "message": "Parser encountered an error. Loading fallback sample exam.",
        "fallback": {
            "exam": sample_exam().to_json_dict(),
            "warnings": [warning.to_json_dict()],
        },
    }), 500


# ─── Health Check ─────────────────────────────────────────────────────────────


@app.route("/api/health", methods=["GET"])
def health():
    """Health check endpoint."""
    return jsonify({
        "status": "healthy",
        "service": "exam-ingest",
        "version": __version__,
    })


@app.route("/api/info", methods=["GET"])
def info():
    """Parser version and capability info."""
    return jsonify({
        "version": __version__,
        "engine": "PyMuPDF",
        "capabilities": [
            "text_extraction",
            "section_detection",
            "question_segmentation",
            "answer_key_alignment",
            "skill_tagging",
        ],
        "supported_formats": ["pdf"],
    })


# ─── Ingest Endpoint ──────────────────────────────────────────────────────────


@app.route("/api/ingest", methods=["POST"])
def ingest_pdf():
    """
    Parse an uploaded PDF synchronously and return the blueprint payload.

    Accepts a multipart/form-data upload in the `file` field.
    """
    file = request.files.get("file")
    if file is None or not file.filename:
        return jsonify({"message": "A PDF file is required."}), 400

    if file.mimetype and file.mimetype != PDF_CONTENT_TYPE:
        return jsonify({
            "message": "Unsupported file type. Please upload a PDF."
        }), 415

    try:
        engine = _build_engine()
        payload = engine.parse_bytes(file.read(), file.filename)
        return jsonify(payload.to_json_dict()), 200
    except Exception:
        logger.exception(f"PDF ingestion failed: {file.filename}")
        return _fallback_response()


# ─── Run Server ──────────────────────────────────────────────────────────────


def run_server(
    host: str = "0.0.0.0",
    port: int = 5000,
    debug: bool = False,
):
    """Start the microservice server."""
    create_app()
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    run_server(debug=True)
