"""
Module entry point for: python -m exam_ingest

Allows running the parser directly as a module:
    python -m exam_ingest parse <pdf_path> [options]
    python -m exam_ingest text <txt_path> [options]
    python -m exam_ingest serve [options]
"""

from .cli import cli


def main():
    cli()


if __name__ == "__main__":
    main()
