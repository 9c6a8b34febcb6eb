"""
Exam Ingest
===========
Turns text recovered from a standardized-test booklet into a structured exam
blueprint: ordered sections, questions, choices, answer keys and skill tags,
plus a confidence score and reviewer warnings.

Architecture:
    - Text Extractor: Recovers raw text and metadata from PDF bytes
    - Section Segmenter: Locates known sections by alias
    - State Machine: Splits questions and separates stems from choices
    - Answer Key Extractor: Aligns the answer key by question number
    - Inference: Question kind and skill tags
    - Assembler: Builds the blueprint payload for the frontend

Version: 1.0.0
"""

__version__ = "1.0.0"
