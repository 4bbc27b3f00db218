"""Load document text from disk for offline ingestion."""

import logging
from pathlib import Path

import fitz  # PyMuPDF

logger = logging.getLogger(__name__)


def extract_text_from_pdf(pdf_path: Path) -> str:
    """Extract all text from a PDF file.

    Args:
        pdf_path: Path to the PDF file

    Returns:
        str: Concatenated text from all pages
    """
    doc = fitz.open(pdf_path)
    try:
        return "".join(page.get_text() for page in doc)
    finally:
        doc.close()


def load_document_text(path: Path) -> str:
    """Read a document as text; PDFs go through PyMuPDF, anything else is UTF-8.

    Args:
        path: Document path

    Returns:
        str: Document text
    """
    if path.suffix.lower() == ".pdf":
        text = extract_text_from_pdf(path)
    else:
        text = path.read_text(encoding="utf-8")
    logger.info(f"📂 Loaded {len(text)} characters from {path.name}")
    return text
