from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

import pdfplumber
from docx import Document


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

SUPPORTED_FILE_TYPES = {".pdf", ".docx", ".txt"}
PAGE_BREAK = "\n\n--- Page Break ---\n\n"


def _extract_text_from_pdf(pdf_path: Path) -> str:
    logger.info("[PDF Extraction] Starting text extraction from PDF: %s", pdf_path.name)
    text_parts: List[str] = []
    with pdfplumber.open(str(pdf_path)) as pdf:
        total_pages = len(pdf.pages)
        logger.info("[PDF Extraction] PDF has %d page(s)", total_pages)
        for page_num, page in enumerate(pdf.pages, 1):
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
                logger.debug("[PDF Extraction] Page %d/%d: extracted %d characters",
                             page_num, total_pages, len(page_text))
            else:
                logger.warning("[PDF Extraction] Page %d/%d: no text found (may be image-only)",
                               page_num, total_pages)
    full_text = PAGE_BREAK.join(text_parts)
    logger.info("[PDF Extraction] Completed: %d characters from %d/%d pages with text",
                len(full_text), len(text_parts), total_pages)
    return full_text


def _extract_text_from_docx(docx_path: Path) -> str:
    logger.info("[DOCX Extraction] Starting text extraction from DOCX: %s", docx_path.name)
    doc = Document(str(docx_path))
    text_parts: List[str] = [para.text for para in doc.paragraphs if para.text.strip()]
    para_count = len(text_parts)
    table_count = 0
    for table in doc.tables:
        rows: List[str] = []
        for row in table.rows:
            row_text = " | ".join(cell.text.strip() for cell in row.cells)
            if row_text.strip(" |"):
                rows.append(row_text)
        if rows:
            text_parts.append("\n".join(rows))
            table_count += 1
    full_text = "\n\n".join(text_parts)
    logger.info("[DOCX Extraction] Completed: %d characters from %d paragraphs and %d tables",
                len(full_text), para_count, table_count)
    return full_text


def extract_text_from_file(path: PathLike) -> str:
    p = Path(path)
    suffix = p.suffix.lower()
    logger.info("[Text Extraction] Starting text extraction from file: %s (%s)", p.name, suffix.upper())
    if suffix == ".pdf":
        return _extract_text_from_pdf(p)
    if suffix == ".docx":
        return _extract_text_from_docx(p)
    if suffix == ".txt":
        text = p.read_text(encoding="utf-8", errors="replace")
        logger.info("[Text Extraction] Read %d characters from text file", len(text))
        return text
    raise ValueError(f"Unsupported file type for path: {path}")
