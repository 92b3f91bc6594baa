from __future__ import annotations

import html
import logging
from io import BytesIO
from typing import Optional

from bs4 import BeautifulSoup, NavigableString
from docx import Document
from docx.shared import Pt

logger = logging.getLogger(__name__)

BLOCK_TAGS = ["p", "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "table", "blockquote", "pre"]


#function to add inline text of an element to a paragraph, keeping basic formatting
def _add_text_to_paragraph(para, element):
    for content in element.contents:
        if isinstance(content, NavigableString):
            text = str(content)
            if text.strip():
                para.add_run(text)
        elif content.name in ("strong", "b"):
            para.add_run(content.get_text()).bold = True
        elif content.name in ("em", "i"):
            para.add_run(content.get_text()).italic = True
        elif content.name == "u":
            para.add_run(content.get_text()).underline = True
        elif content.name == "br":
            para.add_run().add_break()
        else:
            para.add_run(content.get_text())


#function to add an HTML table to the document
def _add_table_to_doc(doc, table_element):
    rows = table_element.find_all("tr")
    if not rows:
        return
    max_cols = max(len(row.find_all(["td", "th"])) for row in rows)
    if max_cols == 0:
        return
    table = doc.add_table(rows=len(rows), cols=max_cols)
    for row_idx, row in enumerate(rows):
        for col_idx, cell in enumerate(row.find_all(["td", "th"])[:max_cols]):
            doc_cell = table.rows[row_idx].cells[col_idx]
            doc_cell.text = cell.get_text(strip=True)
            if cell.name == "th":
                for para in doc_cell.paragraphs:
                    for run in para.runs:
                        run.bold = True


def _is_nested(element) -> bool:
    return any(parent.name in BLOCK_TAGS for parent in element.parents)


def html_to_docx(html_content: str, title: Optional[str] = None) -> bytes:
    doc = Document()
    normal = doc.styles["Normal"]
    normal.font.name = "Calibri"
    normal.font.size = Pt(11)

    if title:
        doc.add_heading(title, level=0)

    soup = BeautifulSoup(html_content or "", "html.parser")
    blocks = [el for el in soup.find_all(BLOCK_TAGS) if not _is_nested(el)]
    for element in blocks:
        if element.name in ("p", "blockquote", "pre"):
            para = doc.add_paragraph(style="Quote" if element.name == "blockquote" else None)
            _add_text_to_paragraph(para, element)
        elif element.name.startswith("h"):
            heading = doc.add_heading(level=min(int(element.name[1]), 9))
            _add_text_to_paragraph(heading, element)
        elif element.name in ("ul", "ol"):
            style = "List Bullet" if element.name == "ul" else "List Number"
            for li in element.find_all("li", recursive=False):
                _add_text_to_paragraph(doc.add_paragraph(style=style), li)
        elif element.name == "table":
            _add_table_to_doc(doc, element)

    if not blocks:
        # plain-text drafts: one paragraph per non-empty line
        for line in soup.get_text().split("\n"):
            if line.strip():
                doc.add_paragraph(line.strip())

    buf = BytesIO()
    doc.save(buf)
    data = buf.getvalue()
    logger.info("Generated DOCX from draft: %d blocks, %d bytes", len(blocks), len(data))
    return data


def draft_to_html_document(content: str, title: Optional[str] = None) -> str:
    soup = BeautifulSoup(content or "", "html.parser")
    if soup.find():
        body = content
    else:
        body = "\n".join(
            f"<p>{html.escape(line.strip())}</p>" for line in (content or "").split("\n") if line.strip()
        )
    page_title = html.escape(title or "RFP Response Draft")
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n<meta charset=\"utf-8\">\n"
        f"<title>{page_title}</title>\n</head>\n<body>\n{body}\n</body>\n</html>\n"
    )
