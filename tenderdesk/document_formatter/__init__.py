from __future__ import annotations

from tenderdesk.document_formatter.docx_generator import draft_to_html_document, html_to_docx

__all__ = ["draft_to_html_document", "html_to_docx"]
