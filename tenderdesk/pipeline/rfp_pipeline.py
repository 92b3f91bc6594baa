from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from tenderdesk.agents.extraction_agent import run_extraction_agent
from tenderdesk.models import ExtractedTender, TenderCreate

logger = logging.getLogger(__name__)


def run_rfp_intake(rfp_text: str, request_id: Optional[str] = None) -> ExtractedTender:
    rid = request_id or "no-request-id"
    logger.info("REQUEST %s: step 1/1 – extraction agent (chars=%d)", rid, len(rfp_text))
    extracted = run_extraction_agent(rfp_text)
    logger.info(
        "REQUEST %s: extraction complete (title=%r, client=%r, deadline=%s)",
        rid,
        extracted.title,
        extracted.client,
        extracted.deadline or "n/a",
    )
    return extracted


def _parse_deadline(value: str) -> Optional[date]:
    value = (value or "").strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        logger.warning("Ignoring unparseable deadline from extraction: %r", value)
        return None


def tender_from_extraction(extracted: ExtractedTender) -> TenderCreate:
    return TenderCreate(
        title=extracted.title or "RFP Document",
        client_name=extracted.client or "Client Organization",
        deadline=_parse_deadline(extracted.deadline),
        requirements=extracted.requirements or None,
        goals=extracted.goals or None,
        scope=extracted.scope or None,
        evaluation_criteria=extracted.evaluation or None,
        client_summary=extracted.client_summary or None,
        status="open",
    )
