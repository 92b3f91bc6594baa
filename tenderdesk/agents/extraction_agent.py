from __future__ import annotations

import functools
import logging
from datetime import date, timedelta
from typing import Any, Dict

from tenderdesk.agents.prompts import EXTRACTION_SYSTEM_PROMPT
from tenderdesk.llm.client import chat_completion, parse_json_object
from tenderdesk.models import ExtractedTender


logger = logging.getLogger(__name__)
MAX_DOCUMENT_CHARS = 15000


def _fallback_extraction() -> Dict[str, Any]:
    return {
        "title": "RFP Document",
        "client": "Client Organization",
        "deadline": (date.today() + timedelta(days=30)).isoformat(),
        "requirements": "- Please review the uploaded document\n- Key requirements will be extracted from the PDF",
        "goals": "Document analysis in progress",
        "scope": "Full scope will be determined after document review",
        "evaluation": "- Technical approach\n- Team experience\n- Cost effectiveness",
        "client_summary": "Client information will be extracted from the RFP document.",
    }


@functools.lru_cache(maxsize=128)
def _run_extraction_agent_cached(document_text: str) -> ExtractedTender:
    doc_text = document_text[:MAX_DOCUMENT_CHARS]
    user_prompt = f"Analyze this RFP document and extract key information:\n\n{doc_text}"
    logger.info("Extraction agent: processing (input_chars=%d, sent_chars=%d)", len(document_text), len(doc_text))
    content = chat_completion(
        messages=[
            {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
            {"role": "user", "content": user_prompt},
        ],
        response_format={"type": "json_object"},
    )
    try:
        data = parse_json_object(content)
    except ValueError:
        logger.warning("Extraction agent: could not parse gateway reply, using fallback extraction")
        data = _fallback_extraction()

    # some models answer with camelCase keys
    if "clientSummary" in data and "client_summary" not in data:
        data["client_summary"] = data.pop("clientSummary")
    result = ExtractedTender(**{k: v for k, v in data.items() if k in ExtractedTender.model_fields})
    logger.info(
        "Extraction agent: finished (title=%r, client=%r, deadline=%s)",
        result.title,
        result.client,
        result.deadline or "n/a",
    )
    return result


def run_extraction_agent(document_text: str) -> ExtractedTender:
    cache_info = _run_extraction_agent_cached.cache_info()
    logger.info(
        "Extraction agent: starting (input_chars=%d, cache_hits=%d, cache_misses=%d, cache_size=%d/%d)",
        len(document_text),
        cache_info.hits,
        cache_info.misses,
        cache_info.currsize,
        cache_info.maxsize,
    )
    result = _run_extraction_agent_cached(document_text)
    new_cache_info = _run_extraction_agent_cached.cache_info()
    if new_cache_info.hits > cache_info.hits:
        logger.info("Extraction agent: cache HIT - returned cached result")
    else:
        logger.info("Extraction agent: cache MISS - processed new request")
    return result.model_copy()
