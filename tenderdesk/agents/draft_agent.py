from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from tenderdesk.agents.prompts import DRAFT_SYSTEM_PROMPT, TENDER_DRAFT_SYSTEM_PROMPT
from tenderdesk.llm.client import GatewayError, chat_completion
from tenderdesk.models import RequirementItem

logger = logging.getLogger(__name__)


#function to render requirement items as a tagged bullet list
def format_requirement_lines(requirements: List[RequirementItem]) -> str:
    lines = []
    for req in requirements:
        tag = "MANDATORY" if req.mandatory else "OPTIONAL"
        line = f"- [{tag}] {req.title}"
        if req.description:
            line += f": {req.description}"
        lines.append(line)
    return "\n".join(lines)


#function to build the plain-text context block for a stored tender
def build_tender_context(tender_data: Dict[str, Any]) -> str:
    def _text(key: str) -> str:
        value = tender_data.get(key)
        return str(value) if value not in (None, "") else "N/A"

    def _json(key: str) -> str:
        return json.dumps(tender_data.get(key) or [], default=str)

    context = f"""
Tender Title: {_text("title")}
Client: {_text("client_name")}
Project: {_text("project_name")}
Deadline: {_text("deadline")}

Requirements: {_text("requirements")}
Goals: {_text("goals")}
Scope: {_text("scope")}
Evaluation Criteria: {_text("evaluation_criteria")}

Deliverables: {_json("deliverables")}
Constraints: {_json("constraints")}
Eligibility Requirements: {_json("eligibility_items")}
Win Themes: {_json("win_themes")}
"""
    return context.strip()


def generate_draft(
    requirements: List[RequirementItem],
    tender_info: Dict[str, Any],
    existing_content: Optional[str] = None,
) -> str:
    logger.info(
        "Draft agent: generating draft (requirements=%d, existing_chars=%d)",
        len(requirements),
        len(existing_content or ""),
    )
    existing_block = ""
    if existing_content:
        existing_block = f"Existing draft content to build upon:\n{existing_content}\n\n"

    user_prompt = f"""Generate an RFP draft for the following:

Tender Information:
{json.dumps(tender_info, indent=2, default=str)}

Requirements to fulfill:
{format_requirement_lines(requirements)}

{existing_block}Generate a complete, professional RFP draft that addresses all requirements. Format it with proper HTML tags for headings, paragraphs, lists, etc."""

    content = chat_completion(
        messages=[
            {"role": "system", "content": DRAFT_SYSTEM_PROMPT},
            {"role": "user", "content": user_prompt},
        ],
    )
    if not content.strip():
        raise GatewayError("No content generated")
    logger.info("Draft agent: draft generated (%d chars)", len(content))
    return content


def generate_tender_draft(tender_data: Dict[str, Any]) -> str:
    logger.info("Draft agent: generating draft for tender %r", tender_data.get("title"))
    context = build_tender_context(tender_data)
    content = chat_completion(
        messages=[
            {"role": "system", "content": TENDER_DRAFT_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": f"Generate a comprehensive RFP response draft based on this information:\n\n{context}",
            },
        ],
    )
    if not content.strip():
        raise GatewayError("No draft content generated")
    logger.info("Draft agent: tender draft generated (%d chars)", len(content))
    return content
