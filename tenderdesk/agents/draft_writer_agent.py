from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from tenderdesk.agents.prompts import DRAFT_WRITER_SYSTEM_PROMPT
from tenderdesk.llm.client import GatewayError, chat_completion
from tenderdesk.models import DRAFT_WRITER_ACTIONS

logger = logging.getLogger(__name__)


def _build_prompt(
    action: str,
    current_draft: str,
    requirements: str,
    tender_info_json: str,
    target_requirement: str,
) -> str:
    if action == "generate_full":
        return f"""Generate a complete RFP draft that addresses all requirements.

TENDER INFO:
{tender_info_json}

REQUIREMENTS:
{requirements}

Create a comprehensive, well-structured draft that covers all aspects professionally."""

    if action == "improve_section":
        return f"""Improve the current draft to better address this specific requirement.

REQUIREMENT TO ADDRESS:
{target_requirement}

CURRENT DRAFT:
{current_draft}

TENDER INFO:
{tender_info_json}

Enhance the draft to better address this requirement while maintaining the existing structure and style."""

    return f"""Add a new section to the draft to address this missing requirement.

REQUIREMENT TO ADDRESS:
{target_requirement}

CURRENT DRAFT:
{current_draft}

TENDER INFO:
{tender_info_json}

Add a well-integrated section that addresses this requirement. Ensure it flows naturally with the existing content."""


def run_draft_writer(
    action: str,
    current_draft: Optional[str] = None,
    requirements: Optional[str] = None,
    tender_info: Optional[Dict[str, Any]] = None,
    target_requirement: Optional[str] = None,
) -> str:
    if action not in DRAFT_WRITER_ACTIONS:
        raise ValueError(f"Unknown draft writer action '{action}'. Use one of: {', '.join(DRAFT_WRITER_ACTIONS)}")
    if action != "generate_full" and not (target_requirement or "").strip():
        raise ValueError(f"Action '{action}' requires a target requirement")

    logger.info(
        "Draft writer agent: action=%s (draft_chars=%d, target=%r)",
        action,
        len(current_draft or ""),
        (target_requirement or "")[:80],
    )
    user_prompt = _build_prompt(
        action,
        current_draft=current_draft or "",
        requirements=requirements or "",
        tender_info_json=json.dumps(tender_info or {}, indent=2, default=str),
        target_requirement=target_requirement or "",
    )
    content = chat_completion(
        messages=[
            {"role": "system", "content": DRAFT_WRITER_SYSTEM_PROMPT},
            {"role": "user", "content": user_prompt},
        ],
    )
    if not content.strip():
        raise GatewayError("No content generated")
    logger.info("Draft writer agent: action=%s produced %d chars", action, len(content))
    return content
