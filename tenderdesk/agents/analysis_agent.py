from __future__ import annotations

import logging
from typing import List

from tenderdesk.agents.prompts import ANALYSIS_SYSTEM_PROMPT, ANALYSIS_TOOL
from tenderdesk.llm.client import chat_completion_tool_call
from tenderdesk.models import RequirementAssessment, RequirementItem

logger = logging.getLogger(__name__)


def _format_requirements(requirements: List[RequirementItem]) -> str:
    return "\n".join(
        f"- [{'MANDATORY' if r.mandatory else 'OPTIONAL'}] {r.id}: {r.title}"
        for r in requirements
    )


def analyze_draft(draft_content: str, requirements: List[RequirementItem]) -> List[RequirementAssessment]:
    logger.info(
        "Analysis agent: checking draft (chars=%d) against %d requirement(s)",
        len(draft_content or ""),
        len(requirements),
    )
    if not requirements:
        return []

    user_prompt = f"""Draft Content:
{draft_content or "No content yet"}

Requirements to check:
{_format_requirements(requirements)}

Analyze the draft and report your assessment for every requirement."""

    arguments = chat_completion_tool_call(
        messages=[
            {"role": "system", "content": ANALYSIS_SYSTEM_PROMPT},
            {"role": "user", "content": user_prompt},
        ],
        tool=ANALYSIS_TOOL,
    )

    known_ids = {r.id for r in requirements}
    raw_items = arguments.get("analysis", [])
    if not isinstance(raw_items, list):
        raw_items = []

    assessments: List[RequirementAssessment] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        requirement_id = str(raw.get("requirementId") or raw.get("requirement_id") or "").strip()
        if requirement_id not in known_ids:
            logger.warning("Analysis agent: dropping assessment for unknown requirement %r", requirement_id)
            continue
        assessments.append(
            RequirementAssessment(
                requirement_id=requirement_id,
                is_met=bool(raw.get("isMet", raw.get("is_met", False))),
                explanation=str(raw.get("explanation") or ""),
                suggestion=str(raw.get("suggestion") or ""),
            )
        )

    met = sum(1 for a in assessments if a.is_met)
    logger.info("Analysis agent: %d/%d assessed requirement(s) met", met, len(assessments))
    return assessments
