from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from tenderdesk.agents.prompts import MONITOR_OUTPUT_FORMAT, MONITOR_SYSTEM_PROMPT
from tenderdesk.llm.client import GatewayError, chat_completion, parse_json_object
from tenderdesk.models import MONITOR_STATUSES, MonitorAnalysis, MonitoredRequirement

logger = logging.getLogger(__name__)


def _clamp_score(value: Any) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    return max(0.0, min(100.0, score))


def _normalize_requirement(raw: Dict[str, Any]) -> MonitoredRequirement:
    status = str(raw.get("status") or "").strip().lower()
    if status not in MONITOR_STATUSES:
        status = "missing"
    suggestions = raw.get("suggestions") or ""
    if isinstance(suggestions, list):
        suggestions = "\n".join(str(s) for s in suggestions)
    return MonitoredRequirement(
        requirement=str(raw.get("requirement") or ""),
        status=status,
        coverage=_clamp_score(raw.get("coverage", 0)),
        feedback=str(raw.get("feedback") or ""),
        suggestions=str(suggestions),
    )


def normalize_monitor_analysis(data: Dict[str, Any]) -> MonitorAnalysis:
    raw_requirements = data.get("requirements", [])
    if not isinstance(raw_requirements, list):
        raw_requirements = []
    next_steps = data.get("next_steps", data.get("nextSteps", []))
    if not isinstance(next_steps, list):
        next_steps = []
    return MonitorAnalysis(
        overall_score=_clamp_score(data.get("overall_score", data.get("overallScore", 0))),
        summary=str(data.get("summary") or ""),
        requirements=[_normalize_requirement(r) for r in raw_requirements if isinstance(r, dict)],
        next_steps=[str(step) for step in next_steps if step],
    )


def monitor_requirements(
    draft_content: str,
    requirements: str,
    tender_info: Optional[Dict[str, Any]] = None,
) -> MonitorAnalysis:
    logger.info("Requirements monitor: analyzing draft (chars=%d)", len(draft_content or ""))
    analysis_prompt = f"""Analyze this RFP draft against the requirements and provide a detailed assessment.

TENDER INFO:
{json.dumps(tender_info or {}, indent=2, default=str)}

REQUIREMENTS:
{requirements or "No requirements specified"}

CURRENT DRAFT:
{draft_content or "(No content yet)"}

{MONITOR_OUTPUT_FORMAT}"""

    content = chat_completion(
        messages=[
            {"role": "system", "content": MONITOR_SYSTEM_PROMPT},
            {"role": "user", "content": analysis_prompt},
        ],
        response_format={"type": "json_object"},
    )
    try:
        data = parse_json_object(content or "{}")
    except ValueError as exc:
        logger.error("Requirements monitor: unparseable gateway reply: %s", exc)
        raise GatewayError("AI response could not be parsed") from exc

    analysis = normalize_monitor_analysis(data)
    statuses: List[str] = [r.status for r in analysis.requirements]
    logger.info(
        "Requirements monitor: score=%.1f, met=%d, partial=%d, missing=%d",
        analysis.overall_score,
        statuses.count("met"),
        statuses.count("partial"),
        statuses.count("missing"),
    )
    return analysis
