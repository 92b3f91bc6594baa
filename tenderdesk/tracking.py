from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List

from tenderdesk.models import (
    TENDER_STATUSES,
    RequirementAssessment,
    RequirementItem,
    RequirementProgress,
)

logger = logging.getLogger(__name__)

BULLET_PATTERN = re.compile(r"^\s*(?:[-•*·]|\d+[.)])\s*")
OPTIONAL_MARKERS = ("should", "may", "optional", "nice to have", "preferred", "desirable")


def _percent(done: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return round(done * 100.0 / total, 1)


def compute_progress(items: Iterable[RequirementItem]) -> RequirementProgress:
    items = list(items)
    mandatory = [r for r in items if r.mandatory]
    optional = [r for r in items if not r.mandatory]
    mandatory_done = sum(1 for r in mandatory if r.completed)
    optional_done = sum(1 for r in optional if r.completed)
    return RequirementProgress(
        mandatory_completed=mandatory_done,
        mandatory_total=len(mandatory),
        mandatory_percent=_percent(mandatory_done, len(mandatory)),
        optional_completed=optional_done,
        optional_total=len(optional),
        optional_percent=_percent(optional_done, len(optional)),
        incomplete_mandatory=[r for r in mandatory if not r.completed],
    )


def _is_optional(line: str) -> bool:
    lowered = line.lower()
    return any(re.search(rf"\b{re.escape(marker)}\b", lowered) for marker in OPTIONAL_MARKERS)


#function to turn the free-text requirements field into checklist items
def derive_requirements(text: str) -> List[RequirementItem]:
    items: List[RequirementItem] = []
    for raw_line in (text or "").splitlines():
        line = BULLET_PATTERN.sub("", raw_line).strip()
        if not line:
            continue
        items.append(
            RequirementItem(
                id=f"REQ-{len(items) + 1:02d}",
                title=line,
                mandatory=not _is_optional(line),
            )
        )
    logger.info(
        "Derived %d requirement(s) (%d mandatory)",
        len(items),
        sum(1 for r in items if r.mandatory),
    )
    return items


def apply_assessments(
    items: List[RequirementItem],
    assessments: Iterable[RequirementAssessment],
) -> List[RequirementItem]:
    met_by_id = {a.requirement_id: a.is_met for a in assessments}
    return [
        item.model_copy(update={"completed": met_by_id[item.id]}) if item.id in met_by_id else item
        for item in items
    ]


def set_completed(items: List[RequirementItem], requirement_id: str, completed: bool) -> List[RequirementItem]:
    if not any(item.id == requirement_id for item in items):
        raise KeyError(requirement_id)
    return [
        item.model_copy(update={"completed": completed}) if item.id == requirement_id else item
        for item in items
    ]


def summarize_dashboard(tenders: Iterable[Any]) -> Dict[str, Any]:
    groups: Dict[str, List[Any]] = {status: [] for status in TENDER_STATUSES}
    for tender in tenders:
        groups.setdefault(tender.status, []).append(tender)
    counts = {status: len(members) for status, members in groups.items()}
    counts["total"] = sum(counts.values())
    return {**groups, "counts": counts}
