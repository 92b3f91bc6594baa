import pytest

from tenderdesk.models import RequirementAssessment, RequirementItem
from tenderdesk.tracking import (
    apply_assessments,
    compute_progress,
    derive_requirements,
    set_completed,
    summarize_dashboard,
)


def _items(*flags):
    """Build items from (mandatory, completed) pairs."""
    return [
        RequirementItem(id=f"REQ-{i:02d}", title=f"Requirement {i}", mandatory=m, completed=c)
        for i, (m, c) in enumerate(flags, 1)
    ]


def test_progress_two_of_five_mandatory():
    items = _items((True, True), (True, True), (True, False), (True, False), (True, False), (False, True))
    progress = compute_progress(items)
    assert progress.mandatory_completed == 2
    assert progress.mandatory_total == 5
    assert progress.mandatory_percent == 40.0
    assert progress.optional_percent == 100.0
    assert [r.id for r in progress.incomplete_mandatory] == ["REQ-03", "REQ-04", "REQ-05"]


def test_progress_with_no_requirements_is_zero():
    progress = compute_progress([])
    assert progress.mandatory_percent == 0.0
    assert progress.optional_percent == 0.0
    assert progress.incomplete_mandatory == []


def test_progress_rounds_to_one_decimal():
    progress = compute_progress(_items((True, True), (True, False), (True, False)))
    assert progress.mandatory_percent == 33.3


def test_derive_requirements_from_bullets():
    text = """- Provide 24/7 support
• Vendor should offer training
1. ISO 27001 certification

* Mobile app is nice to have
Mayor's office sign-off required"""
    items = derive_requirements(text)
    assert [i.id for i in items] == ["REQ-01", "REQ-02", "REQ-03", "REQ-04", "REQ-05"]
    assert items[0].title == "Provide 24/7 support"
    assert items[2].title == "ISO 27001 certification"
    assert [i.mandatory for i in items] == [True, False, True, False, True]
    assert not any(i.completed for i in items)


def test_derive_requirements_empty():
    assert derive_requirements("") == []
    assert derive_requirements(None) == []


def test_apply_assessments_only_touches_assessed_items():
    items = _items((True, False), (True, True), (False, False))
    assessments = [
        RequirementAssessment(requirement_id="REQ-01", is_met=True),
        RequirementAssessment(requirement_id="REQ-02", is_met=False),
    ]
    updated = apply_assessments(items, assessments)
    assert [i.completed for i in updated] == [True, False, False]
    # inputs are not mutated
    assert [i.completed for i in items] == [False, True, False]


def test_set_completed():
    items = _items((True, False), (False, False))
    updated = set_completed(items, "REQ-02", True)
    assert [i.completed for i in updated] == [False, True]
    with pytest.raises(KeyError):
        set_completed(items, "REQ-99", True)


def test_summarize_dashboard_groups_by_status():
    class _T:
        def __init__(self, status):
            self.status = status

    summary = summarize_dashboard([_T("open"), _T("running"), _T("open"), _T("closed")])
    assert summary["counts"] == {"open": 2, "running": 1, "closed": 1, "total": 4}
    assert len(summary["open"]) == 2
