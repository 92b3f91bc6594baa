from __future__ import annotations

from tenderdesk.agents.analysis_agent import analyze_draft
from tenderdesk.agents.draft_agent import generate_draft, generate_tender_draft
from tenderdesk.agents.draft_writer_agent import run_draft_writer
from tenderdesk.agents.extraction_agent import run_extraction_agent
from tenderdesk.agents.monitor_agent import monitor_requirements

__all__ = [
    "analyze_draft",
    "generate_draft",
    "generate_tender_draft",
    "monitor_requirements",
    "run_draft_writer",
    "run_extraction_agent",
]
