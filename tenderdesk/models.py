from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TENDER_STATUSES = ("open", "running", "closed")
MONITOR_STATUSES = ("met", "partial", "missing")
DRAFT_WRITER_ACTIONS = ("generate_full", "improve_section", "add_section")


def _join_bullets(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        lines = []
        for item in value:
            text = str(item).strip()
            if not text:
                continue
            lines.append(text if text.startswith(("-", "•", "*")) else f"- {text}")
        return "\n".join(lines)
    return str(value)


class ExtractedTender(BaseModel):
    title: str = Field(default="", description="Professional title for the tender")
    client: str = Field(default="", description="Client or issuing organisation")
    deadline: str = Field(default="", description="Submission deadline, YYYY-MM-DD")
    requirements: str = Field(default="", description="Key requirements as bullet points")
    goals: str = Field(default="", description="Main objectives of the project")
    scope: str = Field(default="", description="Scope of work")
    evaluation: str = Field(default="", description="Evaluation criteria, with weights if given")
    client_summary: str = Field(default="", description="Two to three sentence client summary")

    @field_validator(
        "title", "client", "deadline", "requirements", "goals", "scope", "evaluation", "client_summary",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _join_bullets(value)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


class RequirementItem(BaseModel):
    id: str = Field(description="Checklist identifier (e.g., 'REQ-01')")
    title: str = Field(description="Short requirement statement")
    mandatory: bool = Field(default=True, description="Whether the requirement is a must-have")
    completed: bool = Field(default=False, description="Whether the draft covers the requirement")
    description: Optional[str] = Field(default=None, description="Optional longer explanation")


class RequirementAssessment(BaseModel):
    requirement_id: str
    is_met: bool
    explanation: str = ""
    suggestion: str = ""


class MonitoredRequirement(BaseModel):
    requirement: str
    status: str = "missing"
    coverage: float = Field(default=0.0, ge=0.0, le=100.0)
    feedback: str = ""
    suggestions: str = ""


class MonitorAnalysis(BaseModel):
    overall_score: float = Field(default=0.0, ge=0.0, le=100.0)
    summary: str = ""
    requirements: List[MonitoredRequirement] = Field(default_factory=list)
    next_steps: List[str] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


class RequirementProgress(BaseModel):
    mandatory_completed: int = 0
    mandatory_total: int = 0
    mandatory_percent: float = 0.0
    optional_completed: int = 0
    optional_total: int = 0
    optional_percent: float = 0.0
    incomplete_mandatory: List[RequirementItem] = Field(default_factory=list)


class _TenderFields(BaseModel):
    title: Optional[str] = None
    client_name: Optional[str] = None
    project_name: Optional[str] = None
    subtitle: Optional[str] = None
    contact: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    deadline: Optional[date] = None
    owner: Optional[str] = None

    requirements: Optional[str] = None
    goals: Optional[str] = None
    scope: Optional[str] = None
    evaluation_criteria: Optional[str] = None
    client_summary: Optional[str] = None
    executive_summary_ask: Optional[str] = None
    strategic_context: Optional[str] = None
    priorities: Optional[str] = None
    mandate: Optional[str] = None
    procurement: Optional[str] = None

    company_fit_score: Optional[int] = Field(default=None, ge=0, le=100)
    ai_confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    capability: Optional[str] = None
    compliance: Optional[str] = None
    profitability: Optional[str] = None
    delivery_window: Optional[str] = None
    primary_dept: Optional[str] = None
    primary_dept_rationale: Optional[str] = None
    co_involve: Optional[str] = None
    past_win: Optional[str] = None
    target_gm: Optional[str] = None

    budget: Optional[str] = None
    budget_type: Optional[str] = None
    agency: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None

    risks: Optional[Any] = None
    why_fits: Optional[Any] = None
    deliverables: Optional[Any] = None
    constraints: Optional[Any] = None
    eligibility_items: Optional[Any] = None
    evaluation_weights: Optional[Any] = None
    gaps: Optional[Any] = None
    past_work: Optional[Any] = None
    product_requirements: Optional[Any] = None
    required_attachments: Optional[Any] = None
    win_themes: Optional[Any] = None

    @field_validator("status")
    @classmethod
    def _check_status(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip().lower()
        if value not in TENDER_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(TENDER_STATUSES)}")
        return value


class TenderCreate(_TenderFields):
    title: str = Field(min_length=1)
    client_name: str = Field(min_length=1)
    status: str = "open"


class TenderUpdate(_TenderFields):
    title: Optional[str] = Field(default=None, min_length=1)
    client_name: Optional[str] = Field(default=None, min_length=1)


class TenderRead(TenderCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    created_at: datetime
    updated_at: datetime


class CollaboratorCreate(BaseModel):
    user_id: str = Field(min_length=1)
    role: str = "editor"


class CollaboratorRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tender_id: str
    user_id: str
    invited_by: str
    role: str
    created_at: datetime


class DraftUpdate(BaseModel):
    content: str


class DraftRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tender_id: str
    content: str
    updated_by: Optional[str] = None
    updated_at: datetime


class ChecklistResponse(BaseModel):
    requirements: List[RequirementItem]
    progress: RequirementProgress
