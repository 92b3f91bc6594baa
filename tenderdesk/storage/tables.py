"""
Relational tables for tenders, their collaborators and saved drafts.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Tender(Base):
    """One RFP opportunity and its response lifecycle."""

    __tablename__ = "tenders"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String, nullable=False, index=True)

    # Identification
    title = Column(String, nullable=False)
    client_name = Column(String, nullable=False)
    project_name = Column(String)
    subtitle = Column(String)
    contact = Column(String)
    status = Column(String, nullable=False, default="open", index=True)
    priority = Column(String)
    deadline = Column(Date)
    owner = Column(String)

    # RFP content
    requirements = Column(Text)
    goals = Column(Text)
    scope = Column(Text)
    evaluation_criteria = Column(Text)
    client_summary = Column(Text)
    executive_summary_ask = Column(Text)
    strategic_context = Column(Text)
    priorities = Column(Text)
    mandate = Column(Text)
    procurement = Column(Text)

    # Go / no-go annotations
    company_fit_score = Column(Integer)
    ai_confidence = Column(Float)
    progress = Column(Integer)
    capability = Column(String)
    compliance = Column(String)
    profitability = Column(String)
    delivery_window = Column(String)
    primary_dept = Column(String)
    primary_dept_rationale = Column(Text)
    co_involve = Column(String)
    past_win = Column(String)
    target_gm = Column(String)

    # Client snapshot
    budget = Column(String)
    budget_type = Column(String)
    agency = Column(String)
    industry = Column(String)
    company_size = Column(String)

    # Free-form JSON blobs
    risks = Column(JSON)
    why_fits = Column(JSON)
    deliverables = Column(JSON)
    constraints = Column(JSON)
    eligibility_items = Column(JSON)
    evaluation_weights = Column(JSON)
    gaps = Column(JSON)
    past_work = Column(JSON)
    product_requirements = Column(JSON)
    required_attachments = Column(JSON)
    win_themes = Column(JSON)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    collaborators = relationship(
        "TenderCollaborator",
        back_populates="tender",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    draft = relationship(
        "TenderDraft",
        back_populates="tender",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class TenderCollaborator(Base):
    """A user a tender has been shared with."""

    __tablename__ = "tender_collaborators"
    __table_args__ = (UniqueConstraint("tender_id", "user_id", name="uq_tender_collaborator"),)

    id = Column(String(36), primary_key=True, default=_new_id)
    tender_id = Column(String(36), ForeignKey("tenders.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    invited_by = Column(String, nullable=False)
    role = Column(String, nullable=False, default="editor")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    tender = relationship("Tender", back_populates="collaborators")


class TenderDraft(Base):
    """Last saved snapshot of a tender's response draft."""

    __tablename__ = "tender_drafts"

    tender_id = Column(String(36), ForeignKey("tenders.id", ondelete="CASCADE"), primary_key=True)
    content = Column(Text, nullable=False, default="")
    updated_by = Column(String)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    tender = relationship("Tender", back_populates="draft")
