from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tenderdesk.models import CollaboratorCreate, RequirementItem, TenderCreate, TenderUpdate
from tenderdesk.storage.seed_data import SAMPLE_TENDERS
from tenderdesk.storage.tables import Tender, TenderCollaborator, TenderDraft
from tenderdesk.tracking import compute_progress

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "client_name", "status")


class RepositoryError(Exception):
    pass


class NotFoundError(RepositoryError):
    pass


class TenderNotFoundError(NotFoundError):
    def __init__(self, tender_id: str):
        super().__init__(f"Tender {tender_id} not found")
        self.tender_id = tender_id


class CollaboratorNotFoundError(NotFoundError):
    pass


class DraftNotFoundError(NotFoundError):
    pass


class TenderAccessError(RepositoryError):
    pass


class DuplicateCollaboratorError(RepositoryError):
    pass


def _is_collaborator(db: Session, tender_id: str, user_id: str) -> bool:
    stmt = select(TenderCollaborator.id).where(
        TenderCollaborator.tender_id == tender_id,
        TenderCollaborator.user_id == user_id,
    )
    return db.execute(stmt).first() is not None


def get_tender(db: Session, tender_id: str, user_id: str) -> Tender:
    tender = db.get(Tender, tender_id)
    if tender is None:
        raise TenderNotFoundError(tender_id)
    if tender.user_id != user_id and not _is_collaborator(db, tender_id, user_id):
        raise TenderAccessError("You do not have access to this tender")
    return tender


def get_owned_tender(db: Session, tender_id: str, user_id: str) -> Tender:
    tender = db.get(Tender, tender_id)
    if tender is None:
        raise TenderNotFoundError(tender_id)
    if tender.user_id != user_id:
        raise TenderAccessError("Only the tender owner can perform this action")
    return tender


def tender_exists(db: Session, tender_id: str) -> bool:
    return db.get(Tender, tender_id) is not None


def create_tender(db: Session, user_id: str, data: TenderCreate) -> Tender:
    tender = Tender(user_id=user_id, **data.model_dump())
    db.add(tender)
    db.commit()
    db.refresh(tender)
    logger.info("Created tender %s (%r) for user %s", tender.id, tender.title, user_id)
    return tender


def list_tenders(db: Session, user_id: str, status: Optional[str] = None) -> List[Tender]:
    shared_ids = select(TenderCollaborator.tender_id).where(TenderCollaborator.user_id == user_id)
    stmt = select(Tender).where(or_(Tender.user_id == user_id, Tender.id.in_(shared_ids)))
    if status:
        stmt = stmt.where(Tender.status == status)
    stmt = stmt.order_by(Tender.created_at.desc())
    return list(db.execute(stmt).scalars().all())


def update_tender(db: Session, tender_id: str, user_id: str, changes: TenderUpdate) -> Tender:
    tender = get_tender(db, tender_id, user_id)
    values = changes.model_dump(exclude_unset=True)
    for field in REQUIRED_FIELDS:
        if field in values and (values[field] is None or not str(values[field]).strip()):
            raise ValueError(f"'{field}' cannot be cleared")

    checklist = None
    if "product_requirements" in values:
        checklist = _parse_checklist(values.pop("product_requirements"))
        values.pop("progress", None)

    for field, value in values.items():
        setattr(tender, field, value)
    if checklist is not None:
        # commits, and keeps progress in step with the new checklist
        set_requirement_checklist(db, tender, checklist)
    else:
        db.commit()
        db.refresh(tender)
    logger.info("Updated tender %s fields=%s", tender_id, sorted(changes.model_dump(exclude_unset=True)))
    return tender


def delete_tender(db: Session, tender_id: str, user_id: str) -> None:
    tender = get_owned_tender(db, tender_id, user_id)
    db.delete(tender)
    db.commit()
    logger.info("Deleted tender %s", tender_id)


def add_collaborator(db: Session, tender_id: str, user_id: str, data: CollaboratorCreate) -> TenderCollaborator:
    tender = get_owned_tender(db, tender_id, user_id)
    if data.user_id == tender.user_id:
        raise ValueError("The tender owner cannot be added as a collaborator")
    if _is_collaborator(db, tender_id, data.user_id):
        raise DuplicateCollaboratorError("This user is already a collaborator")

    collaborator = TenderCollaborator(
        tender_id=tender_id,
        user_id=data.user_id,
        invited_by=user_id,
        role=data.role,
    )
    db.add(collaborator)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateCollaboratorError("This user is already a collaborator") from exc
    db.refresh(collaborator)
    logger.info("Shared tender %s with user %s as %s", tender_id, data.user_id, data.role)
    return collaborator


def list_collaborators(db: Session, tender_id: str, user_id: str) -> List[TenderCollaborator]:
    get_tender(db, tender_id, user_id)
    stmt = (
        select(TenderCollaborator)
        .where(TenderCollaborator.tender_id == tender_id)
        .order_by(TenderCollaborator.created_at)
    )
    return list(db.execute(stmt).scalars().all())


def remove_collaborator(db: Session, tender_id: str, collaborator_id: str, user_id: str) -> None:
    get_owned_tender(db, tender_id, user_id)
    collaborator = db.get(TenderCollaborator, collaborator_id)
    if collaborator is None or collaborator.tender_id != tender_id:
        raise CollaboratorNotFoundError(f"Collaborator {collaborator_id} not found")
    db.delete(collaborator)
    db.commit()
    logger.info("Removed collaborator %s from tender %s", collaborator_id, tender_id)


def get_draft(db: Session, tender_id: str, user_id: str) -> TenderDraft:
    get_tender(db, tender_id, user_id)
    draft = db.get(TenderDraft, tender_id)
    if draft is None:
        raise DraftNotFoundError(f"No draft saved for tender {tender_id}")
    return draft


def save_draft(db: Session, tender_id: str, user_id: str, content: str) -> TenderDraft:
    get_tender(db, tender_id, user_id)
    draft = db.get(TenderDraft, tender_id)
    if draft is None:
        draft = TenderDraft(tender_id=tender_id)
        db.add(draft)
    draft.content = content
    draft.updated_by = user_id
    db.commit()
    db.refresh(draft)
    logger.info("Saved draft for tender %s (%d chars)", tender_id, len(content))
    return draft


def get_checklist(tender: Tender) -> List[RequirementItem]:
    raw_items = tender.product_requirements
    if not isinstance(raw_items, list):
        return []
    items: List[RequirementItem] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        try:
            items.append(RequirementItem(**raw))
        except ValidationError:
            logger.warning("Skipping malformed checklist entry on tender %s: %r", tender.id, raw)
    return items


#function to validate a client-supplied checklist before it replaces the stored one
def _parse_checklist(raw_items) -> List[RequirementItem]:
    if raw_items is None:
        return []
    if not isinstance(raw_items, list):
        raise ValueError("'product_requirements' must be a list of checklist items")
    items: List[RequirementItem] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            raise ValueError("Each checklist item must be an object with 'id' and 'title'")
        try:
            items.append(RequirementItem(**raw))
        except ValidationError as exc:
            raise ValueError(f"Invalid checklist item {raw.get('id')!r}: {exc.errors()[0]['msg']}") from exc
    return items


def set_requirement_checklist(db: Session, tender: Tender, items: List[RequirementItem]) -> Tender:
    # JSON columns are not mutation-tracked, so always assign a new list
    tender.product_requirements = [item.model_dump() for item in items]
    tender.progress = int(round(compute_progress(items).mandatory_percent))
    db.commit()
    db.refresh(tender)
    logger.info("Stored %d checklist item(s) on tender %s (progress=%s%%)", len(items), tender.id, tender.progress)
    return tender


def seed_sample_tenders(db: Session, user_id: str) -> List[Tender]:
    tenders = [Tender(user_id=user_id, **sample) for sample in SAMPLE_TENDERS]
    db.add_all(tenders)
    db.commit()
    for tender in tenders:
        db.refresh(tender)
    logger.info("Seeded %d sample tenders for user %s", len(tenders), user_id)
    return tenders
