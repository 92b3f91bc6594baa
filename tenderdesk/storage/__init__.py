from __future__ import annotations

from tenderdesk.storage.database import SessionLocal, engine, get_db, init_db
from tenderdesk.storage.tables import Base, Tender, TenderCollaborator, TenderDraft

__all__ = [
    "Base",
    "SessionLocal",
    "Tender",
    "TenderCollaborator",
    "TenderDraft",
    "engine",
    "get_db",
    "init_db",
]
