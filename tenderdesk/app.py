from __future__ import annotations

import asyncio
import logging
import re
import tempfile
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI, File, Header, HTTPException, Query, UploadFile, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from tenderdesk import config
from tenderdesk.agents import (
    analyze_draft,
    generate_draft,
    generate_tender_draft,
    monitor_requirements,
    run_draft_writer,
)
from tenderdesk.collab import manager, room_name
from tenderdesk.document_formatter import draft_to_html_document, html_to_docx
from tenderdesk.llm.client import GatewayError
from tenderdesk.models import (
    TENDER_STATUSES,
    ChecklistResponse,
    CollaboratorCreate,
    CollaboratorRead,
    DraftRead,
    DraftUpdate,
    ExtractedTender,
    RequirementItem,
    TenderCreate,
    TenderRead,
    TenderUpdate,
)
from tenderdesk.pipeline.rfp_pipeline import run_rfp_intake, tender_from_extraction
from tenderdesk.pipeline.text_extraction import SUPPORTED_FILE_TYPES, extract_text_from_file
from tenderdesk.storage import repository
from tenderdesk.storage.database import get_db, init_db
from tenderdesk.storage.tables import Tender
from tenderdesk.tracking import (
    apply_assessments,
    compute_progress,
    derive_requirements,
    set_completed,
    summarize_dashboard,
)


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logging.basicConfig(level=config.LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

MIN_ANALYSIS_CHARS = 50


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database ready (%s)", config.DATABASE_URL.split("://", 1)[0])
    yield


app = FastAPI(title="Tender Workspace Backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request payload", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(GatewayError)
async def gateway_error_handler(request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(repository.RepositoryError)
async def repository_error_handler(request, exc: repository.RepositoryError) -> JSONResponse:
    if isinstance(exc, repository.NotFoundError):
        status_code = 404
    elif isinstance(exc, repository.TenderAccessError):
        status_code = 403
    elif isinstance(exc, repository.DuplicateCollaboratorError):
        status_code = 409
    else:
        status_code = 400
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


#function to resolve the caller's user id issued by the auth provider
def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id.strip()


#function to run an agent call and turn unexpected failures into a 500 error body
def _call_agent(name: str, func: Callable[..., Any], **kwargs: Any) -> Any:
    try:
        return func(**kwargs)
    except GatewayError:
        raise
    except ValueError as exc:
        logger.warning("%s rejected request: %s", name, exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("%s failed: %s", name, exc)
        raise HTTPException(status_code=500, detail=str(exc) or f"{name} failed") from exc


def _tender_payload(tender: Tender) -> Dict[str, Any]:
    return TenderRead.model_validate(tender).model_dump(mode="json")


def _checklist_payload(items: List[RequirementItem]) -> Dict[str, Any]:
    return ChecklistResponse(requirements=items, progress=compute_progress(items)).model_dump()


def _ensure_checklist(db: Session, tender: Tender) -> List[RequirementItem]:
    items = repository.get_checklist(tender)
    if not items and tender.requirements:
        items = derive_requirements(tender.requirements)
        repository.set_requirement_checklist(db, tender, items)
    return items


@app.get("/health")
async def health() -> Dict[str, Any]:
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# RFP intake
# ---------------------------------------------------------------------------

#function to extract structured tender fields from an uploaded RFP document
@app.post("/extract-rfp")
async def extract_rfp(file: UploadFile = File(...)) -> Dict[str, Any]:
    request_id = str(uuid.uuid4())
    filename = file.filename or "upload"
    suffix = Path(filename).suffix.lower()
    logger.info("REQUEST %s: /extract-rfp file=%s", request_id, filename)

    if suffix not in SUPPORTED_FILE_TYPES:
        logger.warning("REQUEST %s: unsupported file type %s", request_id, suffix)
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type '{suffix}'. Please upload: PDF, DOCX or TXT.",
        )

    loop = asyncio.get_running_loop()
    with tempfile.TemporaryDirectory(prefix="tenderdesk-") as tmp_dir:
        temp_path = Path(tmp_dir) / f"{request_id}{suffix}"
        bytes_written = 0
        with open(temp_path, "wb") as f:
            while True:
                chunk = await file.read(2 * 1024 * 1024)
                if not chunk:
                    break
                f.write(chunk)
                bytes_written += len(chunk)
        logger.info("REQUEST %s: received %s (%d bytes)", request_id, filename, bytes_written)

        try:
            text = await loop.run_in_executor(None, extract_text_from_file, temp_path)
        except Exception as exc:
            logger.exception("REQUEST %s: failed to extract text from %s: %s", request_id, filename, exc)
            raise HTTPException(
                status_code=400,
                detail="Unable to extract text from the document. Please ensure it is not encrypted.",
            ) from exc

    if not text.strip():
        logger.warning("REQUEST %s: no text extracted", request_id)
        raise HTTPException(status_code=400, detail="No text could be extracted from the uploaded file.")

    extracted = await loop.run_in_executor(
        None, lambda: _call_agent("Extraction", run_rfp_intake, rfp_text=text, request_id=request_id)
    )
    return {"success": True, "data": extracted.to_dict()}


#function to publish reviewed extraction output as a new tender
@app.post("/tenders/from-extraction", status_code=201)
def create_tender_from_extraction(
    extracted: ExtractedTender,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    tender = repository.create_tender(db, user_id, tender_from_extraction(extracted))
    return _tender_payload(tender)


# ---------------------------------------------------------------------------
# Stateless AI handlers
# ---------------------------------------------------------------------------

class AnalyzeDraftRequest(BaseModel):
    draft_content: str = ""
    requirements: List[RequirementItem] = Field(default_factory=list)


class GenerateDraftRequest(BaseModel):
    requirements: List[RequirementItem] = Field(default_factory=list)
    tender_info: Dict[str, Any] = Field(default_factory=dict)
    existing_content: Optional[str] = None


class GenerateRfpDraftRequest(BaseModel):
    tender_data: Dict[str, Any]


class DraftWriterRequest(BaseModel):
    action: str
    current_draft: Optional[str] = None
    requirements: Optional[str] = None
    tender_info: Optional[Dict[str, Any]] = None
    target_requirement: Optional[str] = None


class RequirementsMonitorRequest(BaseModel):
    draft_content: str = ""
    requirements: str = ""
    tender_info: Dict[str, Any] = Field(default_factory=dict)


@app.post("/analyze-draft")
def analyze_draft_endpoint(req: AnalyzeDraftRequest) -> Dict[str, Any]:
    logger.info("Analyze draft endpoint called (draft_chars=%d, requirements=%d)",
                len(req.draft_content), len(req.requirements))
    assessments = _call_agent(
        "Draft analysis", analyze_draft, draft_content=req.draft_content, requirements=req.requirements
    )
    return {"analysis": [a.model_dump() for a in assessments]}


@app.post("/generate-draft")
def generate_draft_endpoint(req: GenerateDraftRequest) -> Dict[str, Any]:
    logger.info("Generate draft endpoint called (requirements=%d)", len(req.requirements))
    content = _call_agent(
        "Draft generation",
        generate_draft,
        requirements=req.requirements,
        tender_info=req.tender_info,
        existing_content=req.existing_content,
    )
    return {"content": content}


@app.post("/generate-rfp-draft")
def generate_rfp_draft_endpoint(req: GenerateRfpDraftRequest) -> Dict[str, Any]:
    logger.info("Generate RFP draft endpoint called (title=%r)", req.tender_data.get("title"))
    draft = _call_agent("Tender draft generation", generate_tender_draft, tender_data=req.tender_data)
    return {"draft": draft}


@app.post("/draft-writer-agent")
def draft_writer_endpoint(req: DraftWriterRequest) -> Dict[str, Any]:
    logger.info("Draft writer endpoint called (action=%s)", req.action)
    content = _call_agent(
        "Draft writer",
        run_draft_writer,
        action=req.action,
        current_draft=req.current_draft,
        requirements=req.requirements,
        tender_info=req.tender_info,
        target_requirement=req.target_requirement,
    )
    return {"content": content}


@app.post("/requirements-monitor")
def requirements_monitor_endpoint(req: RequirementsMonitorRequest) -> Dict[str, Any]:
    logger.info("Requirements monitor endpoint called (draft_chars=%d)", len(req.draft_content))
    analysis = _call_agent(
        "Requirements monitor",
        monitor_requirements,
        draft_content=req.draft_content,
        requirements=req.requirements,
        tender_info=req.tender_info,
    )
    return {"analysis": analysis.to_dict()}


# ---------------------------------------------------------------------------
# Tenders
# ---------------------------------------------------------------------------

@app.post("/seed-sample-tenders")
def seed_sample_tenders_endpoint(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    tenders = repository.seed_sample_tenders(db, user_id)
    return {"success": True, "tenders": [_tender_payload(t) for t in tenders]}


@app.get("/tenders")
def list_tenders_endpoint(
    status: Optional[str] = Query(default=None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> List[Dict[str, Any]]:
    if status is not None and status not in TENDER_STATUSES:
        raise HTTPException(status_code=400, detail=f"status must be one of: {', '.join(TENDER_STATUSES)}")
    return [_tender_payload(t) for t in repository.list_tenders(db, user_id, status=status)]


@app.post("/tenders", status_code=201)
def create_tender_endpoint(
    data: TenderCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return _tender_payload(repository.create_tender(db, user_id, data))


@app.get("/tenders/{tender_id}")
def get_tender_endpoint(
    tender_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return _tender_payload(repository.get_tender(db, tender_id, user_id))


@app.patch("/tenders/{tender_id}")
def update_tender_endpoint(
    tender_id: str,
    changes: TenderUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    try:
        tender = repository.update_tender(db, tender_id, user_id, changes)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _tender_payload(tender)


@app.delete("/tenders/{tender_id}", status_code=204)
def delete_tender_endpoint(
    tender_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Response:
    repository.delete_tender(db, tender_id, user_id)
    return Response(status_code=204)


@app.get("/dashboard")
def dashboard_endpoint(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    summary = summarize_dashboard(repository.list_tenders(db, user_id))
    return {
        key: value if key == "counts" else [_tender_payload(t) for t in value]
        for key, value in summary.items()
    }


# ---------------------------------------------------------------------------
# Sharing
# ---------------------------------------------------------------------------

@app.get("/tenders/{tender_id}/collaborators")
def list_collaborators_endpoint(
    tender_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> List[Dict[str, Any]]:
    collaborators = repository.list_collaborators(db, tender_id, user_id)
    return [CollaboratorRead.model_validate(c).model_dump(mode="json") for c in collaborators]


@app.post("/tenders/{tender_id}/collaborators", status_code=201)
def add_collaborator_endpoint(
    tender_id: str,
    data: CollaboratorCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    try:
        collaborator = repository.add_collaborator(db, tender_id, user_id, data)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return CollaboratorRead.model_validate(collaborator).model_dump(mode="json")


@app.delete("/tenders/{tender_id}/collaborators/{collaborator_id}", status_code=204)
def remove_collaborator_endpoint(
    tender_id: str,
    collaborator_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Response:
    repository.remove_collaborator(db, tender_id, collaborator_id, user_id)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Drafts
# ---------------------------------------------------------------------------

@app.get("/tenders/{tender_id}/draft")
def get_draft_endpoint(
    tender_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    draft = repository.get_draft(db, tender_id, user_id)
    return DraftRead.model_validate(draft).model_dump(mode="json")


@app.put("/tenders/{tender_id}/draft")
def save_draft_endpoint(
    tender_id: str,
    data: DraftUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    draft = repository.save_draft(db, tender_id, user_id, data.content)
    return DraftRead.model_validate(draft).model_dump(mode="json")


#function to download the saved draft as a Word or HTML document
@app.get("/tenders/{tender_id}/draft/export")
def export_draft_endpoint(
    tender_id: str,
    format: str = Query(default="docx"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Response:
    if format not in ("docx", "html"):
        raise HTTPException(status_code=400, detail="Invalid format: choose docx or html")
    draft = repository.get_draft(db, tender_id, user_id)
    tender = draft.tender
    slug = re.sub(r"[^a-z0-9]+", "-", (tender.title or "draft").lower()).strip("-") or "draft"

    if format == "docx":
        try:
            content = html_to_docx(draft.content, title=tender.title)
        except Exception as exc:
            logger.exception("DOCX export failed for tender %s: %s", tender_id, exc)
            raise HTTPException(status_code=500, detail="Failed to generate DOCX") from exc
        media_type = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    else:
        content = draft_to_html_document(draft.content, title=tender.title).encode("utf-8")
        media_type = "text/html; charset=utf-8"

    logger.info("Exported draft for tender %s as %s (%d bytes)", tender_id, format, len(content))
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{slug}.{format}"'},
    )


# ---------------------------------------------------------------------------
# Requirement tracking
# ---------------------------------------------------------------------------

class RequirementToggleRequest(BaseModel):
    completed: bool


class TenderAnalysisRequest(BaseModel):
    draft_content: Optional[str] = None


def _resolve_draft_content(tender: Tender, draft_content: Optional[str]) -> str:
    if draft_content is not None:
        return draft_content
    return tender.draft.content if tender.draft else ""


@app.get("/tenders/{tender_id}/requirements")
def get_requirements_endpoint(
    tender_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    tender = repository.get_tender(db, tender_id, user_id)
    return _checklist_payload(_ensure_checklist(db, tender))


@app.post("/tenders/{tender_id}/requirements/derive")
def derive_requirements_endpoint(
    tender_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    tender = repository.get_tender(db, tender_id, user_id)
    items = derive_requirements(tender.requirements or "")
    repository.set_requirement_checklist(db, tender, items)
    return _checklist_payload(items)


@app.patch("/tenders/{tender_id}/requirements/{requirement_id}")
def toggle_requirement_endpoint(
    tender_id: str,
    requirement_id: str,
    req: RequirementToggleRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    tender = repository.get_tender(db, tender_id, user_id)
    try:
        items = set_completed(_ensure_checklist(db, tender), requirement_id, req.completed)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Requirement {requirement_id} not found") from exc
    repository.set_requirement_checklist(db, tender, items)
    return _checklist_payload(items)


#function to check the draft against the tender checklist and record which requirements are met
@app.post("/tenders/{tender_id}/analyze-draft")
def analyze_tender_draft_endpoint(
    tender_id: str,
    req: TenderAnalysisRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    tender = repository.get_tender(db, tender_id, user_id)
    items = _ensure_checklist(db, tender)
    draft_content = _resolve_draft_content(tender, req.draft_content)

    if len(draft_content.strip()) < MIN_ANALYSIS_CHARS:
        logger.info("Tender %s: draft too short for analysis (%d chars)", tender_id, len(draft_content.strip()))
        return {"analysis": [], "skipped": True, **_checklist_payload(items)}

    assessments = _call_agent("Draft analysis", analyze_draft, draft_content=draft_content, requirements=items)
    items = apply_assessments(items, assessments)
    repository.set_requirement_checklist(db, tender, items)
    return {"analysis": [a.model_dump() for a in assessments], "skipped": False, **_checklist_payload(items)}


@app.post("/tenders/{tender_id}/requirements-monitor")
def monitor_tender_endpoint(
    tender_id: str,
    req: TenderAnalysisRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    tender = repository.get_tender(db, tender_id, user_id)
    analysis = _call_agent(
        "Requirements monitor",
        monitor_requirements,
        draft_content=_resolve_draft_content(tender, req.draft_content),
        requirements=tender.requirements or "No requirements specified",
        tender_info={
            "title": tender.title,
            "client_name": tender.client_name,
            "goals": tender.goals,
            "scope": tender.scope,
        },
    )
    return {"analysis": analysis.to_dict()}


@app.post("/tenders/{tender_id}/generate-draft")
def generate_tender_draft_endpoint(
    tender_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    tender = repository.get_tender(db, tender_id, user_id)
    draft = _call_agent("Tender draft generation", generate_tender_draft, tender_data=_tender_payload(tender))
    return {"draft": draft}


# ---------------------------------------------------------------------------
# Real-time collaboration
# ---------------------------------------------------------------------------

@app.get("/tenders/{tender_id}/collaboration")
def collaboration_info_endpoint(
    tender_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    repository.get_tender(db, tender_id, user_id)
    room = room_name(tender_id)
    return {
        "room": room,
        "relay_url": config.COLLAB_RELAY_URL,
        "builtin_relay_path": f"/ws/drafts/{tender_id}",
        "peers": manager.peer_count(room),
    }


@app.websocket("/ws/drafts/{tender_id}")
async def draft_relay(websocket: WebSocket, tender_id: str, db: Session = Depends(get_db)):
    if not repository.tender_exists(db, tender_id):
        await websocket.close(code=4404)
        return
    db.close()

    room = room_name(tender_id)
    await manager.connect(room, websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            payload = message.get("bytes")
            if payload is None:
                payload = message.get("text")
            if payload is None:
                continue
            await manager.broadcast(room, payload, sender=websocket)
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(room, websocket)
