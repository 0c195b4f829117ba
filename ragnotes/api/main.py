"""
HTTP surface of the note store: ask, add, read, delete, health and reconcile.
"""

from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from .schemas import (
    ErrorResponse,
    HealthResponse,
    NoteCreateRequest,
    NoteGetResponse,
    NoteResponse,
    ReconcileResponse,
    ValidationErrorResponse,
    ValidationFieldError,
)
from ..core import config
from ..core.config import VERSION, VALID_CORRECTION_MODES, debug_enabled
from ..core.db import health_check
from ..core.errors import InputError, NoteStoreError
from ..core.reconcile import reconcile
from ..core.services import NoteStoreServices, get_services
from ..util.logging import logger

# Initialize the FastAPI application
app = FastAPI(
    title="RAG Notes API",
    version=VERSION,
    description="Retrieval-augmented note store with SQLite and a vector index",
    docs_url="/docs" if debug_enabled() else None,
    redoc_url="/redoc" if debug_enabled() else None
)


@app.get("/", response_class=PlainTextResponse)
def ask_endpoint(
    text: Optional[str] = None,
    top_k: Optional[int] = Query(None, ge=1, le=50),
    services: NoteStoreServices = Depends(get_services),
):
    """Answer a question using the closest notes as context."""
    question = text if text and text.strip() else config.DEFAULT_QUESTION

    retrieval = services.retrieval.retrieve(question, top_k)
    answer = services.generator.answer(question, retrieval.context_notes)

    return PlainTextResponse(answer.text, headers={"X-Model-Used": answer.model_used})


@app.post("/notes", response_model=NoteResponse)
def create_note_endpoint(request: NoteCreateRequest, services: NoteStoreServices = Depends(get_services)):
    """Chunk, store and index a note."""
    if request.text is None or not request.text.strip():
        raise InputError("Note text must not be empty", {"field": "text"})

    result = services.ingestion.ingest(request.text)
    if not result.ok:
        error = result.error
        error.details.update({"note_ids": result.note_ids, "warnings": result.warnings})
        raise error

    return NoteResponse(
        id=result.note_ids[0],
        text=request.text,
        indexed=True,
        note_ids=result.note_ids,
        warnings=result.warnings
    )


@app.get("/notes/{note_id}", response_model=NoteGetResponse)
def get_note_endpoint(note_id: int, services: NoteStoreServices = Depends(get_services)):
    note = services.repository.get_note(note_id)
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return NoteGetResponse(id=note.id, text=note.text, created_at=note.created_at)


@app.delete("/notes/{note_id}", status_code=204)
def delete_note_endpoint(note_id: int, services: NoteStoreServices = Depends(get_services)):
    """Delete a note and its vector entry. Deleting a missing note succeeds."""
    services.deletion.delete(note_id)
    return Response(status_code=204)


@app.get("/health", response_model=HealthResponse)
def health_check_endpoint(services: NoteStoreServices = Depends(get_services)):
    """Check system health."""
    db_health = health_check(services.repository.db_path)
    note_count = services.repository.count_notes() if db_health else 0

    return HealthResponse(
        status="healthy" if db_health else "unhealthy",
        version=VERSION,
        db_health=db_health,
        note_count=note_count,
        vector_count=services.vector_store.count(),
        generation_available=services.generator.check_health()
    )


@app.post("/admin/reconcile", response_model=ReconcileResponse)
def reconcile_endpoint(mode: Optional[str] = None, services: NoteStoreServices = Depends(get_services)):
    """Detect drift between notes and vector entries and optionally fix it."""
    if not debug_enabled():
        raise HTTPException(status_code=403, detail="Admin endpoints require debug mode")
    if mode is not None and mode not in VALID_CORRECTION_MODES:
        raise InputError(f"Invalid correction mode: {mode}", {"valid_modes": list(VALID_CORRECTION_MODES)})

    report = reconcile(
        services.repository, services.vector_store, services.embedding_service, mode
    )
    return ReconcileResponse(**report.to_dict())


@app.exception_handler(NoteStoreError)
async def note_store_exception_handler(request: Request, exc: NoteStoreError):
    """Map note store failures to a structured error body."""
    status_code = 400 if exc.client_error else 500
    if status_code == 500:
        logger.error(f"{exc.error_type} on {request.method} {request.url.path}: {exc.message}")

    content = ErrorResponse(
        error_type=exc.error_type,
        message=exc.message,
        details=exc.details or None
    )
    return JSONResponse(status_code=status_code, content=content.model_dump(mode="json"))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed requests are input errors."""
    errors = [
        ValidationFieldError(
            field=".".join(str(part) for part in error.get("loc", [])),
            message=error.get("msg", "")
        )
        for error in exc.errors()
    ]
    content = ValidationErrorResponse(message="Invalid request", errors=errors)
    return JSONResponse(status_code=400, content=content.model_dump(mode="json"))


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Handle all unhandled exceptions."""
    logger.error(f"Unhandled exception: {exc}")
    content = {"detail": "Internal server error"}
    if debug_enabled():
        content["debug"] = str(exc)
    return JSONResponse(
        status_code=500,
        content=content,
    )
