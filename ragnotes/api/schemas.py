"""
Request and response models for the note store API.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class NoteCreateRequest(BaseModel):
    # Optional so a missing field is answered with 400 rather than 422
    text: Optional[str] = None


class NoteResponse(BaseModel):
    id: int
    text: str
    indexed: bool
    note_ids: List[int] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class NoteGetResponse(BaseModel):
    id: int
    text: str
    created_at: Optional[datetime] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    db_health: bool
    note_count: int
    vector_count: int
    generation_available: bool


class ValidationFieldError(BaseModel):
    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    error_type: str = "VALIDATION_ERROR"
    message: str
    errors: List[ValidationFieldError]
    timestamp: datetime = Field(default_factory=datetime.now)


class ErrorResponse(BaseModel):
    error_type: str
    message: str
    timestamp: datetime = Field(default_factory=datetime.now)
    details: Optional[Dict[str, Any]] = None


class ReconcileResponse(BaseModel):
    mode: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    findings: List[Dict[str, Any]]
    results: List[Dict[str, Any]]
