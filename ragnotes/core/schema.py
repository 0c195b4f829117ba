"""
Typed records passed between the note store components.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

import numpy as np

from .errors import NoteStoreError


@dataclass
class Note:
    id: int
    text: str
    created_at: Optional[datetime] = None


@dataclass
class ChunkUnit:
    """One chunk's trip through insert -> embed -> upsert."""
    index: int
    text: str
    note_id: Optional[int] = None
    vector: Optional[np.ndarray] = None
    status: str = "pending"  # pending|indexed|failed|skipped
    error: Optional[str] = None


@dataclass
class IngestResult:
    note_ids: List[int] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    chunks: List[ChunkUnit] = field(default_factory=list)
    error: Optional[NoteStoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def failed_chunks(self) -> List[ChunkUnit]:
        return [c for c in self.chunks if c.status == "failed"]


@dataclass
class RetrievalResult:
    context_notes: List[str] = field(default_factory=list)
    matched_ids: List[int] = field(default_factory=list)
    scores: List[float] = field(default_factory=list)


@dataclass
class Answer:
    text: str
    model_used: str
