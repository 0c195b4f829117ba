"""
Error taxonomy for the note store.
Every collaborator failure is raised as one of these so callers can tell the kinds apart.
"""

from typing import Any, Dict, Optional


class NoteStoreError(Exception):
    """Base class for all note store failures."""

    error_type = "NOTE_STORE_ERROR"
    client_error = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InputError(NoteStoreError):
    """Missing or invalid caller input."""
    error_type = "INPUT_ERROR"
    client_error = True


class StorageWriteError(NoteStoreError):
    """The relational store was unreachable or rejected a write."""
    error_type = "STORAGE_WRITE_ERROR"


class StorageReadError(NoteStoreError):
    """The relational store failed to answer a read."""
    error_type = "STORAGE_READ_ERROR"


class EmbeddingError(NoteStoreError):
    """The embedding service returned no vector."""
    error_type = "EMBEDDING_ERROR"


class IndexWriteError(NoteStoreError):
    """The vector index rejected an upsert or delete."""
    error_type = "INDEX_WRITE_ERROR"


class IndexReadError(NoteStoreError):
    """The vector index failed to answer a query."""
    error_type = "INDEX_READ_ERROR"


class GenerationError(NoteStoreError):
    """The generation model returned no usable text."""
    error_type = "GENERATION_ERROR"
