"""
Deletion: remove a note row and its vector entry together.
"""

from .dao import NoteRepository
from .errors import IndexWriteError
from ..util.logging import logger
from ..vector.index import IVectorStore


class DeletionCoordinator:
    """Idempotent delete of a note/vector pair."""

    def __init__(self, repository: NoteRepository, vector_store: IVectorStore):
        self.repository = repository
        self.vector_store = vector_store

    def delete(self, note_id: int) -> None:
        """
        Delete the note row, then the vector entry with the same id.

        Missing targets are no-ops, so calling this twice is safe. If the vector
        delete fails after the row is gone, the dangling entry stays until the
        delete is retried (retrieval skips it meanwhile).
        """
        # StorageWriteError propagates with the pair still intact
        self.repository.delete_note(note_id)

        record_id = str(note_id)
        try:
            self.vector_store.delete([record_id])
        except Exception as e:
            logger.log_vector_operation("delete", record_id, {"error": str(e)}, status="failed")
            raise IndexWriteError(f"Failed to delete vector entry {record_id}: {e}") from e

        logger.log_vector_operation("delete", record_id)
