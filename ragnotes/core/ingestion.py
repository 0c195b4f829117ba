"""
Ingestion: chunk -> note row -> embedding -> vector upsert, one chunk at a time.

Each chunk is carried through the three steps as its own ChunkUnit. When the
embedding or upsert step fails, the chunk's note row is rolled back; if the
rollback itself fails the orphan id is reported in the result warnings so the
reconciler can pick it up.
"""

from typing import Optional

from .chunking import chunk_text
from .config import CHUNK_OVERLAP, CHUNK_SIZE
from .dao import NoteRepository
from .errors import IndexWriteError, NoteStoreError, StorageWriteError
from .schema import ChunkUnit, IngestResult
from ..util.logging import logger
from ..vector.embeddings import EmbeddingService
from ..vector.index import IVectorStore
from ..vector.types import VectorRecord


class IngestionCoordinator:
    """Writes each chunk of a document as a note row plus its vector entry."""

    def __init__(
        self,
        repository: NoteRepository,
        embedding_service: EmbeddingService,
        vector_store: IVectorStore,
        chunk_size: int = CHUNK_SIZE,
        chunk_overlap: int = CHUNK_OVERLAP,
    ):
        self.repository = repository
        self.embedding_service = embedding_service
        self.vector_store = vector_store
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def ingest(self, raw_text: str) -> IngestResult:
        """
        Ingest a document.

        Chunks are processed in order; the first failing chunk stops the loop and
        the remaining chunks are marked skipped. Chunks committed before the
        failure stay committed.

        Returns:
            IngestResult with the ids of indexed notes, warnings, per-chunk
            status and the error that stopped ingestion (None on success)
        """
        segments = chunk_text(raw_text or "", self.chunk_size, self.chunk_overlap)
        result = IngestResult(chunks=[ChunkUnit(index=i, text=s) for i, s in enumerate(segments)])

        if not segments:
            logger.log_ingestion(0, 0, status="noop")
            return result

        for unit in result.chunks:
            if result.error is not None:
                unit.status = "skipped"
                continue

            error = self._ingest_chunk(unit, result)
            if error is None:
                unit.status = "indexed"
                result.note_ids.append(unit.note_id)
            else:
                unit.status = "failed"
                unit.error = error.message
                result.error = error

        if result.error is not None:
            skipped = sum(1 for c in result.chunks if c.status == "skipped")
            failed = result.failed_chunks[0]
            result.warnings.append(
                f"Ingestion stopped at chunk {failed.index + 1} of {len(segments)}: "
                f"{result.error.message}"
                + (f" ({skipped} chunk(s) not attempted)" if skipped else "")
            )
            logger.log_ingestion(len(segments), len(result.note_ids), status="failed", details={
                "error_type": result.error.error_type,
                "note_ids": result.note_ids,
            })
        else:
            logger.log_ingestion(len(segments), len(result.note_ids))

        return result

    def _ingest_chunk(self, unit: ChunkUnit, result: IngestResult) -> Optional[NoteStoreError]:
        """Run one chunk through insert, embed and upsert. Returns the failure, if any."""
        try:
            note = self.repository.insert_note(unit.text)
        except StorageWriteError as e:
            return e
        unit.note_id = note.id

        try:
            unit.vector = self.embedding_service.embed(unit.text)
            self._upsert(unit)
        except NoteStoreError as e:
            self._rollback(unit, result)
            return e

        return None

    def _upsert(self, unit: ChunkUnit) -> None:
        record = VectorRecord(
            id=str(unit.note_id),
            vector=unit.vector,
            metadata={"chunk_index": unit.index},
        )
        try:
            self.vector_store.upsert([record])
        except Exception as e:
            logger.log_vector_operation("upsert", record.id, {"error": str(e)}, status="failed")
            raise IndexWriteError(f"Failed to index note {unit.note_id}: {e}") from e

        logger.log_vector_operation("upsert", record.id, {
            "provider": self.vector_store.__class__.__name__,
            "dimension": len(unit.vector),
        })

    def _rollback(self, unit: ChunkUnit, result: IngestResult) -> None:
        """Remove the note row of a chunk whose vector could not be written."""
        try:
            self.repository.delete_note(unit.note_id)
        except StorageWriteError as e:
            warning = f"Note {unit.note_id} has no vector entry and could not be rolled back: {e.message}"
            logger.warning(warning)
            result.warnings.append(warning)
            return

        logger.log_note_operation("rollback", unit.note_id)
        unit.note_id = None
