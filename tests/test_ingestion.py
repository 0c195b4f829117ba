"""
Tests for ingestion: note rows and vector entries written in pairs, with rollback on failure.
"""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from ragnotes.core.errors import EmbeddingError, IndexWriteError, StorageWriteError
from ragnotes.core.ingestion import IngestionCoordinator
from ragnotes.vector.embeddings import EmbeddingService
from ragnotes.vector.index import IVectorStore

THREE_CHUNK_TEXT = "aaaaaaaaaaaaaaa bbbbbbbbbbbbbbb ccccccccccccccc"


def test_single_chunk_creates_paired_note_and_vector(ingestion, repository, vector_store):
    result = ingestion.ingest("The capital of France is Paris.")

    assert result.ok
    assert result.note_ids == [1]
    assert result.warnings == []
    assert repository.get_note(1).text == "The capital of France is Paris."
    assert vector_store.list_ids() == {"1"}
    assert vector_store.get("1").metadata == {"chunk_index": 0}


def test_each_chunk_gets_its_own_vector(repository, embedding_service, vector_store):
    coordinator = IngestionCoordinator(repository, embedding_service, vector_store,
                                       chunk_size=20, chunk_overlap=0)

    result = coordinator.ingest(THREE_CHUNK_TEXT)

    assert result.ok
    assert len(result.note_ids) == 3
    assert [c.status for c in result.chunks] == ["indexed"] * 3
    for note_id in result.note_ids:
        note = repository.get_note(note_id)
        stored = vector_store.get(str(note_id))
        assert np.allclose(stored.vector, embedding_service.embed(note.text))


def test_blank_text_writes_nothing(ingestion, repository, vector_store):
    result = ingestion.ingest("   ")

    assert result.ok
    assert result.note_ids == []
    assert result.chunks == []
    assert repository.count_notes() == 0
    assert vector_store.count() == 0


def test_embedding_failure_rolls_back_note(repository, vector_store):
    """A failed embedding leaves neither a note row nor a vector entry behind."""
    failing = MagicMock(spec=EmbeddingService)
    failing.embed.side_effect = EmbeddingError("embedding service unreachable")
    coordinator = IngestionCoordinator(repository, failing, vector_store)

    result = coordinator.ingest("The capital of France is Paris.")

    assert not result.ok
    assert isinstance(result.error, EmbeddingError)
    assert result.note_ids == []
    assert result.chunks[0].status == "failed"
    assert result.chunks[0].note_id is None
    assert repository.count_notes() == 0
    assert vector_store.count() == 0


def test_index_failure_rolls_back_note(repository, embedding_service):
    store = MagicMock(spec=IVectorStore)
    store.upsert.side_effect = RuntimeError("index is read-only")
    coordinator = IngestionCoordinator(repository, embedding_service, store)

    result = coordinator.ingest("The capital of France is Paris.")

    assert isinstance(result.error, IndexWriteError)
    assert isinstance(result.error.__cause__, RuntimeError)
    assert repository.count_notes() == 0


def test_note_insert_failure(ingestion, repository, vector_store):
    with patch.object(repository, "insert_note", side_effect=StorageWriteError("database is locked")):
        result = ingestion.ingest("The capital of France is Paris.")

    assert isinstance(result.error, StorageWriteError)
    assert result.note_ids == []
    assert vector_store.count() == 0


def test_partial_failure_keeps_earlier_chunks(repository, embedding_service, vector_store):
    flaky = MagicMock(spec=EmbeddingService)
    flaky.embed.side_effect = [
        embedding_service.embed("aaaaaaaaaaaaaaa"),
        EmbeddingError("embedding service unreachable"),
    ]
    coordinator = IngestionCoordinator(repository, flaky, vector_store, chunk_size=20, chunk_overlap=0)

    result = coordinator.ingest(THREE_CHUNK_TEXT)

    assert [c.status for c in result.chunks] == ["indexed", "failed", "skipped"]
    assert result.note_ids == [1]
    assert repository.count_notes() == 1
    assert vector_store.list_ids() == {"1"}
    assert flaky.embed.call_count == 2
    assert any("stopped at chunk 2 of 3" in w for w in result.warnings)
    assert any("1 chunk(s) not attempted" in w for w in result.warnings)


def test_failed_rollback_is_reported(repository, vector_store):
    failing = MagicMock(spec=EmbeddingService)
    failing.embed.side_effect = EmbeddingError("embedding service unreachable")
    coordinator = IngestionCoordinator(repository, failing, vector_store)

    with patch.object(repository, "delete_note", side_effect=StorageWriteError("database is locked")):
        result = coordinator.ingest("The capital of France is Paris.")

    assert isinstance(result.error, EmbeddingError)
    assert result.chunks[0].note_id == 1
    assert any("Note 1 has no vector entry" in w for w in result.warnings)
    # The orphan row is still there for the reconciler
    assert repository.count_notes() == 1
    assert vector_store.count() == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
