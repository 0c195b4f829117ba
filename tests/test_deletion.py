"""
Tests for deleting a note together with its vector entry.
"""

from unittest.mock import MagicMock, patch

import pytest

from ragnotes.core.deletion import DeletionCoordinator
from ragnotes.core.errors import IndexWriteError, StorageWriteError
from ragnotes.vector.index import IVectorStore


def test_delete_removes_note_and_vector(ingestion, repository, vector_store):
    ingestion.ingest("The capital of France is Paris.")
    coordinator = DeletionCoordinator(repository, vector_store)

    coordinator.delete(1)

    assert repository.get_note(1) is None
    assert vector_store.list_ids() == set()


def test_delete_is_idempotent(ingestion, repository, vector_store):
    ingestion.ingest("The capital of France is Paris.")
    coordinator = DeletionCoordinator(repository, vector_store)

    coordinator.delete(1)
    coordinator.delete(1)

    assert repository.count_notes() == 0


def test_delete_unknown_note_is_noop(ingestion, repository, vector_store):
    ingestion.ingest("The capital of France is Paris.")

    DeletionCoordinator(repository, vector_store).delete(404)

    assert repository.count_notes() == 1
    assert vector_store.list_ids() == {"1"}


def test_note_delete_failure_leaves_pair_intact(ingestion, repository, vector_store):
    ingestion.ingest("The capital of France is Paris.")
    coordinator = DeletionCoordinator(repository, vector_store)

    with patch.object(repository, "delete_note", side_effect=StorageWriteError("database is locked")):
        with pytest.raises(StorageWriteError):
            coordinator.delete(1)

    assert repository.get_note(1) is not None
    assert vector_store.list_ids() == {"1"}


def test_index_delete_failure_raises(repository):
    note = repository.insert_note("The capital of France is Paris.")
    store = MagicMock(spec=IVectorStore)
    store.delete.side_effect = RuntimeError("index is read-only")

    with pytest.raises(IndexWriteError):
        DeletionCoordinator(repository, store).delete(note.id)

    assert repository.get_note(note.id) is None
    store.delete.assert_called_once_with([str(note.id)])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
