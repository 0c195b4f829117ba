"""
Tests for rebuilding the vector index from the notes table.
"""

from unittest.mock import patch

import numpy as np
import pytest

from scripts.rebuild_index import main, rebuild_index
from ragnotes.vector.embeddings import DeterministicHashEmbedding
from ragnotes.vector.index import SimpleInMemoryVectorStore
from ragnotes.vector.types import VectorRecord

from conftest import TEST_DIMENSION


def test_rebuild_replaces_index_contents(capfd, repository, embedding_service, vector_store):
    for text in ("first", "second", "third"):
        repository.insert_note(text)
    vector_store.upsert([VectorRecord(id="99", vector=np.ones(TEST_DIMENSION))])

    count = rebuild_index(repository, embedding_service, vector_store, batch_size=2)

    assert count == 3
    assert vector_store.list_ids() == {"1", "2", "3"}
    assert np.allclose(vector_store.get("2").vector, embedding_service.embed("second"))

    captured = capfd.readouterr()
    assert "✓ Cleared existing vector index" in captured.out
    assert "Found 3 notes in canonical store" in captured.out
    assert "✓ Successfully rebuilt index with 3 vectors" in captured.out


def test_rebuild_with_no_notes(capfd, repository, embedding_service, vector_store):
    assert rebuild_index(repository, embedding_service, vector_store) == 0

    captured = capfd.readouterr()
    assert "No entries to rebuild. Exiting." in captured.out


def test_main(capfd, repository, db_path):
    repository.insert_note("The capital of France is Paris.")
    store = SimpleInMemoryVectorStore()

    with patch("scripts.rebuild_index.get_vector_store", return_value=store), \
         patch("scripts.rebuild_index.get_embedding_provider",
               return_value=DeterministicHashEmbedding(dimension=TEST_DIMENSION)):
        main(["--db-path", db_path])

    assert store.list_ids() == {"1"}
    captured = capfd.readouterr()
    assert "Starting vector index rebuild..." in captured.out
    assert "✓ Verification search returned 1 results" in captured.out
    assert "Index rebuild complete!" in captured.out


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
