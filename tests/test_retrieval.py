"""
Tests for retrieval: ranked context from the vector index, tolerant of missing notes.
"""

from unittest.mock import MagicMock

import pytest

from ragnotes.core.errors import EmbeddingError, IndexReadError
from ragnotes.core.retrieval import RetrievalEngine
from ragnotes.vector.embeddings import EmbeddingService
from ragnotes.vector.index import IVectorStore
from ragnotes.vector.types import QueryResult


@pytest.fixture
def engine(repository, embedding_service, vector_store):
    return RetrievalEngine(repository, embedding_service, vector_store, top_k=3, max_context_chars=6000)


def _scripted_store(*matches):
    store = MagicMock(spec=IVectorStore)
    store.search.return_value = [QueryResult(id=record_id, score=score) for record_id, score in matches]
    return store


def test_closest_note_is_first(ingestion, engine):
    for text in ("Bananas are yellow.", "The capital of France is Paris.", "Water boils at 100C."):
        ingestion.ingest(text)

    result = engine.retrieve("The capital of France is Paris.")

    assert result.context_notes[0] == "The capital of France is Paris."
    assert result.matched_ids[0] == 2
    assert result.scores[0] == pytest.approx(1.0, abs=1e-5)


def test_empty_index_returns_empty_context(engine):
    result = engine.retrieve("What is the square root of 9?")

    assert result.context_notes == []
    assert result.matched_ids == []


def test_rank_order_is_preserved(repository, embedding_service):
    for text in ("one", "two", "three"):
        repository.insert_note(text)
    store = _scripted_store(("3", 0.9), ("1", 0.5), ("2", 0.1))
    engine = RetrievalEngine(repository, embedding_service, store, top_k=3)

    result = engine.retrieve("question")

    assert result.matched_ids == [3, 1, 2]
    assert result.context_notes == ["three", "one", "two"]
    assert result.scores == [0.9, 0.5, 0.1]


def test_missing_notes_are_skipped(repository, embedding_service):
    repository.insert_note("kept")
    store = _scripted_store(("99", 0.9), ("not-a-note", 0.8), ("1", 0.5))
    engine = RetrievalEngine(repository, embedding_service, store, top_k=3)

    result = engine.retrieve("question")

    assert result.matched_ids == [1]
    assert result.context_notes == ["kept"]


def test_deleted_note_with_dangling_vector(ingestion, repository, engine):
    ingestion.ingest("The capital of France is Paris.")
    repository.delete_note(1)

    result = engine.retrieve("The capital of France is Paris.")

    assert result.context_notes == []


def test_top_k_override(repository, embedding_service):
    store = _scripted_store()
    engine = RetrievalEngine(repository, embedding_service, store, top_k=1)

    engine.retrieve("question")
    engine.retrieve("question", top_k=5)
    engine.retrieve("question", top_k=0)

    assert [c.args[1] for c in store.search.call_args_list] == [1, 5, 0]


def test_context_is_bounded(repository, embedding_service):
    for _ in range(3):
        repository.insert_note("x" * 40)
    store = _scripted_store(("1", 0.9), ("2", 0.8), ("3", 0.7))
    engine = RetrievalEngine(repository, embedding_service, store, top_k=3, max_context_chars=100)

    result = engine.retrieve("question")

    assert result.matched_ids == [1, 2]
    assert sum(len(n) for n in result.context_notes) <= 100


def test_oversized_first_note_is_truncated(repository, embedding_service):
    repository.insert_note("y" * 500)
    store = _scripted_store(("1", 0.9))
    engine = RetrievalEngine(repository, embedding_service, store, max_context_chars=100)

    result = engine.retrieve("question")

    assert result.context_notes == ["y" * 100]


def test_embedding_failure_propagates(repository, vector_store):
    failing = MagicMock(spec=EmbeddingService)
    failing.embed.side_effect = EmbeddingError("embedding service unreachable")
    engine = RetrievalEngine(repository, failing, vector_store)

    with pytest.raises(EmbeddingError):
        engine.retrieve("question")


def test_index_failure_raises_index_read_error(repository, embedding_service):
    store = MagicMock(spec=IVectorStore)
    store.search.side_effect = RuntimeError("index unavailable")
    engine = RetrievalEngine(repository, embedding_service, store)

    with pytest.raises(IndexReadError):
        engine.retrieve("question")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
