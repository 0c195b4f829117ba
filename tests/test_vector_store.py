"""
Tests for the in-memory vector index.
"""

import numpy as np
import pytest

from ragnotes.vector.index import IVectorStore, SimpleInMemoryVectorStore
from ragnotes.vector.types import VectorRecord


def test_vector_store_interface():
    """Test that SimpleInMemoryVectorStore implements IVectorStore interface."""
    assert isinstance(SimpleInMemoryVectorStore(), IVectorStore)


def test_add_single_record():
    store = SimpleInMemoryVectorStore()

    store.add(VectorRecord(id="1", vector=np.array([1.0, 0.0, 0.0]), metadata={"chunk_index": 0}))

    results = store.search(np.array([1.0, 0.0, 0.0]), top_k=1)
    assert len(results) == 1
    assert results[0].id == "1"
    assert results[0].score == pytest.approx(1.0)
    assert results[0].metadata["chunk_index"] == 0


def test_search_ranks_by_similarity():
    """Test that search returns results ordered by similarity."""
    store = SimpleInMemoryVectorStore()
    store.upsert([
        VectorRecord(id="a", vector=np.array([1.0, 0.0])),
        VectorRecord(id="b", vector=np.array([0.0, 1.0])),
        VectorRecord(id="c", vector=np.array([0.7, 0.7])),
    ])

    results = store.search(np.array([0.9, 0.1]), top_k=3)

    assert [r.id for r in results] == ["a", "c", "b"]
    assert results[0].score >= results[1].score >= results[2].score


def test_top_k_limits_results():
    store = SimpleInMemoryVectorStore()
    store.upsert([VectorRecord(id=str(i), vector=np.array([1.0, float(i)])) for i in range(5)])

    assert len(store.search(np.array([1.0, 0.0]), top_k=2)) == 2
    assert store.search(np.array([1.0, 0.0]), top_k=0) == []


def test_upsert_replaces_existing_entry():
    store = SimpleInMemoryVectorStore()
    store.upsert([VectorRecord(id="1", vector=np.array([1.0, 0.0]))])
    store.upsert([VectorRecord(id="1", vector=np.array([0.0, 1.0]))])

    assert store.count() == 1
    results = store.search(np.array([0.0, 1.0]), top_k=1)
    assert results[0].score == pytest.approx(1.0)


def test_delete_ignores_unknown_ids():
    store = SimpleInMemoryVectorStore()
    store.upsert([
        VectorRecord(id="1", vector=np.array([1.0, 0.0])),
        VectorRecord(id="2", vector=np.array([0.0, 1.0])),
    ])

    store.delete(["1", "missing"])
    store.delete(["1"])

    assert store.list_ids() == {"2"}
    assert store.get("1") is None


def test_empty_index_and_zero_query():
    store = SimpleInMemoryVectorStore()
    assert store.search(np.array([1.0, 0.0]), top_k=5) == []

    store.upsert([VectorRecord(id="1", vector=np.array([1.0, 0.0]))])
    assert store.search(np.array([0.0, 0.0]), top_k=5) == []


def test_record_without_vector_is_rejected():
    store = SimpleInMemoryVectorStore()

    with pytest.raises(ValueError):
        store.upsert([VectorRecord(id="1", vector=np.array([]))])


def test_clear():
    store = SimpleInMemoryVectorStore()
    store.upsert([VectorRecord(id="1", vector=np.array([1.0, 0.0]))])

    store.clear()

    assert store.count() == 0
    assert store.list_ids() == set()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
