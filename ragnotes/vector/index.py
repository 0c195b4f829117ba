"""
Vector index interface and the in-memory implementation.
The index is an advisory layer over the canonical notes table.
"""

import threading
from abc import ABC, abstractmethod
from typing import Iterable, List, Set

import numpy as np

from .types import VectorRecord, QueryResult


def normalize(vector) -> np.ndarray:
    """Return a float32 unit vector (zero vectors are returned unchanged)."""
    array = np.asarray(vector, dtype=np.float32)
    norm = np.linalg.norm(array)
    if norm == 0:
        return array
    return array / norm


class IVectorStore(ABC):
    """Abstract interface for vector storage operations."""

    @abstractmethod
    def upsert(self, records: List[VectorRecord]) -> None:
        """Insert records, replacing any existing entry with the same id."""
        pass

    @abstractmethod
    def search(self, query_vector, top_k: int = 5) -> List[QueryResult]:
        """Search for similar vectors and return results ranked by descending score."""
        pass

    @abstractmethod
    def delete(self, record_ids: Iterable[str]) -> None:
        """Delete records by id. Unknown ids are ignored."""
        pass

    @abstractmethod
    def list_ids(self) -> Set[str]:
        """Ids of every stored record."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all records from the store."""
        pass

    def add(self, record: VectorRecord) -> None:
        """Add a single vector record to the store."""
        self.upsert([record])

    def count(self) -> int:
        """Number of stored records."""
        return len(self.list_ids())


class SimpleInMemoryVectorStore(IVectorStore):
    """Simple in-memory implementation of IVectorStore using cosine similarity."""

    def __init__(self):
        self._vectors = {}  # record_id -> VectorRecord
        self._index = {}    # record_id -> normalized_vector
        self._lock = threading.Lock()

    def upsert(self, records: List[VectorRecord]) -> None:
        with self._lock:
            for record in records:
                if record.vector is None or len(record.vector) == 0:
                    raise ValueError(f"Vector record {record.id} has no vector")
                self._vectors[record.id] = record
                self._index[record.id] = normalize(record.vector)

    def search(self, query_vector, top_k: int = 5) -> List[QueryResult]:
        with self._lock:
            if not self._index or top_k < 1:
                return []

            normalized_query = normalize(query_vector)
            if not normalized_query.any():
                return []

            similarities = {
                record_id: float(np.dot(normalized_query, stored_vector))
                for record_id, stored_vector in self._index.items()
            }

            # Ties keep insertion order so results are deterministic
            ranked = sorted(similarities.items(), key=lambda x: x[1], reverse=True)

            return [
                QueryResult(id=record_id, score=score, metadata=dict(self._vectors[record_id].metadata))
                for record_id, score in ranked[:top_k]
            ]

    def delete(self, record_ids: Iterable[str]) -> None:
        with self._lock:
            for record_id in record_ids:
                self._vectors.pop(record_id, None)
                self._index.pop(record_id, None)

    def get(self, record_id: str):
        """Return the stored record for an id, or None."""
        return self._vectors.get(record_id)

    def list_ids(self) -> Set[str]:
        with self._lock:
            return set(self._vectors)

    def clear(self) -> None:
        with self._lock:
            self._vectors.clear()
            self._index.clear()
