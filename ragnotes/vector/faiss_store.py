"""
FAISS-backed vector index.
Vectors are kept in an IndexIDMap2 so entries can be replaced and removed by id.
"""

import json
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Set

import numpy as np

from .types import VectorRecord, QueryResult
from .index import IVectorStore, normalize
from ..util.logging import logger

INDEX_FILENAME = "index.faiss"
IDS_FILENAME = "ids.json"


class FaissVectorStore(IVectorStore):
    """FAISS-backed implementation of IVectorStore."""

    def __init__(self, dimension: int = 768, persist_path: Optional[str] = None):
        """
        Initialize FAISS vector store.

        Args:
            dimension: Dimension of the vectors (768 for bge-base embeddings)
            persist_path: Optional directory; when set the index is loaded from
                and written back to it after every change
        """
        import faiss
        self.faiss = faiss
        self.dimension = dimension
        self.persist_path = Path(persist_path) if persist_path else None
        self._lock = threading.Lock()

        # Inner product over unit vectors = cosine similarity
        self.index = faiss.IndexIDMap2(faiss.IndexFlatIP(dimension))

        # Record id <-> int64 FAISS label
        self.id_to_label = {}
        self.label_to_id = {}
        self.next_label = 0

        if self.persist_path and (self.persist_path / INDEX_FILENAME).exists():
            self._load()

    def _check_dimension(self, vector: np.ndarray, record_id: str) -> None:
        if vector.shape[-1] != self.dimension:
            raise ValueError(
                f"Vector dimension {vector.shape[-1]} for {record_id} does not match expected dimension {self.dimension}"
            )

    def upsert(self, records: List[VectorRecord]) -> None:
        if not records:
            return

        vectors = []
        labels = []
        for record in records:
            if record.vector is None or len(record.vector) == 0:
                raise ValueError(f"Vector record {record.id} has no vector")
            vector = normalize(record.vector)
            self._check_dimension(vector, record.id)
            vectors.append(vector)

        with self._lock:
            for record in records:
                # FAISS has no in-place update; drop the old entry first
                if record.id in self.id_to_label:
                    self._remove_locked([record.id])
                label = self.next_label
                self.next_label += 1
                self.id_to_label[record.id] = label
                self.label_to_id[label] = record.id
                labels.append(label)

            self.index.add_with_ids(
                np.vstack(vectors).astype(np.float32),
                np.array(labels, dtype=np.int64)
            )
            self._save()

    def search(self, query_vector, top_k: int = 5) -> List[QueryResult]:
        with self._lock:
            if not self.index.ntotal or top_k < 1:
                return []

            normalized_query = normalize(query_vector)
            if not normalized_query.any():
                return []
            self._check_dimension(normalized_query, "query")

            scores, labels = self.index.search(
                normalized_query.reshape(1, -1),
                min(top_k, self.index.ntotal)
            )

            results = []
            for label, score in zip(labels[0], scores[0]):
                record_id = self.label_to_id.get(int(label))
                if label == -1 or record_id is None:
                    continue
                results.append(QueryResult(id=record_id, score=float(score)))
            return results

    def _remove_locked(self, record_ids: Iterable[str]) -> None:
        labels = []
        for record_id in record_ids:
            label = self.id_to_label.pop(record_id, None)
            if label is not None:
                self.label_to_id.pop(label, None)
                labels.append(label)
        if labels:
            self.index.remove_ids(np.array(labels, dtype=np.int64))

    def delete(self, record_ids: Iterable[str]) -> None:
        with self._lock:
            self._remove_locked(list(record_ids))
            self._save()

    def list_ids(self) -> Set[str]:
        with self._lock:
            return set(self.id_to_label)

    def clear(self) -> None:
        """Clear all records from the FAISS store."""
        with self._lock:
            self.index = self.faiss.IndexIDMap2(self.faiss.IndexFlatIP(self.dimension))
            self.id_to_label.clear()
            self.label_to_id.clear()
            self.next_label = 0
            self._save()

    def _save(self) -> None:
        if not self.persist_path:
            return

        self.persist_path.mkdir(parents=True, exist_ok=True)
        self.faiss.write_index(self.index, str(self.persist_path / INDEX_FILENAME))
        payload = {
            "dimension": self.dimension,
            "next_label": self.next_label,
            "ids": self.id_to_label,
        }
        (self.persist_path / IDS_FILENAME).write_text(json.dumps(payload), encoding="utf-8")

    def _load(self) -> None:
        index = self.faiss.read_index(str(self.persist_path / INDEX_FILENAME))
        payload = json.loads((self.persist_path / IDS_FILENAME).read_text(encoding="utf-8"))

        if index.d != self.dimension:
            raise ValueError(
                f"Persisted index dimension {index.d} does not match expected dimension {self.dimension}"
            )

        self.index = index
        self.next_label = payload["next_label"]
        self.id_to_label = {record_id: int(label) for record_id, label in payload["ids"].items()}
        self.label_to_id = {label: record_id for record_id, label in self.id_to_label.items()}
        logger.info(f"Loaded FAISS index with {self.index.ntotal} vectors from {self.persist_path}")
