#!/usr/bin/env python3
"""
Index Rebuild Utility
Rebuilds the vector index from the canonical notes table after lost or corrupted vectors.
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from ragnotes.core.config import VECTOR_PROVIDER, get_embedding_provider, get_vector_store
from ragnotes.core.dao import NoteRepository
from ragnotes.core.reconcile import rebuild_vectors
from ragnotes.vector.embeddings import EmbeddingService


def rebuild_index(repository, embedding_service, vector_store, batch_size: int = 32) -> int:
    """Clear the index and re-embed every note. Returns the number of vectors written."""
    vector_store.clear()
    print("✓ Cleared existing vector index")

    note_count = repository.count_notes()
    print(f"Found {note_count} notes in canonical store")

    if not note_count:
        print("No entries to rebuild. Exiting.")
        return 0

    embedded_count = rebuild_vectors(repository, vector_store, embedding_service, batch_size)
    if embedded_count < note_count:
        print(f"ERROR: {note_count - embedded_count} notes failed to embed; see the log for their ids")

    print(f"✓ Successfully rebuilt index with {embedded_count} vectors")
    return embedded_count


def main(argv=None):
    """Rebuild vector index from the SQLite notes table."""
    parser = argparse.ArgumentParser(description="Rebuild the vector index from the notes table")
    parser.add_argument("--db-path", help="SQLite file (default: DB_PATH)")
    parser.add_argument("--batch-size", type=int, default=32,
                        help="Notes embedded per batch (default: 32)")
    args = parser.parse_args(argv)

    if VECTOR_PROVIDER == "memory":
        print("WARNING: VECTOR_PROVIDER=memory; the rebuilt index lives only for this process")

    print("Starting vector index rebuild...")

    repository = NoteRepository(args.db_path)
    embedding_service = EmbeddingService(get_embedding_provider())
    vector_store = get_vector_store()

    embedded_count = rebuild_index(repository, embedding_service, vector_store, args.batch_size)

    if embedded_count:
        sample = repository.list_notes()[0]
        results = vector_store.search(embedding_service.embed(sample.text), top_k=1)
        print(f"✓ Verification search returned {len(results)} results")

    print("Index rebuild complete!")


if __name__ == "__main__":
    main()
