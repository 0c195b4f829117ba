"""
Wiring of the stores, clients and coordinators into one service bundle.
"""

from dataclasses import dataclass
from typing import List, Optional

from . import config
from .dao import NoteRepository
from .deletion import DeletionCoordinator
from .ingestion import IngestionCoordinator
from .reconcile import rebuild_vectors
from .retrieval import RetrievalEngine
from ..generation.answer import AnswerGenerator
from ..generation.providers import IGenerationProvider
from ..util.logging import logger
from ..vector.embeddings import EmbeddingService, IEmbeddingProvider
from ..vector.index import IVectorStore


@dataclass
class NoteStoreServices:
    repository: NoteRepository
    embedding_service: EmbeddingService
    vector_store: IVectorStore
    ingestion: IngestionCoordinator
    retrieval: RetrievalEngine
    deletion: DeletionCoordinator
    generator: AnswerGenerator


def build_services(
    db_path: str = None,
    vector_store: Optional[IVectorStore] = None,
    embedding_provider: Optional[IEmbeddingProvider] = None,
    providers: Optional[List[IGenerationProvider]] = None,
) -> NoteStoreServices:
    """Build the service bundle; anything not passed in comes from configuration."""
    repository = NoteRepository(db_path)
    vector_store = vector_store if vector_store is not None else config.get_vector_store()
    embedding_service = EmbeddingService(
        embedding_provider if embedding_provider is not None else config.get_embedding_provider()
    )

    # An index that does not outlive the process starts empty; refill it from the notes table
    if vector_store.count() == 0 and repository.count_notes() > 0:
        indexed = rebuild_vectors(repository, vector_store, embedding_service)
        logger.info(f"Vector index warmed from notes table: {indexed} entries")

    return NoteStoreServices(
        repository=repository,
        embedding_service=embedding_service,
        vector_store=vector_store,
        ingestion=IngestionCoordinator(
            repository, embedding_service, vector_store,
            chunk_size=config.CHUNK_SIZE, chunk_overlap=config.CHUNK_OVERLAP
        ),
        retrieval=RetrievalEngine(
            repository, embedding_service, vector_store,
            top_k=config.RETRIEVAL_TOP_K, max_context_chars=config.MAX_CONTEXT_CHARS
        ),
        deletion=DeletionCoordinator(repository, vector_store),
        generator=AnswerGenerator(providers),
    )


_services = None


def get_services() -> NoteStoreServices:
    """Lazy initialization of the process-wide service bundle."""
    global _services
    if _services is None:
        _services = build_services()
    return _services


def reset_services() -> None:
    global _services
    _services = None
