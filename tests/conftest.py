"""
Shared fixtures: temp SQLite file, hash embeddings, in-memory index and scripted generation providers.
"""

import pytest

from ragnotes.core.dao import NoteRepository
from ragnotes.core.errors import GenerationError
from ragnotes.core.ingestion import IngestionCoordinator
from ragnotes.generation.providers import IGenerationProvider
from ragnotes.vector.embeddings import DeterministicHashEmbedding, EmbeddingService
from ragnotes.vector.index import SimpleInMemoryVectorStore

TEST_DIMENSION = 64


class FakeProvider(IGenerationProvider):
    """Generation provider with a scripted reply that records what it was sent."""

    def __init__(self, model_name="fake-model", available=True, reply="fake answer", error=None):
        super().__init__(model_name)
        self.available = available
        self.reply = reply
        self.error = error
        self.calls = []

    def is_available(self) -> bool:
        return self.available

    def complete(self, messages):
        self.calls.append(messages)
        if self.error:
            raise GenerationError(self.error, {"model": self.model_name})
        return self.reply


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "notes.db")


@pytest.fixture
def repository(db_path):
    return NoteRepository(db_path)


@pytest.fixture
def embedding_service():
    return EmbeddingService(DeterministicHashEmbedding(dimension=TEST_DIMENSION))


@pytest.fixture
def vector_store():
    return SimpleInMemoryVectorStore()


@pytest.fixture
def ingestion(repository, embedding_service, vector_store):
    return IngestionCoordinator(repository, embedding_service, vector_store)
