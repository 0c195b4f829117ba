"""
Embedding providers and the service that guards them.
"""

from abc import ABC, abstractmethod
import hashlib
from typing import List, Sequence, Union

import numpy as np
from sentence_transformers import SentenceTransformer

from ..core.errors import EmbeddingError
from ..util.logging import logger


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector for given text."""
        pass

    def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts."""
        return [self.embed_text(text) for text in texts]

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider for testing purposes.

    Produces reproducible vectors without downloading a model. Similar texts do
    not get similar vectors; only identical texts are guaranteed to match.
    """

    def __init__(self, dimension: int = 768):
        self.dimension = dimension

    def embed_text(self, text: str) -> list[float]:
        """Generate deterministic embedding vector using hash function."""
        vector = []
        block = 0
        while len(vector) < self.dimension:
            digest = hashlib.sha256(f"{block}:{text}".encode()).hexdigest()
            for i in range(0, len(digest), 8):
                value = int(digest[i:i + 8], 16)
                # Map to [-1, 1] for cosine similarity
                vector.append((value / (2**32)) * 2 - 1)
            block += 1

        return vector[:self.dimension]

    def get_dimension(self) -> int:
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using pre-trained models.

    Defaults to BAAI/bge-base-en-v1.5 (768 dimensions).
    """

    def __init__(self, model_name: str = "BAAI/bge-base-en-v1.5", batch_size: int = 16):
        self.model_name = model_name
        self.batch_size = batch_size
        self._model = None

    @property
    def model(self):
        if self._model is None:
            logger.info(f"Loading embedding model: {self.model_name}")
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def embed_text(self, text: str) -> list[float]:
        embedding = self.model.encode(text, convert_to_numpy=True, normalize_embeddings=True)
        return embedding.tolist()

    def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        embeddings = self.model.encode(
            list(texts),
            batch_size=self.batch_size,
            convert_to_numpy=True,
            normalize_embeddings=True,
        )
        return embeddings.tolist()

    def get_dimension(self) -> int:
        return self.model.get_sentence_embedding_dimension()


class EmbeddingService:
    """
    Embedding client used by the coordinators.
    Turns text (or a batch of texts) into float32 vectors and raises
    EmbeddingError whenever the provider yields no usable vector.
    """

    def __init__(self, provider: IEmbeddingProvider):
        self.provider = provider

    def embed(self, text: Union[str, Sequence[str]]) -> Union[np.ndarray, List[np.ndarray]]:
        """
        Embed one text or a batch of texts.

        Args:
            text: A string, or a sequence of strings

        Returns:
            A 1-D vector for a string, a list of vectors for a sequence
        """
        if isinstance(text, str):
            return self.embed_many([text])[0]
        return self.embed_many(text)

    def embed_many(self, texts: Sequence[str]) -> List[np.ndarray]:
        texts = list(texts)
        if not texts or any(not t or not t.strip() for t in texts):
            raise EmbeddingError("Cannot embed empty text")

        try:
            raw_vectors = self.provider.embed_texts(texts)
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Embedding service failed: {e}") from e

        if raw_vectors is None or len(raw_vectors) != len(texts):
            raise EmbeddingError("Embedding service returned no vector")

        vectors = []
        for raw in raw_vectors:
            if raw is None or len(raw) == 0:
                raise EmbeddingError("Embedding service returned no vector")
            vectors.append(np.asarray(raw, dtype=np.float32))
        return vectors

    def get_dimension(self) -> int:
        return self.provider.get_dimension()
