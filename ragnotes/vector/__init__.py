"""
Vector index overlay - advisory layer over the canonical notes table.
"""

from .index import IVectorStore, SimpleInMemoryVectorStore
from .faiss_store import FaissVectorStore
from .types import VectorRecord, QueryResult
from .embeddings import IEmbeddingProvider, DeterministicHashEmbedding, SentenceTransformerEmbedding, EmbeddingService

__all__ = [
    'IVectorStore',
    'SimpleInMemoryVectorStore',
    'FaissVectorStore',
    'VectorRecord',
    'QueryResult',
    'IEmbeddingProvider',
    'DeterministicHashEmbedding',
    'SentenceTransformerEmbedding',
    'EmbeddingService'
]
