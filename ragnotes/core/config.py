"""
Runtime configuration for the note store.
Values come from the environment (and an optional .env file).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Database path configuration
DB_PATH = os.getenv("DB_PATH", "./data/notes.db")

DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Vector index and embeddings
VECTOR_PROVIDER = os.getenv("VECTOR_PROVIDER", "memory")  # memory|faiss
FAISS_INDEX_PATH = os.getenv("FAISS_INDEX_PATH")  # unset = not persisted
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "sentence_transformers")  # sentence_transformers|hash
EMBED_MODEL_NAME = os.getenv("EMBED_MODEL_NAME", "BAAI/bge-base-en-v1.5")
EMBED_DIM = int(os.getenv("EMBED_DIM", "768"))

# Chunking and retrieval
CHUNK_SIZE = int(os.getenv("CHUNK_SIZE", "1000"))
CHUNK_OVERLAP = int(os.getenv("CHUNK_OVERLAP", "100"))
RETRIEVAL_TOP_K = int(os.getenv("RETRIEVAL_TOP_K", "1"))
MAX_CONTEXT_CHARS = int(os.getenv("MAX_CONTEXT_CHARS", "6000"))

# Generation: premium tier is used only when its credential is present
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OLLAMA_HOST = os.getenv("OLLAMA_HOST", "http://localhost:11434")
OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3:8b-instruct")
GENERATION_TEMPERATURE = float(os.getenv("GENERATION_TEMPERATURE", "0.2"))
GENERATION_TIMEOUT_SEC = float(os.getenv("GENERATION_TIMEOUT_SEC", "60"))

# Reconciliation sweep
CORRECTION_MODE = os.getenv("CORRECTION_MODE", "propose")  # off|propose|apply

DEFAULT_QUESTION = os.getenv("DEFAULT_QUESTION", "What is the square root of 9?")

VERSION = "0.1.0"

VALID_VECTOR_PROVIDERS = ("memory", "faiss")
VALID_EMBED_PROVIDERS = ("sentence_transformers", "hash")
VALID_CORRECTION_MODES = ("off", "propose", "apply")


def get_db_path() -> str:
    """Database path, read at call time so tests can point at a temp file."""
    return os.getenv("DB_PATH", DB_PATH)


def debug_enabled() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def ensure_db_directory(db_path: str = None):
    """Ensure the database directory exists."""
    Path(db_path or get_db_path()).parent.mkdir(parents=True, exist_ok=True)


def get_openai_api_key():
    """Premium provider credential, or None when not configured."""
    return os.getenv("OPENAI_API_KEY") or None


def get_correction_mode() -> str:
    """Get correction mode (off|propose|apply)."""
    return os.getenv("CORRECTION_MODE", CORRECTION_MODE)


def get_vector_store():
    """Get configured vector store implementation."""
    provider = os.getenv("VECTOR_PROVIDER", VECTOR_PROVIDER)

    if provider == "faiss":
        from ..vector.faiss_store import FaissVectorStore
        return FaissVectorStore(
            dimension=int(os.getenv("EMBED_DIM", str(EMBED_DIM))),
            persist_path=os.getenv("FAISS_INDEX_PATH", FAISS_INDEX_PATH),
        )

    from ..vector.index import SimpleInMemoryVectorStore
    return SimpleInMemoryVectorStore()


def get_embedding_provider():
    """Get configured embedding provider implementation."""
    provider = os.getenv("EMBED_PROVIDER", EMBED_PROVIDER)

    if provider == "hash":
        from ..vector.embeddings import DeterministicHashEmbedding
        return DeterministicHashEmbedding(dimension=int(os.getenv("EMBED_DIM", str(EMBED_DIM))))

    from ..vector.embeddings import SentenceTransformerEmbedding
    return SentenceTransformerEmbedding(os.getenv("EMBED_MODEL_NAME", EMBED_MODEL_NAME))


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if VECTOR_PROVIDER not in VALID_VECTOR_PROVIDERS:
        issues.append(f"Invalid VECTOR_PROVIDER: {VECTOR_PROVIDER}")

    if EMBED_PROVIDER not in VALID_EMBED_PROVIDERS:
        issues.append(f"Invalid EMBED_PROVIDER: {EMBED_PROVIDER}")

    if CORRECTION_MODE not in VALID_CORRECTION_MODES:
        issues.append(f"Invalid CORRECTION_MODE: {CORRECTION_MODE}")

    if CHUNK_SIZE < 1:
        issues.append("CHUNK_SIZE must be >= 1")

    if CHUNK_OVERLAP < 0 or CHUNK_OVERLAP >= CHUNK_SIZE:
        issues.append("CHUNK_OVERLAP must be >= 0 and smaller than CHUNK_SIZE")

    if RETRIEVAL_TOP_K < 1:
        issues.append("RETRIEVAL_TOP_K must be >= 1")

    if MAX_CONTEXT_CHARS < 1:
        issues.append("MAX_CONTEXT_CHARS must be >= 1")

    return issues
