"""
Retrieval: question -> embedding -> top-K vector query -> note lookup -> bounded context.
"""

from typing import Optional

from .config import MAX_CONTEXT_CHARS, RETRIEVAL_TOP_K
from .dao import NoteRepository
from .errors import IndexReadError
from .schema import RetrievalResult
from ..util.logging import logger
from ..vector.embeddings import EmbeddingService
from ..vector.index import IVectorStore


class RetrievalEngine:
    """Turns a question into the ranked note texts used as generation context."""

    def __init__(
        self,
        repository: NoteRepository,
        embedding_service: EmbeddingService,
        vector_store: IVectorStore,
        top_k: int = RETRIEVAL_TOP_K,
        max_context_chars: int = MAX_CONTEXT_CHARS,
    ):
        self.repository = repository
        self.embedding_service = embedding_service
        self.vector_store = vector_store
        self.top_k = top_k
        self.max_context_chars = max_context_chars

    def retrieve(self, question: str, top_k: Optional[int] = None) -> RetrievalResult:
        """
        Retrieve context notes for a question, closest first.

        An empty result is a normal outcome. Matches whose note row is gone are
        skipped. Embedding and store failures propagate.
        """
        if top_k is None:
            top_k = self.top_k

        # EmbeddingError propagates: no retrieval without a query vector
        query_vector = self.embedding_service.embed(question)

        try:
            matches = self.vector_store.search(query_vector, top_k)
        except Exception as e:
            raise IndexReadError(f"Vector query failed: {e}") from e

        result = RetrievalResult()
        if not matches:
            logger.log_retrieval(question, [])
            return result

        skipped = []
        used_chars = 0
        for match in matches:
            try:
                note_id = int(match.id)
            except ValueError:
                skipped.append(match.id)
                continue

            note = self.repository.get_note(note_id)
            if note is None:
                skipped.append(match.id)
                continue

            text = note.text
            remaining = self.max_context_chars - used_chars
            if len(text) > remaining:
                if result.context_notes:
                    break
                text = text[:remaining]

            result.context_notes.append(text)
            result.matched_ids.append(note_id)
            result.scores.append(match.score)
            used_chars += len(text)

        if skipped:
            logger.warning(f"Vector entries without notes skipped during retrieval: {skipped}")
        logger.log_retrieval(question, result.matched_ids, skipped)
        return result
