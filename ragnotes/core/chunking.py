"""
Split long note text into bounded, overlapping chunks for embedding.
"""

from typing import List

from .config import CHUNK_OVERLAP, CHUNK_SIZE

_WHITESPACE = (" ", "\n", "\t")


def _last_whitespace(text: str, start: int, end: int) -> int:
    return max(text.rfind(ws, start, end) for ws in _WHITESPACE)


def _next_whitespace_end(text: str, start: int, end: int) -> int:
    positions = [p for p in (text.find(ws, start, end) for ws in _WHITESPACE) if p != -1]
    return min(positions) + 1 if positions else -1


def chunk_text(text: str, chunk_size: int = CHUNK_SIZE, chunk_overlap: int = CHUNK_OVERLAP) -> List[str]:
    """
    Split text into ordered, non-empty chunks of at most chunk_size characters.

    Cuts prefer the last whitespace inside the window; a run with no whitespace
    is cut hard at chunk_size. Each chunk after the first starts up to
    chunk_overlap characters before the end of the previous one, moved forward
    to a word boundary when one exists.
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")
    if chunk_overlap < 0 or chunk_overlap >= chunk_size:
        raise ValueError("chunk_overlap must be >= 0 and smaller than chunk_size")

    cleaned = text.replace("\r\n", "\n").strip() if text else ""
    if not cleaned:
        return []

    chunks: List[str] = []
    length = len(cleaned)
    start = 0

    while start < length:
        end = min(start + chunk_size, length)

        if end < length:
            # Only back off to whitespace past the overlap so the next start still advances
            split_at = _last_whitespace(cleaned, start + chunk_overlap + 1, end + 1)
            if split_at != -1:
                end = split_at

        segment = cleaned[start:end].strip()
        if segment:
            chunks.append(segment)

        if end >= length:
            break

        next_start = end - chunk_overlap
        if chunk_overlap:
            boundary = _next_whitespace_end(cleaned, next_start, end)
            if boundary != -1:
                next_start = boundary
        start = max(next_start, start + 1)

    return chunks
