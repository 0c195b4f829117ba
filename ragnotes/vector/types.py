"""
Vector index records.
Entry ids are the string form of the owning note id.
"""

from typing import Dict, Optional
import numpy as np
from dataclasses import dataclass, field


@dataclass
class VectorRecord:
    """Represents a vector record with metadata."""

    id: str
    """Identifier shared with the owning note"""

    vector: Optional[np.ndarray]
    """Embedding of the note text"""

    metadata: Dict[str, object] = field(default_factory=dict)
    """Additional metadata associated with the vector"""


@dataclass
class QueryResult:
    """Represents a search result from vector store."""

    id: str
    """Identifier for the matching record"""

    score: float
    """Cosine similarity of the match"""

    metadata: Dict[str, object] = field(default_factory=dict)
    """Metadata associated with the matched record"""
