"""
ragnotes - notes searchable by meaning, answered with retrieval-augmented generation.
"""

from .core.config import VERSION

__version__ = VERSION
