"""
docquery - retrieval-augmented question answering over precomputed document embeddings.
"""

from .core.config import VERSION as __version__
from .core.retrieval import RetrievalCore
from .vector import QueryMatch, SimilarityRanker

__all__ = [
    'RetrievalCore',
    'QueryMatch',
    'SimilarityRanker',
    '__version__'
]
