"""
Retrieval core building blocks: record store, similarity ranking and relevance search.
"""

# Package initialization for vector module
from .types import EmbeddingRecord, QueryMatch, LoadReport
from .store import IEmbeddingStore, InMemoryEmbeddingStore
from .similarity import SimilarityRanker, cosine_similarity, name_matches
from .search import find_best

__all__ = [
    'EmbeddingRecord',
    'QueryMatch',
    'LoadReport',
    'IEmbeddingStore',
    'InMemoryEmbeddingStore',
    'SimilarityRanker',
    'cosine_similarity',
    'name_matches',
    'find_best'
]
