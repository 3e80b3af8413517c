"""
Retrieval core: one store, one ranker, one query memory and the match threshold.

Each instance owns its state, so independent cores (one per test, say) never
interfere. Populate with ``load`` before searching.
"""

from typing import Iterable, Optional, Tuple

from docquery.vector.search import find_best
from docquery.vector.similarity import SimilarityRanker, VectorLike
from docquery.vector.store import IEmbeddingStore, InMemoryEmbeddingStore
from docquery.vector.types import LoadReport, QueryMatch
from .query_memory import QueryMemory


class RetrievalCore:
    """Finds the best stored document for a query vector and remembers matches."""

    def __init__(self, ranker: SimilarityRanker, memory_limit: int,
                 similarity_threshold: Optional[float] = None,
                 store: Optional[IEmbeddingStore] = None):
        self._ranker = ranker
        self._memory = QueryMemory(memory_limit)
        self._store = store if store is not None else InMemoryEmbeddingStore()
        self.similarity_threshold = similarity_threshold

    @classmethod
    def from_settings(cls, settings) -> "RetrievalCore":
        """Build a core from resolved Settings."""
        from .config import get_ranker
        return cls(
            ranker=get_ranker(settings),
            memory_limit=settings.memory_limit,
            similarity_threshold=settings.similarity_threshold,
        )

    @property
    def store(self) -> IEmbeddingStore:
        return self._store

    @property
    def ranker(self) -> SimilarityRanker:
        return self._ranker

    @property
    def memory(self) -> QueryMemory:
        return self._memory

    def load(self, rows: Iterable[Tuple[str, str, str]], show_names: bool = False) -> LoadReport:
        """Populate the store from ``(identifier, vector_json, content)`` rows."""
        return self._store.load_rows(rows, show_names=show_names)

    def find_best(self, query_vector: VectorLike, query_text: Optional[str] = None) -> QueryMatch:
        """Search the store and remember the winner; no-match results leave memory untouched."""
        match = find_best(
            self._store,
            self._ranker,
            query_vector,
            query_text=query_text,
            similarity_threshold=self.similarity_threshold,
        )
        if match.found:
            self._memory.remember(match.identifier)
        return match
