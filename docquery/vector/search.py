"""
Relevance search: exhaustive scan of the store for the single best-scoring record.
"""

from typing import Iterable, Optional

from util.logging import logger
from .similarity import SimilarityRanker, VectorLike
from .types import EmbeddingRecord, QueryMatch


def find_best(records: Iterable[EmbeddingRecord], ranker: SimilarityRanker, query_vector: VectorLike,
              query_text: Optional[str] = None, similarity_threshold: Optional[float] = None) -> QueryMatch:
    """
    Find the most relevant record for a query vector.

    Every record is scored once. The running maximum uses strict ``>`` so the
    earliest record wins a tie. When the ranker gates on a threshold and the
    best score falls below it, the result carries no identifier or content but
    keeps the best score for reporting.

    Args:
        records: Records in insertion order
        ranker: Scoring strategy
        query_vector: Embedding of the query
        query_text: Raw query, used by the boosted strategy for name matching
        similarity_threshold: Minimum score for a boosted match

    Returns:
        QueryMatch; ``found`` is False for an empty store or a gated result
    """
    best_record = None
    best_score = None
    scanned = 0

    for record in records:
        scanned += 1
        score = ranker.score(query_vector, record.vector, record.identifier, query_text)
        if best_score is None or score > best_score:
            best_score = score
            best_record = record

    if best_record is None:
        logger.log_search(query_text, scanned=scanned)
        return QueryMatch()

    if ranker.uses_threshold and similarity_threshold is not None and best_score < similarity_threshold:
        logger.log_search(query_text, score=best_score, scanned=scanned)
        return QueryMatch(score=best_score)

    logger.log_search(query_text, identifier=best_record.identifier, score=best_score, scanned=scanned)
    return QueryMatch(identifier=best_record.identifier, content=best_record.content, score=best_score)
