"""
Similarity scoring between a query vector and stored document vectors.

Two ranking strategies share one implementation:

* ``plain``   - cosine similarity only
* ``boosted`` - cosine similarity plus a fixed bonus when the document name
  contains the query text (case-insensitive). Boosted scores may exceed 1.

Anomalies never raise: mismatched dimensions, zero-magnitude vectors and
non-numeric entries all score 0.0 so a scan can carry on.
"""

import math
from typing import Optional, Sequence, Union

import numpy as np

from util.logging import logger

VectorLike = Union[Sequence[float], np.ndarray]

DEFAULT_NAME_BOOST = 0.1


def cosine_similarity(vec_a: VectorLike, vec_b: VectorLike) -> float:
    """
    Cosine similarity of two vectors.

    Returns 0.0 when the lengths differ, when either vector has zero
    magnitude, or when an entry is not a finite float.
    """
    try:
        a = np.asarray(vec_a, dtype=np.float64)
        b = np.asarray(vec_b, dtype=np.float64)
    except (TypeError, ValueError) as e:
        logger.error(f"Cannot compare vectors with non-numeric entries: {e}")
        return 0.0

    if a.ndim != 1 or b.ndim != 1:
        logger.error(f"Cannot compare vectors of shape {a.shape} and {b.shape}")
        return 0.0

    if a.shape[0] != b.shape[0]:
        logger.warning(f"Vector dimension mismatch: {a.shape[0]} vs {b.shape[0]}")
        return 0.0

    if not (np.all(np.isfinite(a)) and np.all(np.isfinite(b))):
        logger.error("Cannot compare vectors with missing or non-finite entries")
        return 0.0

    scale_a = np.max(np.abs(a)) if a.size else 0.0
    scale_b = np.max(np.abs(b)) if b.size else 0.0
    if scale_a == 0 or scale_b == 0:
        logger.debug("Zero-magnitude vector in comparison, scoring 0.0")
        return 0.0

    # Unit max-abs keeps the squared norms clear of overflow and underflow
    a = a / scale_a
    b = b / scale_b
    similarity = float(np.dot(a, b) / (np.linalg.norm(a) * np.linalg.norm(b)))
    if not math.isfinite(similarity):
        logger.error(f"Non-finite similarity {similarity}, scoring 0.0")
        return 0.0
    return similarity


def name_matches(identifier: Optional[str], query_text: Optional[str]) -> bool:
    """True when the identifier contains the query text, ignoring case."""
    if identifier is None or query_text is None:
        return False
    return query_text.lower() in identifier.lower()


class SimilarityRanker:
    """Scores stored records against a query using the configured strategy."""

    def __init__(self, mode: str = "plain", name_boost: float = DEFAULT_NAME_BOOST):
        if mode not in ("plain", "boosted"):
            raise ValueError(f"Unknown ranker mode: {mode}")
        self.mode = mode
        self.name_boost = name_boost

    @property
    def uses_threshold(self) -> bool:
        """Only the boosted strategy gates results on a minimum score."""
        return self.mode == "boosted"

    def score(self, query_vector: VectorLike, record_vector: VectorLike,
              identifier: Optional[str] = None, query_text: Optional[str] = None) -> float:
        similarity = cosine_similarity(query_vector, record_vector)
        if self.mode == "boosted" and name_matches(identifier, query_text):
            similarity += self.name_boost
        return similarity

    def __repr__(self) -> str:
        return f"SimilarityRanker(mode={self.mode!r}, name_boost={self.name_boost!r})"
