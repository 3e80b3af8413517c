"""
Record and result types for the in-memory embedding store.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np


@dataclass(frozen=True, eq=False)
class EmbeddingRecord:
    """A stored document vector with its content."""

    identifier: str
    """Document name; duplicates are allowed and rank independently"""

    vector: np.ndarray
    """Read-only float64 vector"""

    content: str
    """Text payload handed to the generator on a match"""

    @property
    def dimension(self) -> int:
        return int(self.vector.shape[0])


@dataclass(frozen=True)
class QueryMatch:
    """Result of a relevance search."""

    identifier: Optional[str] = None
    """Winning document name, None when nothing matched"""

    content: Optional[str] = None
    """Winning document content, None when nothing matched"""

    score: Optional[float] = None
    """Best score seen; None only when the store was empty"""

    @property
    def found(self) -> bool:
        return self.identifier is not None


@dataclass
class LoadReport:
    """Summary of a bulk load into the store."""

    accepted: int = 0
    rejected: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.accepted + len(self.rejected)
