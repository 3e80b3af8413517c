"""
In-memory embedding store.
Populated once at startup from external rows, read-only afterwards, scanned exhaustively by search.
"""

import json
import math
from abc import ABC, abstractmethod
from numbers import Real
from typing import Iterable, Iterator, List, Optional, Tuple

import numpy as np

from util.logging import logger
from .types import EmbeddingRecord, LoadReport


class IEmbeddingStore(ABC):
    """Abstract interface for embedding storage."""

    @abstractmethod
    def add_record(self, identifier: str, vector, content: str) -> bool:
        """Add one record; return False if the vector is rejected."""
        pass

    @abstractmethod
    def records(self) -> List[EmbeddingRecord]:
        """All records in insertion order."""
        pass

    @abstractmethod
    def size(self) -> int:
        """Number of stored records."""
        pass

    def load_rows(self, rows: Iterable[Tuple[str, str, str]], show_names: bool = False) -> LoadReport:
        """
        Load ``(identifier, vector_json, content)`` rows.

        Args:
            rows: Rows from the record source
            show_names: Log each document name at INFO level as it loads

        Returns:
            LoadReport with the accepted count and the rejected rows
        """
        report = LoadReport()
        for identifier, vector_json, content in rows:
            if show_names:
                logger.info(f"Loading embedding for document: {identifier}")

            try:
                vector = json.loads(vector_json)
            except (TypeError, ValueError) as e:
                reason = f"unparsable embedding: {e}"
                logger.log_record_load(identifier, status="rejected", reason=reason)
                report.rejected.append((identifier, reason))
                continue

            if self.add_record(identifier, vector, content):
                report.accepted += 1
            else:
                report.rejected.append((identifier, _record_problem(identifier, vector)))

        logger.log_operation("store.load_rows", "complete", {
            "accepted": report.accepted,
            "rejected": len(report.rejected),
        })
        return report

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[EmbeddingRecord]:
        return iter(self.records())


def _record_problem(identifier, vector) -> Optional[str]:
    """Return the reason a record cannot be stored, or None if it is fine."""
    if not isinstance(identifier, str):
        return f"identifier must be a string, got {type(identifier).__name__}"
    return _validate_vector(vector)


def _validate_vector(vector) -> Optional[str]:
    """Return the reason a vector is unusable, or None if it is fine."""
    if isinstance(vector, np.ndarray):
        if vector.ndim != 1:
            return f"vector must be one-dimensional, got shape {vector.shape}"
        vector = vector.tolist()
    if not isinstance(vector, (list, tuple)):
        return f"vector must be an array, got {type(vector).__name__}"
    if len(vector) == 0:
        return "vector has no dimension"
    for value in vector:
        # bool is an int subclass but never a valid embedding component
        if isinstance(value, bool) or not isinstance(value, Real):
            return f"non-numeric vector entry: {value!r}"
        if not math.isfinite(value):
            return f"non-finite vector entry: {value!r}"
    return None


class InMemoryEmbeddingStore(IEmbeddingStore):
    """List-backed store; iteration order is insertion order."""

    def __init__(self):
        self._records: List[EmbeddingRecord] = []

    def add_record(self, identifier: str, vector, content: str) -> bool:
        """
        Append a record if it has a string identifier and its vector is a
        non-empty sequence of finite numbers.

        Rejections are logged and reported through the return value, never raised,
        so a bulk load keeps going past a bad row.
        """
        reason = _record_problem(identifier, vector)
        if reason is not None:
            logger.log_record_load(identifier, status="rejected", reason=reason)
            return False

        array = np.array(vector, dtype=np.float64)
        array.setflags(write=False)
        self._records.append(EmbeddingRecord(identifier=identifier, vector=array, content=content))
        logger.log_record_load(identifier, dimension=array.shape[0])
        return True

    def records(self) -> List[EmbeddingRecord]:
        return list(self._records)

    def size(self) -> int:
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[EmbeddingRecord]:
        return iter(self._records)
