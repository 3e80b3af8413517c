"""
Query memory: a fixed-capacity FIFO of recently matched document identifiers.

Bookkeeping only. Ranking and search never consult it. The memory starts
empty, grows until it reaches capacity, and after that every insertion
evicts the oldest entry.
"""

from collections import deque
from typing import Any, Dict, List, Optional

from util.logging import logger


class QueryMemory:
    """
    Bounded history of matched documents.

    Features:
    - Unconditional FIFO eviction at capacity (duplicates allowed)
    - Oldest-first read access
    - Usage statistics for diagnostics
    """

    def __init__(self, capacity: int):
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ValueError(f"Query memory capacity must be a positive integer, got {capacity!r}")
        self._capacity = capacity
        self._entries = deque()
        self._stats = {
            "remembered": 0,
            "evicted": 0,
        }

    @property
    def capacity(self) -> int:
        return self._capacity

    def remember(self, identifier: str) -> Optional[str]:
        """
        Record a matched identifier.

        Returns:
            The evicted identifier, or None if nothing was evicted
        """
        evicted = None
        if len(self._entries) == self._capacity:
            evicted = self._entries.popleft()
            self._stats["evicted"] += 1

        self._entries.append(identifier)
        self._stats["remembered"] += 1

        logger.log_memory_update(identifier, len(self._entries), evicted)
        return evicted

    def get_all(self) -> List[str]:
        """Identifiers oldest first."""
        return list(self._entries)

    def get_stats(self) -> Dict[str, Any]:
        """Get usage statistics."""
        return self._stats.copy()

    def debug_info(self) -> Dict[str, Any]:
        """Get detailed debug information about current memory state."""
        return {
            "stats": self.get_stats(),
            "capacity": self._capacity,
            "size": len(self._entries),
            "entries": self.get_all(),
        }

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"QueryMemory(capacity={self._capacity}, entries={self.get_all()!r})"
