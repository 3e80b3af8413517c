"""
Structured logging for the retrieval pipeline.
Record loading, ranking anomalies, searches and memory updates all flow through here.
"""

import logging
import os
from typing import Any, Dict


class StructuredLogger:
    """Structured logger for load, search and query-memory operations."""

    def __init__(self, name: str = "docquery"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG if _debug_from_env() else logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def set_debug(self, enabled: bool) -> None:
        """Switch between DEBUG and INFO verbosity."""
        self.logger.setLevel(logging.DEBUG if enabled else logging.INFO)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None, level: int = logging.INFO):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        self.logger.log(level, message)

    def log_record_load(self, identifier: str, status: str = "accepted", reason: str = None, dimension: int = None):
        """Log the outcome of loading one stored document."""
        details = {"identifier": identifier}
        if dimension is not None:
            details["dimension"] = dimension
        if reason is not None:
            details["reason"] = reason

        level = logging.WARNING if status == "rejected" else logging.DEBUG
        self.log_operation("store.add_record", status, details, level=level)

    def log_search(self, query_text: str, identifier: str = None, score: float = None, scanned: int = 0):
        """Log a relevance search result."""
        details = {"scanned": scanned}
        if query_text is not None:
            details["query"] = query_text[:50] + "..." if len(query_text) > 50 else query_text
        if score is not None:
            details["score"] = round(score, 6)

        if identifier is None:
            self.log_operation("search.find_best", "no_match", details)
        else:
            details["identifier"] = identifier
            self.log_operation("search.find_best", "matched", details)

    def log_memory_update(self, identifier: str, size: int, evicted: str = None):
        """Log a query-memory insertion, with the evicted entry if one was dropped."""
        details = {"identifier": identifier, "size": size}
        if evicted is not None:
            details["evicted"] = evicted

        self.log_operation("memory.remember", "success", details, level=logging.DEBUG)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


def _debug_from_env() -> bool:
    return os.getenv("DEBUG", "false").strip().lower() in ("true", "1", "yes", "on")


# Global logger instance
logger = StructuredLogger()
