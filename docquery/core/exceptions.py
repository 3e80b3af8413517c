"""
Exceptions raised by the I/O collaborators around the retrieval core.
The core itself never raises for load or ranking anomalies; it encodes them in return values.
"""


class DocQueryError(Exception):
    """Base class for docquery errors."""


class ConfigurationError(DocQueryError):
    """Settings could not be loaded or failed validation."""


class RecordSourceError(DocQueryError):
    """The document table could not be read at all."""


class EmbeddingServiceError(DocQueryError):
    """The embedding service failed or returned an unusable vector."""


class GenerationServiceError(DocQueryError):
    """The generative model service failed to answer."""
