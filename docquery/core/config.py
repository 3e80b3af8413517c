"""
Configuration for the docquery retrieval tool.

Settings are layered: built-in defaults, then an optional JSON config file
(camelCase keys, e.g. ``memoryLimit``), then environment variables (a ``.env``
file in the working directory is honoured through python-dotenv).
"""

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlsplit

from dotenv import load_dotenv

from .exceptions import ConfigurationError

load_dotenv()

DEFAULT_OLLAMA_HOST = "http://localhost:11434"
DEFAULT_SENTENCE_MODEL = "mixedbread-ai/mxbai-embed-large-v1"

RANKER_MODES = ("plain", "boosted")
EMBED_PROVIDERS = ("ollama", "hash", "sentence")

VERSION = "1.0.0"


@dataclass(frozen=True)
class Settings:
    """Resolved application settings."""

    db_path: str = "./data/embeddings.db"
    table_name: str = "file_info"
    memory_limit: int = 5
    similarity_threshold: float = 0.5
    ranker_mode: str = "boosted"
    name_boost: float = 0.1
    embed_provider: str = "ollama"  # ollama|hash|sentence
    embed_model: str = "mxbai-embed-large"
    sentence_model: str = DEFAULT_SENTENCE_MODEL
    embedding_service_url: str = DEFAULT_OLLAMA_HOST
    model_service_url: str = DEFAULT_OLLAMA_HOST
    ollama_model: str = "llama3"
    temperature: float = 0.7
    stream: bool = False
    show_document_names: bool = False
    include_document_name: bool = True
    debug: bool = False

    @property
    def embedding_host(self) -> str:
        return service_host(self.embedding_service_url)

    @property
    def model_host(self) -> str:
        return service_host(self.model_service_url)


# JSON config key -> Settings field
_FILE_KEYS = {
    "databasePath": "db_path",
    "tableName": "table_name",
    "memoryLimit": "memory_limit",
    "similarityThreshold": "similarity_threshold",
    "rankerMode": "ranker_mode",
    "nameBoost": "name_boost",
    "embedProvider": "embed_provider",
    "embeddingModel": "embed_model",
    "sentenceModel": "sentence_model",
    "embeddingServiceUrl": "embedding_service_url",
    "modelServiceUrl": "model_service_url",
    "model": "ollama_model",
    "temperature": "temperature",
    "stream": "stream",
    "showDocumentNames": "show_document_names",
    "includeDocumentName": "include_document_name",
    "debug": "debug",
}

# Environment variable -> Settings field
_ENV_KEYS = {
    "DB_PATH": "db_path",
    "TABLE_NAME": "table_name",
    "MEMORY_LIMIT": "memory_limit",
    "SIMILARITY_THRESHOLD": "similarity_threshold",
    "RANKER_MODE": "ranker_mode",
    "NAME_BOOST": "name_boost",
    "EMBED_PROVIDER": "embed_provider",
    "EMBED_MODEL": "embed_model",
    "SENTENCE_MODEL": "sentence_model",
    "EMBEDDING_SERVICE_URL": "embedding_service_url",
    "MODEL_SERVICE_URL": "model_service_url",
    "OLLAMA_MODEL": "ollama_model",
    "TEMPERATURE": "temperature",
    "STREAM": "stream",
    "SHOW_DOCUMENT_NAMES": "show_document_names",
    "INCLUDE_DOCUMENT_NAME": "include_document_name",
    "DEBUG": "debug",
}

_INT_FIELDS = {"memory_limit"}
_FLOAT_FIELDS = {"similarity_threshold", "name_boost", "temperature"}
_BOOL_FIELDS = {"stream", "show_document_names", "include_document_name", "debug"}

_TRUE_WORDS = {"true", "1", "yes", "on"}
_FALSE_WORDS = {"false", "0", "no", "off"}


def _coerce(field: str, value: Any) -> Any:
    """Convert a raw file/env value to the type of the Settings field."""
    if value is None:
        raise ConfigurationError(f"Missing value for {field}")
    try:
        if field in _BOOL_FIELDS:
            if isinstance(value, bool):
                return value
            word = str(value).strip().lower()
            if word in _TRUE_WORDS:
                return True
            if word in _FALSE_WORDS:
                return False
            raise ValueError("expected true/false, 1/0, yes/no or on/off")
        if field in _INT_FIELDS:
            if isinstance(value, bool):
                raise ValueError("boolean is not an integer")
            if isinstance(value, float) and not value.is_integer():
                raise ValueError("fractional value")
            return int(value)
        if field in _FLOAT_FIELDS:
            if isinstance(value, bool):
                raise ValueError("boolean is not a number")
            return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value for {field}: {value!r} ({e})") from e
    return str(value)


def read_config_file(config_path: str) -> Dict[str, Any]:
    """Read a JSON config file and map its keys onto Settings fields. Unknown keys are ignored."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Config file {config_path} is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a JSON object")

    return {
        _FILE_KEYS[key]: _coerce(_FILE_KEYS[key], value)
        for key, value in raw.items()
        if key in _FILE_KEYS
    }


def read_environment(environ: Mapping[str, str]) -> Dict[str, Any]:
    """Collect the Settings overrides present in an environment mapping."""
    return {
        field: _coerce(field, environ[name])
        for name, field in _ENV_KEYS.items()
        if name in environ and environ[name] != ""
    }


def load_settings(config_path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Resolve settings from defaults, an optional JSON file and the environment.

    Args:
        config_path: Optional JSON config file; ``CONFIG_PATH`` is used when omitted
        environ: Environment mapping, defaults to ``os.environ``

    Returns:
        The resolved Settings
    """
    environ = os.environ if environ is None else environ
    config_path = config_path or environ.get("CONFIG_PATH")

    overrides: Dict[str, Any] = {}
    if config_path:
        overrides.update(read_config_file(config_path))
    overrides.update(read_environment(environ))

    return replace(Settings(), **overrides)


def validate_settings(settings: Settings) -> List[str]:
    """Validate settings and return any issues."""
    issues = []

    if settings.memory_limit < 1:
        issues.append("MEMORY_LIMIT must be >= 1")

    if settings.ranker_mode not in RANKER_MODES:
        issues.append(f"Invalid RANKER_MODE: {settings.ranker_mode}")

    if settings.embed_provider not in EMBED_PROVIDERS:
        issues.append(f"Invalid EMBED_PROVIDER: {settings.embed_provider}")

    if not -1.0 <= settings.similarity_threshold <= 2.0:
        issues.append("SIMILARITY_THRESHOLD must be between -1 and 2")

    if not settings.table_name.isidentifier():
        issues.append(f"Invalid TABLE_NAME: {settings.table_name}")

    return issues


def service_host(url: str) -> str:
    """Reduce a service URL such as ``http://host:11434/api/embeddings`` to its host part."""
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return url.rstrip("/")
    return f"{parts.scheme}://{parts.netloc}"


def get_ranker(settings: Settings):
    """Get the configured similarity ranker."""
    from docquery.vector.similarity import SimilarityRanker
    return SimilarityRanker(mode=settings.ranker_mode, name_boost=settings.name_boost)


def get_embedding_provider(settings: Settings):
    """Get the configured embedding provider implementation."""
    if settings.embed_provider == "hash":
        from docquery.llm.embeddings import DeterministicHashEmbedding
        return DeterministicHashEmbedding()
    elif settings.embed_provider == "sentence":
        from docquery.llm.embeddings import SentenceTransformerEmbedding
        return SentenceTransformerEmbedding(settings.sentence_model)
    else:
        from docquery.llm.embeddings import OllamaEmbedding
        return OllamaEmbedding(model=settings.embed_model, host=settings.embedding_host)
