"""
Embedding providers that turn query text into a vector.
The Ollama provider talks to the embedding service; the others run offline.
"""

from abc import ABC, abstractmethod
import hashlib
from typing import List, Optional

import ollama

from docquery.core.config import DEFAULT_OLLAMA_HOST, DEFAULT_SENTENCE_MODEL
from docquery.core.exceptions import EmbeddingServiceError
from util.logging import logger


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    def embed_text(self, text: str) -> List[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass


class OllamaEmbedding(IEmbeddingProvider):
    """Embedding provider backed by an Ollama server's embeddings API."""

    def __init__(self, model: str = "mxbai-embed-large", host: str = DEFAULT_OLLAMA_HOST,
                 client: Optional[ollama.Client] = None):
        self.model = model
        self.host = host
        self._client = client
        self._dimension = None

    @property
    def client(self) -> ollama.Client:
        if self._client is None:
            self._client = ollama.Client(host=self.host)
        return self._client

    def embed_text(self, text: str) -> List[float]:
        """
        Embed text through the Ollama server.

        Raises:
            EmbeddingServiceError: on transport errors, or when the response
                holds no embedding, an empty one, or one that is all zeros
        """
        try:
            response = self.client.embeddings(model=self.model, prompt=text)
        except (ollama.ResponseError, ollama.RequestError, ConnectionError) as e:
            logger.error(f"Embedding request to {self.host} failed: {e}")
            raise EmbeddingServiceError(f"Embedding request failed: {e}") from e

        try:
            embedding = response["embedding"]
        except (KeyError, TypeError):
            embedding = None
        if not isinstance(embedding, (list, tuple)):
            raise EmbeddingServiceError("Embedding response does not contain a valid embedding")

        embedding = list(embedding)
        if not embedding or all(value == 0 for value in embedding):
            raise EmbeddingServiceError("Generated embedding is empty or contains only zeros")

        self._dimension = len(embedding)
        return embedding

    def get_dimension(self) -> int:
        """Dimension of the last embedding, probing the server if none was made yet."""
        if self._dimension is None:
            self.embed_text("test")
        return self._dimension


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider for testing purposes.

    Produces reproducible vectors without a model or a server. Similar texts
    do not get similar vectors; only identical texts do.
    """

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    def embed_text(self, text: str) -> List[float]:
        """Generate deterministic embedding vector using hash function."""
        vector = []
        counter = 0
        while len(vector) < self.dimension:
            # Extend the digest stream until enough components exist
            hex_dig = hashlib.sha256(f"{counter}:{text}".encode()).hexdigest()
            for i in range(0, len(hex_dig), 8):
                if len(vector) >= self.dimension:
                    break
                value = int(hex_dig[i:i + 8], 16)
                # Map to [-1, 1] for cosine similarity
                vector.append((value / (2 ** 32)) * 2 - 1)
            counter += 1

        return vector

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Embeds queries locally with sentence-transformers.

    The default model is the Hugging Face release of mxbai-embed-large, so
    query vectors share a dimension with documents embedded through Ollama.
    """

    def __init__(self, model_name: str = DEFAULT_SENTENCE_MODEL, model=None):
        self.model_name = model_name
        self._model = model

    @property
    def model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            logger.info(f"Loading sentence-transformers model {self.model_name}")
            try:
                self._model = SentenceTransformer(self.model_name)
            except (OSError, ValueError) as e:
                raise EmbeddingServiceError(f"Cannot load model {self.model_name}: {e}") from e
        return self._model

    def embed_text(self, text: str) -> List[float]:
        """
        Encode one text with the local model.

        Raises:
            EmbeddingServiceError: when the model cannot be loaded or yields
                an empty or all-zero vector
        """
        embedding = [float(value) for value in self.model.encode(text, convert_to_numpy=True)]
        if not embedding or all(value == 0 for value in embedding):
            raise EmbeddingServiceError("Generated embedding is empty or contains only zeros")
        return embedding

    def get_dimension(self) -> int:
        return self.model.get_sentence_embedding_dimension()
