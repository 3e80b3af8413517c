"""
Generation collaborator: sends the query plus the matched document to an Ollama model.
"""

from datetime import datetime
from typing import Optional

import ollama

from docquery.core.config import DEFAULT_OLLAMA_HOST
from docquery.core.exceptions import GenerationServiceError
from docquery.vector.types import QueryMatch
from util.logging import logger


def build_prompt(query: str, match: QueryMatch, include_document_name: bool = True) -> str:
    """
    Build the model prompt from the query and the matched document.

    With the document name the prompt reads ``Query/Document/Content`` on
    separate lines; without it, the query is followed directly by the content.
    """
    if include_document_name:
        return f"Query: {query}\nDocument: {match.identifier}\nContent: {match.content}"
    return f"{query}\n{match.content}"


class OllamaGenerator:
    """
    Thin wrapper around the Ollama generate API.
    Returns the reply text; streaming replies are joined into one string.
    """

    def __init__(self, model: str, host: str = DEFAULT_OLLAMA_HOST, temperature: float = 0.7,
                 stream: bool = False, client: Optional[ollama.Client] = None):
        self.model = model
        self.host = host
        self.temperature = temperature
        self.stream = stream
        self._client = client

    @classmethod
    def from_settings(cls, settings) -> "OllamaGenerator":
        return cls(
            model=settings.ollama_model,
            host=settings.model_host,
            temperature=settings.temperature,
            stream=settings.stream,
        )

    @property
    def client(self) -> ollama.Client:
        if self._client is None:
            self._client = ollama.Client(host=self.host)
        return self._client

    def generate(self, prompt: str) -> str:
        """
        Generate a reply for a prompt.

        Raises:
            GenerationServiceError: when the model service fails
        """
        start_time = datetime.now()
        try:
            response = self.client.generate(
                model=self.model,
                prompt=prompt,
                stream=self.stream,
                options={'temperature': self.temperature}
            )
            if self.stream:
                reply = "".join(chunk["response"] for chunk in response)
            else:
                reply = response["response"]
        except (ollama.ResponseError, ollama.RequestError, ConnectionError) as e:
            logger.error(f"Generation request to {self.host} failed: {e}")
            raise GenerationServiceError(f"Model request failed: {e}") from e

        processing_time = int((datetime.now() - start_time).total_seconds() * 1000)
        logger.log_operation("generator.generate", "success", {
            "model": self.model,
            "processing_time_ms": processing_time,
            "response_length": len(reply),
        })
        return reply
