"""
Per-query pipeline: embed the query, search the core, then ask the model about the winner.
"""

from dataclasses import dataclass
from typing import Optional

from docquery.llm.generator import build_prompt
from docquery.vector.types import QueryMatch
from .retrieval import RetrievalCore
from util.logging import logger


@dataclass(frozen=True)
class QueryOutcome:
    """What happened to one query."""

    query: str
    match: QueryMatch
    reply: Optional[str] = None


def query_documents(query: str, core: RetrievalCore, embedding_provider, generator,
                    include_document_name: bool = True) -> QueryOutcome:
    """
    Answer one query against the loaded documents.

    Blank queries are skipped without calling any service. A query with no
    relevant document returns without contacting the model.

    Args:
        query: Raw query text
        core: Loaded retrieval core
        embedding_provider: Provider with ``embed_text``
        generator: Generator with ``generate``
        include_document_name: Put the document name into the prompt

    Returns:
        QueryOutcome with the match and, when a document matched, the model reply

    Raises:
        EmbeddingServiceError, GenerationServiceError: from the collaborators
    """
    if not query or not query.strip():
        return QueryOutcome(query=query, match=QueryMatch())

    query_vector = embedding_provider.embed_text(query)
    match = core.find_best(query_vector, query)

    if not match.found:
        logger.info(f"No relevant document for query (best score: {match.score})")
        return QueryOutcome(query=query, match=match)

    prompt = build_prompt(query, match, include_document_name=include_document_name)
    reply = generator.generate(prompt)
    return QueryOutcome(query=query, match=match, reply=reply)
