#!/usr/bin/env python3
"""
Interactive query console.

Loads the stored embeddings once, then answers queries one at a time until
EOF or Ctrl-C.
"""

import argparse
import sys
from dataclasses import replace
from typing import Callable, List, Optional

from docquery.core.config import get_embedding_provider, load_settings, validate_settings
from docquery.core.db import iter_document_rows
from docquery.core.exceptions import ConfigurationError, DocQueryError, RecordSourceError
from docquery.core.query_service import QueryOutcome, query_documents
from docquery.core.retrieval import RetrievalCore
from docquery.llm.generator import OllamaGenerator
from util.logging import logger

GREEN = 32
RED = 31
BLUE = 34

PROMPT = "Enter your query: "


def colorize(text: str, color_code: int) -> str:
    """Wrap text in an ANSI color escape."""
    return f"\x1b[{color_code}m{text}\x1b[0m"


def print_outcome(outcome: QueryOutcome, out=print) -> None:
    """Print one query outcome the way the console shows it."""
    match = outcome.match
    if not match.found:
        if match.score is not None:
            out(f"{colorize('***** Similarity:', GREEN)} {match.score}")
        out(colorize("No relevant document found.", RED))
        return

    out(f"{colorize('***** Most relevant document:', GREEN)} {match.identifier}")
    out(f"{colorize('***** Similarity:', GREEN)} {match.score}")
    out(f"{colorize('***** Original content of the most relevant document:', GREEN)} {(match.content or '')[:200]}...")
    if outcome.reply is not None:
        out(f"{colorize('***** Model response:', BLUE)} {outcome.reply}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docquery",
        description="Ask questions against precomputed document embeddings."
    )
    parser.add_argument("--config", help="JSON config file (camelCase keys)")
    parser.add_argument("--db", dest="db_path", help="SQLite database holding the file_info table")
    parser.add_argument("--ranker", dest="ranker_mode", choices=["plain", "boosted"],
                        help="Similarity strategy")
    parser.add_argument("--threshold", dest="similarity_threshold", type=float,
                        help="Minimum score for a boosted match")
    parser.add_argument("--memory-limit", dest="memory_limit", type=int,
                        help="How many matched documents to remember")
    return parser


def run_loop(core: RetrievalCore, embedding_provider, generator, include_document_name: bool = True,
             input_fn: Callable[[str], str] = input, out=print) -> int:
    """
    Read queries until EOF or interrupt.

    Service errors are reported and the loop carries on with the next query.

    Returns:
        Number of queries answered with a matching document
    """
    answered = 0
    while True:
        try:
            query = input_fn(PROMPT)
        except (EOFError, KeyboardInterrupt):
            out("")
            break

        if not query.strip():
            continue

        try:
            outcome = query_documents(query, core, embedding_provider, generator,
                                      include_document_name=include_document_name)
        except KeyboardInterrupt:
            out("")
            break
        except DocQueryError as e:
            logger.error(f"Query failed: {e}")
            out(colorize(f"Error: {e}", RED))
            continue

        print_outcome(outcome, out=out)
        if outcome.match.found:
            answered += 1

    return answered


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the query console."""
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(config_path=args.config)
    except ConfigurationError as e:
        print(f"❌ {e}")
        return 1

    overrides = {
        name: getattr(args, name)
        for name in ("db_path", "ranker_mode", "similarity_threshold", "memory_limit")
        if getattr(args, name) is not None
    }
    settings = replace(settings, **overrides)

    issues = validate_settings(settings)
    if issues:
        for issue in issues:
            print(f"❌ {issue}")
        return 1

    logger.set_debug(settings.debug)

    core = RetrievalCore.from_settings(settings)
    try:
        rows = list(iter_document_rows(settings.db_path, settings.table_name))
    except RecordSourceError as e:
        print(f"💥 {e}")
        return 1

    report = core.load(rows, show_names=settings.show_document_names)
    print(f"Embeddings loaded: {report.accepted} accepted, {len(report.rejected)} rejected.")

    embedding_provider = get_embedding_provider(settings)
    generator = OllamaGenerator.from_settings(settings)

    run_loop(core, embedding_provider, generator,
             include_document_name=settings.include_document_name)
    print("👋 Bye.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
