"""
Interactive console: loop behaviour and startup failures.
"""

import sqlite3
from unittest.mock import MagicMock

import pytest

from docquery import cli
from docquery.core.exceptions import EmbeddingServiceError
from docquery.core.retrieval import RetrievalCore
from docquery.vector.similarity import SimilarityRanker


def scripted_input(lines):
    """Input function that replays lines, then signals EOF."""
    remaining = list(lines)

    def _input(prompt):
        if not remaining:
            raise EOFError
        return remaining.pop(0)
    return _input


@pytest.fixture
def core():
    core = RetrievalCore(SimilarityRanker("boosted"), memory_limit=3, similarity_threshold=0.5)
    core.load([("manual.pdf", "[1.0, 0.0]", "Press the red button.")])
    return core


@pytest.fixture
def documents_db(tmp_path):
    db_path = tmp_path / "embeddings.db"
    conn = sqlite3.connect(db_path)
    conn.execute("CREATE TABLE file_info (nombre TEXT, embedding TEXT, original_content TEXT)")
    conn.execute("INSERT INTO file_info VALUES ('manual.pdf', '[1.0, 0.0]', 'Press the red button.')")
    conn.commit()
    conn.close()
    return str(db_path)


def test_colorize():
    assert cli.colorize("hi", cli.RED) == "\x1b[31mhi\x1b[0m"


def test_run_loop_answers_and_stops_on_eof(core):
    embedder = MagicMock()
    embedder.embed_text.side_effect = [[1.0, 0.0], [0.0, 1.0]]
    generator = MagicMock()
    generator.generate.return_value = "It starts."
    printed = []

    answered = cli.run_loop(core, embedder, generator,
                            input_fn=scripted_input(["how to start", "   ", "unrelated"]),
                            out=printed.append)

    assert answered == 1
    output = "\n".join(printed)
    assert "manual.pdf" in output
    assert "It starts." in output
    assert "No relevant document found." in output
    # Blank line was skipped without embedding
    assert embedder.embed_text.call_count == 2
    assert core.memory.get_all() == ["manual.pdf"]


def test_run_loop_continues_after_service_error(core):
    embedder = MagicMock()
    embedder.embed_text.side_effect = [EmbeddingServiceError("service down"), [1.0, 0.0]]
    generator = MagicMock()
    generator.generate.return_value = "ok"
    printed = []

    answered = cli.run_loop(core, embedder, generator,
                            input_fn=scripted_input(["first", "second"]),
                            out=printed.append)

    assert answered == 1
    assert any("service down" in line for line in printed)


def test_run_loop_stops_on_keyboard_interrupt(core):
    def interrupted(prompt):
        raise KeyboardInterrupt

    assert cli.run_loop(core, MagicMock(), MagicMock(), input_fn=interrupted, out=lambda *_: None) == 0


def test_run_loop_stops_on_interrupt_during_generation(core):
    embedder = MagicMock()
    embedder.embed_text.return_value = [1.0, 0.0]
    generator = MagicMock()
    generator.generate.side_effect = KeyboardInterrupt
    printed = []

    answered = cli.run_loop(core, embedder, generator,
                            input_fn=scripted_input(["how to start", "never read"]),
                            out=printed.append)

    assert answered == 0
    assert generator.generate.call_count == 1
    assert embedder.embed_text.call_count == 1
    assert printed == [""]


def test_print_outcome_truncates_content():
    from docquery.core.query_service import QueryOutcome
    from docquery.vector.types import QueryMatch

    printed = []
    outcome = QueryOutcome(query="q", match=QueryMatch("doc", "x" * 500, 0.9), reply="answer")
    cli.print_outcome(outcome, out=printed.append)

    content_line = next(line for line in printed if "Original content" in line)
    assert content_line.endswith("x" * 200 + "...")
    assert "x" * 201 not in content_line


def test_main_missing_database(tmp_path, monkeypatch):
    monkeypatch.delenv("CONFIG_PATH", raising=False)
    assert cli.main(["--db", str(tmp_path / "missing.db")]) == 1


def test_main_invalid_settings(documents_db, monkeypatch):
    monkeypatch.delenv("CONFIG_PATH", raising=False)
    assert cli.main(["--db", documents_db, "--memory-limit", "0"]) == 1


def test_main_bad_config_file(tmp_path):
    assert cli.main(["--config", str(tmp_path / "nope.json")]) == 1


def test_main_runs_loop(documents_db, monkeypatch):
    monkeypatch.delenv("CONFIG_PATH", raising=False)
    monkeypatch.setenv("EMBED_PROVIDER", "hash")
    captured = {}

    def fake_run_loop(core, embedding_provider, generator, include_document_name=True):
        captured["core"] = core
        captured["generator"] = generator
        return 0

    monkeypatch.setattr(cli, "run_loop", fake_run_loop)

    assert cli.main(["--db", documents_db, "--ranker", "plain", "--memory-limit", "2"]) == 0
    assert captured["core"].store.size() == 1
    assert captured["core"].ranker.mode == "plain"
    assert captured["core"].memory.capacity == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
