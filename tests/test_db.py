"""
SQLite record source.
"""

import sqlite3

import pytest

from docquery.core.db import get_db, health_check, iter_document_rows
from docquery.core.exceptions import RecordSourceError
from docquery.core.retrieval import RetrievalCore
from docquery.vector.similarity import SimilarityRanker


@pytest.fixture
def documents_db(tmp_path):
    """Create a file_info table with a mix of good and bad embeddings."""
    db_path = tmp_path / "embeddings.db"
    conn = sqlite3.connect(db_path)
    conn.execute("CREATE TABLE file_info (nombre TEXT, embedding TEXT, original_content TEXT)")
    conn.executemany(
        "INSERT INTO file_info (nombre, embedding, original_content) VALUES (?, ?, ?)",
        [
            ("manual.pdf", "[1.0, 0.0, 0.0]", "How to operate the device."),
            ("broken.pdf", "not-a-vector", "Unparsable."),
            ("faq.txt", "[0.0, 1.0, 0.0]", "Frequently asked questions."),
            ("empty.txt", "[]", "No embedding."),
        ],
    )
    conn.commit()
    conn.close()
    return str(db_path)


def test_iter_document_rows_in_insertion_order(documents_db):
    rows = list(iter_document_rows(documents_db))
    assert [row[0] for row in rows] == ["manual.pdf", "broken.pdf", "faq.txt", "empty.txt"]
    assert rows[0] == ("manual.pdf", "[1.0, 0.0, 0.0]", "How to operate the device.")


def test_rows_load_into_core(documents_db):
    """Test that a database load keeps good rows and reports bad ones."""
    core = RetrievalCore(SimilarityRanker("plain"), memory_limit=2)

    report = core.load(iter_document_rows(documents_db))

    assert report.accepted == 2
    assert [name for name, _ in report.rejected] == ["broken.pdf", "empty.txt"]
    assert core.find_best([0.0, 1.0, 0.0]).identifier == "faq.txt"


def test_missing_database(tmp_path):
    with pytest.raises(RecordSourceError):
        list(iter_document_rows(str(tmp_path / "missing.db")))


def test_missing_table(tmp_path):
    db_path = tmp_path / "other.db"
    sqlite3.connect(db_path).close()
    with pytest.raises(RecordSourceError):
        list(iter_document_rows(str(db_path)))


def test_invalid_table_name(documents_db):
    with pytest.raises(RecordSourceError):
        list(iter_document_rows(documents_db, table="file_info; DROP TABLE file_info"))


def test_custom_table(tmp_path):
    db_path = tmp_path / "custom.db"
    conn = sqlite3.connect(db_path)
    conn.execute("CREATE TABLE docs (nombre TEXT, embedding TEXT, original_content TEXT)")
    conn.execute("INSERT INTO docs VALUES ('a', '[1]', 'content')")
    conn.commit()
    conn.close()

    assert list(iter_document_rows(str(db_path), table="docs")) == [("a", "[1]", "content")]


def test_health_check(documents_db, tmp_path):
    assert health_check(documents_db) is True
    assert health_check(documents_db, table="missing") is False
    assert health_check(str(tmp_path / "missing.db")) is False
    assert health_check(documents_db, table="bad name") is False


def test_get_db_closes_connection(documents_db):
    with get_db(documents_db) as conn:
        conn.execute("SELECT 1")
    with pytest.raises(sqlite3.ProgrammingError):
        conn.execute("SELECT 1")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
