"""Tests for document sources."""

from __future__ import annotations

import pytest

from graphbind import ConfigurationError, DocumentSource, FileDocumentSource, MappingDocumentSource


def test_file_source_searches_locations_in_order(tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    (first / "booksQuery.gql").write_text("query { books { id } }")
    (second / "booksQuery.graphql").write_text("query { books { name } }")
    (second / "bookQuery.graphql").write_text("query { bookById(id: 1) { id } }")

    source = FileDocumentSource([first, second])

    assert source.get_document("booksQuery") == "query { books { id } }"
    assert source.get_document("bookQuery") == "query { bookById(id: 1) { id } }"


def test_file_source_prefers_graphql_extension(tmp_path):
    (tmp_path / "bookQuery.graphql").write_text("graphql")
    (tmp_path / "bookQuery.gql").write_text("gql")

    assert FileDocumentSource([tmp_path]).get_document("bookQuery") == "graphql"


def test_file_source_caches_content(tmp_path):
    path = tmp_path / "bookQuery.graphql"
    path.write_text("query { first }")
    source = FileDocumentSource([tmp_path])

    source.get_document("bookQuery")
    path.write_text("query { second }")

    assert source.get_document("bookQuery") == "query { first }"


def test_file_source_missing_document(tmp_path):
    source = FileDocumentSource([tmp_path])

    with pytest.raises(ConfigurationError, match="Failed to find document 'missing'"):
        source.get_document("missing")


def test_mapping_source():
    source = MappingDocumentSource({"bookQuery": "query { book }"})

    assert isinstance(source, DocumentSource)
    assert source.get_document("bookQuery") == "query { book }"
    with pytest.raises(ConfigurationError, match="Document 'other' not found"):
        source.get_document("other")
