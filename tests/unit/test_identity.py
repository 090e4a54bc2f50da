"""Unit tests for deterministic document identity."""

from __future__ import annotations

import os

import pytest

from docsearch.ingestion.identity import display_name, document_id, locator_from_id


class TestDocumentId:
    def test_same_locator_same_id(self) -> None:
        assert document_id("/docs/a.txt") == document_id("/docs/a.txt")

    def test_distinct_locators_distinct_ids(self) -> None:
        locators = ["/docs/a.txt", "/docs/a.txt ", "/docs/A.txt", "/docs/b.txt", "https://cdn/x/a.txt"]
        ids = {document_id(loc) for loc in locators}
        assert len(ids) == len(locators)

    def test_id_is_reversible(self) -> None:
        locator = "https://res.example.com/raw/upload/v1/documents/Q3 plan ✓.pdf"
        assert locator_from_id(document_id(locator)) == locator

    def test_id_is_url_safe(self) -> None:
        doc_id = document_id("/???/>>>/~~~.md")
        assert "/" not in doc_id
        assert "+" not in doc_id

    def test_undecodable_file_name_round_trips(self) -> None:
        locator = "/docs/" + os.fsdecode(b"caf\xe9.txt")

        doc_id = document_id(locator)

        assert locator_from_id(doc_id) == locator
        assert doc_id != document_id("/docs/café.txt")

    def test_known_value(self) -> None:
        # Pure function of the locator: no salt, no machine state.
        assert document_id("/a") == "L2E="

    def test_empty_locator_rejected(self) -> None:
        with pytest.raises(ValueError):
            document_id("")

    def test_invalid_id_rejected(self) -> None:
        with pytest.raises(ValueError, match="not a document id"):
            locator_from_id("abc")


class TestDisplayName:
    def test_relative_to_root(self) -> None:
        assert display_name("/docs/team/plan.md", "/docs") == "team/plan.md"

    def test_outside_root_falls_back_to_name(self) -> None:
        assert display_name("/elsewhere/plan.md", "/docs") == "plan.md"

    def test_plain_path(self) -> None:
        assert display_name("/tmp/a.txt") == "a.txt"

    def test_url_tail(self) -> None:
        url = "https://res.example.com/raw/upload/v1/documents/report%20final.pdf"
        assert display_name(url) == "report final.pdf"

    def test_file_uri(self) -> None:
        assert display_name("file:///srv/uploads/notes-1a2b3c4d.txt") == "notes-1a2b3c4d.txt"
