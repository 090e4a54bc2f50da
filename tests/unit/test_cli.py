"""Unit tests for the command-line interface."""

from __future__ import annotations

import json

import pytest

from docsearch.cli import build_parser, main


def _run(service, *argv: str) -> int:
    return main(list(argv), service_factory=lambda: service)


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_index_and_search(service, store, tmp_path, capsys) -> None:
    (tmp_path / "a.txt").write_text("apple banana")
    (tmp_path / "b.txt").write_text("car truck")

    assert _run(service, "index", str(tmp_path)) == 0
    assert "Indexed 2 document(s)" in capsys.readouterr().out

    assert _run(service, "search", "apple") == 0
    out = capsys.readouterr().out
    assert "a.txt" in out
    assert "b.txt" not in out


def test_search_without_matches(service, capsys) -> None:
    assert _run(service, "search", "anything") == 0
    assert capsys.readouterr().out.strip() == "No relevant documents found."


def test_index_missing_directory(service, tmp_path) -> None:
    assert _run(service, "index", str(tmp_path / "missing")) == 1


def test_reindex_clears_store(service, store, tmp_path, make_doc) -> None:
    store.documents["stale"] = make_doc("stale")
    (tmp_path / "a.txt").write_text("fresh")

    _run(service, "index", str(tmp_path), "--reindex")

    assert "stale" not in store.documents
    assert len(store.documents) == 1


def test_stats_prints_json(service, store, make_doc, capsys) -> None:
    store.documents["d1"] = make_doc("d1", project="Apollo")

    assert _run(service, "stats") == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["totalDocuments"] == 1
    assert payload["projects"] == ["Apollo"]


def test_clear(service, store, make_doc, capsys) -> None:
    store.documents["d1"] = make_doc("d1")

    assert _run(service, "clear") == 0
    assert store.documents == {}
    assert "All documents deleted successfully" in capsys.readouterr().out


def test_search_store_failure_reported(service, store, make_doc, caplog) -> None:
    store.documents["d1"] = make_doc("d1")
    store.fail = True

    assert _run(service, "search", "apple") == 1
    assert "store unavailable" in caplog.text


def test_zero_limit_rejected(service, store, make_doc) -> None:
    store.documents["d1"] = make_doc("d1")

    assert _run(service, "search", "apple", "--limit", "0") == 1
    assert store.query_calls == []
