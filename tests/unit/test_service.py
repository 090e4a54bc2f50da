"""Unit tests for the service facade."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from docsearch.ingestion.jobs import JobStatus


async def _run_to_completion(service, accepted):
    job = service.index_status(accepted.job_id)
    await job.task
    return job


class TestIndex:
    @pytest.mark.asyncio
    async def test_returns_immediately_and_job_completes(self, service, store, config) -> None:
        docs = Path(config.documents_path)
        (docs / "a.txt").write_text("alpha")
        (docs / "b.md").write_text("beta")

        accepted = await service.index()

        assert accepted.success is True
        assert accepted.indexing is True
        assert accepted.message == "Indexing started in background"

        job = await _run_to_completion(service, accepted)
        assert job.status is JobStatus.SUCCEEDED
        assert job.count == 2
        assert await store.count() == 2

    @pytest.mark.asyncio
    async def test_explicit_root(self, service, store, tmp_path) -> None:
        other = tmp_path / "other"
        other.mkdir()
        (other / "x.json").write_text('{"k": "v"}')

        job = await _run_to_completion(service, await service.index(other))

        assert job.count == 1

    @pytest.mark.asyncio
    async def test_missing_directory_reported(self, service, tmp_path) -> None:
        accepted = await service.index(tmp_path / "missing")

        assert accepted.success is False
        assert accepted.message.startswith("Directory not found")
        assert accepted.job_id is None

    @pytest.mark.asyncio
    async def test_reindex_clears_first(self, service, store, config, make_doc) -> None:
        await store.upsert(make_doc("stale"))
        (Path(config.documents_path) / "fresh.txt").write_text("fresh")

        await _run_to_completion(service, await service.index(reindex=True))

        assert "stale" not in store.documents
        assert [d.filename for d in store.documents.values()] == ["fresh.txt"]

    @pytest.mark.asyncio
    async def test_failing_store_marks_job_failed_on_reindex(self, service, store) -> None:
        store.fail = True

        job = await _run_to_completion(service, await service.index(reindex=True))

        assert job.status is JobStatus.FAILED
        assert "store unavailable" in job.error

    @pytest.mark.asyncio
    async def test_cancel_unknown_job(self, service) -> None:
        result = service.cancel_index("nope")
        assert result.success is False

    @pytest.mark.asyncio
    async def test_cancel_finished_job_refused(self, service) -> None:
        accepted = await service.index()
        await _run_to_completion(service, accepted)

        result = service.cancel_index(accepted.job_id)

        assert result.success is False
        assert "already succeeded" in result.message


class TestUpload:
    @pytest.mark.asyncio
    async def test_upload_counts(self, service, store, config) -> None:
        result = await service.upload(
            [
                ("notes.txt", b"meeting notes"),
                ("empty.txt", b""),
                ("tool.exe", b"MZ"),
            ]
        )

        assert result.success is True
        assert result.indexed == 1
        assert result.failed == 2
        assert result.message == "Uploaded and indexed 1 file(s), 2 failed"

        (doc,) = store.documents.values()
        assert doc.filename == "notes.txt"
        assert doc.source_locator.startswith("file://")
        assert any(Path(config.upload_path).iterdir())

    @pytest.mark.asyncio
    async def test_no_files(self, service) -> None:
        result = await service.upload([])
        assert result.success is False
        assert result.message == "No files provided"

    @pytest.mark.asyncio
    async def test_store_failure_counts_as_failed(self, service, store) -> None:
        store.fail = True

        result = await service.upload([("a.txt", b"alpha")])

        assert result.success is False
        assert result.indexed == 0
        assert result.failed == 1


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_one(self, service, store, make_doc) -> None:
        await store.upsert(make_doc("d1"))
        await store.upsert(make_doc("d2"))

        result = await service.delete_one("d1")

        assert result.success is True
        assert result.message == "Document deleted successfully"
        assert list(store.documents) == ["d2"]

    @pytest.mark.asyncio
    async def test_delete_all(self, service, store, make_doc) -> None:
        await store.upsert(make_doc("d1"))

        result = await service.delete_all()

        assert result.success is True
        assert result.message == "All documents deleted successfully"
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_delete_failures_become_envelopes(self, service, store) -> None:
        store.fail = True

        one = await service.delete_one("d1")
        everything = await service.delete_all()

        assert one.success is False
        assert one.message == "Failed to delete document"
        assert one.error == "store unavailable"
        assert everything.success is False
        assert everything.message == "Failed to delete all documents"


class TestReads:
    @pytest.mark.asyncio
    async def test_list_documents_newest_first(self, service, store, make_doc) -> None:
        store.documents["old"] = make_doc("old", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
        store.documents["new"] = make_doc("new", created_at=datetime(2024, 6, 1, tzinfo=timezone.utc))

        rows = await service.list_documents()

        assert [r.id for r in rows] == ["new", "old"]
        assert rows[0].locator == "/docs/new.txt"

    @pytest.mark.asyncio
    async def test_health(self, service, store, make_doc) -> None:
        await store.upsert(make_doc("d1"))

        health = await service.health()

        assert health["status"] == "running"
        assert health["store"] == "ready"
        assert health["documentsIndexed"] == 1
        assert "timestamp" in health

    @pytest.mark.asyncio
    async def test_health_reports_unavailable_store(self, service, store) -> None:
        store.fail = True

        health = await service.health()

        assert health["status"] == "degraded"
        assert health["store"] == "unavailable"
        assert health["documentsIndexed"] is None

    @pytest.mark.asyncio
    async def test_get_document(self, service, store, make_doc) -> None:
        await store.upsert(make_doc("d1", team="ops"))

        row = await service.get_document("d1")

        assert row.id == "d1"
        assert row.team == "ops"
        assert await service.get_document("missing") is None

    @pytest.mark.asyncio
    async def test_zero_limit_is_not_replaced_by_default(self, service, store, make_doc) -> None:
        await store.upsert(make_doc("d1"))

        with pytest.raises(ValueError):
            await service.search("anything", 0)
        assert store.query_calls == []

    @pytest.mark.asyncio
    async def test_search_uses_configured_default_limit(self, service, store, make_doc) -> None:
        await store.upsert(make_doc("d1"))

        await service.search("anything")

        assert store.query_calls == [2 * service.config.search_limit]
