"""Service facade — the operations exposed to transports (HTTP, CLI).

All collaborators are injected, so tests can substitute fakes for the
vector store, embedding service, classifier and blob store.  Mutating
operations return :class:`~docsearch.models.OperationResult` envelopes
rather than raising.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from docsearch.classification.classifier import DocumentClassifier
from docsearch.config import Settings, settings as default_settings
from docsearch.errors import DocSearchError
from docsearch.ingestion.embedder import EmbeddingService
from docsearch.ingestion.enrichment import EnrichmentPipeline
from docsearch.ingestion.indexer import Indexer
from docsearch.ingestion.jobs import CancellationToken, IndexJob, JobRegistry
from docsearch.models import IndexAccepted, OperationResult, UploadResult
from docsearch.retrieval.base import VectorStoreBase
from docsearch.retrieval.models import DocumentStats, DocumentSummary, SearchResponse
from docsearch.retrieval.search import SearchEngine
from docsearch.retrieval.stats import StatsAggregator
from docsearch.storage.blob import BlobStore

logger = logging.getLogger(__name__)


class DocumentService:
    """Wires the pipeline, indexer, search engine and statistics together.

    Parameters
    ----------
    store:
        Vector store holding indexed documents.
    embedder:
        Embedding service shared by indexing and search.
    classifier:
        Document classifier used during enrichment.
    blob_store:
        Destination for uploaded files.
    config:
        Windows, threshold, concurrency and default paths.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: EmbeddingService,
        classifier: DocumentClassifier,
        blob_store: BlobStore,
        *,
        config: Settings = default_settings,
    ) -> None:
        self.config = config
        self.store = store
        self.blob_store = blob_store
        self.pipeline = EnrichmentPipeline(
            embedder,
            classifier,
            embed_window=config.embed_window,
            classify_window=config.classify_window,
            preview_cap=config.preview_cap,
            embedding_dim=config.embedding_dim,
        )
        self.indexer = Indexer(store, self.pipeline, max_concurrency=config.index_concurrency)
        self.search_engine = SearchEngine(store, embedder, threshold=config.similarity_threshold)
        self.stats_aggregator = StatsAggregator(store)
        self.jobs = JobRegistry()

    # -- read operations ------------------------------------------------------

    async def search(self, query: str, limit: int | None = None) -> SearchResponse:
        return await self.search_engine.search(query, limit if limit is not None else self.config.search_limit)

    async def stats(self) -> DocumentStats:
        return await self.stats_aggregator.stats()

    async def list_documents(self) -> list[DocumentSummary]:
        return [DocumentSummary.from_document(doc) for doc in await self.store.list_all()]

    async def get_document(self, doc_id: str) -> DocumentSummary | None:
        doc = await self.store.get(doc_id)
        return DocumentSummary.from_document(doc) if doc is not None else None

    async def health(self) -> dict[str, Any]:
        """Report store readiness; the document count is omitted while the store is down."""
        ready = await self.store.health_check()
        return {
            "status": "running" if ready else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "store": "ready" if ready else "unavailable",
            "documentsIndexed": await self.store.count() if ready else None,
        }

    # -- indexing -------------------------------------------------------------

    async def index(self, root: str | Path | None = None, *, reindex: bool = False) -> IndexAccepted:
        """Start indexing *root* in the background and return immediately.

        With *reindex*, the store is cleared before the walk begins.
        Progress is observable through :meth:`index_status` or by polling
        the document count.
        """
        root = Path(root or self.config.documents_path)
        if not root.is_dir():
            return IndexAccepted(success=False, message=f"Directory not found: {root}")

        async def work(token: CancellationToken) -> int:
            if reindex:
                logger.info("Clearing existing documents before re-index")
                await self.store.delete_all()
            return await self.indexer.index_directory(root, cancel_token=token)

        job = self.jobs.start(work)
        return IndexAccepted(
            success=True,
            message="Indexing started in background",
            indexing=True,
            job_id=job.job_id,
        )

    def index_status(self, job_id: str) -> IndexJob | None:
        return self.jobs.get(job_id)

    def cancel_index(self, job_id: str) -> OperationResult:
        job = self.jobs.get(job_id)
        if job is None:
            return OperationResult(success=False, message=f"Unknown indexing job: {job_id}")
        if not job.cancel():
            return OperationResult(success=False, message=f"Indexing job {job_id} already {job.status.value}")
        return OperationResult(success=True, message=f"Cancellation requested for job {job_id}")

    async def upload(self, files: Iterable[tuple[str, bytes]]) -> UploadResult:
        """Store each ``(filename, data)`` pair in the blob store and index it."""
        files = list(files)
        if not files:
            return UploadResult(success=False, message="No files provided")

        indexed = failed = 0
        for filename, data in files:
            try:
                blob = await self.blob_store.store(data, filename)
                doc = await self.indexer.index_buffer(data, filename, blob.url, blob.size)
            except Exception:
                logger.exception("Error processing upload %s", filename)
                doc = None
            if doc is None:
                failed += 1
            else:
                indexed += 1

        message = f"Uploaded and indexed {indexed} file(s)"
        if failed:
            message += f", {failed} failed"
        return UploadResult(success=indexed > 0, message=message, indexed=indexed, failed=failed)

    # -- deletion -------------------------------------------------------------

    async def delete_one(self, doc_id: str) -> OperationResult:
        try:
            await self.store.delete_one(doc_id)
        except DocSearchError as exc:
            logger.error("Delete of %s failed: %s", doc_id, exc)
            return OperationResult(success=False, message="Failed to delete document", error=str(exc))
        return OperationResult(success=True, message="Document deleted successfully")

    async def delete_all(self) -> OperationResult:
        try:
            await self.store.delete_all()
        except DocSearchError as exc:
            logger.error("Clear-all failed: %s", exc)
            return OperationResult(success=False, message="Failed to delete all documents", error=str(exc))
        return OperationResult(success=True, message="All documents deleted successfully")


def build_default_service(config: Settings = default_settings) -> DocumentService:
    """Construct a :class:`DocumentService` backed by Chroma, LangChain and local disk."""
    from docsearch.classification.classifier import LLMDocumentClassifier, get_chat_model
    from docsearch.ingestion.embedder import get_embedding_service
    from docsearch.retrieval.chroma_store import ChromaVectorStore
    from docsearch.storage.blob import LocalBlobStore

    return DocumentService(
        store=ChromaVectorStore(config.chroma_collection, host=config.chroma_host, port=config.chroma_port),
        embedder=get_embedding_service(config),
        classifier=LLMDocumentClassifier(get_chat_model(config=config)),
        blob_store=LocalBlobStore(config.upload_path),
        config=config,
    )
