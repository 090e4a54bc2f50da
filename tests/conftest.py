"""Shared pytest configuration, fakes and fixtures.

The fakes stand in for the external collaborators (embedding service,
classifier, vector store) so the whole pipeline runs in-process.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from pathlib import Path

import pytest

from docsearch.classification.classifier import DocumentClassifier
from docsearch.config import Settings
from docsearch.errors import StoreFailure
from docsearch.ingestion.embedder import EmbeddingService
from docsearch.ingestion.enrichment import EnrichmentPipeline
from docsearch.ingestion.indexer import Indexer
from docsearch.models import Classification, Document
from docsearch.retrieval.base import VectorStoreBase
from docsearch.retrieval.models import ScoredDocument
from docsearch.service import DocumentService
from docsearch.storage.blob import LocalBlobStore


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that run against a real Chroma client")


# ── Fakes ───────────────────────────────────────────────────────────────


class FakeEmbeddingService(EmbeddingService):
    """Bag-of-words embedder: every distinct lowercase word gets its own axis."""

    def __init__(self, dim: int = 64) -> None:
        self.dim = dim
        self.vocabulary: dict[str, int] = {}
        self.calls: list[str] = []
        self.fail_on: set[str] = set()

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if any(marker in text for marker in self.fail_on):
            raise RuntimeError("embedding quota exceeded")
        vector = [0.0] * self.dim
        for word in re.findall(r"[a-z0-9]+", text.lower()):
            index = self.vocabulary.setdefault(word, len(self.vocabulary) % self.dim)
            vector[index] += 1.0
        return vector


class FakeClassifier(DocumentClassifier):
    """Returns canned labels per filename; can be told to fail."""

    def __init__(self) -> None:
        self.labels: dict[str, Classification] = {}
        self.default: Classification | None = None
        self.fail_on: set[str] = set()
        self.calls: list[tuple[str, str]] = []

    async def classify(self, text: str, filename: str) -> Classification | None:
        self.calls.append((text, filename))
        if filename in self.fail_on:
            raise RuntimeError("classification model unavailable")
        return self.labels.get(filename, self.default)


def cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    if norm == 0:
        return 0.0
    return max(-1.0, min(1.0, dot / norm))


class InMemoryVectorStore(VectorStoreBase):
    """Dict-backed store with brute-force cosine search."""

    def __init__(self) -> None:
        super().__init__("memory")
        self.documents: dict[str, Document] = {}
        self.query_calls: list[int] = []
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise StoreFailure("store unavailable")

    async def upsert(self, document: Document) -> Document:
        self._check()
        existing = self.documents.get(document.id)
        created_at = (existing.created_at if existing else None) or datetime.now(timezone.utc)
        stored = document.model_copy(update={"created_at": created_at})
        self.documents[document.id] = stored
        return stored

    async def query(self, embedding: list[float], top_k: int) -> list[ScoredDocument]:
        self._check()
        self.query_calls.append(top_k)
        scored = [
            ScoredDocument(document=doc, similarity=cosine(embedding, doc.embedding))
            for doc in self.documents.values()
        ]
        scored.sort(key=lambda s: s.similarity, reverse=True)
        return scored[:top_k]

    async def get(self, doc_id: str) -> Document | None:
        self._check()
        return self.documents.get(doc_id)

    async def delete_one(self, doc_id: str) -> None:
        self._check()
        self.documents.pop(doc_id, None)

    async def delete_all(self) -> None:
        self._check()
        self.documents.clear()

    async def count(self) -> int:
        self._check()
        return len(self.documents)

    async def list_all(self) -> list[Document]:
        self._check()
        return sorted(self.documents.values(), key=lambda d: d.created_at, reverse=True)


def make_document(doc_id: str = "doc-1", **overrides) -> Document:
    fields = {
        "id": doc_id,
        "filename": f"{doc_id}.txt",
        "source_locator": f"/docs/{doc_id}.txt",
        "content_preview": f"Preview of {doc_id}",
        "embedding": [1.0, 0.0, 0.0],
        "size": 10,
        "modified_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return Document(**fields)


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture()
def embedder() -> FakeEmbeddingService:
    return FakeEmbeddingService()


@pytest.fixture()
def classifier() -> FakeClassifier:
    return FakeClassifier()


@pytest.fixture()
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture()
def pipeline(embedder: FakeEmbeddingService, classifier: FakeClassifier) -> EnrichmentPipeline:
    return EnrichmentPipeline(embedder, classifier)


@pytest.fixture()
def indexer(store: InMemoryVectorStore, pipeline: EnrichmentPipeline) -> Indexer:
    return Indexer(store, pipeline, max_concurrency=4)


@pytest.fixture()
def config(tmp_path: Path) -> Settings:
    documents = tmp_path / "documents"
    documents.mkdir()
    return Settings(
        documents_path=str(documents),
        upload_path=str(tmp_path / "uploads"),
        index_concurrency=2,
        _env_file=None,
    )


@pytest.fixture()
def service(
    store: InMemoryVectorStore,
    embedder: FakeEmbeddingService,
    classifier: FakeClassifier,
    config: Settings,
) -> DocumentService:
    return DocumentService(
        store,
        embedder,
        classifier,
        LocalBlobStore(config.upload_path),
        config=config,
    )


@pytest.fixture()
def make_doc():
    """Factory for :class:`Document` instances with sensible defaults."""
    return make_document
