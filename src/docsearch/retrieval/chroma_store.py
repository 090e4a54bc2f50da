"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any, TypeVar

from docsearch.config import settings
from docsearch.errors import StoreFailure
from docsearch.models import Document
from docsearch.retrieval.base import VectorStoreBase
from docsearch.retrieval.models import ScoredDocument

logger = logging.getLogger(__name__)

T = TypeVar("T")

_INCLUDE_FULL = ["documents", "metadatas", "embeddings"]


def _to_metadata(doc: Document) -> dict[str, Any]:
    """Flatten a :class:`Document` into Chroma metadata.

    Chroma metadata values must be flat str/int/float/bool, so tags are
    stored as a JSON string and unset labels are omitted entirely.
    """
    meta: dict[str, Any] = {
        "filename": doc.filename,
        "source_locator": doc.source_locator,
        "size": doc.size,
        "modified_at": doc.modified_at.isoformat(),
        "tags": json.dumps(doc.tags),
    }
    if doc.created_at is not None:
        meta["created_at"] = doc.created_at.isoformat()
    for key in ("category", "project", "team"):
        value = getattr(doc, key)
        if value is not None:
            meta[key] = value
    return meta


def _from_record(doc_id: str, content: str | None, meta: dict[str, Any] | None, embedding: Any) -> Document:
    meta = meta or {}
    return Document(
        id=doc_id,
        filename=meta.get("filename", ""),
        source_locator=meta.get("source_locator", ""),
        content_preview=content or "",
        embedding=[float(x) for x in embedding] if embedding is not None else [],
        category=meta.get("category"),
        project=meta.get("project"),
        team=meta.get("team"),
        tags=json.loads(meta.get("tags") or "[]"),
        size=meta.get("size", 0),
        modified_at=meta.get("modified_at") or datetime.now(timezone.utc),
        created_at=meta.get("created_at"),
    )


def _column(results: dict[str, Any], key: str, *, nested: bool = False) -> list[Any]:
    """Read one column from a Chroma result without truth-testing arrays."""
    values = results.get(key)
    if values is None:
        return []
    if nested:
        values = values[0] if len(values) else []
    return list(values)


def _sort_key(doc: Document) -> datetime:
    return doc.created_at or datetime.min.replace(tzinfo=timezone.utc)


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed document store using cosine distance.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    client:
        Pre-built Chroma client (e.g. ``chromadb.EphemeralClient()``);
        when given, *host* and *port* are ignored.
    """

    def __init__(
        self,
        collection_name: str = settings.chroma_collection,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        client: Any = None,
    ) -> None:
        super().__init__(collection_name)
        if client is None:
            import chromadb

            client = chromadb.HttpClient(host=host, port=port)
        self._client = client
        self._collection = self._client.get_or_create_collection(
            name=collection_name,
            metadata={"hnsw:space": "cosine"},
        )

    # -- VectorStoreBase overrides --------------------------------------------

    async def upsert(self, document: Document) -> Document:
        existing = await self._call("get", self._collection.get, ids=[document.id], include=["metadatas"])
        metas = _column(existing, "metadatas")
        created_at = (metas[0] or {}).get("created_at") if metas else None
        stored = Document.model_validate(
            {**document.model_dump(), "created_at": created_at or document.created_at or datetime.now(timezone.utc)}
        )

        await self._call(
            "upsert",
            self._collection.upsert,
            ids=[stored.id],
            embeddings=[stored.embedding],
            documents=[stored.content_preview],
            metadatas=[_to_metadata(stored)],
        )
        return stored

    async def query(self, embedding: list[float], top_k: int) -> list[ScoredDocument]:
        available = await self.count()
        n_results = min(top_k, available)
        if n_results <= 0:
            return []

        results = await self._call(
            "query",
            self._collection.query,
            query_embeddings=[embedding],
            n_results=n_results,
            include=[*_INCLUDE_FULL, "distances"],
        )
        ids = _column(results, "ids", nested=True)
        docs = _column(results, "documents", nested=True)
        metas = _column(results, "metadatas", nested=True)
        embeddings = _column(results, "embeddings", nested=True)
        distances = _column(results, "distances", nested=True)

        hits: list[ScoredDocument] = []
        for doc_id, content, meta, emb, dist in zip(ids, docs, metas, embeddings, distances):
            # Cosine space: distance = 1 - cosine similarity.
            similarity = max(-1.0, min(1.0, 1.0 - float(dist)))
            hits.append(ScoredDocument(document=_from_record(doc_id, content, meta, emb), similarity=similarity))
        return hits

    async def get(self, doc_id: str) -> Document | None:
        results = await self._call("get", self._collection.get, ids=[doc_id], include=_INCLUDE_FULL)
        documents = self._records(results)
        return documents[0] if documents else None

    async def delete_one(self, doc_id: str) -> None:
        await self._call("delete", self._collection.delete, ids=[doc_id])

    async def delete_all(self) -> None:
        results = await self._call("get", self._collection.get, include=[])
        ids = _column(results, "ids")
        if ids:
            await self._call("delete", self._collection.delete, ids=ids)
        logger.info("Cleared %d document(s) from collection %r", len(ids), self.collection_name)

    async def count(self) -> int:
        return int(await self._call("count", self._collection.count))

    async def list_all(self) -> list[Document]:
        results = await self._call("get", self._collection.get, include=_INCLUDE_FULL)
        return sorted(self._records(results), key=_sort_key, reverse=True)

    async def health_check(self) -> bool:
        try:
            await asyncio.to_thread(self._client.heartbeat)
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False

    # -- internals ------------------------------------------------------------

    @staticmethod
    def _records(results: dict[str, Any]) -> list[Document]:
        ids: Sequence[str] = _column(results, "ids")
        docs = _column(results, "documents") or [None] * len(ids)
        metas = _column(results, "metadatas") or [None] * len(ids)
        embeddings = _column(results, "embeddings") or [None] * len(ids)
        return [_from_record(*row) for row in zip(ids, docs, metas, embeddings)]

    async def _call(self, operation: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except Exception as exc:
            logger.error("Chroma %s failed on collection %r: %s", operation, self.collection_name, exc)
            raise StoreFailure(f"{operation} failed: {exc}") from exc
