"""Semantic search — query text → ranked, thresholded results.

Usage::

    engine  = SearchEngine(store, embedder)
    response = await engine.search("quarterly marketing plan", limit=10)
    for hit in response.results:
        print(f"{hit.similarity:.2f}", hit.filename)
"""

from __future__ import annotations

import logging

from docsearch.errors import EmbeddingFailure
from docsearch.ingestion.embedder import EmbeddingService
from docsearch.retrieval.base import VectorStoreBase
from docsearch.retrieval.models import ScoredDocument, SearchHit, SearchResponse

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.4


class SearchEngine:
    """Nearest-neighbour search over a :class:`VectorStoreBase`.

    Parameters
    ----------
    store:
        The vector store holding indexed documents.
    embedder:
        Must be the same model (and dimension) used to embed documents.
    threshold:
        Candidates must score strictly above this cosine similarity.
    overfetch:
        Multiplier on *limit* for the store query, compensating for
        candidates dropped by the threshold.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: EmbeddingService,
        *,
        threshold: float = DEFAULT_THRESHOLD,
        overfetch: int = 2,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self.threshold = threshold
        self.overfetch = overfetch

    async def search(self, query: str, limit: int = 10) -> SearchResponse:
        """Run a semantic search.

        Blank queries and empty stores return an empty response without
        calling the embedding service.

        Raises
        ------
        ValueError
            If *limit* is smaller than 1.
        EmbeddingFailure, StoreFailure
            Propagated from the collaborators.
        """
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")

        query = query.strip()
        if not query:
            return SearchResponse(query="")

        if await self._store.count() == 0:
            logger.info("Search for %r skipped: no documents indexed", query)
            return SearchResponse(query=query)

        embedding = await self._embed_query(query)
        candidates = await self._store.query(embedding, limit * self.overfetch)
        logger.debug("Found %d candidate(s) for %r", len(candidates), query)

        ranked = rank(candidates, threshold=self.threshold)[:limit]
        results = [SearchHit.from_scored(c) for c in ranked]

        logger.info("Returning %d relevant result(s) for %r", len(results), query)
        return SearchResponse(query=query, results=results, count=len(results))

    async def _embed_query(self, query: str) -> list[float]:
        try:
            embedding = await self._embedder.embed(query)
        except Exception as exc:
            raise EmbeddingFailure(f"could not embed query: {exc}") from exc
        if not embedding:
            raise EmbeddingFailure("embedding service returned an empty query vector")
        return embedding


def rank(candidates: list[ScoredDocument], *, threshold: float = DEFAULT_THRESHOLD) -> list[ScoredDocument]:
    """Keep candidates scoring strictly above *threshold*, best first.

    Ties are broken by document id so the order is deterministic whatever
    order the store returned.
    """
    relevant = [c for c in candidates if c.similarity > threshold]
    return sorted(relevant, key=lambda c: (-c.similarity, c.document.id))
