"""Enrichment pipeline — extracted text → embedding + classification.

The two collaborator calls run concurrently, so per-document latency is
that of the slower call.  Their failure policies differ:

* embedding failure is fatal for the document (:class:`EmbeddingFailure`);
* classification failure only drops the labels.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from docsearch.classification.classifier import DocumentClassifier
from docsearch.errors import EmbeddingFailure
from docsearch.ingestion.embedder import EmbeddingService
from docsearch.ingestion.identity import document_id
from docsearch.models import Classification, Document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Enrichment:
    """Result of :meth:`EnrichmentPipeline.enrich`."""

    embedding: list[float]
    classification: Classification | None = None


class EnrichmentPipeline:
    """Concurrently embed and classify document text.

    Parameters
    ----------
    embedder:
        Service producing the document vector.
    classifier:
        Service producing optional labels.
    embed_window:
        Characters of content sent to *embedder*.
    classify_window:
        Characters of content sent to *classifier*.
    preview_cap:
        Characters of content kept as the persisted preview.
    embedding_dim:
        Expected vector length.  When *None*, the first vector produced
        fixes the dimension for the lifetime of the pipeline.
    """

    def __init__(
        self,
        embedder: EmbeddingService,
        classifier: DocumentClassifier,
        *,
        embed_window: int = 5000,
        classify_window: int = 2000,
        preview_cap: int = 1000,
        embedding_dim: int | None = None,
    ) -> None:
        self._embedder = embedder
        self._classifier = classifier
        self.embed_window = embed_window
        self.classify_window = classify_window
        self.preview_cap = preview_cap
        self.embedding_dim = embedding_dim

    async def enrich(self, content: str, filename: str) -> Enrichment:
        """Embed and classify *content*.

        Raises
        ------
        EmbeddingFailure
            When the embedding call fails or returns an unusable vector.
            The classification call is cancelled and awaited before the
            error propagates, so nothing outlives this call.
        """
        embed_task = asyncio.ensure_future(self._embed(content[: self.embed_window], filename))
        classify_task = asyncio.ensure_future(self._classify(content[: self.classify_window], filename))
        try:
            embedding = await embed_task
        except BaseException:
            classify_task.cancel()
            await asyncio.gather(classify_task, return_exceptions=True)
            raise
        classification = await classify_task
        return Enrichment(embedding=embedding, classification=classification)

    def assemble(
        self,
        *,
        locator: str,
        filename: str,
        content: str,
        enrichment: Enrichment,
        size: int,
        modified_at: datetime | None = None,
    ) -> Document:
        """Build the :class:`Document` persisted for *locator*."""
        labels = enrichment.classification or Classification()
        return Document(
            id=document_id(locator),
            filename=filename,
            source_locator=locator,
            content_preview=content[: self.preview_cap],
            embedding=enrichment.embedding,
            category=labels.category,
            project=labels.project,
            team=labels.team,
            tags=labels.tags,
            size=size,
            modified_at=modified_at or datetime.now(timezone.utc),
        )

    # -- internals ------------------------------------------------------------

    async def _embed(self, text: str, filename: str) -> list[float]:
        try:
            vector = await self._embedder.embed(text)
        except Exception as exc:
            raise EmbeddingFailure(f"embedding failed for {filename}: {exc}") from exc

        if not vector:
            raise EmbeddingFailure(f"embedding service returned an empty vector for {filename}")
        if self.embedding_dim is None:
            self.embedding_dim = len(vector)
        elif len(vector) != self.embedding_dim:
            raise EmbeddingFailure(
                f"embedding for {filename} has dimension {len(vector)}, expected {self.embedding_dim}"
            )
        return vector

    async def _classify(self, text: str, filename: str) -> Classification | None:
        try:
            return await self._classifier.classify(text, filename)
        except Exception:
            logger.warning("Classification failed for %s; storing without labels", filename, exc_info=True)
            return None
