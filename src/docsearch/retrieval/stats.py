"""Facet summaries over the persisted corpus."""

from __future__ import annotations

from docsearch.models import Document
from docsearch.retrieval.base import VectorStoreBase
from docsearch.retrieval.models import DocumentStats


class StatsAggregator:
    def __init__(self, store: VectorStoreBase) -> None:
        self._store = store

    async def stats(self) -> DocumentStats:
        """Count documents and collect the distinct labels in use.

        Each facet lists a value once, in first-seen order; documents
        without a label contribute nothing to that facet.
        """
        documents = await self._store.list_all()
        return DocumentStats(
            total_documents=len(documents),
            categories=_distinct(documents, "category"),
            teams=_distinct(documents, "team"),
            projects=_distinct(documents, "project"),
        )


def _distinct(documents: list[Document], facet: str) -> list[str]:
    seen: dict[str, None] = {}
    for doc in documents:
        value = getattr(doc, facet)
        if value:
            seen.setdefault(value, None)
    return list(seen)
