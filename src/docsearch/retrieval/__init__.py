"""
Retrieval — vector store access, semantic search, and corpus statistics.

This module wraps the vector store behind a clean interface so that
callers never need to know which DB is backing retrieval.

Public surface
--------------
- :class:`SearchEngine` — thresholded, ranked semantic search.
- :class:`StatsAggregator` — facet summaries.
- :class:`VectorStoreBase` — abstract backend (subclass for pgvector, Qdrant, …).
- :class:`ChromaVectorStore` — default Chroma backend.
- :class:`ScoredDocument`, :class:`SearchHit`, :class:`SearchResponse`,
  :class:`DocumentSummary`, :class:`DocumentStats` — data models.
"""

from docsearch.retrieval.base import VectorStoreBase
from docsearch.retrieval.models import (
    DocumentStats,
    DocumentSummary,
    ScoredDocument,
    SearchHit,
    SearchResponse,
)
from docsearch.retrieval.search import SearchEngine
from docsearch.retrieval.stats import StatsAggregator

__all__ = [
    "ChromaVectorStore",
    "DocumentStats",
    "DocumentSummary",
    "ScoredDocument",
    "SearchEngine",
    "SearchHit",
    "SearchResponse",
    "StatsAggregator",
    "VectorStoreBase",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from docsearch.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
