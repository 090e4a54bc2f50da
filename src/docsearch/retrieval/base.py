"""Abstract base class for vector-store backends.

Adding a new backend (pgvector, Qdrant, Pinecone …) only requires
subclassing :class:`VectorStoreBase` and implementing the abstract
methods.  The rest of the stack is backend-agnostic.

Every method is a coroutine; backends with blocking clients should move
the call off the event loop.  Backends raise
:class:`~docsearch.errors.StoreFailure` for any operation that fails.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from docsearch.models import Document
from docsearch.retrieval.models import ScoredDocument


class VectorStoreBase(ABC):
    """Backend-agnostic document store with cosine nearest-neighbour search.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / table / namespace.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    async def upsert(self, document: Document) -> Document:
        """Insert *document* or fully replace the record with the same id.

        ``created_at`` is assigned on first insert and preserved on
        replacement.  Returns the stored document.
        """
        ...

    @abstractmethod
    async def query(self, embedding: list[float], top_k: int) -> list[ScoredDocument]:
        """Return up to *top_k* documents nearest to *embedding*.

        Similarity is cosine similarity in ``[-1, 1]``.
        """
        ...

    @abstractmethod
    async def get(self, doc_id: str) -> Document | None:
        """Return the document stored under *doc_id*, if any."""
        ...

    @abstractmethod
    async def delete_one(self, doc_id: str) -> None:
        ...

    @abstractmethod
    async def delete_all(self) -> None:
        ...

    @abstractmethod
    async def count(self) -> int:
        ...

    @abstractmethod
    async def list_all(self) -> list[Document]:
        """Return every stored document, newest ``created_at`` first."""
        ...

    # -- optional overrides ---------------------------------------------------

    async def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        try:
            await self.count()
        except Exception:
            return False
        return True
