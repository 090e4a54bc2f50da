"""Failure taxonomy.

Each failure is contained at the smallest unit it concerns:

* :class:`ExtractionFailure` — one file yields no text; it is skipped.
* :class:`EmbeddingFailure` — one document cannot be stored; the batch continues.
* :class:`ClassificationFailure` — metadata is dropped; the document is still stored.
* :class:`StoreFailure` — one store operation failed; raised to its caller.
* :class:`TraversalFailure` — one directory could not be read; siblings continue.
* :class:`BlobStoreFailure` — an uploaded file could not be persisted.
"""

from __future__ import annotations


class DocSearchError(Exception):
    """Base class for every error raised by :mod:`docsearch`."""


class ExtractionFailure(DocSearchError):
    """Text could not be extracted from a buffer."""


class EmbeddingFailure(DocSearchError):
    """The embedding service failed or returned an unusable vector."""


class ClassificationFailure(DocSearchError):
    """The classification service failed or returned an unparseable response."""


class StoreFailure(DocSearchError):
    """A vector-store operation failed."""


class TraversalFailure(DocSearchError):
    """A directory could not be listed during a walk."""


class BlobStoreFailure(DocSearchError):
    """An uploaded buffer could not be written to blob storage."""
