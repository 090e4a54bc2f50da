"""Indexer — drives extraction, enrichment and persistence per file.

Two entry points:

* :meth:`Indexer.index_directory` walks a directory tree depth-first and
  returns how many documents it stored.
* :meth:`Indexer.index_buffer` indexes a single uploaded buffer.

Failures are contained at the smallest unit: an unreadable directory skips
that subtree; an empty extraction, a failed embedding, an undecodable path
or any other per-file error skips that file;
and a failed classification only drops its labels.
"""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from docsearch.errors import EmbeddingFailure, StoreFailure, TraversalFailure
from docsearch.ingestion import extractor
from docsearch.ingestion.enrichment import EnrichmentPipeline
from docsearch.ingestion.identity import display_name
from docsearch.ingestion.jobs import CancellationToken
from docsearch.models import Document
from docsearch.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


class Indexer:
    """Index files into a vector store with bounded concurrency.

    Parameters
    ----------
    store:
        Destination vector store (upsert keyed by document id).
    pipeline:
        Enrichment pipeline producing embeddings and labels.
    max_concurrency:
        Maximum number of files being extracted/enriched/stored at once
        across the whole walk.
    supported_extensions:
        Lowercase extensions (with dot) eligible for indexing.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        pipeline: EnrichmentPipeline,
        *,
        max_concurrency: int,
        supported_extensions: frozenset[str] = extractor.SUPPORTED_EXTENSIONS,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self._store = store
        self._pipeline = pipeline
        self.max_concurrency = max_concurrency
        self.supported_extensions = supported_extensions

    # -- public API -----------------------------------------------------------

    async def index_directory(
        self,
        root: str | Path,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> int:
        """Recursively index every supported file under *root*.

        Returns
        -------
        int
            Number of documents stored.  Unsupported, empty, and failed
            files count toward nothing.
        """
        root = Path(root).resolve()
        token = cancel_token or CancellationToken()
        semaphore = asyncio.Semaphore(self.max_concurrency)

        logger.info("Indexing directory %s (max %d file(s) in flight)", root, self.max_concurrency)
        count = await self._walk(root, root, semaphore, token)
        logger.info("Indexed %d document(s) from %s%s", count, root, " (cancelled)" if token.cancelled else "")
        return count

    async def index_file(self, path: str | Path, root: str | Path | None = None) -> Document | None:
        """Index one file from disk.  Returns the stored document or ``None``."""
        path = Path(path)
        try:
            data, stat = await asyncio.to_thread(_read_file, path)
        except OSError as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return None

        locator = str(path)
        return await self._index(
            data,
            filename=display_name(locator, root),
            locator=locator,
            size=stat.st_size,
            modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )

    async def index_buffer(
        self,
        data: bytes,
        filename: str,
        locator: str,
        size: int,
        modified_at: datetime | None = None,
    ) -> Document | None:
        """Index an uploaded buffer stored at *locator*.

        Returns ``None`` when no text could be extracted or the embedding
        failed.

        Raises
        ------
        StoreFailure
            When the store rejects the upsert.
        """
        return await self._index(
            data,
            filename=filename,
            locator=locator,
            size=size,
            modified_at=modified_at or datetime.now(timezone.utc),
        )

    # -- internals ------------------------------------------------------------

    async def _walk(
        self,
        directory: Path,
        root: Path,
        semaphore: asyncio.Semaphore,
        token: CancellationToken,
    ) -> int:
        if token.cancelled:
            return 0

        logger.debug("Scanning directory: %s", directory)
        try:
            entries = await asyncio.to_thread(_list_directory, directory)
        except TraversalFailure as exc:
            logger.warning("%s", exc)
            return 0

        count = 0
        files: list[Path] = []
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                count += await self._walk(Path(entry.path), root, semaphore, token)
            elif entry.is_file():
                if extractor.extension_of(entry.name) not in self.supported_extensions:
                    logger.debug("Skipping unsupported file: %s", entry.path)
                elif not _is_text_path(entry.path):
                    logger.warning("Skipping %r: path is not valid UTF-8", entry.path)
                else:
                    files.append(Path(entry.path))

        results = await asyncio.gather(*(self._index_bounded(f, root, semaphore, token) for f in files))
        return count + sum(results)

    async def _index_bounded(
        self,
        path: Path,
        root: Path,
        semaphore: asyncio.Semaphore,
        token: CancellationToken,
    ) -> int:
        async with semaphore:
            if token.cancelled:
                return 0
            try:
                doc = await self.index_file(path, root)
            except StoreFailure as exc:
                logger.error("Could not store %s: %s", path, exc)
                return 0
            except Exception:
                logger.exception("Unexpected error indexing %s; skipping", path)
                return 0
            return 1 if doc is not None else 0

    async def _index(
        self,
        data: bytes,
        *,
        filename: str,
        locator: str,
        size: int,
        modified_at: datetime,
    ) -> Document | None:
        content = await asyncio.to_thread(extractor.extract, data, filename)
        if not content.strip():
            logger.info("No content extracted from %s; skipping", filename)
            return None

        try:
            enrichment = await self._pipeline.enrich(content, filename)
        except EmbeddingFailure as exc:
            logger.error("Skipping %s: %s", filename, exc)
            return None

        doc = self._pipeline.assemble(
            locator=locator,
            filename=filename,
            content=content,
            enrichment=enrichment,
            size=size,
            modified_at=modified_at,
        )
        stored = await self._store.upsert(doc)
        logger.info("Indexed %s (%s)", filename, locator)
        return stored


def _read_file(path: Path) -> tuple[bytes, os.stat_result]:
    return path.read_bytes(), path.stat()


def _list_directory(directory: Path) -> list[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError as exc:
        raise TraversalFailure(f"Cannot read directory {directory}: {exc}") from exc


def _is_text_path(path: str) -> bool:
    # Undecodable bytes arrive as lone surrogates, which documents cannot hold.
    try:
        path.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True
