"""Blob storage for uploaded files.

The blob store hands back the URL that becomes an uploaded document's
source locator.  :class:`LocalBlobStore` keeps files on the local
filesystem; hosted backends subclass :class:`BlobStore`.
"""

from __future__ import annotations

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path, PurePath
from uuid import uuid4

from pydantic import BaseModel

from docsearch.errors import BlobStoreFailure

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class StoredBlob(BaseModel):
    url: str
    size: int


class BlobStore(ABC):
    @abstractmethod
    async def store(self, data: bytes, filename: str) -> StoredBlob:
        """Persist *data* and return where it lives.

        Raises
        ------
        BlobStoreFailure
            When the bytes could not be written.
        """
        ...


class LocalBlobStore(BlobStore):
    """Write uploads under *root* and address them with ``file://`` URIs.

    Every upload gets a unique name, so uploading the same filename twice
    yields two distinct locators.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    async def store(self, data: bytes, filename: str) -> StoredBlob:
        target = self.root / _unique_name(filename)
        try:
            await asyncio.to_thread(_write, target, data)
        except OSError as exc:
            raise BlobStoreFailure(f"could not store {filename}: {exc}") from exc
        logger.info("Stored upload %s at %s", filename, target)
        return StoredBlob(url=target.as_uri(), size=len(data))


def _unique_name(filename: str) -> str:
    name = PurePath(filename).name or "upload"
    stem, suffix = PurePath(name).stem, PurePath(name).suffix
    stem = _UNSAFE_CHARS.sub("_", stem).strip("_") or "upload"
    return f"{stem}-{uuid4().hex[:8]}{suffix.lower()}"


def _write(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
