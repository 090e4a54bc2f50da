"""Deterministic document identity.

A document id is the URL-safe base64 encoding of its source locator.  The
encoding is reversible, so two distinct locators can never share an id, and
it depends on nothing but the locator string, so ids survive restarts and
re-indexing overwrites rather than duplicates.
"""

from __future__ import annotations

import base64
import binascii
from pathlib import PurePath
from urllib.parse import unquote, urlsplit


def document_id(locator: str) -> str:
    """Return the id for *locator* (absolute path or blob URL).

    File names that are not valid UTF-8 reach us with surrogate escapes
    (see :func:`os.fsdecode`); they are encoded back to their raw bytes.
    """
    if not locator:
        raise ValueError("source locator must be a non-empty string")
    return base64.urlsafe_b64encode(locator.encode("utf-8", "surrogateescape")).decode("ascii")


def locator_from_id(doc_id: str) -> str:
    """Invert :func:`document_id`."""
    try:
        return base64.urlsafe_b64decode(doc_id.encode("ascii")).decode("utf-8", "surrogateescape")
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise ValueError(f"not a document id: {doc_id!r}") from exc


def display_name(locator: str, root: str | PurePath | None = None) -> str:
    """Derive a human-readable filename from the tail of *locator*.

    Paths under *root* are shown relative to it (``"team/plan.md"``);
    URLs and other paths fall back to their last segment.
    """
    if root is not None:
        try:
            return PurePath(locator).relative_to(PurePath(root)).as_posix()
        except ValueError:
            pass

    parts = urlsplit(locator)
    if parts.scheme and parts.netloc:
        tail = unquote(parts.path.rstrip("/").rsplit("/", 1)[-1])
        return tail or parts.netloc
    return PurePath(locator).name or locator
