"""Domain models shared by ingestion, retrieval and serving."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Placeholders models emit instead of JSON null.
_NULL_WORDS = frozenset({"null", "none", "n/a", "unknown"})


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if value.lower() in _NULL_WORDS:
            return None
        return value or None
    return value


def _clean_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set)):
        raise ValueError("tags must be a list of strings")
    tags: list[str] = []
    for tag in value:
        if not isinstance(tag, str):
            raise ValueError("tags must be a list of strings")
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


class Classification(BaseModel):
    """AI-derived labels for a document.

    ``None`` on any label means *unclassified*; blank strings returned by a
    model are normalised to ``None`` so they never surface as a facet.
    """

    category: str | None = None
    project: str | None = None
    team: str | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("category", "project", "team", mode="before")
    @classmethod
    def _normalise_labels(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _normalise_tags(cls, value: Any) -> list[str]:
        return _clean_tags(value)


class Document(BaseModel):
    """The persisted unit: one source locator, one embedding, optional labels.

    Attributes
    ----------
    id:
        Deterministic id derived from ``source_locator`` (see
        :func:`docsearch.ingestion.identity.document_id`).
    filename:
        Display name derived from the locator tail.
    source_locator:
        Absolute path or blob URL the bytes came from.
    content_preview:
        Extracted text truncated to the preview cap.
    embedding:
        Vector produced from the embedding window of the content.
    created_at:
        Assigned by the store on first insert and kept across re-indexing.
    """

    id: str
    filename: str
    source_locator: str
    content_preview: str = ""
    embedding: list[float] = Field(min_length=1)
    category: str | None = None
    project: str | None = None
    team: str | None = None
    tags: list[str] = Field(default_factory=list)
    size: int = Field(default=0, ge=0)
    modified_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    created_at: datetime | None = None

    @field_validator("category", "project", "team", mode="before")
    @classmethod
    def _normalise_labels(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _normalise_tags(cls, value: Any) -> list[str]:
        return _clean_tags(value)


# ── Outward-facing envelopes ───────────────────────────────────────────


class ApiModel(BaseModel):
    """Base for response shapes: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OperationResult(ApiModel):
    """Success/failure envelope returned by every mutating operation."""

    success: bool
    message: str
    error: str | None = None


class IndexAccepted(OperationResult):
    """Acknowledgement that a background indexing run was scheduled."""

    indexing: bool = False
    job_id: str | None = None


class UploadResult(OperationResult):
    """Outcome of a multi-file upload."""

    indexed: int = 0
    failed: int = 0
