"""Retrieval-side models: scored candidates and outward response shapes."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from docsearch.models import ApiModel, Document


class ScoredDocument(BaseModel):
    """A vector-store candidate with its cosine similarity to the query."""

    document: Document
    similarity: float = Field(ge=-1.0, le=1.0)


class SearchHit(ApiModel):
    """One search result as exposed to callers — never carries the embedding."""

    id: str
    filename: str
    preview: str
    category: str | None = None
    project: str | None = None
    team: str | None = None
    tags: list[str] = Field(default_factory=list)
    modified_at: datetime
    similarity: float

    @classmethod
    def from_scored(cls, scored: ScoredDocument) -> SearchHit:
        doc = scored.document
        return cls(
            id=doc.id,
            filename=doc.filename,
            preview=doc.content_preview,
            category=doc.category,
            project=doc.project,
            team=doc.team,
            tags=doc.tags,
            modified_at=doc.modified_at,
            similarity=scored.similarity,
        )


class SearchResponse(ApiModel):
    query: str = ""
    results: list[SearchHit] = Field(default_factory=list)
    count: int = 0


class DocumentSummary(ApiModel):
    """Row returned by document listings."""

    id: str
    filename: str
    locator: str
    category: str | None = None
    team: str | None = None
    project: str | None = None
    size: int
    modified_at: datetime

    @classmethod
    def from_document(cls, doc: Document) -> DocumentSummary:
        return cls(
            id=doc.id,
            filename=doc.filename,
            locator=doc.source_locator,
            category=doc.category,
            team=doc.team,
            project=doc.project,
            size=doc.size,
            modified_at=doc.modified_at,
        )


class DocumentStats(ApiModel):
    """Facet summary of the persisted corpus."""

    total_documents: int = 0
    categories: list[str] = Field(default_factory=list)
    teams: list[str] = Field(default_factory=list)
    projects: list[str] = Field(default_factory=list)
