"""FastAPI application exposing the document index as a REST API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse

from docsearch.config import settings
from docsearch.errors import DocSearchError
from docsearch.models import ApiModel, IndexAccepted, OperationResult, UploadResult
from docsearch.retrieval.models import DocumentStats, DocumentSummary, SearchResponse
from docsearch.service import DocumentService, build_default_service

logger = logging.getLogger(__name__)


# ── Response schemas ──────────────────────────────────────────────────
class DocumentList(ApiModel):
    """All indexed documents, newest first."""

    documents: list[DocumentSummary] = []


# ── Dependencies ──────────────────────────────────────────────────────
def get_service(request: Request) -> DocumentService:
    return request.app.state.service


# ── Routes ────────────────────────────────────────────────────────────
router = APIRouter(prefix="/api")


@router.get("/health")
async def health(service: DocumentService = Depends(get_service)) -> dict[str, Any]:
    """Readiness probe with the current document count."""
    return await service.health()


@router.get("/search", response_model=SearchResponse)
async def search(
    q: str = "",
    limit: int = Query(default=settings.search_limit, ge=1, le=100),
    service: DocumentService = Depends(get_service),
) -> SearchResponse:
    """Semantic search over indexed documents."""
    return await service.search(q, limit)


@router.post("/index", response_model=IndexAccepted, status_code=202)
async def start_indexing(
    reindex: bool = False,
    service: DocumentService = Depends(get_service),
) -> IndexAccepted:
    """Start indexing the configured documents directory in the background."""
    return await service.index(reindex=reindex)


@router.get("/index/{job_id}")
async def indexing_status(job_id: str, service: DocumentService = Depends(get_service)) -> dict[str, Any]:
    job = service.index_status(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Unknown indexing job: {job_id}")
    return job.as_dict()


@router.delete("/index/{job_id}", response_model=OperationResult)
async def cancel_indexing(job_id: str, service: DocumentService = Depends(get_service)) -> OperationResult:
    return service.cancel_index(job_id)


@router.get("/stats", response_model=DocumentStats)
async def stats(service: DocumentService = Depends(get_service)) -> DocumentStats:
    return await service.stats()


@router.get("/documents", response_model=DocumentList)
async def list_documents(service: DocumentService = Depends(get_service)) -> DocumentList:
    return DocumentList(documents=await service.list_documents())


@router.get("/documents/{doc_id}", response_model=DocumentSummary)
async def get_document(doc_id: str, service: DocumentService = Depends(get_service)) -> DocumentSummary:
    doc = await service.get_document(doc_id)
    if doc is None:
        raise HTTPException(status_code=404, detail=f"Unknown document: {doc_id}")
    return doc


@router.post("/upload", response_model=UploadResult)
async def upload(
    files: list[UploadFile] = File(default=[]),
    service: DocumentService = Depends(get_service),
) -> UploadResult:
    """Store uploaded files in blob storage and index them."""
    payload = [(f.filename or "upload", await f.read()) for f in files]
    return await service.upload(payload)


@router.delete("/documents/{doc_id}", response_model=OperationResult)
async def delete_document(doc_id: str, service: DocumentService = Depends(get_service)) -> OperationResult:
    return await service.delete_one(doc_id)


@router.delete("/documents", response_model=OperationResult)
async def delete_all_documents(service: DocumentService = Depends(get_service)) -> OperationResult:
    return await service.delete_all()


# ── Error envelopes ───────────────────────────────────────────────────
async def _docsearch_error(request: Request, exc: DocSearchError) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"success": False, "message": str(exc)})


async def _value_error(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "message": str(exc)})


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "message": "Internal error"})


# ── Application factory ───────────────────────────────────────────────
def create_app(service: DocumentService | None = None) -> FastAPI:
    """Build the API around *service*.

    When *service* is omitted, the default Chroma / LangChain backed
    service is constructed at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.service is None:
            app.state.service = build_default_service()
        if not await app.state.service.store.health_check():
            logger.warning("Vector store is not reachable; search and indexing will fail until it is")
        yield

    app = FastAPI(
        title="Document Search API",
        version="0.1.0",
        description="Index heterogeneous documents and search them semantically.",
        lifespan=lifespan,
    )
    app.state.service = service
    app.include_router(router)
    app.add_exception_handler(DocSearchError, _docsearch_error)
    app.add_exception_handler(ValueError, _value_error)
    app.add_exception_handler(Exception, _unexpected_error)

    @app.get("/health")
    async def liveness() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    return app


app = create_app()
