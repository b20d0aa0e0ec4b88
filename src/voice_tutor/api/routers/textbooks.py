"""Textbook upload and knowledge base endpoints."""

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from ...models.document import IngestResponse, TextIngestRequest
from ...rag.ingest import DocumentIngester, IngestionError
from ..dependencies import AppServices, get_services

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/upload", response_model=IngestResponse)
async def upload_textbook(
    file: UploadFile = File(...),
    services: AppServices = Depends(get_services),
):
    """
    Upload and index a textbook.

    The document is chunked and stored in the vector index.
    Supported file types: PDF, DOCX, TXT, MD
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    suffix = Path(file.filename).suffix.lower()
    if suffix not in DocumentIngester.SUPPORTED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {suffix}. Supported: {sorted(DocumentIngester.SUPPORTED_EXTENSIONS)}",
        )

    content = await file.read()
    logger.info(f"Received textbook upload: {file.filename}, size: {len(content)} bytes")
    if not content:
        raise HTTPException(status_code=400, detail="File is empty")

    try:
        result = await services.ingester.ingest_bytes(content, file.filename)
    except IngestionError as e:
        logger.error(f"Error processing textbook {file.filename}: {e}")
        raise HTTPException(status_code=422, detail=f"Failed to process textbook: {e}")

    return IngestResponse(
        document_id=result.document_id,
        filename=file.filename,
        chunks_created=result.chunks_created,
        message="Textbook indexed successfully",
    )


@router.post("/ingest-text", response_model=IngestResponse)
async def ingest_text(request: TextIngestRequest, services: AppServices = Depends(get_services)):
    """Ingest raw text into the knowledge base."""
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="Text cannot be empty")

    try:
        result = await services.ingester.ingest_text(request.text, request.source_name)
    except IngestionError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return IngestResponse(
        document_id=result.document_id,
        filename=request.source_name,
        chunks_created=result.chunks_created,
        message="Successfully ingested text content",
    )


@router.get("/health")
async def health(services: AppServices = Depends(get_services)):
    """Knowledge base status."""
    return {
        "status": "ok",
        "service": "textbook-controller",
        "indexed_passages": services.index.count(),
    }
