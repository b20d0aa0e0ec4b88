"""Knowledge base document models."""

from pydantic import BaseModel, Field


class Passage(BaseModel):
    """One indexed chunk of a source document."""

    document_id: str = Field(..., description="Identifier assigned at ingestion")
    index: int = Field(..., ge=0, description="0-based position within the document")
    text: str
    source_name: str
    total_chunks: int = Field(..., ge=1)


class ScoredPassage(BaseModel):
    """A passage returned by a similarity search."""

    passage: Passage
    score: float


class IngestResponse(BaseModel):
    """Response for document ingestion."""

    status: str = "success"
    document_id: str
    filename: str
    chunks_created: int
    message: str


class TextIngestRequest(BaseModel):
    """Request for ingesting raw text."""

    text: str
    source_name: str = "manual_entry"
