"""RAG (Retrieval-Augmented Generation) components."""

from .chunker import TextChunker
from .index import CorpusIndex, FastEmbedEmbedder, LocalCorpusIndex
from .ingest import DocumentIngester, IngestionError, IngestResult
from .retriever import RetrievalAnswerer

__all__ = [
    "CorpusIndex",
    "DocumentIngester",
    "FastEmbedEmbedder",
    "IngestResult",
    "IngestionError",
    "LocalCorpusIndex",
    "RetrievalAnswerer",
    "TextChunker",
]
