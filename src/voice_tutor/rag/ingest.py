"""Textbook ingestion: text extraction, chunking and indexing."""

import asyncio
import io
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from ..models.document import Passage
from .chunker import TextChunker
from .index import CorpusIndex

logger = logging.getLogger(__name__)


class IngestionError(Exception):
    """Raised when a document yields nothing that can be indexed."""


@dataclass
class IngestResult:
    document_id: str
    source_name: str
    chunks_created: int


def extract_pdf_text(content: bytes) -> str:
    import fitz  # PyMuPDF

    with fitz.open(stream=content, filetype="pdf") as doc:
        logger.info(f"Extracted {doc.page_count} pages from PDF")
        return " ".join(page.get_text() for page in doc)


def extract_docx_text(content: bytes) -> str:
    import docx

    document = docx.Document(io.BytesIO(content))
    return "\n".join(p.text for p in document.paragraphs)


def extract_plain_text(content: bytes) -> str:
    return content.decode("utf-8", errors="replace")


class DocumentIngester:
    """Splits textbooks into passages and writes them to the corpus index."""

    EXTRACTORS = {
        ".pdf": extract_pdf_text,
        ".docx": extract_docx_text,
        ".txt": extract_plain_text,
        ".md": extract_plain_text,
    }
    SUPPORTED_EXTENSIONS = set(EXTRACTORS)

    def __init__(
        self,
        index: CorpusIndex,
        chunker: TextChunker | None = None,
        batch_size: int = 50,
    ):
        self.index = index
        self.chunker = chunker or TextChunker()
        self.batch_size = batch_size

    def extract_text(self, content: bytes, filename: str) -> str:
        suffix = Path(filename).suffix.lower()
        extractor = self.EXTRACTORS.get(suffix)
        if extractor is None:
            raise IngestionError(
                f"Unsupported file type: {suffix or '(none)'}. "
                f"Supported: {sorted(self.SUPPORTED_EXTENSIONS)}"
            )
        try:
            return extractor(content)
        except Exception as e:
            raise IngestionError(f"Could not read {filename}: {e}") from e

    def _index_text(self, text: str, source_name: str) -> IngestResult:
        chunks = self.chunker.split(text)
        if not chunks:
            raise IngestionError(f"No indexable text found in {source_name}")

        document_id = str(uuid.uuid4())
        total = len(chunks)
        passages = [
            Passage(
                document_id=document_id,
                index=i,
                text=chunk,
                source_name=source_name,
                total_chunks=total,
            )
            for i, chunk in enumerate(chunks)
        ]
        logger.info(f"Split {source_name} into {total} chunks")

        for batch_start in range(0, total, self.batch_size):
            batch = passages[batch_start:batch_start + self.batch_size]
            try:
                self.index.add(batch, persist=False)
            except Exception as e:
                logger.error(
                    f"Indexing failed for {source_name} at chunk {batch_start}/{total}: {e}"
                )
                raise IngestionError(
                    f"Indexing failed after {batch_start} of {total} chunks: {e}"
                ) from e

        try:
            self.index.flush()
        except Exception as e:
            logger.error(f"Saving the corpus index failed for {source_name}: {e}")
            raise IngestionError(f"Indexed {total} chunks but could not save the index: {e}") from e

        logger.info(f"Successfully indexed {total} chunks for document: {document_id}")
        return IngestResult(document_id=document_id, source_name=source_name, chunks_created=total)

    def ingest_document(self, content: bytes, filename: str) -> IngestResult:
        if not content:
            raise IngestionError("File is empty")
        text = self.extract_text(content, filename)
        return self._index_text(text, filename)

    async def ingest_bytes(self, content: bytes, filename: str) -> IngestResult:
        """Extract, chunk and index an uploaded document."""
        logger.info(f"Processing textbook: {filename} ({len(content)} bytes)")
        return await asyncio.to_thread(self.ingest_document, content, filename)

    async def ingest_text(self, text: str, source_name: str = "manual_entry") -> IngestResult:
        """Chunk and index raw text."""
        return await asyncio.to_thread(self._index_text, text, source_name)
