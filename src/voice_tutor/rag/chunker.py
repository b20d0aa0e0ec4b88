"""Sentence-aligned, overlapping text chunking for textbook ingestion."""

import logging
import re

logger = logging.getLogger(__name__)

SENTENCE_TERMINATORS = (".", "?", "!")

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    """Collapse every run of whitespace to a single space and trim the ends."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


class TextChunker:
    """Splits extracted document text into overlapping passages.

    Each window is ``chunk_size`` characters long. When the window does not
    reach the end of the text, the cut is moved back to the last sentence
    terminator found in the trailing ``boundary_window`` characters, if any.
    The next window starts ``chunk_overlap`` characters before the cut.
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        boundary_window: int = 100,
        min_chunk_chars: int = 50,
        max_chunks: int = 10_000,
    ):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 0 <= chunk_overlap < chunk_size:
            raise ValueError("chunk_overlap must be in [0, chunk_size)")
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.boundary_window = boundary_window
        self.min_chunk_chars = min_chunk_chars
        self.max_chunks = max_chunks

    def split(self, text: str) -> list[str]:
        """Split ``text`` into passage bodies, in document order."""
        normalized = normalize_whitespace(text)
        return [normalized[start:end].strip() for start, end in self._spans(normalized)]

    def spans(self, text: str) -> list[tuple[int, int]]:
        """Return ``(start, end)`` offsets of each kept chunk in the normalized text."""
        return self._spans(normalize_whitespace(text))

    def _find_break(self, text: str, start: int, end: int) -> int:
        """Return the cut position for the window ``[start, end)``."""
        tail_start = max(start, end - self.boundary_window)
        break_point = max(text.rfind(mark, tail_start, end) for mark in SENTENCE_TERMINATORS)
        if break_point > start:
            return break_point + 1
        return end

    def _spans(self, text: str) -> list[tuple[int, int]]:
        spans: list[tuple[int, int]] = []
        length = len(text)
        start = 0

        while start < length:
            if len(spans) >= self.max_chunks:
                logger.warning(
                    f"Chunk cap of {self.max_chunks} reached at offset {start}/{length}; "
                    "remaining text is not indexed"
                )
                break

            end = min(start + self.chunk_size, length)
            if end < length:
                end = self._find_break(text, start, end)

            if len(text[start:end].strip()) >= self.min_chunk_chars:
                spans.append((start, end))

            if end >= length:
                break

            next_start = end - self.chunk_overlap
            # A sentence cut close to the previous start can stall the window.
            start = next_start if next_start > start else end

        return spans
