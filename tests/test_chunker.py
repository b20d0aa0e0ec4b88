"""Tests for TextChunker."""

import pytest

from voice_tutor.rag.chunker import TextChunker, normalize_whitespace


def _sentences(count: int) -> str:
    return " ".join(f"Sentence number {i:04d} explains how computer networks share data." for i in range(count))


def _rebuild(text: str, spans: list[tuple[int, int]]) -> str:
    """Concatenate spans, dropping the part each one shares with its predecessor."""
    rebuilt = text[spans[0][0]:spans[0][1]]
    for (_, prev_end), (_, end) in zip(spans, spans[1:]):
        rebuilt += text[prev_end:end]
    return rebuilt


@pytest.fixture
def chunker():
    return TextChunker(chunk_size=1000, chunk_overlap=200)


class TestNormalization:
    def test_collapses_whitespace_runs_and_trims(self):
        assert normalize_whitespace("  Hello\n\n  world\t again ") == "Hello world again"

    def test_empty_input(self):
        assert normalize_whitespace("") == ""


class TestSplit:
    def test_blank_input_yields_nothing(self, chunker):
        assert chunker.split("") == []
        assert chunker.split("   \n\t ") == []

    def test_input_below_floor_yields_nothing(self, chunker):
        assert chunker.split("Too short to index.") == []

    def test_input_exactly_chunk_size_yields_one_passage(self, chunker):
        text = "x" * 1000

        chunks = chunker.split(text)

        assert chunks == [text]

    def test_prefers_sentence_boundary_in_trailing_window(self, chunker):
        text = "a" * 949 + "." + "b" * 150

        chunks = chunker.split(text)

        assert chunks[0] == "a" * 949 + "."

    def test_cuts_at_window_when_no_boundary_in_trailing_window(self, chunker):
        text = "a" * 500 + "." + "b" * 700

        chunks = chunker.split(text)

        assert len(chunks[0]) == 1000

    def test_three_thousand_characters(self, chunker):
        text = _sentences(80)[:3000]
        normalized = normalize_whitespace(text)

        chunks = chunker.split(text)
        spans = chunker.spans(text)

        assert len(chunks) >= 3
        assert all(len(c) <= 1000 for c in chunks)
        for (start, end), (next_start, _) in zip(spans, spans[1:]):
            assert start < next_start < end
            assert end - next_start <= 200
        assert [normalized[s:e].strip() for s, e in spans] == chunks

    def test_every_passage_meets_floor(self, chunker):
        chunks = chunker.split(_sentences(200))

        assert chunks
        assert all(len(c) >= chunker.min_chunk_chars for c in chunks)

    @pytest.mark.parametrize(
        "text",
        [
            _sentences(150),
            "word " * 2000,
            "Why? Because! " * 500,
            "x" * 4321,
        ],
    )
    def test_spans_reconstruct_normalized_text(self, chunker, text):
        normalized = normalize_whitespace(text)

        spans = chunker.spans(text)

        assert spans[0][0] == 0
        assert spans[-1][1] == len(normalized)
        assert _rebuild(normalized, spans) == normalized

    def test_stalled_window_is_forced_forward(self):
        chunker = TextChunker(chunk_size=10, chunk_overlap=8, boundary_window=10, min_chunk_chars=1)
        text = "a." + "b" * 40

        spans = chunker.spans(text)

        starts = [s for s, _ in spans]
        assert starts == sorted(set(starts))
        assert spans[0] == (0, 2)
        assert spans[1][0] == 2
        assert _rebuild(text, spans) == text

    def test_chunk_cap_stops_early(self):
        chunker = TextChunker(chunk_size=100, chunk_overlap=0, min_chunk_chars=1, max_chunks=3)

        chunks = chunker.split("x" * 1000)

        assert len(chunks) == 3

    def test_deterministic(self, chunker):
        text = _sentences(60)
        assert chunker.split(text) == chunker.split(text)


class TestConfiguration:
    def test_overlap_must_be_smaller_than_chunk(self):
        with pytest.raises(ValueError):
            TextChunker(chunk_size=100, chunk_overlap=100)

    def test_chunk_size_must_be_positive(self):
        with pytest.raises(ValueError):
            TextChunker(chunk_size=0, chunk_overlap=0)
