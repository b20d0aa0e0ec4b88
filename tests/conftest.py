"""Shared fixtures: deterministic embedder, in-memory database, provider doubles."""

import re
import zlib
from unittest.mock import AsyncMock, Mock

import numpy as np
import pytest

from voice_tutor.api.dependencies import AppServices
from voice_tutor.config import Settings
from voice_tutor.db import create_db_engine, create_session_factory, init_db
from voice_tutor.rag import DocumentIngester, LocalCorpusIndex, RetrievalAnswerer, TextChunker
from voice_tutor.services.ultravox_service import RemoteSession
from voice_tutor.sessions import CallOrchestrator, SessionRegistry, SummaryDispatcher
from voice_tutor.summaries import ConversationSummarizer, SummaryRepository

WORD_RE = re.compile(r"[a-z]+")


class HashingEmbedder:
    """Bag-of-words vectors; texts sharing words are similar."""

    def __init__(self, dims: int = 1024):
        self.dims = dims

    def embed(self, texts):
        vectors = np.zeros((len(texts), self.dims), dtype=np.float32)
        for row, text in enumerate(texts):
            for word in WORD_RE.findall(text.lower()):
                vectors[row, zlib.crc32(word.encode()) % self.dims] += 1.0
        return vectors


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        data_path=tmp_path / "data",
        database_url="sqlite://",
        ultravox_api_key="test-key",
        groq_api_key="",
    )


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine):
    return SummaryRepository(create_session_factory(engine))


@pytest.fixture
def embedder():
    return HashingEmbedder()


@pytest.fixture
def index(embedder):
    return LocalCorpusIndex(embedder=embedder)


@pytest.fixture
def voice_sessions():
    provider = Mock()
    provider.create_call = AsyncMock(
        return_value=RemoteSession(call_id="uv-123", join_url="wss://voice.example/join/uv-123")
    )
    provider.fetch_transcript = AsyncMock(return_value="user: What is a firewall?\nagent: It filters traffic.")
    return provider


@pytest.fixture
def generator():
    gen = Mock()
    gen.generate = AsyncMock(
        return_value="TOPICS: networking, security\nSUMMARY: Student asked about firewalls."
    )
    return gen


@pytest.fixture
def services(settings, engine, repository, index, voice_sessions, generator):
    registry = SessionRegistry()
    summarizer = ConversationSummarizer(voice_sessions, generator, repository)
    dispatcher = SummaryDispatcher(summarizer)
    return AppServices(
        settings=settings,
        registry=registry,
        orchestrator=CallOrchestrator(registry, voice_sessions, dispatcher),
        dispatcher=dispatcher,
        summarizer=summarizer,
        repository=repository,
        index=index,
        ingester=DocumentIngester(index=index, chunker=TextChunker()),
        answerer=RetrievalAnswerer(index=index, generator=generator, similarity_threshold=0.1),
        engine=engine,
    )
