"""Application service wiring shared by the routers."""

from dataclasses import dataclass

import httpx
from fastapi import Request
from sqlalchemy.engine import Engine

from ..config import Settings
from ..db import create_db_engine, create_session_factory
from ..rag import DocumentIngester, FastEmbedEmbedder, LocalCorpusIndex, RetrievalAnswerer, TextChunker
from ..rag.index import CorpusIndex
from ..services import GroqTextGenerator, UltravoxService
from ..sessions import CallOrchestrator, SessionRegistry, SummaryDispatcher
from ..summaries import ConversationSummarizer, SummaryRepository


@dataclass
class AppServices:
    """Long-lived collaborators; one instance per application."""

    settings: Settings
    registry: SessionRegistry
    orchestrator: CallOrchestrator
    dispatcher: SummaryDispatcher
    summarizer: ConversationSummarizer
    repository: SummaryRepository
    index: CorpusIndex
    ingester: DocumentIngester
    answerer: RetrievalAnswerer
    engine: Engine | None = None


def build_services(settings: Settings) -> AppServices:
    """Build production services from settings."""
    timeout = httpx.Timeout(
        settings.http_read_timeout,
        connect=settings.http_connect_timeout,
        write=settings.http_write_timeout,
    )

    voice_sessions = UltravoxService(
        api_key=settings.ultravox_api_key,
        base_url=settings.ultravox_api_url,
        model=settings.ultravox_model,
        voice=settings.ultravox_voice,
        temperature=settings.ultravox_temperature,
        timeout=timeout,
    )
    generator = GroqTextGenerator(
        api_key=settings.groq_api_key,
        model=settings.groq_model,
        timeout=timeout,
    )

    engine = create_db_engine(settings.database_url)
    repository = SummaryRepository(create_session_factory(engine))

    index = LocalCorpusIndex(
        embedder=FastEmbedEmbedder(settings.embedding_model),
        store_path=settings.corpus_path,
    )
    ingester = DocumentIngester(
        index=index,
        chunker=TextChunker(chunk_size=settings.chunk_size, chunk_overlap=settings.chunk_overlap),
        batch_size=settings.ingest_batch_size,
    )
    answerer = RetrievalAnswerer(
        index=index,
        generator=generator,
        top_k=settings.retrieval_top_k,
        similarity_threshold=settings.similarity_threshold,
    )

    registry = SessionRegistry()
    summarizer = ConversationSummarizer(voice_sessions, generator, repository)
    dispatcher = SummaryDispatcher(summarizer)
    orchestrator = CallOrchestrator(registry, voice_sessions, dispatcher)

    return AppServices(
        settings=settings,
        registry=registry,
        orchestrator=orchestrator,
        dispatcher=dispatcher,
        summarizer=summarizer,
        repository=repository,
        index=index,
        ingester=ingester,
        answerer=answerer,
        engine=engine,
    )


def get_services(request: Request) -> AppServices:
    return request.app.state.services
