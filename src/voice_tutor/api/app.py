"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import get_settings
from ..db import init_db
from .dependencies import AppServices, build_services
from .routers import query, rag, summaries, textbooks, twilio

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    services: AppServices = app.state.services
    services.settings.ensure_data_dirs()
    if services.engine is not None:
        init_db(services.engine)
    if not services.settings.ultravox_api_key:
        logging.warning("ULTRAVOX_API_KEY is not set; incoming calls will be rejected")
    logging.info("Voice Tutor API starting up...")
    yield
    if services.dispatcher.pending:
        logging.info(f"Waiting for {services.dispatcher.pending} summaries to finish...")
    await services.dispatcher.drain()
    logging.info("Voice Tutor API shutting down...")


def create_app(services: AppServices | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if services is None:
        services = build_services(get_settings())
    logging.getLogger().setLevel(services.settings.log_level.upper())

    app = FastAPI(
        title="Voice Tutor API",
        description="Phone tutoring with Twilio, Ultravox and textbook RAG",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(twilio.router, prefix="/api/twilio", tags=["twilio"])
    app.include_router(rag.router, prefix="/api/rag", tags=["rag"])
    app.include_router(query.router, prefix="/api/query", tags=["query"])
    app.include_router(textbooks.router, prefix="/api/textbooks", tags=["textbooks"])
    app.include_router(summaries.router, prefix="/api/summaries", tags=["summaries"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": "0.1.0"}

    return app
