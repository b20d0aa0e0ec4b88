"""Application configuration using Pydantic settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Voice AI provider (Ultravox)
    ultravox_api_key: str = ""
    ultravox_api_url: str = "https://api.ultravox.ai/api"
    ultravox_model: str = "fixie-ai/ultravox"
    ultravox_voice: str = "Mark"
    ultravox_temperature: float = 0.3

    # Text generation (Groq)
    groq_api_key: str = ""
    groq_model: str = "llama-3.1-8b-instant"

    # Public address the telephony and voice providers call back on.
    # Falls back to forwarded headers / request URL when empty.
    public_base_url: str = ""

    # Server Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"

    # Outbound HTTP timeouts (seconds)
    http_connect_timeout: float = 30.0
    http_read_timeout: float = 60.0
    http_write_timeout: float = 60.0

    # Data Storage
    data_path: Path = Path("./tutor_data")
    database_url: str = "sqlite:///./tutor_data/summaries.db"

    # Knowledge base
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    chunk_size: int = 1000
    chunk_overlap: int = 200
    ingest_batch_size: int = 50
    retrieval_top_k: int = 5
    similarity_threshold: float = 0.7

    @property
    def corpus_path(self) -> Path:
        return self.data_path / "corpus"

    def ensure_data_dirs(self) -> None:
        """Ensure required data directories exist."""
        self.data_path.mkdir(parents=True, exist_ok=True)
        self.corpus_path.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    settings = Settings()
    settings.ensure_data_dirs()
    return settings
