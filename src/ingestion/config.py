"""Configuration module for the YouTube document ingestion service."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

from .errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# OpenAI-compatible endpoints per embedding provider
PROVIDER_BASE_URLS = {
    "gemini": "https://generativelanguage.googleapis.com/v1beta/openai/",
    "openai": "https://api.openai.com/v1",
    "ollama": "http://localhost:11434/v1",
}


def _default_base_url() -> str:
    provider = os.getenv("EMBEDDING_PROVIDER", "gemini")
    return os.getenv(
        "EMBEDDING_BASE_URL", PROVIDER_BASE_URLS.get(provider, PROVIDER_BASE_URLS["gemini"])
    )


class IngestionConfig(BaseModel):
    """Configuration for the YouTube ingestion pipeline.

    Manages settings for transcript scraping, chunking, embedding and vector
    storage. All settings can be overridden via environment variables.
    """

    # Embedding settings
    embedding_provider: str = Field(
        default_factory=lambda: os.getenv("EMBEDDING_PROVIDER", "gemini")
    )
    embedding_base_url: str = Field(default_factory=_default_base_url)
    embedding_api_key: str = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY")
        or os.getenv("EMBEDDING_API_KEY", "")
    )
    embedding_model: str = Field(
        default_factory=lambda: os.getenv("EMBEDDING_MODEL_CHOICE", "embedding-001")
    )
    embedding_batch_size: int = Field(
        default_factory=lambda: int(os.getenv("EMBEDDING_BATCH_SIZE", "16")), gt=0
    )

    # Vector store settings (Supabase)
    supabase_url: str = Field(default_factory=lambda: os.getenv("SUPABASE_URL", ""))
    supabase_key: str = Field(
        default_factory=lambda: os.getenv("SUPABASE_SERVICE_KEY", "")
    )
    table_name: str = Field(
        default_factory=lambda: os.getenv("VECTOR_TABLE_NAME", "embedded_documents")
    )
    query_name: str = Field(
        default_factory=lambda: os.getenv("VECTOR_QUERY_NAME", "match_documents")
    )

    # Chunking settings (character-based)
    chunk_size: int = Field(
        default_factory=lambda: int(os.getenv("CHUNK_SIZE", "1000")), gt=0
    )
    chunk_overlap: int = Field(
        default_factory=lambda: int(os.getenv("CHUNK_OVERLAP", "200")), ge=0
    )

    # Scraping settings
    user_agent: str = Field(
        default_factory=lambda: os.getenv("YOUTUBE_USER_AGENT", DEFAULT_USER_AGENT)
    )
    accept_language: str = Field(
        default_factory=lambda: os.getenv("YOUTUBE_ACCEPT_LANGUAGE", "en-US,en;q=0.9")
    )

    @model_validator(mode="after")
    def _check_chunk_window(self) -> "IngestionConfig":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self

    def require_embedding_key(self) -> None:
        """Fail fast when no embedding API key is configured.

        Raises:
            ConfigurationError: If the provider needs a key and none is set.
        """
        if self.embedding_provider != "ollama" and not self.embedding_api_key:
            raise ConfigurationError(
                "GEMINI_API_KEY is not configured in environment variables"
            )


def get_config() -> IngestionConfig:
    """Get validated configuration instance.

    Returns:
        IngestionConfig: Validated configuration object with all settings.

    Raises:
        ValidationError: If environment values are missing or invalid.
    """
    return IngestionConfig()
