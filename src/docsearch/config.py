"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Sources
    documents_path: str = Field(default="./documents", description="Root directory walked by /api/index")
    upload_path: str = Field(default="./uploads", description="Directory backing the local blob store")

    # LLM (classification)
    openai_api_key: str = Field(default="", description="OpenAI API key (or dummy value for a local endpoint)")
    llm_model_name: str = Field(default="gpt-4o-mini", description="Chat model used to classify documents")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for the LLM API. Leave empty to use OpenAI cloud. "
            "Set to any OpenAI-compatible endpoint (vLLM, Ollama, ...) for local serving."
        ),
    )

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection: str = "documents"

    # Embedding
    embedding_provider: str = Field(default="huggingface", description="'huggingface' or 'openai'")
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    embedding_dim: int | None = Field(
        default=None,
        description="Expected vector dimension; vectors of any other length are rejected.",
    )

    # Windows
    embed_window: int = Field(default=5000, ge=1, description="Characters of content sent to the embedder")
    classify_window: int = Field(default=2000, ge=1, description="Characters of content sent to the classifier")
    preview_cap: int = Field(default=1000, ge=1, description="Characters of content persisted as preview")

    # Search
    similarity_threshold: float = Field(default=0.4, ge=-1.0, le=1.0)
    search_limit: int = Field(default=20, ge=1)

    # Indexing
    index_concurrency: int = Field(default=4, ge=1, description="Maximum number of files enriched at once")

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Default instance. Holds values only; clients are built from it explicitly.
settings = Settings()
