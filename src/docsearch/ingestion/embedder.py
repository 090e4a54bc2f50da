"""Embedding service — text → fixed-length vector."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from docsearch.config import Settings, settings as default_settings

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


class EmbeddingService(ABC):
    """Backend-agnostic embedding interface.

    Implementations may raise any exception on timeout or quota errors;
    callers treat every failure as fatal for the text being embedded.
    """

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Return the embedding vector for *text*."""
        ...


class LangChainEmbeddingService(EmbeddingService):
    """Adapter over any LangChain :class:`~langchain_core.embeddings.Embeddings`.

    Parameters
    ----------
    embeddings:
        A LangChain embeddings object (HuggingFace, OpenAI, ...).
    """

    def __init__(self, embeddings: Embeddings) -> None:
        self._embeddings = embeddings

    async def embed(self, text: str) -> list[float]:
        vector = await self._embeddings.aembed_query(text)
        return [float(x) for x in vector]


def get_embedding_service(config: Settings = default_settings) -> EmbeddingService:
    """Return the embedding service selected by ``config.embedding_provider``."""
    provider = config.embedding_provider.lower()

    if provider == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        logger.info("Using HuggingFace embeddings: %s", config.embedding_model)
        embeddings = HuggingFaceEmbeddings(
            model_name=config.embedding_model,
            encode_kwargs={"normalize_embeddings": True},
        )
    elif provider == "openai":
        from langchain_openai import OpenAIEmbeddings

        logger.info("Using OpenAI embeddings: %s", config.embedding_model)
        kwargs: dict = {"model": config.embedding_model, "api_key": config.openai_api_key}
        if config.llm_base_url:
            kwargs["base_url"] = config.llm_base_url
        embeddings = OpenAIEmbeddings(**kwargs)
    else:
        raise ValueError(f"Unsupported embedding_provider={config.embedding_provider!r}")

    return LangChainEmbeddingService(embeddings)
