"""Unit tests for the embedding service adapters."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from docsearch.config import Settings
from docsearch.ingestion.embedder import LangChainEmbeddingService, get_embedding_service


class TestLangChainEmbeddingService:
    @pytest.mark.asyncio
    async def test_returns_plain_floats(self) -> None:
        embeddings = MagicMock()
        embeddings.aembed_query = AsyncMock(return_value=[1, 0.5])

        vector = await LangChainEmbeddingService(embeddings).embed("hello")

        assert vector == [1.0, 0.5]
        assert all(type(x) is float for x in vector)
        embeddings.aembed_query.assert_awaited_once_with("hello")

    @pytest.mark.asyncio
    async def test_errors_propagate(self) -> None:
        embeddings = MagicMock()
        embeddings.aembed_query = AsyncMock(side_effect=TimeoutError("slow"))

        with pytest.raises(TimeoutError):
            await LangChainEmbeddingService(embeddings).embed("hello")


def test_unknown_provider_rejected() -> None:
    config = Settings(embedding_provider="word2vec", _env_file=None)
    with pytest.raises(ValueError, match="word2vec"):
        get_embedding_service(config)
