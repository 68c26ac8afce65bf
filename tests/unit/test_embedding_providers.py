"""Unit tests for embedding provider adapters - native Ollama, OpenAI-compatible, fallback."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from weave_chunker.config.settings import Settings
from weave_chunker.interfaces.embedding_provider import IEmbeddingProvider
from weave_chunker.providers.embedding.fallback_embedding_provider import FallbackEmbeddingProvider
from weave_chunker.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from weave_chunker.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from weave_chunker.providers.embedding.validation import ensure_usable_vectors
from weave_chunker.utils.errors import EmbeddingError, ProviderUnavailableError

_REAL_ASYNC_CLIENT = httpx.AsyncClient


def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "ollama",
        "openai_base_url": "http://localhost:11434/v1",
        "ollama_base_url": "",
        "embedding_model": "nomic-embed-text",
    }
    defaults.update(overrides)
    return Settings(**defaults)


def _mock_transport_client(handler):  # noqa: ANN001, ANN202
    def factory(**kwargs):  # noqa: ANN202
        return _REAL_ASYNC_CLIENT(transport=httpx.MockTransport(handler), **kwargs)

    return factory


# ======================================================================
# Validation
# ======================================================================


class TestEnsureUsableVectors:
    def test_accepts_uniform_vectors(self) -> None:
        vectors = [[0.1, 0.2], [0.3, 0.4]]
        assert ensure_usable_vectors(vectors, 2, "p") is vectors

    def test_count_mismatch(self) -> None:
        with pytest.raises(EmbeddingError, match="expected 2 vectors, got 1"):
            ensure_usable_vectors([[0.1]], 2, "p")

    def test_zero_dimension(self) -> None:
        with pytest.raises(EmbeddingError, match="dim=0"):
            ensure_usable_vectors([[]], 1, "p")

    def test_mixed_widths(self) -> None:
        with pytest.raises(EmbeddingError, match="mixes dimensions"):
            ensure_usable_vectors([[0.1], [0.1, 0.2]], 2, "p")


# ======================================================================
# Native Ollama
# ======================================================================


class TestOllamaEmbeddingProvider:
    def test_base_url_derived_from_openai_url(self) -> None:
        assert _settings().ollama_base_url == "http://localhost:11434"

    def test_metadata(self) -> None:
        assert OllamaEmbeddingProvider(_settings()).get_provider_name() == "ollama_embedding"

    @pytest.mark.asyncio
    async def test_embed_one_request_per_text(self) -> None:
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            seen.append(body)
            assert request.url.path == "/api/embeddings"
            return httpx.Response(200, json={"embedding": [float(len(body["prompt"])), 1.0]})

        provider = OllamaEmbeddingProvider(_settings())
        with patch(
            "weave_chunker.providers.embedding.ollama_embedding_provider.httpx.AsyncClient",
            side_effect=_mock_transport_client(handler),
        ):
            vectors = await provider.embed(["ab", "abcd"])

        assert vectors == [[2.0, 1.0], [4.0, 1.0]]
        assert [b["prompt"] for b in seen] == ["ab", "abcd"]
        assert all(b["model"] == "nomic-embed-text" for b in seen)

    @pytest.mark.asyncio
    async def test_http_error_becomes_embedding_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": "model not loaded"})

        provider = OllamaEmbeddingProvider(_settings())
        with patch(
            "weave_chunker.providers.embedding.ollama_embedding_provider.httpx.AsyncClient",
            side_effect=_mock_transport_client(handler),
        ):
            with pytest.raises(EmbeddingError, match="http 500"):
                await provider.embed(["text"])

    @pytest.mark.asyncio
    async def test_empty_embedding_rejected(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"embedding": []})

        provider = OllamaEmbeddingProvider(_settings())
        with patch(
            "weave_chunker.providers.embedding.ollama_embedding_provider.httpx.AsyncClient",
            side_effect=_mock_transport_client(handler),
        ):
            with pytest.raises(EmbeddingError, match="dim=0"):
                await provider.embed(["text"])

    @pytest.mark.asyncio
    async def test_empty_input(self) -> None:
        assert await OllamaEmbeddingProvider(_settings()).embed([]) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>proxy</html>"),
            httpx.Response(200, json=[0.1, 0.2]),
            httpx.Response(200, json={"embedding": [0.1, None]}),
        ],
        ids=["non-json", "json-list", "null-component"],
    )
    async def test_malformed_body_becomes_embedding_error(self, response: httpx.Response) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return response

        provider = OllamaEmbeddingProvider(_settings())
        with patch(
            "weave_chunker.providers.embedding.ollama_embedding_provider.httpx.AsyncClient",
            side_effect=_mock_transport_client(handler),
        ):
            with pytest.raises(EmbeddingError, match="malformed"):
                await provider.embed(["text"])

    @pytest.mark.asyncio
    async def test_connect_error_becomes_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        provider = OllamaEmbeddingProvider(_settings())
        with patch(
            "weave_chunker.providers.embedding.ollama_embedding_provider.httpx.AsyncClient",
            side_effect=_mock_transport_client(handler),
        ):
            with pytest.raises(ProviderUnavailableError, match="unreachable"):
                await provider.embed(["text"])


# ======================================================================
# OpenAI-compatible
# ======================================================================


class TestOpenAIEmbeddingProvider:
    def test_provider_label(self) -> None:
        assert (
            OpenAIEmbeddingProvider(_settings()).get_provider_name()
            == "openai-compatible_embedding"
        )
        assert (
            OpenAIEmbeddingProvider(_settings(openai_base_url="")).get_provider_name()
            == "openai_embedding"
        )

    @pytest.mark.asyncio
    async def test_embed_success(self) -> None:
        mock_response = MagicMock()
        mock_response.data = [MagicMock(embedding=[0.1, 0.2]), MagicMock(embedding=[0.3, 0.4])]
        mock_response.usage = MagicMock(total_tokens=12)

        provider = OpenAIEmbeddingProvider(_settings())
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=mock_response)
        provider._client = mock_client

        vectors = await provider.embed(["a", "b"])

        assert vectors == [[0.1, 0.2], [0.3, 0.4]]
        mock_client.embeddings.create.assert_awaited_once_with(
            input=["a", "b"], model="nomic-embed-text"
        )

    @pytest.mark.asyncio
    async def test_connection_error_becomes_unavailable(self) -> None:
        provider = OpenAIEmbeddingProvider(_settings())
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(
            side_effect=openai.APIConnectionError(request=httpx.Request("POST", "http://x"))
        )
        provider._client = mock_client

        with pytest.raises(ProviderUnavailableError):
            await provider.embed(["a"])

    @pytest.mark.asyncio
    async def test_api_error_becomes_embedding_error(self) -> None:
        request = httpx.Request("POST", "http://x/v1/embeddings")
        provider = OpenAIEmbeddingProvider(_settings())
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(
            side_effect=openai.InternalServerError(
                message="boom", response=httpx.Response(500, request=request), body=None
            )
        )
        provider._client = mock_client

        with pytest.raises(EmbeddingError, match="API error"):
            await provider.embed(["a"])

    @pytest.mark.asyncio
    async def test_null_embedding_becomes_embedding_error(self) -> None:
        mock_response = MagicMock()
        mock_response.data = [MagicMock(embedding=None)]
        mock_response.usage = None

        provider = OpenAIEmbeddingProvider(_settings())
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=mock_response)
        provider._client = mock_client

        with pytest.raises(EmbeddingError, match="malformed"):
            await provider.embed(["a"])

    @pytest.mark.asyncio
    async def test_embed_single(self) -> None:
        mock_response = MagicMock()
        mock_response.data = [MagicMock(embedding=[0.5, 0.5])]
        mock_response.usage = None

        provider = OpenAIEmbeddingProvider(_settings())
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=mock_response)
        provider._client = mock_client

        assert await provider.embed_single("q") == [0.5, 0.5]


# ======================================================================
# Fallback
# ======================================================================


def _provider(name: str, result=None, error: Exception | None = None) -> MagicMock:  # noqa: ANN001
    provider = MagicMock(spec=IEmbeddingProvider)
    provider.get_provider_name.return_value = name
    provider.embed = AsyncMock(return_value=result, side_effect=error)
    return provider


class TestFallbackEmbeddingProvider:
    @pytest.mark.asyncio
    async def test_primary_success(self) -> None:
        primary = _provider("primary", result=[[1.0]])
        alternate = _provider("alternate", result=[[2.0]])

        vectors = await FallbackEmbeddingProvider(primary, alternate).embed(["x"])

        assert vectors == [[1.0]]
        alternate.embed.assert_not_called()

    @pytest.mark.asyncio
    async def test_falls_back_once(self) -> None:
        primary = _provider("primary", error=EmbeddingError(message="down"))
        alternate = _provider("alternate", result=[[2.0]])

        vectors = await FallbackEmbeddingProvider(primary, alternate).embed(["x"])

        assert vectors == [[2.0]]
        alternate.embed.assert_awaited_once_with(["x"])

    @pytest.mark.asyncio
    async def test_falls_back_on_unavailable(self) -> None:
        primary = _provider("primary", error=ProviderUnavailableError(message="no route"))
        alternate = _provider("alternate", result=[[2.0]])
        assert await FallbackEmbeddingProvider(primary, alternate).embed_single("x") == [2.0]

    @pytest.mark.asyncio
    async def test_alternate_failure_propagates(self) -> None:
        primary = _provider("primary", error=EmbeddingError(message="down"))
        alternate = _provider("alternate", error=EmbeddingError(message="also down"))

        with pytest.raises(EmbeddingError, match="also down"):
            await FallbackEmbeddingProvider(primary, alternate).embed(["x"])

    @pytest.mark.asyncio
    async def test_no_alternate_reraises(self) -> None:
        primary = _provider("primary", error=EmbeddingError(message="down"))
        with pytest.raises(EmbeddingError, match="down"):
            await FallbackEmbeddingProvider(primary).embed(["x"])

    @pytest.mark.asyncio
    async def test_malformed_primary_body_uses_alternate(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>proxy</html>")

        alternate = _provider("alternate", result=[[0.3, 0.4]])
        provider = FallbackEmbeddingProvider(OllamaEmbeddingProvider(_settings()), alternate)
        with patch(
            "weave_chunker.providers.embedding.ollama_embedding_provider.httpx.AsyncClient",
            side_effect=_mock_transport_client(handler),
        ):
            vectors = await provider.embed(["x"])

        assert vectors == [[0.3, 0.4]]
        alternate.embed.assert_awaited_once_with(["x"])

    def test_provider_name(self) -> None:
        primary = _provider("primary")
        alternate = _provider("alternate")
        assert FallbackEmbeddingProvider(primary, alternate).get_provider_name() == "primary+alternate"
        assert FallbackEmbeddingProvider(primary).get_provider_name() == "primary"
