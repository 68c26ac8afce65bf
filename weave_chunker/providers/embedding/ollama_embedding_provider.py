"""Native Ollama embedding provider adapter (local/free).

Calls Ollama's own ``POST /api/embeddings`` endpoint over ``httpx``, one
request per text (the native API takes a single ``prompt``).  This is the
default primary route; the OpenAI-compatible ``/v1`` route is the alternate.
"""

from __future__ import annotations

import httpx
import structlog

from weave_chunker.config.settings import Settings
from weave_chunker.interfaces.embedding_provider import IEmbeddingProvider
from weave_chunker.providers.embedding.validation import ensure_usable_vectors
from weave_chunker.utils.errors import EmbeddingError, ProviderUnavailableError

logger = structlog.get_logger(logger_name=__name__)


class OllamaEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by a local Ollama server's native API."""

    def __init__(self, settings: Settings) -> None:
        self._base_url = settings.ollama_base_url.rstrip("/")
        self._model = settings.embedding_model
        self._timeout = settings.embedding_timeout

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        vectors: list[list[float]] = []
        try:
            async with httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout) as client:
                for text in texts:
                    response = await client.post(
                        "/api/embeddings",
                        json={"model": self._model, "prompt": text},
                    )
                    response.raise_for_status()
                    vectors.append(self._parse_embedding(response))
        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ProviderUnavailableError(
                message=f"ollama unreachable at {self._base_url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise EmbeddingError(
                message=f"ollama embeddings http {exc.response.status_code}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            raise EmbeddingError(
                message=f"ollama embeddings request failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("ollama_embedding_batch", model=self._model, batch_size=len(texts))
        return ensure_usable_vectors(vectors, len(texts), self.get_provider_name())

    async def embed_single(self, text: str) -> list[float]:
        result = await self.embed([text])
        return result[0]

    def get_provider_name(self) -> str:
        return "ollama_embedding"

    def _parse_embedding(self, response: httpx.Response) -> list[float]:
        """Read ``{"embedding": [...]}``; any other body is an EmbeddingError."""
        try:
            return [float(x) for x in response.json().get("embedding", [])]
        except (ValueError, TypeError, AttributeError) as exc:
            raise EmbeddingError(
                message=f"malformed ollama embeddings response: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
