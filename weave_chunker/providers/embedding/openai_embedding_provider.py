"""OpenAI-compatible embedding provider adapter.

Wraps the ``openai`` async client to implement :class:`IEmbeddingProvider`.
Works against real OpenAI and against any server exposing
``/v1/embeddings`` (Ollama, TogetherAI, vLLM) via ``OPENAI_BASE_URL``.
"""

from __future__ import annotations

import openai
import structlog

from weave_chunker.config.settings import Settings
from weave_chunker.interfaces.embedding_provider import IEmbeddingProvider
from weave_chunker.providers.embedding.validation import ensure_usable_vectors
from weave_chunker.utils.errors import EmbeddingError, ProviderUnavailableError

logger = structlog.get_logger(logger_name=__name__)

_OPENAI_BATCH_LIMIT = 2048


class OpenAIEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by an OpenAI-compatible embeddings API.

    The model comes from ``Settings.embedding_model``.  Inputs larger than
    the per-call limit are sent in several requests.
    """

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key

        client_kwargs: dict = {"api_key": self._api_key, "timeout": settings.embedding_timeout}
        if settings.openai_base_url:
            client_kwargs["base_url"] = settings.openai_base_url

        self._client = openai.AsyncOpenAI(**client_kwargs)
        self._model = settings.embedding_model
        self._provider_label = (
            "openai-compatible_embedding" if settings.openai_base_url else "openai_embedding"
        )

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        try:
            all_embeddings: list[list[float]] = []
            for start in range(0, len(texts), _OPENAI_BATCH_LIMIT):
                batch = texts[start : start + _OPENAI_BATCH_LIMIT]
                response = await self._client.embeddings.create(
                    input=batch,
                    model=self._model,
                )
                all_embeddings.extend(
                    [float(x) for x in item.embedding] for item in response.data
                )
                logger.info(
                    "openai_embedding_batch",
                    model=self._model,
                    provider=self._provider_label,
                    batch_size=len(batch),
                    tokens=response.usage.total_tokens if response.usage else None,
                )
        except openai.APIConnectionError as exc:
            raise ProviderUnavailableError(
                message=f"{self._provider_label} unreachable: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise EmbeddingError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except (ValueError, TypeError, AttributeError) as exc:
            raise EmbeddingError(
                message=f"malformed {self._provider_label} response: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        return ensure_usable_vectors(all_embeddings, len(texts), self.get_provider_name())

    async def embed_single(self, text: str) -> list[float]:
        result = await self.embed([text])
        return result[0]

    def get_provider_name(self) -> str:
        return self._provider_label
