"""Primary/alternate embedding route with a single retry.

When the primary provider fails for a batch, the same batch is sent once to
the alternate provider.  If the alternate also fails its error propagates to
the caller; batches already stored stay valid.
"""

from __future__ import annotations

import structlog

from weave_chunker.interfaces.embedding_provider import IEmbeddingProvider
from weave_chunker.utils.errors import EmbeddingError, ProviderUnavailableError

logger = structlog.get_logger(logger_name=__name__)


class FallbackEmbeddingProvider(IEmbeddingProvider):
    """Delegates to *primary*, retrying once through *alternate* on failure."""

    def __init__(
        self,
        primary: IEmbeddingProvider,
        alternate: IEmbeddingProvider | None = None,
    ) -> None:
        self._primary = primary
        self._alternate = alternate

    async def embed(self, texts: list[str]) -> list[list[float]]:
        try:
            return await self._primary.embed(texts)
        except (EmbeddingError, ProviderUnavailableError) as exc:
            if self._alternate is None:
                raise
            logger.warning(
                "embedding_fallback",
                primary=self._primary.get_provider_name(),
                alternate=self._alternate.get_provider_name(),
                error=str(exc),
                batch_size=len(texts),
            )
            return await self._alternate.embed(texts)

    async def embed_single(self, text: str) -> list[float]:
        result = await self.embed([text])
        return result[0]

    def get_provider_name(self) -> str:
        if self._alternate is None:
            return self._primary.get_provider_name()
        return f"{self._primary.get_provider_name()}+{self._alternate.get_provider_name()}"
