"""Abstract base class for text-embedding service providers.

Defines the contract for turning chunk and query text into fixed-width
vectors.  Implementations wrap Ollama's native embeddings endpoint, any
OpenAI-compatible ``/v1/embeddings`` endpoint, or a fallback pair of both.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations (weave_chunker/providers/embedding/):
#   OllamaEmbeddingProvider    - native /api/embeddings over httpx
#   OpenAIEmbeddingProvider    - OpenAI-compatible /v1/embeddings
#   FallbackEmbeddingProvider  - primary route, retried once via an alternate
class IEmbeddingProvider(ABC):
    """Contract for embedding services used at index and query time.

    Vectors feed
    :class:`~weave_chunker.interfaces.vector_store_provider.IVectorStoreProvider`,
    whose dimension is fixed by the first batch written.
    """

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Parameters
        ----------
        texts:
            One or more text strings to embed.

        Returns
        -------
        list[list[float]]
            Vectors corresponding positionally to *texts*, all of the same
            non-zero length.

        Raises
        ------
        weave_chunker.utils.errors.EmbeddingError
            If the call fails or returns a malformed or empty vector.
        weave_chunker.utils.errors.ProviderUnavailableError
            If the service cannot be reached.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text (e.g. a query)."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"ollama_embedding"``."""
