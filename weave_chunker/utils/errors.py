"""Custom exception hierarchy for weave-chunker.

All application exceptions inherit from :class:`WeaveChunkerError`, which
carries an optional ``provider_name`` so error handlers can identify which
collaborator (e.g. "ollama_embedding", "sqlite_vec") caused the failure.

The hierarchy follows the pipeline stages:

    WeaveChunkerError  (base -- catch-all for any weave-chunker error)
    +-- ConfigurationError       (invalid chunking options / settings)
    +-- ProviderUnavailableError (embedding route down / unreachable)
    +-- QueryValidationError     (bad search request, raised before any I/O)
    +-- RAGError                 (embedding or vector-store failure)
        +-- EmbeddingError          (embedding call failed or returned dim 0)
        +-- DimensionMismatchError  (vector width differs from the store's)

Callers fall back to the alternate embedding route on EmbeddingError or
ProviderUnavailableError, and abort indexing on DimensionMismatchError.
"""


class WeaveChunkerError(Exception):
    """Base exception for all weave-chunker errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name``.  ``__str__`` prefixes the provider name in brackets,
    e.g. ``[sqlite_vec] DB dim=768 vs new dim=1536``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Configuration / request validation
# ---------------------------------------------------------------------------

class ConfigurationError(WeaveChunkerError):
    """Raised when chunking options or settings are out of range."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class QueryValidationError(WeaveChunkerError):
    """Raised for an empty query or a non-positive result count."""

    def __init__(
        self,
        message: str = "Invalid search request",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class ProviderUnavailableError(WeaveChunkerError):
    """Raised when an embedding route is unreachable."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# RAG / vector-store errors
# ---------------------------------------------------------------------------

class RAGError(WeaveChunkerError):
    """Raised when an embedding or vector-store operation fails."""

    def __init__(
        self,
        message: str = "RAG pipeline operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmbeddingError(RAGError):
    """Raised when the embedding service fails or returns empty vectors."""

    def __init__(
        self,
        message: str = "Embedding request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DimensionMismatchError(RAGError):
    """Raised when a vector's width differs from the store's fixed dimension.

    Fatal for the store instance: indexing must stop rather than mix
    vectors of different widths in one index.
    """

    def __init__(
        self,
        message: str = "Embedding dimension mismatch",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
