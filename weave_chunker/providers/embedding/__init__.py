"""Embedding provider implementations.

Embeddings turn chunk and query text into vectors stored in the SQLite
vector store and compared by L2 distance at search time.

    1. OllamaEmbeddingProvider   - native Ollama /api/embeddings (default primary).
    2. OpenAIEmbeddingProvider   - OpenAI-compatible /v1/embeddings (default alternate).
    3. FallbackEmbeddingProvider - wraps a primary and an alternate route.
"""

from weave_chunker.providers.embedding.fallback_embedding_provider import (
    FallbackEmbeddingProvider,
)
from weave_chunker.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from weave_chunker.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["FallbackEmbeddingProvider", "OllamaEmbeddingProvider", "OpenAIEmbeddingProvider"]
