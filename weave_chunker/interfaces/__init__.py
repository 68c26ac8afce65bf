"""Public interface definitions for swappable pipeline collaborators.

Concrete adapters implement these abstract base classes and are wired
together by the CLI builders, so tests can inject mocks and providers can
be swapped without touching the pipeline.

    Interface              →  Concrete implementations
    ─────────────────────────────────────────────────────────────
    IEmbeddingProvider     →  OllamaEmbeddingProvider,
                              OpenAIEmbeddingProvider,
                              FallbackEmbeddingProvider
    IVectorStoreProvider   →  SQLiteVectorStore
    ITextAnalyzer          →  MetadataExtractor
"""

from weave_chunker.interfaces.embedding_provider import IEmbeddingProvider
from weave_chunker.interfaces.text_analyzer import ITextAnalyzer
from weave_chunker.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IEmbeddingProvider",
    "ITextAnalyzer",
    "IVectorStoreProvider",
]
