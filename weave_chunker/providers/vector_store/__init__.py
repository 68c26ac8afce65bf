"""Vector-store implementations."""

from weave_chunker.providers.vector_store.sqlite_vector_store import SQLiteVectorStore

__all__ = ["SQLiteVectorStore"]
