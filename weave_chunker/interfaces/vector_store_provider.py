"""Abstract base class for the persistent chunk + vector store.

The store couples two structures sharing one integer row id: chunk records
keyed by a unique chunk id, and a vector index of fixed width.  They are
exposed together through this single interface so that every write keeps
each record paired with its vector.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from weave_chunker.models.store import KnnHit, StoredRow, VectorRecord


# Concrete implementation: SQLiteVectorStore (weave_chunker/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for chunk storage and nearest-neighbour retrieval."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create the backing structures if they do not exist yet."""

    @abstractmethod
    async def set_dimension(self, dim: int) -> None:
        """Record *dim* on first call; later calls must pass the same value.

        Raises
        ------
        weave_chunker.utils.errors.DimensionMismatchError
            If the store already holds a different dimension.
        """

    @abstractmethod
    async def get_dimension(self) -> int:
        """Return the persisted dimension.

        Raises
        ------
        weave_chunker.utils.errors.RAGError
            If no dimension has been recorded (nothing indexed yet).
        """

    @abstractmethod
    async def upsert(self, records: list[VectorRecord]) -> int:
        """Insert or replace a batch of records atomically.

        Either every record in the batch is written with its vector, or
        nothing in the batch is.  Returns the number of records written.
        """

    @abstractmethod
    async def knn(self, query_vector: list[float], k: int) -> list[KnnHit]:
        """Return up to *k* hits ordered by ascending L2 distance."""

    @abstractmethod
    async def get_row(self, chunk_id: str) -> StoredRow | None:
        """Return the stored record for *chunk_id*, or ``None``."""

    @abstractmethod
    async def count(self) -> tuple[int, int]:
        """Return ``(chunk_records, vectors)`` currently stored."""

    @abstractmethod
    async def list_rows(self) -> list[StoredRow]:
        """Return every stored chunk record, ordered by row id."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier, e.g. ``"sqlite_vec"``."""
