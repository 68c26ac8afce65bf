"""Vector-store row models.

A stored chunk lives in two coupled structures sharing an integer row id:
the chunk record (:class:`StoredRow`) and its embedding in the vector
table.  :class:`VectorRecord` is what callers hand to ``upsert``;
:class:`KnnHit` is what ``knn`` returns.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class VectorRecord(BaseModel):
    """One chunk plus its embedding, as written by ``upsert``."""

    model_config = ConfigDict(frozen=True)

    chunk_id: str
    path: str
    text: str
    embedding: list[float]
    content_hash: str
    metadata_json: str | None = None


class StoredRow(BaseModel):
    """A persisted chunk record (vector excluded)."""

    model_config = ConfigDict(frozen=True)

    row_id: int = Field(description="Storage-assigned integer id, stable once created.")
    chunk_id: str
    path: str
    text: str
    content_hash: str
    metadata_json: str | None = None
    created_at: str


class KnnHit(BaseModel):
    """A nearest-neighbour result joined back to its chunk record."""

    model_config = ConfigDict(frozen=True)

    chunk_id: str
    path: str
    text: str
    metadata_json: str | None = None
    distance: float = Field(ge=0.0, description="L2 distance to the query vector.")
    score: float = Field(description="Similarity 1 / (1 + distance).")
