"""Pydantic v2 data models for chunking, storage, search and corpus analysis."""

from weave_chunker.models.chunk import (
    BaseMetadata,
    Chunk,
    ChunkMetadata,
    ContentType,
    Section,
    TextAnalysis,
)
from weave_chunker.models.corpus import CorpusStats, IngestionResult
from weave_chunker.models.search import (
    RankedHit,
    SearchFilters,
    SearchHit,
    SearchRequest,
    SearchResponse,
)
from weave_chunker.models.store import KnnHit, StoredRow, VectorRecord

__all__ = [
    "BaseMetadata",
    "Chunk",
    "ChunkMetadata",
    "ContentType",
    "CorpusStats",
    "IngestionResult",
    "KnnHit",
    "RankedHit",
    "SearchFilters",
    "SearchHit",
    "SearchRequest",
    "SearchResponse",
    "Section",
    "StoredRow",
    "TextAnalysis",
    "VectorRecord",
]
