"""Index-run and corpus-analysis result models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class IngestionResult(BaseModel):
    """Summary of indexing one source document.

    Returned by :meth:`IndexingService.index_document` and reported by the
    ``bake`` command.
    """

    model_config = ConfigDict(frozen=True)

    source_file: str = Field(description="Document path relative to the indexed root.")
    chunks_created: int = Field(default=0, ge=0, description="Chunks embedded and stored.")
    total_tokens: int = Field(default=0, ge=0, description="Sum of chunk token estimates.")
    ingestion_time: float = Field(default=0.0, ge=0.0, description="Wall-clock seconds.")


class ImportanceSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    average: float = 0.0
    median: float = 0.0
    minimum: float = 0.0
    maximum: float = 0.0


class FileBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    chunk_count: int = 0
    avg_length: float = 0.0


class SectionBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    section_path: str
    section_title: str | None = None
    chunk_count: int = 0


class CorpusStats(BaseModel):
    """Aggregate statistics over everything in a vector store.

    Produced by :class:`~weave_chunker.services.analysis.corpus_analyzer.CorpusAnalyzer`
    for the ``analyze`` command.  Histograms are ordered by descending count.
    """

    model_config = ConfigDict(frozen=True)

    total_chunks: int = Field(default=0, ge=0)
    avg_chunk_length: float = 0.0
    min_chunk_length: int = 0
    max_chunk_length: int = 0
    files: list[FileBreakdown] = Field(default_factory=list)
    content_types: dict[str, int] = Field(default_factory=dict)
    universes: dict[str, int] = Field(default_factory=dict)
    species: dict[str, int] = Field(default_factory=dict)
    subspecies: dict[str, int] = Field(default_factory=dict)
    importance: ImportanceSummary | None = None
    top_entities: list[tuple[str, int]] = Field(default_factory=list)
    top_concepts: list[tuple[str, int]] = Field(default_factory=list)
    top_sections: list[SectionBreakdown] = Field(default_factory=list)
