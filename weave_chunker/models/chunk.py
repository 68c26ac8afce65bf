"""Chunking data models: sections, text analysis and chunk records.

Defines Pydantic v2 models for the index-time half of the pipeline.  All
models use frozen config: a chunk is built once by the assembler and only
ever replaced wholesale by re-indexing.

Pipeline overview:

    1. SECTIONING: a Markdown document is cut at H1/H2/H3 headings into
       :class:`Section` records keyed by a slug path ("rites/sync-days").
    2. SPLITTING: oversized sections are split by paragraph with overlap.
    3. ANALYSIS: each block gets a :class:`TextAnalysis` (entities, concepts,
       content type, importance).
    4. ASSEMBLY: blocks become :class:`Chunk` records with deterministic ids
       and :class:`ChunkMetadata`, ready for embedding and storage.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ContentType = Literal["narrative", "list", "quote", "mixed"]


class Section(BaseModel):
    """A heading-delimited region of one source document, before splitting."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description='Slug path, e.g. "major-rites/sync-days" or "intro".')
    title: str | None = Field(default=None, description="Deepest active heading text.")
    parent_title: str | None = Field(
        default=None, description="Heading text one level up from the title, if any."
    )
    text: str = Field(description="Normalized section body.")


class TextAnalysis(BaseModel):
    """Output of a text analyzer for one block of text."""

    model_config = ConfigDict(frozen=True)

    entities: list[str] = Field(default_factory=list, description="At most 25 entity strings.")
    concepts: list[str] = Field(default_factory=list, description="At most 15 concept strings.")
    content_type: ContentType = Field(default="narrative")
    importance_score: float = Field(default=0.5, ge=0.1, le=1.0)


class BaseMetadata(BaseModel):
    """Caller-supplied classification copied into every chunk of an index run."""

    model_config = ConfigDict(frozen=True)

    universe: str | None = None
    species: str | None = None
    subspecies: str | None = None


class ChunkMetadata(BaseModel):
    """Metadata persisted as JSON alongside every stored chunk."""

    model_config = ConfigDict(frozen=True)

    universe: str | None = None
    species: str | None = None
    subspecies: str | None = None
    source_file: str = Field(description="Document path relative to the indexed root.")
    section_path: str = Field(description="Slug path of the originating section.")
    section_title: str | None = Field(default=None, description="Heading text for context.")
    parent_section: str | None = Field(default=None, description="Parent heading text.")
    entities: list[str] = Field(default_factory=list)
    concepts: list[str] = Field(default_factory=list)
    content_type: ContentType = "narrative"
    importance_score: float = Field(default=0.5, ge=0.1, le=1.0)
    aliases: list[str] = Field(default_factory=list)
    # Grouping tag "source_file:section_path" for blocks of a split section.
    # Names a virtual parent that is never stored as a row.
    parent_chunk_id: str | None = None


class Chunk(BaseModel):
    """An independently retrievable unit of text with its metadata."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="SHA-1 of source_file:section_path[:sub_index].")
    text: str
    metadata: ChunkMetadata
    token_estimate: int = Field(default=0, ge=0)
