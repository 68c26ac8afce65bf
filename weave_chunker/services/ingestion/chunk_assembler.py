"""Turns one Markdown document into immutable :class:`Chunk` records.

Combines the :class:`Sectionizer`, the :class:`SizeSplitter` and an
:class:`ITextAnalyzer` into the index-time chunking step:

1. Sectionize the document by heading.
2. Prefix each section's title to its text (unless already present).
3. Keep the section whole when it fits the budget; otherwise split it.
4. Analyze each resulting block and assign a deterministic id.

Blocks of a split section carry ``parent_chunk_id = "source_file:path"``.
A section that yields a single block is treated as unsplit.
"""

from __future__ import annotations

import structlog

from weave_chunker.interfaces.text_analyzer import ITextAnalyzer
from weave_chunker.models.chunk import BaseMetadata, Chunk, ChunkMetadata, Section, TextAnalysis
from weave_chunker.services.ingestion.metadata_extractor import MetadataExtractor
from weave_chunker.services.ingestion.sectionizer import Sectionizer
from weave_chunker.services.ingestion.size_splitter import SizeSplitter, estimate_tokens
from weave_chunker.utils.hashing import chunk_id_for

logger = structlog.get_logger(logger_name=__name__)


class ChunkAssembler:
    """Builds chunk records for a document.

    Parameters
    ----------
    splitter:
        Size policy; defaults to a 400-token budget with 15% overlap.
    analyzer:
        Metadata strategy; defaults to the regex :class:`MetadataExtractor`.
    """

    def __init__(
        self,
        splitter: SizeSplitter | None = None,
        analyzer: ITextAnalyzer | None = None,
    ) -> None:
        self._sectionizer = Sectionizer()
        self._splitter = splitter or SizeSplitter()
        self._analyzer = analyzer or MetadataExtractor()

    def assemble(
        self,
        markdown: str,
        source_file: str,
        base_meta: BaseMetadata | None = None,
    ) -> list[Chunk]:
        """Return the chunks of *markdown* in document order."""
        base_meta = base_meta or BaseMetadata()
        chunks: list[Chunk] = []

        for section in self._sectionizer.sectionize(markdown):
            chunks.extend(self._chunk_section(section, source_file, base_meta))

        logger.debug(
            "chunking_complete",
            source_file=source_file,
            num_chunks=len(chunks),
            split_chunks=sum(1 for c in chunks if c.metadata.parent_chunk_id),
        )
        return chunks

    def _chunk_section(
        self,
        section: Section,
        source_file: str,
        base_meta: BaseMetadata,
    ) -> list[Chunk]:
        if section.title and section.title not in section.text:
            contextual_text = f"{section.title}\n\n{section.text}"
        else:
            contextual_text = section.text

        parts = [contextual_text]
        if not self._splitter.fits(section.text):
            parts = self._splitter.split(contextual_text)

        if len(parts) <= 1:
            analysis = self._analyzer.extract(section.text, title=section.title)
            return [
                self._build_chunk(
                    text=contextual_text,
                    chunk_id=chunk_id_for(source_file, section.path),
                    section=section,
                    source_file=source_file,
                    base_meta=base_meta,
                    analysis=analysis,
                    parent_chunk_id=None,
                )
            ]

        parent_chunk_id = f"{source_file}:{section.path}"
        return [
            self._build_chunk(
                text=part,
                chunk_id=chunk_id_for(source_file, section.path, index),
                section=section,
                source_file=source_file,
                base_meta=base_meta,
                analysis=self._analyzer.extract(part),
                parent_chunk_id=parent_chunk_id,
            )
            for index, part in enumerate(parts)
        ]

    @staticmethod
    def _build_chunk(
        text: str,
        chunk_id: str,
        section: Section,
        source_file: str,
        base_meta: BaseMetadata,
        analysis: TextAnalysis,
        parent_chunk_id: str | None,
    ) -> Chunk:
        metadata = ChunkMetadata(
            universe=base_meta.universe,
            species=base_meta.species,
            subspecies=base_meta.subspecies,
            source_file=source_file,
            section_path=section.path,
            section_title=section.title,
            parent_section=section.parent_title,
            entities=analysis.entities,
            concepts=analysis.concepts,
            content_type=analysis.content_type,
            importance_score=analysis.importance_score,
            aliases=[],
            parent_chunk_id=parent_chunk_id,
        )
        return Chunk(
            id=chunk_id,
            text=text,
            metadata=metadata,
            token_estimate=estimate_tokens(text),
        )
