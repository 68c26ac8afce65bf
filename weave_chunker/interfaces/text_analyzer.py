"""Abstract base class for chunk text analyzers.

A text analyzer derives entities, concepts, content type and an importance
score from a block of text.  The regex heuristics in
:class:`~weave_chunker.services.ingestion.metadata_extractor.MetadataExtractor`
are the default; a model-backed analyzer can replace them without touching
the splitter or the store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from weave_chunker.models.chunk import TextAnalysis


class ITextAnalyzer(ABC):
    """Contract for deterministic text analysis of one chunk."""

    @abstractmethod
    def extract(self, text: str, title: str | None = None) -> TextAnalysis:
        """Analyze *text*.

        Parameters
        ----------
        text:
            The block to classify.
        title:
            Optional section title.  When given it is prefixed to *text*
            for entity and concept extraction only; content type and
            importance are computed from *text* alone.
        """
