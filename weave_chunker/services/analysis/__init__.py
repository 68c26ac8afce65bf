"""Corpus statistics over a baked store."""

from weave_chunker.services.analysis.corpus_analyzer import CorpusAnalyzer

__all__ = ["CorpusAnalyzer"]
