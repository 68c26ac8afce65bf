"""Index-time pipeline: sectioning, splitting, metadata, assembly, indexing."""

from weave_chunker.services.ingestion.chunk_assembler import ChunkAssembler
from weave_chunker.services.ingestion.indexing_service import IndexingService
from weave_chunker.services.ingestion.metadata_extractor import MetadataExtractor
from weave_chunker.services.ingestion.sectionizer import Sectionizer
from weave_chunker.services.ingestion.size_splitter import SizeSplitter

__all__ = [
    "ChunkAssembler",
    "IndexingService",
    "MetadataExtractor",
    "Sectionizer",
    "SizeSplitter",
]
