"""weave-chunker: Markdown lore chunking, vector indexing and relevance search."""

__version__ = "0.1.0"
