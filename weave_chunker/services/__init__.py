"""Service layer: ingestion, retrieval and analysis."""
