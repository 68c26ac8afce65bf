"""Shared sanity checks for vectors returned by embedding providers."""

from __future__ import annotations

from weave_chunker.utils.errors import EmbeddingError


def ensure_usable_vectors(
    vectors: list[list[float]],
    expected_count: int,
    provider_name: str,
) -> list[list[float]]:
    """Return *vectors* unchanged, or raise if they cannot be indexed.

    Rejects a count that differs from the number of inputs, empty
    (dimension 0) vectors, and batches mixing several widths.
    """
    if len(vectors) != expected_count:
        raise EmbeddingError(
            message=f"expected {expected_count} vectors, got {len(vectors)}",
            provider_name=provider_name,
        )
    widths = {len(v) for v in vectors}
    if 0 in widths:
        raise EmbeddingError(message="embedding returned dim=0", provider_name=provider_name)
    if len(widths) > 1:
        raise EmbeddingError(
            message=f"embedding batch mixes dimensions {sorted(widths)}",
            provider_name=provider_name,
        )
    return vectors
