"""Deterministic hashing helpers for chunk identity and content digests."""

from __future__ import annotations

import hashlib


def sha1_hex(value: str) -> str:
    """Return the hex SHA-1 digest of *value* encoded as UTF-8."""
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


def chunk_id_for(source_file: str, section_path: str, sub_index: int | None = None) -> str:
    """Stable chunk id for a logical chunk.

    Unsplit sections hash ``source_file:section_path``; blocks produced by a
    size split append ``#<sub_index>`` so every block keeps its own id across
    re-indexing runs.  ``#`` never survives slugify, so a heading such as
    ``a:0`` cannot collide with block 0 of section ``a``.
    """
    key = f"{source_file}:{section_path}"
    if sub_index is not None:
        key = f"{key}#{sub_index}"
    return sha1_hex(key)


def content_hash_for(source_file: str, text: str) -> str:
    """Digest of a chunk's text, scoped by its source file."""
    return sha1_hex(f"{source_file}:{text}")
