"""Size-bounded paragraph splitter with character-ratio overlap.

A section whose token estimate fits the budget is emitted as one block.  An
oversized section is split at paragraph boundaries (blank lines): paragraphs
are packed greedily until the next one would push the running estimate past
the budget, the buffer is committed, and the next buffer is seeded with the
trailing ``overlap_ratio`` fraction (by characters) of the committed block so
that context spanning the boundary survives in both blocks.

A single paragraph larger than the budget is never cut further; it becomes
one oversized block.
"""

from __future__ import annotations

import math
import re

import structlog

from weave_chunker.services.ingestion.sectionizer import normalize_block
from weave_chunker.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_MAX_TOKENS = 400
DEFAULT_OVERLAP_RATIO = 0.15
MAX_TOKENS_RANGE = (300, 500)
OVERLAP_RATIO_RANGE = (0.10, 0.20)

_PARAGRAPH_SPLIT_RE = re.compile(r"\n{2,}")
_LIST_MARKER_RE = re.compile(r"^(\s*[-*+]|\s*\d+\.)\s+", re.MULTILINE)

# Per-occurrence multipliers applied on top of the chars/4 estimate.
_PIPE_BONUS = 0.03
_LIST_LINE_BONUS = 0.05


def estimate_tokens(text: str) -> int:
    """Approximate the token count of *text*.

    ``ceil(chars / 4)`` scaled up by 3% per pipe character (tables) and 5%
    per list-marker line, since dense tables and lists tokenize heavier than
    prose.  Never returns less than 1.
    """
    approx = math.ceil(len(text) / 4)
    table_bonus = text.count("|") * _PIPE_BONUS
    list_bonus = len(_LIST_MARKER_RE.findall(text)) * _LIST_LINE_BONUS
    return max(1, math.floor(approx * (1 + table_bonus + list_bonus)))


class SizeSplitter:
    """Splits section text into blocks of at most ``max_tokens`` (estimated).

    Parameters
    ----------
    max_tokens:
        Target token budget per block, 300..500 (default 400).
    overlap_ratio:
        Fraction of a committed block carried into the next one,
        0.10..0.20 (default 0.15).
    """

    def __init__(
        self,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        overlap_ratio: float = DEFAULT_OVERLAP_RATIO,
    ) -> None:
        low, high = MAX_TOKENS_RANGE
        if not low <= max_tokens <= high:
            raise ConfigurationError(
                message=f"max_tokens must be within {low}..{high}, got {max_tokens}"
            )
        low_r, high_r = OVERLAP_RATIO_RANGE
        if not low_r <= overlap_ratio <= high_r:
            raise ConfigurationError(
                message=f"overlap_ratio must be within {low_r}..{high_r}, got {overlap_ratio}"
            )
        self._max_tokens = max_tokens
        self._overlap_ratio = overlap_ratio

    @property
    def max_tokens(self) -> int:
        return self._max_tokens

    @property
    def overlap_ratio(self) -> float:
        return self._overlap_ratio

    def fits(self, text: str) -> bool:
        """Return ``True`` if *text* fits the budget as a single block."""
        return estimate_tokens(text) <= self._max_tokens

    def split(self, text: str) -> list[str]:
        """Split *text* into size-bounded blocks.

        Returns ``[text]`` unchanged when it already fits.
        """
        if self.fits(text):
            return [text]

        blocks: list[str] = []
        buffer: list[str] = []
        tokens = 0

        for paragraph in _PARAGRAPH_SPLIT_RE.split(text):
            paragraph_tokens = estimate_tokens(paragraph)
            if tokens > 0 and tokens + paragraph_tokens > self._max_tokens:
                committed = normalize_block("\n\n".join(buffer))
                buffer = []
                tokens = 0
                if committed:
                    blocks.append(committed)
                    overlap = self.overlap_fragment(committed)
                    if overlap.strip():
                        buffer.append(overlap)
                        tokens = estimate_tokens(overlap)
            buffer.append(paragraph)
            tokens += paragraph_tokens

        if buffer:
            tail = normalize_block("\n\n".join(buffer))
            if tail:
                blocks.append(tail)

        logger.debug(
            "section_split",
            blocks=len(blocks),
            section_tokens=estimate_tokens(text),
            max_tokens=self._max_tokens,
        )
        return blocks

    def overlap_fragment(self, committed: str) -> str:
        """Return the trailing ``overlap_ratio`` share of *committed* by characters."""
        overlap_chars = math.floor(len(committed) * self._overlap_ratio)
        if overlap_chars <= 0:
            return ""
        return committed[len(committed) - overlap_chars :]
