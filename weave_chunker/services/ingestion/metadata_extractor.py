"""Deterministic heuristic metadata extraction for chunk text.

Implements :class:`~weave_chunker.interfaces.text_analyzer.ITextAnalyzer`
with regular expressions only, so the same text always yields the same
metadata:

- **entities** -- headings, capitalized words, multi-word proper nouns,
  title-case lines, quoted terms and emphasized spans (max 25).
- **concepts** -- headings plus lore-style phrase patterns such as
  "Council of Artisans", "Seven Harmonies" or "known as the Weave" (max 15).
- **content_type** -- narrative / list / quote / mixed from line ratios.
- **importance_score** -- 0.5 baseline adjusted by proper nouns, emphasis,
  quotes, lists and length, clamped to [0.1, 1.0].
"""

from __future__ import annotations

import re

import structlog

from weave_chunker.interfaces.text_analyzer import ITextAnalyzer
from weave_chunker.models.chunk import ContentType, TextAnalysis

logger = structlog.get_logger(logger_name=__name__)

_MAX_ENTITIES = 25
_MAX_CONCEPTS = 15

# Frequent capitalized sentence words that are never entities.
_COMMON_WORDS = frozenset(
    {
        "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "from", "up", "about", "into", "through", "during", "before", "after", "above",
        "below", "between", "among", "is", "are", "was", "were", "be", "been", "being",
        "have", "has", "had", "do", "does", "did", "will", "would", "could", "should",
        "may", "might", "must", "can", "shall", "this", "that", "these", "those",
    }
)

_HEADING_LINE_RE = re.compile(r"^#+\s+(.+)$", re.MULTILINE)
_HEADING_PREFIX_RE = re.compile(r"^#+\s+")
_MARKUP_RE = re.compile(r"[*_`~]")
_CONCEPT_HEADING_NOISE_RE = re.compile("[*_`~\U0001f9e0⚙️\U0001f3db✨\U0001f4d8\U0001f4cc\U0001f52e]")

# Capitalized word not at the very start, not after ". " and not at a line start.
_PROPER_NOUN_RE = re.compile(r"(?<!\. )(?<!\n)[A-Z][a-z]+(?:'[a-z]+)?")
_MULTI_WORD_RE = re.compile(r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+)+")
_TITLE_LINE_RE = re.compile(r"^[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*$", re.MULTILINE)
_QUOTED_RE = re.compile(r'"([^"]+)"')
_EMPHASIS_RE = re.compile(r"\*\*([^*]+)\*\*|\*([^*]+)\*")

_CONCEPT_PATTERNS = (
    re.compile(r"(?:the\s+)?([A-Z][a-z]+(?:\s+of\s+[A-Z][a-z]+)+)"),
    re.compile(r"([A-Z][a-z]+\s+[A-Z][a-z]+s?)"),
    re.compile(r"(?:known\s+as|called|termed)\s+([^.,\n]+)"),
    re.compile(r"^([A-Z][a-z]+(?:\s+[A-Z&][a-z]+)*):?$", re.MULTILINE),
)
_CONCEPT_PREFIX_RE = re.compile(r"^(?:the\s+|known\s+as\s+|called\s+|termed\s+)", re.IGNORECASE)

_BULLET_LINE_RE = re.compile(r"^\s*[-*+•]\s+", re.MULTILINE)
_NUMBERED_LINE_RE = re.compile(r"^\s*\d+\.\s+", re.MULTILINE)
_QUOTE_LINE_RE = re.compile(r"^\s*>", re.MULTILINE)
_CAPITALIZED_RE = re.compile(r"[A-Z][a-z]+")


def extract_entities(text: str) -> list[str]:
    """Return up to 25 entity strings in first-seen order."""
    entities: dict[str, None] = {}

    for match in _HEADING_LINE_RE.finditer(text):
        clean = _MARKUP_RE.sub("", _HEADING_PREFIX_RE.sub("", match.group(0))).strip()
        if len(clean) > 2:
            entities[clean] = None

    for match in _PROPER_NOUN_RE.finditer(text):
        word = match.group(0)
        if match.start() == 0:
            continue
        if len(word) > 2 and word.lower() not in _COMMON_WORDS:
            entities[word] = None

    for match in _MULTI_WORD_RE.finditer(text):
        entities[match.group(0)] = None

    for match in _TITLE_LINE_RE.finditer(text):
        phrase = match.group(0)
        if 3 < len(phrase) < 50:
            entities[phrase] = None

    for match in _QUOTED_RE.finditer(text):
        clean = match.group(0).replace('"', "")
        if len(clean) > 2:
            entities[clean] = None

    for match in _EMPHASIS_RE.finditer(text):
        clean = match.group(0).replace("*", "")
        if len(clean) > 2:
            entities[clean] = None

    return list(entities)[:_MAX_ENTITIES]


def extract_concepts(text: str) -> list[str]:
    """Return up to 15 concept strings in first-seen order."""
    concepts: dict[str, None] = {}

    for match in _HEADING_LINE_RE.finditer(text):
        clean = _CONCEPT_HEADING_NOISE_RE.sub("", _HEADING_PREFIX_RE.sub("", match.group(0))).strip()
        if 3 < len(clean) < 50:
            concepts[clean] = None

    for pattern in _CONCEPT_PATTERNS:
        for match in pattern.finditer(text):
            clean = _CONCEPT_PREFIX_RE.sub("", match.group(0))
            clean = clean.removesuffix(":").strip()
            if 3 < len(clean) < 50:
                concepts[clean] = None

    return list(concepts)[:_MAX_CONCEPTS]


def classify_content(text: str) -> tuple[ContentType, float]:
    """Return ``(content_type, importance_score)`` for *text*."""
    list_lines = len(_BULLET_LINE_RE.findall(text)) + len(_NUMBERED_LINE_RE.findall(text))
    quote_lines = len(_QUOTE_LINE_RE.findall(text))
    total_lines = len(text.split("\n"))

    list_ratio = list_lines / total_lines
    quote_ratio = quote_lines / total_lines

    content_type: ContentType
    if quote_ratio > 0.5:
        content_type = "quote"
    elif list_ratio > 0.4:
        content_type = "list"
    elif list_ratio > 0.1 or quote_ratio > 0.1:
        content_type = "mixed"
    else:
        content_type = "narrative"

    importance = 0.5
    importance += min(0.3, len(_CAPITALIZED_RE.findall(text)) * 0.02)
    importance += min(0.2, len(_EMPHASIS_RE.findall(text)) * 0.05)
    if quote_ratio > 0.2:
        importance += 0.15
    if list_ratio > 0.3:
        importance += 0.1
    if len(text) < 100:
        importance -= 0.2

    return content_type, max(0.1, min(1.0, importance))


class MetadataExtractor(ITextAnalyzer):
    """Regex-heuristic :class:`ITextAnalyzer`.

    Stateless; one instance can be shared across documents.
    """

    def extract(self, text: str, title: str | None = None) -> TextAnalysis:
        signal_text = f"{title}\n\n{text}" if title else text
        content_type, importance = classify_content(text)
        analysis = TextAnalysis(
            entities=extract_entities(signal_text),
            concepts=extract_concepts(signal_text),
            content_type=content_type,
            importance_score=importance,
        )
        logger.debug(
            "metadata_extracted",
            entities=len(analysis.entities),
            concepts=len(analysis.concepts),
            content_type=content_type,
            importance=round(importance, 3),
        )
        return analysis
