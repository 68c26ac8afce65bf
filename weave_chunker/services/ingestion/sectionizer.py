"""Heading-aware Markdown sectionizer.

Cuts a document into ordered :class:`~weave_chunker.models.chunk.Section`
records using H1/H2/H3 headings (deeper headings count as H3).  Each section
is keyed by a slug path built from the active headings:

    ## Major Rites          -> "major-rites"
    ### Sync Days           -> "major-rites/sync-days"

Text before any heading lands in a single ``"intro"`` section.  Lines inside
fenced code blocks are kept verbatim and never treated as headings.  Lists,
tables and quotes are not reformatted; they simply stay inside one section
buffer until the size splitter decides otherwise.
"""

from __future__ import annotations

import re
from typing import NamedTuple

import structlog

from weave_chunker.models.chunk import Section

logger = structlog.get_logger(logger_name=__name__)

_FENCE_RE = re.compile(r"^\s*```")
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*)$")

_MARKUP_RE = re.compile(r"[*_`~]")
_LINK_RE = re.compile(r"!?\[.*?\]\(.*?\)")
_LINK_SYNTAX_RE = re.compile(r"^!?\[|\]\(.*\)$")
_LEADING_SYMBOLS_RE = re.compile(r"^[\W_]+")
_DISALLOWED_RE = re.compile(r"[^\w\s/:-]")
_WHITESPACE_RE = re.compile(r"\s+")
_HYPHENS_RE = re.compile(r"-+")
_EDGE_RE = re.compile(r"^[-/]+|[-/]+$")
_BLANK_RUN_RE = re.compile(r"\n{3,}")


class _Heading(NamedTuple):
    slug: str
    title: str


def slugify(raw: str) -> str:
    """Return a path-safe slug for heading text.

    >>> slugify("🏛 Kaelari Governance & Social Structure")
    'kaelari-governance-social-structure'
    >>> slugify("**✨**")
    'section'
    """
    s = raw.strip()
    s = _MARKUP_RE.sub("", s)
    s = _LINK_RE.sub(lambda m: _LINK_SYNTAX_RE.sub("", m.group(0)), s)
    s = _LEADING_SYMBOLS_RE.sub("", s)
    s = _DISALLOWED_RE.sub("", s)
    s = s.lower()
    s = _WHITESPACE_RE.sub("-", s)
    s = _HYPHENS_RE.sub("-", s)
    s = _EDGE_RE.sub("", s)
    return s or "section"


def normalize_block(text: str) -> str:
    """Trim surrounding whitespace and collapse runs of blank lines to one."""
    return _BLANK_RUN_RE.sub("\n\n", text.strip())


class Sectionizer:
    """Splits Markdown into heading-scoped sections.

    Context rules: an H1 resets H2 and H3; an H2 replaces the H2 slot and
    clears H3; an H3 replaces only the H3 slot.
    """

    def __init__(self) -> None:
        self._h1: _Heading | None = None
        self._h2: _Heading | None = None
        self._h3: _Heading | None = None

    def sectionize(self, markdown: str) -> list[Section]:
        """Return the ordered sections of *markdown*.

        Empty or whitespace-only sections are dropped, so a document with
        no body text yields an empty list.
        """
        self._h1 = self._h2 = self._h3 = None
        sections: list[Section] = []
        buffer: list[str] = []
        in_fence = False

        for line in markdown.replace("\r\n", "\n").split("\n"):
            if _FENCE_RE.match(line):
                in_fence = not in_fence
                buffer.append(line)
                continue
            if in_fence:
                buffer.append(line)
                continue

            match = _HEADING_RE.match(line)
            if match is None:
                buffer.append(line)
                continue

            self._flush(buffer, sections)
            buffer = []
            level = min(3, len(match.group(1)))
            title = match.group(2).strip()
            heading = _Heading(slug=slugify(title), title=title)
            if level == 1:
                self._h1, self._h2, self._h3 = heading, None, None
            elif level == 2:
                self._h2, self._h3 = heading, None
            else:
                self._h3 = heading

        self._flush(buffer, sections)
        logger.debug("sectionize_complete", sections=len(sections))
        return sections

    # ------------------------------------------------------------------
    # Heading context
    # ------------------------------------------------------------------

    def _current_path(self) -> str:
        if self._h2 and self._h3:
            return f"{self._h2.slug}/{self._h3.slug}"
        if self._h1 and self._h3:
            return f"{self._h1.slug}/{self._h3.slug}"
        if self._h2:
            return self._h2.slug
        if self._h3:
            return self._h3.slug
        if self._h1:
            return self._h1.slug
        return "intro"

    def _current_title(self) -> str | None:
        deepest = self._h3 or self._h2 or self._h1
        return deepest.title if deepest else None

    def _current_parent(self) -> str | None:
        if self._h3 and self._h2:
            return self._h2.title
        if self._h2 and self._h1:
            return self._h1.title
        return None

    def _flush(self, buffer: list[str], sections: list[Section]) -> None:
        text = normalize_block("\n".join(buffer))
        if not text:
            return
        section = Section(
            path=self._current_path(),
            title=self._current_title(),
            parent_title=self._current_parent(),
            text=text,
        )
        logger.debug(
            "section_created",
            path=section.path,
            title=section.title,
            text_length=len(text),
        )
        sections.append(section)
