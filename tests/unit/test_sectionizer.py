"""Unit tests for the heading-aware Markdown sectionizer."""

from __future__ import annotations

import pytest

from weave_chunker.services.ingestion.sectionizer import Sectionizer, normalize_block, slugify


class TestSlugify:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Major Rites", "major-rites"),
            ("🏛 Kaelari Governance & Social Structure", "kaelari-governance-social-structure"),
            ("[The Archive](https://example.com/archive)", "the-archive"),
            ("**Sync**  Days", "sync-days"),
            ("Era: First/Second", "era:-first/second"),
            ("**✨**", "section"),
            ("", "section"),
        ],
    )
    def test_slugify(self, raw: str, expected: str) -> None:
        assert slugify(raw) == expected


class TestNormalizeBlock:
    def test_collapses_blank_runs_and_trims(self) -> None:
        assert normalize_block("\n\nline one\n\n\n\nline two\n  ") == "line one\n\nline two"

    def test_keeps_single_blank_line(self) -> None:
        assert normalize_block("a\n\nb") == "a\n\nb"


class TestSectionize:
    def test_heading_hierarchy(self, sample_markdown: str) -> None:
        sections = Sectionizer().sectionize(sample_markdown)

        assert [s.path for s in sections] == [
            "intro",
            "kaelari-lore",
            "major-rites",
            "major-rites/sync-days",
            "sayings",
        ]
        intro, lore, rites, sync, sayings = sections
        assert intro.title is None and intro.parent_title is None
        assert intro.text == "A preface before any heading."
        assert lore.title == "Kaelari Lore" and lore.parent_title is None
        assert rites.title == "Major Rites" and rites.parent_title == "Kaelari Lore"
        assert sync.title == "Sync Days" and sync.parent_title == "Major Rites"
        assert sayings.parent_title == "Kaelari Lore"

    def test_h3_directly_under_h1(self) -> None:
        sections = Sectionizer().sectionize("# Realm\n### Rivers\nwater flows")

        assert len(sections) == 1
        assert sections[0].path == "realm/rivers"
        assert sections[0].title == "Rivers"
        assert sections[0].parent_title is None

    def test_h1_resets_deeper_context(self) -> None:
        md = "# One\n## Sub\n### Leaf\nleaf text\n# Two\nsecond text"
        sections = Sectionizer().sectionize(md)

        assert [s.path for s in sections] == ["sub/leaf", "two"]
        assert sections[1].parent_title is None

    def test_deep_headings_count_as_h3(self) -> None:
        sections = Sectionizer().sectionize("## Top\n#### Deep\nbody")
        assert sections[0].path == "top/deep"

    def test_fenced_heading_is_not_a_heading(self) -> None:
        md = "## Code\n```\n# not a heading\n```\nafter the fence"
        sections = Sectionizer().sectionize(md)

        assert len(sections) == 1
        assert sections[0].path == "code"
        assert "# not a heading" in sections[0].text
        assert sections[0].text.endswith("after the fence")

    def test_empty_sections_are_dropped(self) -> None:
        sections = Sectionizer().sectionize("# Empty\n\n\n# Full\ncontent")
        assert [s.path for s in sections] == ["full"]

    def test_document_without_body_text(self) -> None:
        assert Sectionizer().sectionize("# Only\n## Headings\n") == []
        assert Sectionizer().sectionize("") == []

    def test_hash_without_space_is_text(self) -> None:
        sections = Sectionizer().sectionize("#hashtag is not a heading")
        assert sections[0].path == "intro"

    def test_blank_runs_collapsed(self) -> None:
        sections = Sectionizer().sectionize("## A\nline1\n\n\n\nline2")
        assert sections[0].text == "line1\n\nline2"

    def test_crlf_line_endings(self) -> None:
        sections = Sectionizer().sectionize("## Rites\r\nbody text\r\n")
        assert sections[0].path == "rites"
        assert sections[0].text == "body text"

    def test_reusable_between_documents(self) -> None:
        sectionizer = Sectionizer()
        sectionizer.sectionize("# First\n## Second\ntext")
        sections = sectionizer.sectionize("plain text")
        assert sections[0].path == "intro"
