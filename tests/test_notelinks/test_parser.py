"""Unit tests for notelinks.parser."""

import textwrap
from pathlib import Path

import pytest

from notelinks.parser import note_title, parse_frontmatter, parse_note, parse_wikilinks

# ---------------------------------------------------------------------------
# parse_frontmatter
# ---------------------------------------------------------------------------


class TestParseFrontmatter:
    def test_no_frontmatter_returns_empty_dict(self):
        meta, body = parse_frontmatter("Just some text.")
        assert meta == {}
        assert body == "Just some text."

    def test_basic_frontmatter(self):
        raw = textwrap.dedent("""\
            ---
            title: Go - Context
            tags: [go, concurrency]
            ---
            Body here.
        """)
        meta, body = parse_frontmatter(raw)
        assert meta["title"] == "Go - Context"
        assert body == "Body here.\n"

    def test_frontmatter_not_at_start_is_ignored(self):
        raw = "Intro\n---\ntitle: Nope\n---\nMore text."
        meta, body = parse_frontmatter(raw)
        assert meta == {}
        assert body == raw

    def test_invalid_yaml_returns_empty_dict(self):
        meta, body = parse_frontmatter("---\ntitle: [unclosed\n---\nBody.")
        assert meta == {}
        assert body == "Body."

    def test_non_mapping_yaml_returns_empty_dict(self):
        meta, _ = parse_frontmatter("---\n- just\n- a list\n---\nBody.")
        assert meta == {}


# ---------------------------------------------------------------------------
# parse_wikilinks
# ---------------------------------------------------------------------------


class TestParseWikilinks:
    def test_single_link(self):
        assert parse_wikilinks("See [[Getting Started]] for details.") == [("Getting Started", 1)]

    def test_multiple_links_in_order(self):
        assert parse_wikilinks("[[Z]] then [[A]] then [[M]]") == [("Z", 1), ("A", 1), ("M", 1)]

    def test_duplicates_preserved(self):
        """Every occurrence is reported, not just the first."""
        assert parse_wikilinks("[[A]] then [[A]] again") == [("A", 1), ("A", 1)]

    def test_line_numbers(self):
        text = "intro\n[[A]]\n\n[[B]] and [[A]]\n"
        assert parse_wikilinks(text) == [("A", 2), ("B", 4), ("A", 4)]

    def test_first_line_offset(self):
        assert parse_wikilinks("x\n[[A]]", first_line=5) == [("A", 6)]

    def test_link_with_alias(self):
        assert parse_wikilinks("See [[index|Home Page]] here.") == [("index", 1)]

    def test_link_with_heading(self):
        assert parse_wikilinks("Jump to [[Go - Context#Cancellation]].") == [("Go - Context", 1)]

    def test_target_kept_as_written(self):
        assert parse_wikilinks("[[ Spaced Title ]]") == [(" Spaced Title ", 1)]

    def test_same_note_anchor_is_not_a_reference(self):
        assert parse_wikilinks("See [[#Summary]] below.") == []

    def test_blank_target_is_not_a_reference(self):
        assert parse_wikilinks("Empty [[   ]] link.") == []

    def test_no_links(self):
        assert parse_wikilinks("Plain text, no links.") == []

    def test_fenced_code_block_skipped(self):
        text = textwrap.dedent("""\
            ```python
            grid = [[1, 2], [3, 4]]
            ```
            See [[Arrays]].
        """)
        assert parse_wikilinks(text) == [("Arrays", 4)]

    def test_fence_closed_only_by_same_marker(self):
        text = "~~~\n```\n[[Hidden]]\n~~~\n[[Visible]]\n"
        assert parse_wikilinks(text) == [("Visible", 5)]

    def test_longer_fence_not_closed_by_shorter_run(self):
        text = textwrap.dedent("""\
            ````markdown
            ```python
            grid = [[1, 2]]
            ```
            [[Still Code]]
            ````
            [[Visible]]
        """)
        assert parse_wikilinks(text) == [("Visible", 7)]

    def test_fence_closed_by_longer_run(self):
        assert parse_wikilinks("```\n[[Hidden]]\n`````\n[[Visible]]\n") == [("Visible", 4)]

    def test_inline_code_span_skipped(self):
        assert parse_wikilinks("Use `[[x]]` syntax to link [[Syntax]].") == [("Syntax", 1)]


# ---------------------------------------------------------------------------
# note_title
# ---------------------------------------------------------------------------


class TestNoteTitle:
    def test_frontmatter_title_wins(self):
        assert note_title(Path("go-context.md"), {"title": "Go - Context"}) == "Go - Context"

    def test_falls_back_to_stem(self):
        assert note_title(Path("Go - Context.md"), {}) == "Go - Context"

    def test_empty_title_falls_back_to_stem(self):
        assert note_title(Path("x.md"), {"title": ""}) == "x"

    def test_non_string_title(self):
        assert note_title(Path("x.md"), {"title": 42}) == "42"

    def test_title_not_stripped(self):
        assert note_title(Path("x.md"), {"title": "api "}) == "api "


# ---------------------------------------------------------------------------
# parse_note (integration)
# ---------------------------------------------------------------------------


class TestParseNote:
    def test_full_note(self, tmp_path: Path):
        md = tmp_path / "go-context.md"
        md.write_text(
            textwrap.dedent("""\
                ---
                title: Go - Context
                ---
                See [[Goroutines]] and [[Channels|chan]].

                Also [[Goroutines]] again.
            """),
            encoding="utf-8",
        )
        note = parse_note(md, tmp_path)
        assert note.title == "Go - Context"
        assert note.relpath == "go-context.md"
        assert note.targets == ["Goroutines", "Channels", "Goroutines"]
        assert [r.line for r in note.references] == [4, 4, 6]
        assert all(r.source == "Go - Context" for r in note.references)
        assert all(r.source_path == "go-context.md" for r in note.references)

    def test_note_without_frontmatter(self, tmp_path: Path):
        md = tmp_path / "Simple.txt"
        md.write_text("Just text.\n", encoding="utf-8")
        note = parse_note(md, tmp_path)
        assert note.title == "Simple"
        assert note.references == []

    def test_relpath_is_posix_relative_to_root(self, tmp_path: Path):
        sub = tmp_path / "go"
        sub.mkdir()
        md = sub / "context.md"
        md.write_text("[[A]]", encoding="utf-8")
        assert parse_note(md, tmp_path).relpath == "go/context.md"

    def test_invalid_utf8_raises(self, tmp_path: Path):
        md = tmp_path / "bad.md"
        md.write_bytes(b"\xff\xfe\x00broken")
        with pytest.raises(UnicodeDecodeError):
            parse_note(md, tmp_path)
