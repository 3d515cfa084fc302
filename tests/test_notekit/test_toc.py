"""Unit tests for notekit.toc."""

import textwrap

import pytest

from notekit.toc import AnchorRegistry, anchorize, extract_toc


def _toc(text: str):
    return extract_toc(textwrap.dedent(text)).value


# ---------------------------------------------------------------------------
# anchorize
# ---------------------------------------------------------------------------


class TestAnchorize:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Title", "title"),
            ("Hello, World!", "hello-world"),
            ("  Spaced   Out  ", "spaced-out"),
            ("snake_case and/slash", "snake-case-and-slash"),
            ("*Emphasis* matters", "emphasis-matters"),
            ("Version 2.0", "version-2-0"),
            ("!!!", "section"),
        ],
    )
    def test_anchorize(self, text, expected):
        assert anchorize(text) == expected


class TestAnchorRegistry:
    def test_first_occurrence_is_bare(self):
        reg = AnchorRegistry()
        assert [reg.claim("a"), reg.claim("a"), reg.claim("a")] == ["a", "a-2", "a-3"]

    def test_skips_taken_suffix(self):
        reg = AnchorRegistry()
        assert reg.claim("title") == "title"
        assert reg.claim("title-2") == "title-2"
        assert reg.claim("title") == "title-3"


# ---------------------------------------------------------------------------
# extract_toc
# ---------------------------------------------------------------------------


class TestExtractToc:
    def test_duplicate_headings(self):
        toc = _toc("# Title\n# Title\n")
        assert [h.anchor for h in toc] == ["title", "title-2"]

    def test_levels_and_text(self):
        toc = _toc("""\
            # One
            ## Two
            ###### Six
        """)
        assert [(h.level, h.text) for h in toc] == [(1, "One"), (2, "Two"), (6, "Six")]

    def test_inline_markdown_kept_raw(self):
        toc = _toc("## *Em* and `code`\n")
        assert toc[0].text == "*Em* and `code`"
        assert toc[0].anchor == "em-and-code"

    def test_requires_whitespace_after_hashes(self):
        assert _toc("#hashtag\n#\n") == ()

    def test_seven_hashes_is_not_heading(self):
        assert _toc("####### Too deep\n") == ()

    def test_indented_hash_is_not_heading(self):
        assert extract_toc("Text\n  # Indented\n").value == ()

    def test_fenced_headings_skipped(self):
        toc = _toc("""\
            # Real
            ```bash
            # just a comment
            ```
            # Also Real
        """)
        assert [h.text for h in toc] == ["Real", "Also Real"]

    def test_unclosed_fence_swallows_rest(self):
        parsed = extract_toc("# Kept\n```\n# Lost\n")
        assert [h.text for h in parsed.value] == ["Kept"]
        assert parsed.diagnostics == ("unclosed code fence opened at line 2",)

    def test_anchors_unique(self):
        toc = _toc("""\
            # Notes
            ## Notes
            ### Notes!
            # Notes 2
        """)
        anchors = [h.anchor for h in toc]
        assert anchors == ["notes", "notes-2", "notes-3", "notes-2-2"]
        assert len(set(anchors)) == len(anchors)

    def test_empty_heading_kept_with_fallback_anchor(self):
        toc = extract_toc("#   \n## Real\n#\t\n").value
        assert [(h.level, h.text, h.anchor) for h in toc] == [
            (1, "", "section"),
            (2, "Real", "real"),
            (1, "", "section-2"),
        ]
