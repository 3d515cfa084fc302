"""Unit tests for notekit.links."""

import textwrap

from notekit.links import extract_links


def _links(text: str):
    return extract_links(text).value


class TestExtractLinks:
    def test_link_and_embed(self):
        assert _links("[[Foo]] and ![[Bar|alt]]") == (("Foo",), ("Bar",))

    def test_alias_never_leaks(self):
        links, _ = _links("See [[index|Home Page]] here.")
        assert links == ("index",)

    def test_target_is_trimmed(self):
        links, embeds = _links("[[  Spaced Out  | alias ]] ![[ pic.png ]]")
        assert links == ("Spaced Out",)
        assert embeds == ("pic.png",)

    def test_heading_suffix_kept(self):
        links, _ = _links("Jump to [[canvas-guide#Interaction]].")
        assert links == ("canvas-guide#Interaction",)

    def test_duplicates_preserved_in_order(self):
        links, _ = _links("[[Z]] then [[A]] then [[Z]]")
        assert links == ("Z", "A", "Z")

    def test_embeds_and_links_interleaved(self):
        links, embeds = _links("![[one]] [[two]] ![[three]] [[four]]")
        assert links == ("two", "four")
        assert embeds == ("one", "three")

    def test_no_links(self):
        assert _links("Plain text, [single] brackets.") == ((), ())

    def test_inside_list_quote_and_code_span(self):
        text = textwrap.dedent("""\
            - item [[A]]
            > quoted [[B]]
            inline `[[C]]` code
        """)
        links, _ = _links(text)
        assert links == ("A", "B", "C")

    def test_fenced_code_excluded(self):
        text = textwrap.dedent("""\
            [[before]]
            ```python
            x = data[[0]]
            ```
            ~~~
            [[inside tilde]]
            ~~~
            [[after]]
        """)
        links, _ = _links(text)
        assert links == ("before", "after")

    def test_unterminated_is_literal(self):
        parsed = extract_links("Broken [[link here\nand [[ok]]")
        assert parsed.value == (("ok",), ())
        assert parsed.diagnostics == ("unterminated wikilink at line 1",)

    def test_link_does_not_span_lines(self):
        assert _links("[[first\nsecond]]") == ((), ())

    def test_empty_target_dropped(self):
        parsed = extract_links("[[ ]] and [[|alias]]")
        assert parsed.value == ((), ())
        assert len(parsed.diagnostics) == 2

    def test_fence_inside_blockquote_excluded(self):
        assert _links("> ```\n> [[Quoted]]\n> ```\n> [[Real]]") == (("Real",), ())

    def test_fence_inside_nested_list_excluded(self):
        text = "- a\n  - b\n\n    ```\n    [[Inside]]\n    ```\n- [[Outside]]\n"
        assert _links(text) == (("Outside",), ())
