"""Unit tests for notekit.blocks."""

from notekit.blocks import mask_code, scan_lines


class TestScanLines:
    def test_fence_lines_flagged(self):
        lines = scan_lines("a\n```\nb\n```\nc").value
        assert [line.in_code for line in lines] == [False, True, True, True, False]

    def test_closing_fence_needs_same_char(self):
        lines = scan_lines("~~~\n```\nstill code\n~~~\nout").value
        assert [line.in_code for line in lines] == [True, True, True, True, False]

    def test_closing_fence_may_be_longer(self):
        lines = scan_lines("```\ncode\n`````\nout").value
        assert lines[-1].in_code is False

    def test_shorter_closing_does_not_close(self):
        lines = scan_lines("````\n```\nstill\n````\nout").value
        assert [line.in_code for line in lines] == [True, True, True, True, False]

    def test_backtick_info_with_backtick_is_not_fence(self):
        lines = scan_lines("``` a`b\ntext").value
        assert not any(line.in_code for line in lines)

    def test_closing_fence_with_text_does_not_close(self):
        parsed = scan_lines("```\n``` not closing\ncode")
        assert all(line.in_code for line in parsed.value)
        assert parsed.diagnostics

    def test_crlf_numbering(self):
        lines = scan_lines("a\r\nb\rc\nd").value
        assert [line.text for line in lines] == ["a", "b", "c", "d"]
        assert [line.number for line in lines] == [0, 1, 2, 3]


class TestMaskFencedCode:
    def test_blanks_fenced_lines(self):
        masked = mask_code("keep\n```\n[[gone]]\n```\nkeep too")
        assert masked.value == "keep\n\n\n\nkeep too"
        assert masked.ok


class TestNestedCode:
    def test_fence_inside_blockquote(self):
        lines = scan_lines("> quote\n> ```\n> [[Quoted]]\n> ```\nafter").value
        assert [line.in_code for line in lines] == [False, True, True, True, False]

    def test_fence_inside_nested_list(self):
        parsed = scan_lines("- a\n  - b\n\n    ```\n    [[Inside]] $x$\n    ```\n")
        assert [line.number for line in parsed.value if line.in_code] == [3, 4, 5]
        assert parsed.ok

    def test_indented_code_block(self):
        lines = scan_lines("Para\n\n    code [[x]]\n\nback").value
        assert [line.in_code for line in lines] == [False, False, True, False, False]

    def test_unclosed_fence_in_blockquote(self):
        parsed = scan_lines("> ```\n> code\n\nout")
        assert parsed.value[-1].in_code is False
        assert parsed.diagnostics == ("unclosed code fence opened at line 1",)
