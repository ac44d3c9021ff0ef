"""Tests for masking, logical-line splitting and the small text helpers."""

from __future__ import annotations

from polycode.languages.registry import get_rules
from polycode.parsing.lexical import (
    indent_width,
    is_block_brace,
    python_logical_lines,
    scan,
    split_statements,
    split_top_level,
    split_trailing_comment,
    strip_outer_parens,
)

PY = get_rules("Python")
JS = get_rules("JavaScript")
GO = get_rules("Go")

# ── scan ──


class TestScan:
    def test_brackets_inside_strings_and_comments_ignored(self):
        result = scan('x = "a(b"  # c(', PY)
        assert result.brackets == []
        assert len(result.comments) == 1
        assert result.unterminated == []

    def test_masked_text_keeps_offsets(self):
        text = 'x = "ab"\ny = 1'
        result = scan(text, PY)
        assert len(result.masked) == len(text)
        assert result.masked.split("\n")[0] == 'x = "  "'

    def test_unterminated_single_line_string(self):
        result = scan('print("hi', PY)
        assert len(result.unterminated) == 1
        s = result.unterminated[0]
        assert (s.quote, s.line, s.column, s.multiline) == ('"', 1, 6, False)

    def test_unterminated_block_comment(self):
        result = scan("/* open\nint x;", get_rules("Java"))
        assert result.open_block_comment == 1

    def test_line_classes(self):
        result = scan("# only comment\nx = 1\n\n", PY)
        assert [(i.has_code, i.has_comment) for i in result.lines[:3]] == [
            (False, True), (True, False), (False, False),
        ]

    def test_brace_depth_per_line(self):
        result = scan("if (x) {\n  y();\n}\n", JS)
        assert [i.depth for i in result.lines[:3]] == [0, 1, 0]


# ── logical lines ──


class TestSplitStatements:
    def test_semicolons_split(self):
        lines = split_statements("let a = 1; let b = 2;", JS)
        assert [ln.text for ln in lines] == ["let a = 1;", "let b = 2;"]

    def test_block_braces_end_lines(self):
        lines = split_statements("if (x) {\n  y();\n}", JS)
        assert [ln.text for ln in lines] == ["if (x) {", "y();", "}"]

    def test_lone_brace_joins_header(self):
        lines = split_statements("if (x)\n{\n  y();\n}", JS)
        assert lines[0].text == "if (x) {"
        assert lines[0].start_line == 1

    def test_object_literal_stays_inline(self):
        lines = split_statements("const o = { a: 1 };", JS)
        assert [ln.text for ln in lines] == ["const o = { a: 1 };"]

    def test_go_for_clause_kept_whole(self):
        lines = split_statements("for i := 0; i < 3; i++ {\n\tx()\n}", GO)
        assert lines[0].text == "for i := 0; i < 3; i++ {"

    def test_comment_is_its_own_line(self):
        lines = split_statements("x(); // note\n", JS)
        assert lines[0].text == "x();"
        assert lines[1].is_comment
        assert lines[1].trailing

    def test_string_contents_preserved(self):
        lines = split_statements('log("a   b");', JS)
        assert lines[0].text == 'log("a   b");'


class TestPythonLogicalLines:
    def test_bracket_continuation_joined(self):
        lines = python_logical_lines("x = (1,\n     2)\ny = 3", PY)
        assert [ln.text for ln in lines] == ["x = (1, 2)", "y = 3"]
        assert (lines[0].start_line, lines[0].end_line) == (1, 2)

    def test_indent_recorded(self):
        lines = python_logical_lines("if x:\n    y = 1", PY)
        assert [ln.indent for ln in lines] == [0, 4]

    def test_comment_lines_flagged(self):
        lines = python_logical_lines("# hello\nx = 1", PY)
        assert lines[0].is_comment
        assert not lines[1].is_comment


# ── helpers ──


class TestHelpers:
    def test_split_top_level_respects_nesting(self):
        assert split_top_level("a, (b, c), 'd,e'") == ["a", "(b, c)", "'d,e'"]

    def test_split_top_level_empty(self):
        assert split_top_level("") == []

    def test_split_trailing_comment(self):
        assert split_trailing_comment('x = "#"  # c', PY) == ('x = "#"', "c")

    def test_strip_outer_parens(self):
        assert strip_outer_parens("((a + b))") == "a + b"
        assert strip_outer_parens("(a) + (b)") == "(a) + (b)"

    def test_indent_width_expands_tabs(self):
        assert indent_width("\tx") == 4
        assert indent_width("  x") == 2

    def test_is_block_brace(self):
        assert is_block_brace("if (x) ")
        assert is_block_brace("class Foo ")
        assert not is_block_brace("const o = ")
