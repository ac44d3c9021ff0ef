"""Tests for the deterministic fix engine."""

from __future__ import annotations

import pytest

from polycode.analysis import fixer
from polycode.analysis.detectors import balance, strings
from polycode.analysis.fixer import fix_syntax_errors
from polycode.analysis.findings import FixResult
from polycode.analysis.syntax import analyze_syntax
from polycode.core.errors import UnsupportedLanguage

BROKEN = [
    ("Python", "x = (1 + 2\n"),
    ("JavaScript", "function f() {\n  return (1 + 2;\n}\n"),
    ("Java", "class A {\n    void f() {\n        g();\n    }\n"),
    ("C++", "int main() {\n    return 0;\n}}\n"),
    ("Go", 'func main() {\n\tfmt.Println("hi"\n}\n'),
    ("Python", 'print("""hi'),
    ("JavaScript", "console.log(`hi"),
    ("Go", "fmt.Println(`hi"),
    ("Python", "x = [" * 120),
]


class TestFixScenarios:
    def test_unterminated_string(self):
        result = fix_syntax_errors('print("hi', "Python")
        assert result.code == 'print("hi")'
        assert len(result.fixes) == 1
        assert result.fixes[0].start_line == 1
        assert result.unresolved == ()

    def test_missing_semicolon(self, java_missing_semicolon):
        result = fix_syntax_errors(java_missing_semicolon, "Java")
        assert "        int x = 5;\n" in result.code
        assert len(result.fixes) == 1

    def test_missing_colon(self):
        result = fix_syntax_errors("def f()\n    return 1\n", "Python")
        assert result.code == "def f():\n    return 1\n"

    def test_stray_closer_removed(self):
        result = fix_syntax_errors("x = 1)\n", "Python")
        assert result.code == "x = 1\n"

    def test_closer_inserted_before_terminator(self):
        result = fix_syntax_errors("function f() {\n  return (1 + 2;\n}\n", "JavaScript")
        assert "  return (1 + 2);" in result.code

    def test_missing_brace_appended(self):
        result = fix_syntax_errors("class A {\n    void f() {\n        g();\n    }\n", "Java")
        assert result.code == "class A {\n    void f() {\n        g();\n    }\n}"

    def test_unterminated_block_comment(self):
        result = fix_syntax_errors("/* open\nint x = 1;\n", "Java")
        assert len(result.fixes) == 1
        assert not analyze_syntax(result.code, "Java").has_errors

    @pytest.mark.parametrize("language, code, fixed", [
        ("Python", 'print("""hi', 'print("""hi""")'),
        ("Python", 'x = """abc\n', 'x = """abc\n"""'),
        ("JavaScript", "console.log(`hi", "console.log(`hi`)"),
        ("Go", "fmt.Println(`hi", "fmt.Println(`hi`)"),
    ])
    def test_multiline_string_closed_at_end(self, language, code, fixed):
        result = fix_syntax_errors(code, language)
        assert result.code == fixed
        assert len(result.fixes) == 1
        assert result.unresolved == ()

    def test_trailing_backslash_does_not_escape_close(self):
        result = fix_syntax_errors('x = """abc\\', "Python")
        assert result.code == 'x = """abc\\ """'
        assert result.unresolved == ()

    def test_more_openers_than_default_passes(self):
        result = fix_syntax_errors("x = [" * 120, "Python")
        assert result.unresolved == ()
        assert result.code.endswith("]" * 120)
        assert len(result.fixes) == 120


class TestFixProperties:
    @pytest.mark.parametrize("language, code", BROKEN)
    def test_balance_invariant(self, language, code):
        fixed = fix_syntax_errors(code, language).code
        report = analyze_syntax(fixed, language)
        assert report.with_code(balance.UNCLOSED_OPENER) == ()
        assert report.with_code(balance.UNMATCHED_CLOSER) == ()

    @pytest.mark.parametrize("language, code", [
        ("Python", 'print("hi'),
        ("Python", "x = (1 + 2\n"),
        ("Java", "int x = 5\n"),
    ])
    def test_idempotent(self, language, code):
        once = fix_syntax_errors(code, language)
        twice = fix_syntax_errors(once.code, language)
        assert twice.fixes == ()
        assert twice.code == once.code

    def test_clean_code_untouched(self, python_add):
        result = fix_syntax_errors(python_add, "Python")
        assert result.code == python_add
        assert result.fixes == ()

    def test_unfixable_reported_unresolved(self, monkeypatch):
        monkeypatch.delitem(fixer._TEMPLATES, strings.UNTERMINATED_MULTILINE)
        code = 'x = """abc\n'
        result = fix_syntax_errors(code, "Python")
        assert result.code == code
        assert result.fixes == ()
        assert [f.code for f in result.unresolved] == [strings.UNTERMINATED_MULTILINE]

    @pytest.mark.parametrize("code", [")))(((", "}{", "'\"`", "", "{[(<"])
    def test_never_raises(self, code):
        assert isinstance(fix_syntax_errors(code, "JavaScript"), FixResult)

    def test_unsupported_language(self):
        with pytest.raises(UnsupportedLanguage):
            fix_syntax_errors("x", "Cobol")
