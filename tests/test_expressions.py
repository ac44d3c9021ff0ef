"""Tests for expression-level translation between languages."""

from __future__ import annotations

import pytest

from polycode.languages.registry import get_rules
from polycode.rendering.expressions import infer_type, translate, type_name

PY = get_rules("Python")
JS = get_rules("JavaScript")
JAVA = get_rules("Java")
GO = get_rules("Go")
CSHARP = get_rules("C#")
CPP = get_rules("C++")


class TestTranslate:
    def test_same_language_untouched(self):
        assert translate("a and b", PY, PY) == "a and b"

    def test_python_logic_to_curly(self):
        assert translate("a and not b", PY, JS) == "a && !b"

    def test_curly_logic_to_python(self):
        assert translate("flag && true", JS, PY) == "flag and True"

    def test_none_to_null(self):
        assert translate("x == None", PY, JAVA) == "x == null"

    def test_null_to_nil(self):
        assert translate("p != null", JAVA, GO) == "p != nil"

    def test_len_to_length(self):
        assert translate("len(xs)", PY, JS) == "xs.length"

    def test_length_to_len(self):
        assert translate("xs.length", JS, PY) == "len(xs)"

    def test_strict_equality_dropped_outside_javascript(self):
        assert translate("a === b", JS, PY) == "a == b"

    def test_self_reference(self):
        assert translate("self.x + 1", PY, JS) == "this.x + 1"

    def test_single_quotes_requoted_for_char_targets(self):
        assert translate("'hi'", PY, JAVA) == '"hi"'

    def test_single_quotes_kept_for_javascript(self):
        assert translate("'hi'", PY, JS) == "'hi'"

    def test_string_contents_protected(self):
        assert translate('"a and b"', PY, JS) == '"a and b"'

    def test_new_dropped_for_python(self):
        assert translate("new Point(1, 2)", JAVA, PY) == "Point(1, 2)"


# ── negation ──


class TestNegation:
    @pytest.mark.parametrize("expr, expected", [
        ("not a > 5", "!(a > 5)"),
        ("not (a or b)", "!(a || b)"),
        ("not x.empty() and y", "!x.empty() && y"),
        ("not a == b or c", "!(a == b) || c"),
        ("f(not a + 1, b)", "f(!(a + 1), b)"),
        ("not done", "!done"),
    ])
    def test_operand_wrapped_when_compound(self, expr, expected):
        assert translate(expr, PY, JS) == expected

    def test_not_in_left_alone(self):
        assert translate("k not in d", PY, JS) == "k not in d"


# ── power ──


class TestPower:
    @pytest.mark.parametrize("target, expected", [
        (JAVA, "Math.pow(x, 2)"),
        (CSHARP, "Math.Pow(x, 2)"),
        (CPP, "std::pow(x, 2)"),
        (GO, "math.Pow(x, 2)"),
    ])
    def test_mapped_to_pow_call(self, target, expected):
        assert translate("x ** 2", PY, target) == expected

    def test_right_associative(self):
        assert translate("2 ** 3 ** 2", PY, GO) == "math.Pow(2, math.Pow(3, 2))"

    def test_parenthesised_operands(self):
        assert translate("(a + 1) ** (n - 1)", PY, JAVA) == "Math.pow((a + 1), (n - 1))"

    def test_javascript_source(self):
        assert translate("y ** 0.5", JS, CPP) == "std::pow(y, 0.5)"

    def test_native_operator_kept(self):
        assert translate("x ** 2", PY, JS) == "x ** 2"
        assert translate("x ** 2", JS, PY) == "x ** 2"


class TestTypes:
    @pytest.mark.parametrize("value, expected", [
        ("1", "int"),
        ("1.5", "float"),
        ('"s"', "string"),
        ("True", "bool"),
        ("foo", ""),
        ("", ""),
    ])
    def test_infer_type(self, value, expected):
        assert infer_type(value) == expected

    def test_type_name_per_target(self):
        assert type_name("string", JAVA) == "String"
        assert type_name("float", GO) == "float64"
        assert type_name("", JAVA) == "Object"
