"""Tests for source-to-IR extraction."""

from __future__ import annotations

import json

import pytest

from polycode.core.errors import UnsupportedLanguage
from polycode.languages.registry import get_rules
from polycode.parsing.extractor import extract, match_construct
from polycode.parsing.ir import NodeKind


class TestMatchConstruct:
    def test_first_matching_pattern_wins(self):
        rules = get_rules("Python")
        found = match_construct(rules.headers, "elif x > 1")
        assert found is not None
        assert found[0].shape == "elif"
        assert found[1]["condition"] == "x > 1"

    def test_no_match(self):
        assert match_construct(get_rules("Python").headers, "with f as g") is None


class TestPythonExtraction:
    def test_function_and_return(self, python_add):
        program = extract(python_add, "Python")
        assert program.attr("language") == "Python"
        fn = program.children[0]
        assert fn.kind is NodeKind.FUNCTION_DECL
        assert fn.attr("name") == "add"
        assert fn.attr("params") == "a, b"
        ret = fn.children[0]
        assert ret.kind is NodeKind.RETURN
        assert ret.attr("value") == "a + b"

    def test_first_assignment_declares(self):
        program = extract("x = 1\nx = 2", "Python")
        assert [n.kind for n in program.children] == [NodeKind.VAR_DECL, NodeKind.ASSIGNMENT]

    def test_range_loop(self):
        program = extract("for i in range(2, 10):\n    print(i)", "Python")
        loop = program.children[0]
        assert loop.kind is NodeKind.FOR
        assert (loop.attr("style"), loop.attr("var"), loop.attr("start"), loop.attr("end")) == ("range", "i", "2", "10")
        assert loop.children[0].kind is NodeKind.PRINT

    def test_if_elif_else_variants(self):
        program = extract("if a:\n    x()\nelif b:\n    y()\nelse:\n    z()", "Python")
        assert [n.attr("variant") for n in program.children] == ["if", "elif", "else"]

    def test_method_roles(self, python_point):
        cls = extract(python_point, "Python").children[0]
        assert cls.kind is NodeKind.CLASS_DECL
        init = cls.children[0]
        assert init.attr("role") == "constructor"
        assert init.attr("params") == "x, y"

    def test_defaults_and_annotations(self):
        fn = extract("def f(n: int, k=2) -> int:\n    return n", "Python").children[0]
        assert fn.attr("param_types") == "int, any"
        assert json.loads(fn.attr("param_defaults")) == ["", "2"]
        assert fn.attr("return_type") == "int"

    def test_docstring_and_trailing_comment(self):
        program = extract('"""Module doc."""\nx = 1  # one', "Python")
        doc, decl = program.children
        assert doc.kind is NodeKind.COMMENT
        assert doc.attr("doc") == "1"
        assert doc.attr("text") == "Module doc."
        assert decl.attr("comment") == "one"

    def test_unsupported_construct_becomes_unknown(self):
        program = extract("with open(f) as fh:\n    pass", "Python")
        node = program.children[0]
        assert node.kind is NodeKind.UNKNOWN
        assert node.attr("raw") == "with open(f) as fh:"
        assert node.children[0].kind is NodeKind.EXPRESSION

    def test_unknown_raw_is_verbatim(self):
        node = extract("assert (a ==\n        b)\n", "Python").children[0]
        assert node.kind is NodeKind.UNKNOWN
        assert node.attr("raw") == "assert (a ==\n        b)"

    def test_nested_unknown_raw_dedented(self):
        func = extract("def f():\n    assert (a ==\n            b)\n", "Python").children[0]
        assert func.children[0].attr("raw") == "assert (a ==\n        b)"


class TestBraceExtraction:
    def test_counting_for_loop(self):
        program = extract("for (let i = 0; i < 10; i++) {\n  console.log(i);\n}", "JavaScript")
        loop = program.children[0]
        assert loop.kind is NodeKind.FOR
        assert (loop.attr("start"), loop.attr("end")) == ("0", "10")
        assert loop.children[0].attr("args") == "i"

    def test_inclusive_bound(self):
        loop = extract("for (int i = 1; i <= n; i++) {\n    f(i);\n}", "Java").children[0]
        assert loop.attr("end") == "n + 1"

    def test_class_with_constructor_and_method(self, js_dog):
        cls = extract(js_dog, "JavaScript").children[0]
        assert cls.attr("base") == "Animal"
        ctor, speak = cls.children
        assert ctor.attr("role") == "constructor"
        assert speak.attr("role") == "method"
        assert ctor.children[0].kind is NodeKind.ASSIGNMENT

    def test_increment_normalised(self):
        stmt = extract("i++;", "JavaScript").children[0]
        assert stmt.kind is NodeKind.ASSIGNMENT
        assert (stmt.attr("target"), stmt.attr("op"), stmt.attr("value")) == ("i", "+=", "1")

    def test_go_methods_move_into_struct(self, go_counter):
        program = extract(go_counter, "Go")
        assert len(program.children) == 1
        struct = program.children[0]
        assert struct.kind is NodeKind.CLASS_DECL
        field, method = struct.children
        assert (field.kind, field.attr("type")) == (NodeKind.VAR_DECL, "int")
        assert method.attr("role") == "method"
        assert method.attr("receiver") == "c"

    def test_typed_declaration(self):
        decl = extract("int count = 3;", "Java").children[0]
        assert decl.kind is NodeKind.VAR_DECL
        assert (decl.attr("name"), decl.attr("type"), decl.attr("value")) == ("count", "int", "3")

    def test_unknown_block_keeps_children(self):
        program = extract("switch (x) {\n  foo();\n}", "JavaScript")
        node = program.children[0]
        assert node.kind is NodeKind.UNKNOWN
        assert node.is_block
        assert node.children[0].kind is NodeKind.EXPRESSION
        assert not node.children[0].is_block

    def test_unknown_header_raw_is_verbatim(self):
        node = extract("switch (x) {\n  foo();\n}", "JavaScript").children[0]
        assert node.attr("raw") == "switch (x) {"

    def test_empty_unknown_block_is_still_a_block(self):
        node = extract("switch (x) {\n}", "JavaScript").children[0]
        assert node.children == []
        assert node.is_block

    def test_shared_line_falls_back_to_statement_text(self):
        first, second = extract("a ?? b; c ?? d;", "JavaScript").children
        assert (first.attr("raw"), second.attr("raw")) == ("a ?? b;", "c ?? d;")

    @pytest.mark.parametrize("source, language", [
        ("class MathUtil {\n    public static int twice(int x) {\n        return x * 2;\n    }\n}", "Java"),
        ("class MathUtil {\n  static twice(x) {\n    return x * 2;\n  }\n}", "JavaScript"),
        ("class MathUtil {\npublic:\n    static int twice(int x) {\n        return x * 2;\n    }\n};", "C++"),
    ])
    def test_static_method_flagged(self, source, language):
        method = extract(source, language).children[0].children[0]
        assert method.attr("role") == "method"
        assert method.attr("static") == "1"

    def test_instance_method_not_flagged(self, js_dog):
        speak = extract(js_dog, "JavaScript").children[0].children[1]
        assert speak.attr("static") == ""

    def test_trailing_comment_attached(self):
        stmt = extract("x = 1; // set", "JavaScript").children[0]
        assert stmt.attr("comment") == "set"

    def test_stray_closer_is_unknown(self):
        program = extract("}\nfoo();", "JavaScript")
        assert program.children[0].kind is NodeKind.UNKNOWN
        assert program.children[1].kind is NodeKind.EXPRESSION


class TestExtractGeneral:
    def test_empty_input(self):
        program = extract("", "Go")
        assert program.kind is NodeKind.PROGRAM
        assert program.children == []

    def test_unsupported_language(self):
        with pytest.raises(UnsupportedLanguage):
            extract("x", "Cobol")

    def test_every_line_is_covered(self):
        source = "x = 1\nwith a:\n    b()\ny = x"
        program = extract(source, "Python")
        lines = {line for node in program.walk() if node.kind is not NodeKind.PROGRAM
                 for line in range(node.span.start_line, node.span.end_line + 1)}
        assert lines == {1, 2, 3, 4}
