"""Tests for IR-to-source rendering."""

from __future__ import annotations

from dataclasses import replace

from polycode.core.config import DEFAULT_CONFIG
from polycode.parsing.extractor import extract
from polycode.parsing.ir import IRNode, NodeKind, program
from polycode.rendering.renderer import render


def _convert(source: str, source_lang: str, target_lang: str, config=None) -> str:
    return render(extract(source, source_lang), target_lang, config)


class TestRenderJavaScript:
    def test_function(self, python_add):
        assert _convert(python_add, "Python", "JavaScript") == "function add(a, b) {\n  return a + b;\n}\n"

    def test_if_else_chain(self):
        source = "if x > 1:\n    y = 1\nelse:\n    y = 2\n"
        assert _convert(source, "Python", "JavaScript") == (
            "if (x > 1) {\n"
            "  let y = 1;\n"
            "} else {\n"
            "  y = 2;\n"
            "}\n"
        )

    def test_compound_negation_parenthesised(self):
        out = _convert("if not a > 5:\n    f()\n", "Python", "JavaScript")
        assert out == "if (!(a > 5)) {\n  f();\n}\n"


class TestRenderPython:
    def test_counting_loop(self):
        source = "for (let i = 0; i < 10; i++) {\n  console.log(i);\n}"
        assert _convert(source, "JavaScript", "Python") == "for i in range(10):\n    print(i)\n"

    def test_class_methods_gain_self(self, js_dog):
        out = _convert(js_dog, "JavaScript", "Python")
        assert "class Dog(Animal):" in out
        assert "def __init__(self, name):" in out
        assert "self.name = name" in out
        assert "def speak(self):" in out
        assert "print(self.name)" in out

    def test_go_receiver_becomes_self(self, go_counter):
        out = _convert(go_counter, "Go", "Python")
        assert "class Counter:" in out
        assert "def Inc(self):" in out
        assert "self.count += 1" in out

    def test_empty_body_gets_pass(self):
        out = _convert("function f() {\n}", "JavaScript", "Python")
        assert out == "def f():\n    pass\n"


class TestRenderTyped:
    def test_java_top_level_function(self, python_add):
        out = _convert(python_add, "Python", "Java")
        assert out.splitlines()[0] == "public static Object add(Object a, Object b) {"
        assert "    return a + b;" in out

    def test_java_constructor_and_fields(self, python_point):
        out = _convert(python_point, "Python", "Java")
        assert "class Point {" in out
        assert "private Object x;" in out
        assert "public Point(Object x, Object y) {" in out
        assert "this.x = x;" in out

    def test_cpp_print_adds_include(self):
        out = _convert("print('hi')", "Python", "C++")
        assert out == '#include <iostream>\n\nstd::cout << "hi" << std::endl;\n'

    def test_go_preamble_and_print(self):
        out = _convert("print('hi')", "Python", "Go")
        assert out.startswith("package main\n")
        assert 'import "fmt"' in out
        assert 'fmt.Println("hi")' in out


# ── static methods ──

JAVA_STATIC = (
    "class MathUtil {\n"
    "    public static int twice(int x) {\n"
    "        return x * 2;\n"
    "    }\n"
    "}\n"
)


class TestRenderStatic:
    def test_python_staticmethod_without_self(self):
        out = _convert(JAVA_STATIC, "Java", "Python")
        assert "    @staticmethod\n    def twice(x):\n        return x * 2" in out
        assert "self" not in out

    def test_javascript_keeps_static_keyword(self):
        out = _convert(JAVA_STATIC, "Java", "JavaScript")
        assert "  static twice(x) {" in out

    def test_go_plain_function(self):
        out = _convert(JAVA_STATIC, "Java", "Go")
        assert "func twice(x int) int {" in out
        assert "func (" not in out

    def test_csharp_static(self):
        out = _convert(JAVA_STATIC, "Java", "C#")
        assert "    public static int twice(int x) {" in out

    def test_instance_method_unchanged(self, js_dog):
        out = _convert(js_dog, "JavaScript", "Python")
        assert "@staticmethod" not in out
        assert "def speak(self):" in out


# ── power and field types ──


class TestRenderPower:
    def test_go_imports_math(self):
        out = _convert("y = x ** 2\n", "Python", "Go")
        assert "y := math.Pow(x, 2)" in out
        assert 'import "math"' in out

    def test_cpp_includes_cmath(self):
        out = _convert("y = x ** 2\n", "Python", "C++")
        assert out.startswith("#include <cmath>\n\n")
        assert "std::pow(x, 2)" in out

    def test_power_assignment(self):
        out = _convert("x = 2\nx **= 3\n", "Python", "Java")
        assert "x = Math.pow(x, 3);" in out

    def test_no_math_import_without_power(self):
        assert 'import "math"' not in _convert("y = x * 2\n", "Python", "Go")

    def test_cpp_untyped_fields_get_concrete_type(self, python_point):
        out = _convert(python_point, "Python", "C++")
        assert "    std::any x;" in out
        assert "auto x;" not in out
        assert out.startswith("#include <any>\n")


class TestRenderDegradation:
    def test_unknown_marked(self):
        out = _convert("with open(f) as fh:\n    pass", "Python", "JavaScript")
        assert out == "// untranslated: with open(f) as fh:\n"

    def test_unknown_verbatim_when_marking_disabled(self):
        config = replace(DEFAULT_CONFIG, mark_untranslated=False)
        out = _convert("with open(f) as fh:\n    pass", "Python", "JavaScript", config)
        assert out == "with open(f) as fh:\n"

    def test_unknown_keeps_source_layout(self):
        config = replace(DEFAULT_CONFIG, mark_untranslated=False)
        out = _convert("assert (a ==\n        b)\n", "Python", "JavaScript", config)
        assert out == "assert (a ==\n        b)\n"

    def test_unknown_block_reemitted_with_braces(self):
        config = replace(DEFAULT_CONFIG, mark_untranslated=False)
        out = _convert("switch (x) {\n  foo();\n}", "JavaScript", "Java", config)
        assert out == "switch (x) {\n    foo();\n}\n"

    def test_marked_unknown_block(self):
        out = _convert("switch (x) {\n  foo();\n}", "JavaScript", "Java")
        assert out == "// untranslated: switch (x) {\nfoo();\n// untranslated: }\n"

    def test_empty_program(self):
        assert render(program([], 1), "JavaScript", source_lang="Python") == ""

    def test_broken_node_degrades(self):
        node = IRNode(NodeKind.FUNCTION_DECL, {"name": "f", "params": "a", "param_defaults": "{broken"}, [])
        tree = program([node], 1)
        tree.attributes["language"] = "Python"
        out = render(tree, "JavaScript")
        assert out.startswith("// untranslated: FunctionDecl")

    def test_deterministic(self, js_dog):
        assert _convert(js_dog, "JavaScript", "Go") == _convert(js_dog, "JavaScript", "Go")
