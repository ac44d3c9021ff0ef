"""Tests for the quality metrics engine."""

from __future__ import annotations

from dataclasses import replace

import pytest

from polycode.analysis.metrics import generate_quality_metrics
from polycode.core.config import DEFAULT_CONFIG, ReadabilityThresholds
from polycode.core.errors import UnsupportedLanguage


class TestCounts:
    def test_loc_excludes_blank_and_comment_lines(self):
        m = generate_quality_metrics("# comment\nx = 1\n\ny = 2\n", "Python")
        assert m.lines_of_code == 2

    def test_block_comment_lines_excluded(self):
        m = generate_quality_metrics("/*\n * doc\n */\nint x = 1;\n", "Java")
        assert m.lines_of_code == 1

    def test_functions_and_classes(self, python_point):
        m = generate_quality_metrics(python_point, "Python")
        assert (m.functions, m.classes) == (1, 1)

    def test_scenario_output_has_one_function(self):
        m = generate_quality_metrics("function add(a, b) {\n  return a + b;\n}\n", "JavaScript")
        assert m.functions == 1

    def test_keywords_in_strings_not_counted(self):
        m = generate_quality_metrics('s = "def f(): if x"\n', "Python")
        assert (m.functions, m.complexity) == (0, 1)

    def test_complexity(self):
        m = generate_quality_metrics("if a and b:\n    pass\n", "Python")
        assert m.complexity == 3

    def test_go_counts(self, go_counter):
        m = generate_quality_metrics(go_counter, "Go")
        assert (m.functions, m.classes) == (1, 1)


class TestMonotonicity:
    @pytest.mark.parametrize("language, base, extra", [
        ("Python", "x = 1\n", "def f():\n    return 1\n"),
        ("JavaScript", "let x = 1;\n", "function f() {\n  return 1;\n}\n"),
        ("Go", "package main\n", "func f() int {\n\treturn 1\n}\n"),
        ("JavaScript", "let x = 1;\n", "const f = x => x;\n"),
        ("JavaScript", "let x = 1;\n", "const g = async y => y;\n"),
        ("Java", "int x = 1;\n", "int f() {\n    return 1;\n}\n"),
        ("C#", "int x = 1;\n", "int F() {\n    return 1;\n}\n"),
        ("C++", "int x = 1;\n", "int f() {\n    return 1;\n}\n"),
    ])
    def test_adding_a_function_increases_counts(self, language, base, extra):
        before = generate_quality_metrics(base, language)
        after = generate_quality_metrics(base + extra, language)
        assert after.functions > before.functions
        assert after.lines_of_code > before.lines_of_code


class TestReadability:
    def test_good_without_comments(self):
        assert generate_quality_metrics("x = 1", "Python").readability == "Good"

    def test_excellent_with_comments(self):
        assert generate_quality_metrics("# note\nx = 1", "Python").readability == "Excellent"

    def test_thresholds_are_configurable(self):
        strict = replace(DEFAULT_CONFIG, readability=ReadabilityThresholds(line_length=2.0, nesting=-1.0))
        assert generate_quality_metrics("x = 1", "Python", strict).readability == "Poor"

    def test_bucket_clamps_points(self):
        thresholds = ReadabilityThresholds()
        assert thresholds.bucket(5) == "Excellent"
        assert thresholds.bucket(-1) == "Poor"


class TestErrors:
    def test_empty_code(self):
        m = generate_quality_metrics("", "C#")
        assert (m.lines_of_code, m.functions, m.classes, m.complexity) == (0, 0, 0, 1)

    def test_unsupported_language(self):
        with pytest.raises(UnsupportedLanguage):
            generate_quality_metrics("x", "Cobol")
