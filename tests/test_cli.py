"""Tests for CLI commands via typer's CliRunner."""

from __future__ import annotations

import json

import yaml
from typer.testing import CliRunner

from polycode.cli.main import app

runner = CliRunner()


def _write(tmp_path, name: str, text: str):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


# ── convert ──


class TestConvertCommand:
    def test_prints_converted_code(self, tmp_path, python_add):
        src = _write(tmp_path, "add.py", python_add)
        result = runner.invoke(app, ["convert", str(src), "--from", "python", "--to", "javascript"])
        assert result.exit_code == 0
        assert "function add(a, b) {" in result.stdout

    def test_json_output(self, tmp_path, python_add):
        src = _write(tmp_path, "add.py", python_add)
        result = runner.invoke(app, ["convert", str(src), "-f", "python", "-t", "go", "--json"])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["success"] is True
        assert "func add(" in payload["output_code"]

    def test_writes_output_file(self, tmp_path, python_add):
        src = _write(tmp_path, "add.py", python_add)
        out = tmp_path / "out" / "add.js"
        result = runner.invoke(app, ["convert", str(src), "-f", "python", "-t", "js", "-o", str(out)])
        assert result.exit_code == 0
        assert out.read_text(encoding="utf-8") == "function add(a, b) {\n  return a + b;\n}\n"

    def test_empty_input_fails(self, tmp_path):
        src = _write(tmp_path, "empty.py", "")
        result = runner.invoke(app, ["convert", str(src), "-f", "python", "-t", "go"])
        assert result.exit_code == 2

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["convert", str(tmp_path / "nope.py"), "-f", "python", "-t", "go"])
        assert result.exit_code == 2

    def test_stdin(self):
        result = runner.invoke(app, ["convert", "-", "-f", "python", "-t", "javascript"], input="x = 1\n")
        assert result.exit_code == 0
        assert "let x = 1;" in result.stdout


# ── analyze / fix / metrics ──


class TestAnalyzeCommand:
    def test_errors_exit_nonzero(self, tmp_path):
        src = _write(tmp_path, "bad.py", 'print("hi')
        result = runner.invoke(app, ["analyze", str(src), "--lang", "python"])
        assert result.exit_code == 1
        assert "Findings" in result.stdout

    def test_json(self, tmp_path, python_add):
        src = _write(tmp_path, "add.py", python_add)
        result = runner.invoke(app, ["analyze", str(src), "-l", "python", "--json"])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["errors"] == []
        assert payload["metrics"]["functions"] == 1

    def test_unsupported_language(self, tmp_path):
        src = _write(tmp_path, "a.txt", "x")
        result = runner.invoke(app, ["analyze", str(src), "-l", "cobol"])
        assert result.exit_code == 2


class TestFixCommand:
    def test_writes_fixed_file(self, tmp_path):
        src = _write(tmp_path, "bad.py", 'print("hi')
        out = tmp_path / "fixed.py"
        result = runner.invoke(app, ["fix", str(src), "-l", "python", "-o", str(out)])
        assert result.exit_code == 0
        assert out.read_text(encoding="utf-8") == 'print("hi")'

    def test_json(self, tmp_path):
        src = _write(tmp_path, "bad.py", 'print("hi')
        result = runner.invoke(app, ["fix", str(src), "-l", "python", "--json"])
        payload = json.loads(result.stdout)
        assert payload["output_code"] == 'print("hi")'
        assert len(payload["fixes"]) == 1


class TestMetricsCommand:
    def test_json_from_stdin(self):
        result = runner.invoke(app, ["metrics", "-", "--lang", "python", "--json"], input="x = 1\n")
        assert result.exit_code == 0
        assert json.loads(result.stdout)["lines_of_code"] == 1

    def test_table(self, tmp_path, python_add):
        src = _write(tmp_path, "add.py", python_add)
        result = runner.invoke(app, ["metrics", str(src), "-l", "python"])
        assert result.exit_code == 0
        assert "Readability" in result.stdout


# ── languages / rules ──


class TestMiscCommands:
    def test_languages(self):
        result = runner.invoke(app, ["languages"])
        assert result.exit_code == 0
        assert result.stdout.split() == ["Python", "JavaScript", "Java", "C#", "C++", "Go"]

    def test_rules_written(self, tmp_path):
        out = tmp_path / "rules.yaml"
        result = runner.invoke(app, ["rules", "--out", str(out)])
        assert result.exit_code == 0
        assert yaml.safe_load(out.read_text(encoding="utf-8"))["fix"]["max_passes"] == 100

    def test_rules_file_option(self, tmp_path):
        rules = _write(tmp_path, "rules.yaml", "conversion:\n  mark_untranslated: false\n")
        src = _write(tmp_path, "w.py", "with open(f) as fh:\n    pass\n")
        result = runner.invoke(app, ["convert", str(src), "-f", "py", "-t", "js", "--rules-file", str(rules)])
        assert result.exit_code == 0
        assert "untranslated" not in result.stdout
        assert "with open(f) as fh:" in result.stdout
