from __future__ import annotations

from pathlib import Path
from typing import Optional
import sys

import typer
from rich.console import Console
from rich.table import Table

from polycode import service
from polycode.core.config import EngineConfig, load_config
from polycode.core.errors import PolycodeError
from polycode.core.logging import setup_logging
from polycode.presets import DEFAULT_RULES, save_rules


app = typer.Typer(add_completion=False, help="Rule-based multi-language code transformer and analyzer")
console = Console()


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", help="DEBUG | INFO | WARNING | ERROR"),
    log_format: str = typer.Option("console", "--log-format", help="console | json"),
) -> None:
    setup_logging(log_level, log_format)


def _read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    p = Path(path)
    if not p.exists():
        typer.secho(f"Path not found: {p}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    return p.read_text(encoding="utf-8")


def _config(rules_file: Optional[Path]) -> EngineConfig:
    return load_config(rules_file)


def _fail(exc: PolycodeError) -> None:
    typer.secho(str(exc), fg=typer.colors.RED, err=True)
    raise typer.Exit(code=2)


def _write_code(code: str, output: Optional[Path]) -> None:
    if output is None:
        typer.echo(code, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(code, encoding="utf-8")
    typer.secho(f"Wrote: {output}", fg=typer.colors.GREEN, err=True)


def _print_lines(lines: list[str]) -> None:
    for line in lines:
        if line.startswith("Warning:"):
            console.print(f"[yellow]{line}[/]")
        elif line.startswith("Suggestion:"):
            console.print(f"[blue]{line}[/]")
        elif line.startswith("Error:"):
            console.print(f"[red]{line}[/]")
        else:
            console.print(line, highlight=False)


def _metrics_table(m) -> Table:
    table = Table(title="Quality Metrics")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Lines of code", str(m.lines_of_code))
    table.add_row("Functions", str(m.functions))
    table.add_row("Classes", str(m.classes))
    table.add_row("Complexity", str(m.complexity))
    table.add_row("Readability", m.readability)
    return table


@app.command("convert")
def convert(
    source: str = typer.Argument(..., help="Source file path, or - for stdin"),
    source_lang: str = typer.Option(..., "--from", "-f", help="Source language"),
    target_lang: str = typer.Option(..., "--to", "-t", help="Target language"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write converted code here"),
    rules_file: Optional[Path] = typer.Option(None, "--rules-file", help="YAML rules overriding the defaults"),
    as_json: bool = typer.Option(False, "--json", help="Print the JSON response"),
) -> None:
    """Convert source code between two supported languages."""
    text = _read_source(source)
    res = service.convert(text, source_lang, target_lang, _config(rules_file))
    if as_json:
        typer.echo(res.model_dump_json(indent=2))
        if not res.success:
            raise typer.Exit(code=2)
        return
    if not res.success:
        typer.secho(res.error or "Conversion failed", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    _write_code(res.output_code, output)
    if output is not None:
        _print_lines(res.analysis_lines)


@app.command("analyze")
def analyze(
    source: str = typer.Argument(..., help="Source file path, or - for stdin"),
    language: str = typer.Option(..., "--lang", "-l", help="Language of the source"),
    rules_file: Optional[Path] = typer.Option(None, "--rules-file", help="YAML rules overriding the defaults"),
    as_json: bool = typer.Option(False, "--json", help="Print the JSON response"),
) -> None:
    """Report syntax errors, warnings, suggestions and quality metrics."""
    text = _read_source(source)
    try:
        res = service.analyze(text, language, _config(rules_file))
    except PolycodeError as exc:
        _fail(exc)
        return
    if as_json:
        typer.echo(res.model_dump_json(indent=2))
        return

    console.print(_metrics_table(res.metrics))
    findings = res.errors + res.warnings + res.suggestions
    if not findings:
        console.print("[green]No findings[/]")
        return
    table = Table(title="Findings")
    table.add_column("Severity")
    table.add_column("Line", justify="right")
    table.add_column("Code")
    table.add_column("Message")
    for f in findings:
        table.add_row(f.severity, str(f.start_line), f.code, f.message)
    console.print(table)
    if res.errors:
        raise typer.Exit(code=1)


@app.command("fix")
def fix(
    source: str = typer.Argument(..., help="Source file path, or - for stdin"),
    language: str = typer.Option(..., "--lang", "-l", help="Language of the source"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write fixed code here"),
    rules_file: Optional[Path] = typer.Option(None, "--rules-file", help="YAML rules overriding the defaults"),
    as_json: bool = typer.Option(False, "--json", help="Print the JSON response"),
) -> None:
    """Repair common syntax errors with deterministic edits."""
    text = _read_source(source)
    try:
        res = service.fix(text, language, _config(rules_file))
    except PolycodeError as exc:
        _fail(exc)
        return
    if as_json:
        typer.echo(res.model_dump_json(indent=2))
        return
    _write_code(res.output_code, output)
    if output is not None:
        _print_lines(res.analysis_lines)
    for f in res.unresolved:
        typer.secho(f"Unresolved: line {f.start_line}: {f.message}", fg=typer.colors.YELLOW, err=True)


@app.command("metrics")
def metrics(
    source: str = typer.Argument(..., help="Source file path, or - for stdin"),
    language: str = typer.Option(..., "--lang", "-l", help="Language of the source"),
    rules_file: Optional[Path] = typer.Option(None, "--rules-file", help="YAML rules overriding the defaults"),
    as_json: bool = typer.Option(False, "--json", help="Print the JSON response"),
) -> None:
    """Compute structural quality metrics."""
    text = _read_source(source)
    try:
        res = service.metrics(text, language, _config(rules_file))
    except PolycodeError as exc:
        _fail(exc)
        return
    if as_json:
        typer.echo(res.model_dump_json(indent=2))
        return
    console.print(_metrics_table(res))


@app.command("languages")
def languages(as_json: bool = typer.Option(False, "--json", help="Print the JSON response")) -> None:
    """List the supported languages."""
    res = service.languages()
    if as_json:
        typer.echo(res.model_dump_json(indent=2))
        return
    for name in res.languages:
        typer.echo(name)


@app.command("rules")
def rules(
    out: Path = typer.Option(Path("polycode-rules.yaml"), "--out", help="Where to write the rules file"),
) -> None:
    """Write the default rules file for editing."""
    path = save_rules(DEFAULT_RULES, out)
    typer.secho(f"Wrote rules: {path}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
