"""Request-level entry points shared by the CLI and any embedding host."""

from __future__ import annotations

from polycode.analysis.fixer import fix_syntax_errors
from polycode.analysis.metrics import generate_quality_metrics
from polycode.analysis.syntax import analyze_syntax
from polycode.core.config import DEFAULT_CONFIG, EngineConfig
from polycode.core.logging import get_logger
from polycode.languages.registry import normalize_language, supported_languages
from polycode.reporting.schema import (
    AnalyzeResponse,
    ConvertResponse,
    FindingJSON,
    FixRecordJSON,
    FixResponse,
    LanguagesResponse,
    QualityMetricsJSON,
)
from polycode.reporting.text import analysis_report, finding_lines, fix_lines, quality_lines
from polycode.transform.transformer import convert_code, validate_source

log = get_logger("polycode.service")


def _prepare(source: object, language: object) -> tuple[str, str]:
    lang = normalize_language(language)
    return validate_source(source), lang


def convert(source: object, source_lang: object, target_lang: object,
            config: EngineConfig | None = None) -> ConvertResponse:
    config = config or DEFAULT_CONFIG
    result = convert_code(source, source_lang, target_lang, config)
    if not result.success:
        return ConvertResponse(success=False, error=result.error, status=result.status.value)

    target = normalize_language(target_lang)
    lines = list(result.analysis)
    metrics = None
    if result.output_code.strip():
        report = analyze_syntax(result.output_code, target, config)
        quality = generate_quality_metrics(result.output_code, target, config)
        metrics = QualityMetricsJSON.from_metrics(quality)
        lines += quality_lines(quality)
        lines += finding_lines(report.warnings, "Warning: ")
        lines += finding_lines(report.suggestions, "Suggestion: ")
    return ConvertResponse(
        success=True,
        output_code=result.output_code,
        analysis_lines=lines,
        status=result.status.value,
        metrics=metrics,
    )


def analyze(source: object, language: object, config: EngineConfig | None = None) -> AnalyzeResponse:
    config = config or DEFAULT_CONFIG
    text, lang = _prepare(source, language)
    report = analyze_syntax(text, lang, config)
    quality = generate_quality_metrics(text, lang, config)
    return AnalyzeResponse(
        errors=[FindingJSON.from_finding(f) for f in report.errors],
        warnings=[FindingJSON.from_finding(f) for f in report.warnings],
        suggestions=[FindingJSON.from_finding(f) for f in report.suggestions],
        metrics=QualityMetricsJSON.from_metrics(quality),
        report=analysis_report(report, quality),
    )


def fix(source: object, language: object, config: EngineConfig | None = None) -> FixResponse:
    config = config or DEFAULT_CONFIG
    text, lang = _prepare(source, language)
    before = analyze_syntax(text, lang, config)
    result = fix_syntax_errors(text, lang, config)
    quality = generate_quality_metrics(result.code, lang, config)
    log.info("fix.request", language=lang, fixes=len(result.fixes), unresolved=len(result.unresolved))
    return FixResponse(
        output_code=result.code,
        fixes=[FixRecordJSON.from_record(r) for r in result.fixes],
        unresolved=[FindingJSON.from_finding(f) for f in result.unresolved],
        metrics=QualityMetricsJSON.from_metrics(quality),
        analysis_lines=fix_lines(before, result.fixes) + quality_lines(quality),
    )


def metrics(source: object, language: object, config: EngineConfig | None = None) -> QualityMetricsJSON:
    text, lang = _prepare(source, language)
    return QualityMetricsJSON.from_metrics(generate_quality_metrics(text, lang, config or DEFAULT_CONFIG))


def languages() -> LanguagesResponse:
    return LanguagesResponse(languages=supported_languages())
