from __future__ import annotations

from polycode.analysis.detectors.balance import detect_balance, match_brackets
from polycode.analysis.detectors.blocks import detect_blocks
from polycode.analysis.detectors.strings import detect_strings
from polycode.analysis.detectors.style import detect_style
from polycode.analysis.detectors.terminators import detect_terminators
from polycode.analysis.findings import AnalysisFinding, Severity, SyntaxReport
from polycode.core.config import DEFAULT_CONFIG, EngineConfig
from polycode.core.logging import get_logger
from polycode.languages.registry import get_rules
from polycode.parsing.lexical import scan

log = get_logger("polycode.analyze")


def _bucket(findings: list[AnalysisFinding], severity: Severity) -> tuple[AnalysisFinding, ...]:
    return tuple(sorted((f for f in findings if f.severity is severity), key=lambda f: f.sort_key))


def analyze_syntax(code: str, language: str, config: EngineConfig | None = None) -> SyntaxReport:
    """Run every detector for ``language`` over ``code``."""
    config = config or DEFAULT_CONFIG
    rules = get_rules(language)
    text = code.replace("\r\n", "\n").replace("\r", "\n")
    result = scan(text, rules)

    match = match_brackets(result.brackets)
    findings, absorbed = detect_strings(result, rules, match)
    findings += detect_balance(match, absorbed)
    findings += detect_blocks(text, result, rules)
    findings += detect_terminators(result, rules)
    findings += detect_style(text, result, rules, config)

    report = SyntaxReport(
        errors=_bucket(findings, Severity.ERROR),
        warnings=_bucket(findings, Severity.WARNING),
        suggestions=_bucket(findings, Severity.SUGGESTION),
    )
    log.debug("analyze.done", language=rules.name, errors=len(report.errors),
              warnings=len(report.warnings), suggestions=len(report.suggestions))
    return report
