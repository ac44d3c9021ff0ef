from __future__ import annotations
import re

from polycode.analysis.findings import AnalysisFinding, Severity
from polycode.core.config import EngineConfig
from polycode.languages.rules import LanguageRules
from polycode.parsing.lexical import ScanResult, indent_width

LONG_LINES = "long-lines"
DEEP_NESTING = "deep-nesting"
ASSIGNMENT_IN_CONDITION = "assignment-in-condition"
LOOSE_EQUALITY = "loose-equality"
VAR_DECLARATION = "var-declaration"
NONE_COMPARISON = "none-comparison"
MISSING_COMMENTS = "missing-comments"
TODO_MARKER = "todo-marker"

_CONDITION = re.compile(r"\b(?:if|while)\s*\((?P<cond>.*)\)")
_ASSIGN = re.compile(r"(?<![=!<>+\-*/%&|^])=(?![=>])")
_LOOSE_EQ = re.compile(r"(?<![=!])==(?!=)")
_VAR = re.compile(r"^\s*var\s+\w")
_NONE_CMP = re.compile(r"[=!]=\s*None\b")
_TODO = re.compile(r"\b(TODO|FIXME|XXX|HACK)\b")


def nesting_levels(text: str, result: ScanResult, rules: LanguageRules) -> list[int]:
    """Nesting depth of every line that carries code."""
    physical = text.split("\n")
    levels: list[int] = []
    for info in result.lines:
        if not info.has_code:
            continue
        if rules.uses_braces:
            levels.append(info.depth)
        else:
            levels.append(indent_width(physical[info.number - 1]) // 4)
    return levels


def _suggestion(code: str, message: str, start: int, end: int | None = None, column: int = 0,
                severity: Severity = Severity.SUGGESTION) -> AnalysisFinding:
    return AnalysisFinding(severity=severity, code=code, message=message, start_line=start,
                           end_line=end or start, column=column)


def detect_style(text: str, result: ScanResult, rules: LanguageRules, config: EngineConfig) -> list[AnalysisFinding]:
    findings: list[AnalysisFinding] = []
    physical = text.split("\n")
    masked = result.masked_lines()

    long_lines = [i for i, line in enumerate(physical, start=1) if len(line.rstrip()) > config.max_line_length]
    if long_lines:
        findings.append(_suggestion(
            LONG_LINES,
            f"{len(long_lines)} line(s) longer than {config.max_line_length} characters; consider wrapping",
            long_lines[0], long_lines[-1],
        ))

    deep = [info.number for info, level in zip([i for i in result.lines if i.has_code],
                                                nesting_levels(text, result, rules))
            if level >= config.nesting_warn_at]
    if deep:
        findings.append(_suggestion(
            DEEP_NESTING,
            f"Nesting depth reaches {config.nesting_warn_at} or more; consider extracting functions",
            deep[0], deep[-1],
        ))

    for number, line in enumerate(masked, start=1):
        if rules.uses_braces and rules.name != "Go":
            m = _CONDITION.search(line)
            if m and _ASSIGN.search(m.group("cond")):
                findings.append(_suggestion(
                    ASSIGNMENT_IN_CONDITION, "Assignment inside a condition; did you mean '=='?",
                    number, column=m.start("cond"), severity=Severity.WARNING,
                ))
        if rules.name == "JavaScript":
            m = _LOOSE_EQ.search(line)
            if m:
                findings.append(_suggestion(LOOSE_EQUALITY, "Use '===' instead of '=='", number, column=m.start()))
            if _VAR.match(line):
                findings.append(_suggestion(VAR_DECLARATION, "Prefer 'let' or 'const' over 'var'", number))
        if rules.name == "Python":
            m = _NONE_CMP.search(line)
            if m:
                findings.append(_suggestion(NONE_COMPARISON, "Compare with None using 'is' / 'is not'",
                                            number, column=m.start()))

    code_lines = sum(1 for info in result.lines if info.has_code)
    if code_lines >= config.long_file_lines and not result.comments:
        findings.append(_suggestion(
            MISSING_COMMENTS, f"No comments in {code_lines} lines of code; consider documenting the intent", 1,
        ))

    for span in result.comments:
        m = _TODO.search(text[span.start:span.end])
        if m:
            findings.append(_suggestion(TODO_MARKER, f"Unresolved {m.group(1)} marker", span.line,
                                        span.end_line))
    return findings
