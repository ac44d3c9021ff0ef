from __future__ import annotations
from typing import Iterable, Mapping

from polycode.analysis.findings import AnalysisFinding, FixRecord, QualityMetrics, SyntaxReport
from polycode.parsing.ir import NodeKind

KIND_LABELS: Mapping[NodeKind, str] = {
    NodeKind.FUNCTION_DECL: "function(s)",
    NodeKind.CLASS_DECL: "class(es)",
    NodeKind.VAR_DECL: "variable declaration(s)",
    NodeKind.ASSIGNMENT: "assignment(s)",
    NodeKind.IF: "conditional branch(es)",
    NodeKind.FOR: "for loop(s)",
    NodeKind.WHILE: "while loop(s)",
    NodeKind.PRINT: "print statement(s)",
    NodeKind.RETURN: "return statement(s)",
    NodeKind.EXPRESSION: "expression statement(s)",
    NodeKind.COMMENT: "comment(s)",
}


def conversion_lines(source: str, target: str, counts: Mapping[NodeKind, int]) -> list[str]:
    """Narrative of what a conversion translated and what it left behind."""
    lines = [f"Converted {source} to {target} (rule-based)"]
    for kind, label in KIND_LABELS.items():
        if counts.get(kind):
            lines.append(f"Translated {counts[kind]} {label}")
    left = counts.get(NodeKind.UNKNOWN, 0)
    if left:
        lines.append(f"PartialTranslation: {left} construct(s) left untranslated and marked in the output")
    else:
        lines.append("All recognised constructs translated")
    return lines


def quality_lines(metrics: QualityMetrics) -> list[str]:
    return [
        f"Code quality: {metrics.readability}",
        f"Lines of code: {metrics.lines_of_code}",
        f"Functions: {metrics.functions}",
        f"Classes: {metrics.classes}",
    ]


def finding_lines(findings: Iterable[AnalysisFinding], prefix: str = "") -> list[str]:
    return [f"{prefix}{f.describe()}" for f in findings]


def fix_lines(report: SyntaxReport, fixes: Iterable[FixRecord]) -> list[str]:
    lines = [
        "Syntax analysis completed",
        f"Found {len(report.errors)} error(s)",
        f"Found {len(report.warnings)} warning(s)",
    ]
    lines += [f"Fixed: {r.describe()}" for r in fixes]
    lines += finding_lines(report.warnings, "Warning: ")
    lines += finding_lines(report.suggestions, "Suggestion: ")
    return lines


def analysis_report(report: SyntaxReport, metrics: QualityMetrics) -> str:
    """Plain-text analysis report."""
    lines = [
        "Code Analysis Report",
        f"Lines of code: {metrics.lines_of_code}",
        f"Functions: {metrics.functions}",
        f"Classes: {metrics.classes}",
        f"Complexity: {metrics.complexity}",
        f"Readability: {metrics.readability}",
    ]
    lines += finding_lines(report.errors, "Error: ")
    lines += finding_lines(report.warnings, "Warning: ")
    lines += finding_lines(report.suggestions, "Suggestion: ")
    return "\n".join(lines)
