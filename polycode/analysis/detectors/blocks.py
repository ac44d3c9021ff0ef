from __future__ import annotations
import re

from polycode.analysis.findings import AnalysisFinding, Severity
from polycode.languages.rules import LanguageRules
from polycode.parsing.lexical import ScanResult, python_logical_lines

MISSING_COLON = "missing-colon"
MISSING_BODY = "missing-body"
MIXED_INDENTATION = "mixed-indentation"
UNEXPECTED_INDENT = "unexpected-indent"

_HEADER = re.compile(r"^(?:async\s+)?(?:def|class|if|elif|else|for|while|try|except|finally|with)\b")


def _top_level_colon(masked: str) -> bool:
    depth = 0
    for ch in masked:
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
        elif ch == ":" and depth == 0:
            return True
    return False


def _balanced(masked: str) -> bool:
    return sum(masked.count(c) for c in "([{") == sum(masked.count(c) for c in ")]}")


def detect_blocks(text: str, result: ScanResult, rules: LanguageRules) -> list[AnalysisFinding]:
    """Indentation checks for indentation-delimited languages."""
    if rules.block_style != "indent":
        return []
    findings: list[AnalysisFinding] = []
    physical = text.split("\n")
    masked = result.masked_lines()

    styles = set()
    for number, line in enumerate(physical, start=1):
        info = result.lines[number - 1] if number - 1 < len(result.lines) else None
        if info is None or not info.has_code:
            continue
        lead = line[:len(line) - len(line.lstrip(" \t"))]
        if not lead:
            continue
        if " " in lead and "\t" in lead:
            styles.add("mixed")
        else:
            styles.add("tab" if "\t" in lead else "space")
        if len(styles) > 1:
            findings.append(AnalysisFinding(
                severity=Severity.WARNING,
                code=MIXED_INDENTATION,
                message="Mixed tabs and spaces in indentation",
                start_line=number,
                end_line=number,
            ))
            break

    code_lines = [ln for ln in python_logical_lines(text, rules, result) if not ln.is_comment]
    for idx, line in enumerate(code_lines):
        code = "\n".join(masked[line.start_line - 1:line.end_line]).strip()
        nxt = code_lines[idx + 1] if idx + 1 < len(code_lines) else None
        prev = code_lines[idx - 1] if idx > 0 else None

        if prev is not None and line.indent > prev.indent:
            prev_code = "\n".join(masked[prev.start_line - 1:prev.end_line]).rstrip()
            if not prev_code.endswith(":") and _balanced(prev_code):
                findings.append(AnalysisFinding(
                    severity=Severity.WARNING,
                    code=UNEXPECTED_INDENT,
                    message="Unexpected indent",
                    start_line=line.start_line,
                    end_line=line.start_line,
                    column=line.indent,
                ))

        if not _HEADER.match(code):
            continue
        if code.endswith(":"):
            if nxt is None or nxt.indent <= line.indent:
                findings.append(AnalysisFinding(
                    severity=Severity.WARNING,
                    code=MISSING_BODY,
                    message=f"Block header '{line.text.strip()}' has no indented body",
                    start_line=line.start_line,
                    end_line=line.end_line,
                ))
            continue
        if not _balanced(code) or _top_level_colon(code):
            continue
        last = masked[line.end_line - 1].rstrip()
        findings.append(AnalysisFinding(
            severity=Severity.ERROR,
            code=MISSING_COLON,
            message="Block header is missing ':'",
            start_line=line.end_line,
            end_line=line.end_line,
            column=len(last),
            expected=":",
        ))
    return findings
