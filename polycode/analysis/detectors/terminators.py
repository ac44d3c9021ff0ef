from __future__ import annotations
import re
from dataclasses import dataclass

from polycode.analysis.findings import AnalysisFinding, Severity
from polycode.languages.rules import LanguageRules
from polycode.parsing.lexical import ScanResult, is_block_brace

MISSING_TERMINATOR = "missing-terminator"
OPTIONAL_TERMINATOR = "optional-terminator"

_SKIP_END = ("{", "}", ";", ",", "(", "[", ":", "\\", "=", "+", "-", "*", "/", "%", "&", "|", "^", "!", "~",
             "<", ">", "?", ".")
_SKIP_START = ("#", "@")
_CONTROL = re.compile(
    r"^(?:\}\s*)?(?:(?:if|for|foreach|while|switch|catch|using|lock|fixed)\s*\(.*\)|else(?:\s+if\s*\(.*\))?|do|try|finally)$"
)
_CONTINUES = (".", "?", ":", "&&", "||", "+", "-", "*", "/", "<<", ">>", "=", "{")
_ATTRIBUTE = re.compile(r"^\[.*\]$")


@dataclass(frozen=True)
class _LineState:
    open_parens: int
    in_literal: bool


def _line_states(result: ScanResult) -> dict[int, _LineState]:
    """Bracket context at the end of every line: open parens and literal braces."""
    masked = result.masked_lines()
    states: dict[int, _LineState] = {}
    stack: list[tuple[str, bool]] = []
    by_line: dict[int, list] = {}
    for b in result.brackets:
        by_line.setdefault(b.line, []).append(b)
    for number in range(1, len(masked) + 1):
        for b in by_line.get(number, ()):
            if b.char in "([":
                stack.append((b.char, False))
            elif b.char == "{":
                prefix = masked[number - 1][:b.column]
                literal = any(c in "([" for c, _ in stack) or any(lit for _, lit in stack) \
                    or not is_block_brace(prefix)
                stack.append(("{", literal))
            else:
                want = {")": "(", "]": "[", "}": "{"}[b.char]
                if stack and stack[-1][0] == want:
                    stack.pop()
        states[number] = _LineState(
            open_parens=sum(1 for c, _ in stack if c in "(["),
            in_literal=any(lit for _, lit in stack),
        )
    return states


def detect_terminators(result: ScanResult, rules: LanguageRules) -> list[AnalysisFinding]:
    """Statements missing their ``;`` terminator."""
    if not rules.uses_braces or not rules.terminator:
        return []
    masked = result.masked_lines()
    states = _line_states(result)
    code_lines = [i for i, ln in enumerate(masked, start=1) if ln.strip()]
    findings: list[AnalysisFinding] = []
    for pos, number in enumerate(code_lines):
        line = masked[number - 1].rstrip()
        code = line.strip()
        state = states[number]
        if state.open_parens or state.in_literal:
            continue
        if code.endswith(_SKIP_END) or code.startswith(_SKIP_START) or _ATTRIBUTE.match(code) or _CONTROL.match(code):
            continue
        nxt = masked[code_lines[pos + 1] - 1].strip() if pos + 1 < len(code_lines) else ""
        if nxt.startswith(_CONTINUES):
            continue
        if rules.terminator_required:
            severity, code_name = Severity.ERROR, MISSING_TERMINATOR
            message = f"Missing '{rules.terminator}' at end of statement"
        else:
            severity, code_name = Severity.SUGGESTION, OPTIONAL_TERMINATOR
            message = f"Consider ending the statement with '{rules.terminator}'"
        findings.append(AnalysisFinding(
            severity=severity,
            code=code_name,
            message=message,
            start_line=number,
            end_line=number,
            column=len(line),
            expected=rules.terminator,
        ))
    return findings
