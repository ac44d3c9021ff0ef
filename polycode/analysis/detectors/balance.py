from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Optional

from polycode.analysis.findings import AnalysisFinding, Severity
from polycode.parsing.lexical import CLOSERS, OPENERS, Bracket

UNMATCHED_CLOSER = "unmatched-closer"
UNCLOSED_OPENER = "unclosed-opener"


@dataclass
class BracketMatch:
    # openers never closed, in source order, with the closer that forced them shut (if any)
    unclosed: list[tuple[Bracket, Optional[Bracket]]] = field(default_factory=list)
    stray: Optional[Bracket] = None


def match_brackets(brackets: Iterable[Bracket]) -> BracketMatch:
    """Stack-match brackets; a closer that matches a deeper opener closes the openers above it."""
    result = BracketMatch()
    stack: list[Bracket] = []
    for b in brackets:
        if b.char in OPENERS:
            stack.append(b)
            continue
        want = CLOSERS[b.char]
        depth = next((i for i in range(len(stack) - 1, -1, -1) if stack[i].char == want), None)
        if depth is None:
            if result.stray is None:
                result.stray = b
            continue
        for opener in stack[depth + 1:]:
            result.unclosed.append((opener, b))
        del stack[depth:]
    result.unclosed.extend((opener, None) for opener in stack)
    result.unclosed.sort(key=lambda pair: pair[0].offset)
    return result


def detect_balance(match: BracketMatch, absorbed: set[int]) -> list[AnalysisFinding]:
    findings: list[AnalysisFinding] = []
    if match.stray is not None:
        b = match.stray
        findings.append(AnalysisFinding(
            severity=Severity.ERROR,
            code=UNMATCHED_CLOSER,
            message=f"Unmatched closing '{b.char}'",
            start_line=b.line,
            end_line=b.line,
            column=b.column,
            token=b.char,
        ))
    for opener, closer in match.unclosed:
        if opener.offset in absorbed:
            continue
        anchor = (closer.line, closer.column) if closer is not None and closer.line == opener.line else None
        findings.append(AnalysisFinding(
            severity=Severity.ERROR,
            code=UNCLOSED_OPENER,
            message=f"Unclosed '{opener.char}': expected '{OPENERS[opener.char]}'",
            start_line=opener.line,
            end_line=closer.line if closer is not None else opener.line,
            column=opener.column,
            token=opener.char,
            expected=OPENERS[opener.char],
            anchor=anchor,
        ))
    return findings
