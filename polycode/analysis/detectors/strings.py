from __future__ import annotations

from polycode.analysis.detectors.balance import BracketMatch
from polycode.analysis.findings import AnalysisFinding, Severity
from polycode.languages.rules import LanguageRules
from polycode.parsing.lexical import OPENERS, ScanResult

UNTERMINATED_STRING = "unterminated-string"
UNTERMINATED_MULTILINE = "unterminated-multiline-string"
UNTERMINATED_BLOCK_COMMENT = "unterminated-block-comment"


def detect_strings(result: ScanResult, rules: LanguageRules, match: BracketMatch) -> tuple[list[AnalysisFinding], set[int]]:
    """Unterminated literals and block comments.

    Returns the findings and the offsets of openers folded into a string
    finding: brackets left open before an unterminated quote on the same line
    (or anywhere before a multi-line string, which runs to end of input) are
    closed by the same repair.
    """
    findings: list[AnalysisFinding] = []
    absorbed: set[int] = set()
    last_line = len(result.lines)
    open_at_eof = [o for o, closer in match.unclosed if closer is None]
    for s in result.unterminated:
        if s.multiline:
            folded = [o for o in open_at_eof if (o.line, o.column) < (s.line, s.column)]
            code, end_line = UNTERMINATED_MULTILINE, last_line
            message = f"Unterminated multi-line string starting with {s.quote}"
        else:
            folded = [o for o in open_at_eof if o.line == s.line and o.column < s.column]
            code, end_line = UNTERMINATED_STRING, s.line
            message = f"Unterminated string literal: missing closing {s.quote}"
        absorbed.update(o.offset for o in folded)
        closers = "".join(OPENERS[o.char] for o in reversed(folded))
        if closers:
            message += f" (and '{closers}')"
        findings.append(AnalysisFinding(
            severity=Severity.ERROR,
            code=code,
            message=message,
            start_line=s.line,
            end_line=end_line,
            column=s.column,
            token=s.quote,
            expected=s.quote + closers,
        ))
    if result.open_block_comment is not None and rules.block_comment:
        findings.append(AnalysisFinding(
            severity=Severity.ERROR,
            code=UNTERMINATED_BLOCK_COMMENT,
            message=f"Unterminated block comment: missing {rules.block_comment[1]}",
            start_line=result.open_block_comment,
            end_line=last_line,
            token=rules.block_comment[0],
            expected=rules.block_comment[1],
        ))
    return findings, absorbed
