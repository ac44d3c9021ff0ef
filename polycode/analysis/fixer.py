from __future__ import annotations
from typing import Callable, Optional

from polycode.analysis.detectors import balance, blocks, strings, terminators
from polycode.analysis.findings import AnalysisFinding, FixRecord, FixResult, SyntaxReport
from polycode.analysis.syntax import analyze_syntax
from polycode.core.config import DEFAULT_CONFIG, EngineConfig
from polycode.core.logging import get_logger
from polycode.languages.registry import get_rules
from polycode.languages.rules import LanguageRules
from polycode.parsing.lexical import indent_width, scan

log = get_logger("polycode.fix")

Edit = Optional[tuple[str, FixRecord]]
Template = Callable[[list[str], AnalysisFinding, LanguageRules], Edit]

_TRAILING_HEADER = ("{", ":", ";")


def _code_end(lines: list[str], masked: list[str], idx: int) -> int:
    """Column just past the last code character of a line, ignoring a trailing comment."""
    return len(masked[idx].rstrip()) if idx < len(masked) else len(lines[idx].rstrip())


def _insert(line: str, column: int, text: str) -> str:
    return line[:column] + text + line[column:]


def _closable(line: str, quote: str, rules: LanguageRules) -> str:
    """``line`` with a space added when a trailing backslash would escape the closing quote."""
    slashes = len(line) - len(line.rstrip("\\"))
    return line + " " if slashes % 2 and quote not in rules.raw_quotes else line


def _close_string(lines: list[str], f: AnalysisFinding, rules: LanguageRules) -> Edit:
    idx = f.start_line - 1
    lines[idx] = _closable(lines[idx].rstrip(), f.token, rules) + f.expected
    extra = f" and {len(f.expected) - 1} bracket(s)" if len(f.expected) > 1 else ""
    return "\n".join(lines), FixRecord(f"Closed unterminated string with {f.token}{extra}", f.start_line, f.start_line)


def _close_multiline(lines: list[str], f: AnalysisFinding, rules: LanguageRules) -> Edit:
    # the literal runs to end of input; contents are kept as written
    lines[-1] = _closable(lines[-1], f.token, rules) + f.expected
    extra = f" and {len(f.expected) - len(f.token)} bracket(s)" if len(f.expected) > len(f.token) else ""
    return "\n".join(lines), FixRecord(f"Closed multi-line string with {f.token}{extra}", f.start_line, len(lines))


def _close_block_comment(lines: list[str], f: AnalysisFinding, rules: LanguageRules) -> Edit:
    lines[-1] = (lines[-1].rstrip() + " " + f.expected).lstrip() if lines[-1].strip() else f.expected
    return "\n".join(lines), FixRecord(f"Closed block comment with {f.expected}", f.start_line, len(lines))


def _delete_closer(lines: list[str], f: AnalysisFinding, rules: LanguageRules) -> Edit:
    idx = f.start_line - 1
    line = lines[idx]
    if line[f.column:f.column + 1] != f.token:
        return None
    lines[idx] = line[:f.column] + line[f.column + 1:]
    if not lines[idx].strip() and line.strip() == f.token:
        del lines[idx]
    return "\n".join(lines), FixRecord(f"Removed unmatched '{f.token}'", f.start_line, f.start_line)


def _insert_closer(lines: list[str], f: AnalysisFinding, rules: LanguageRules) -> Edit:
    text = "\n".join(lines)
    masked = scan(text, rules).masked_lines()
    idx = f.start_line - 1
    closer = f.expected
    description = f"Inserted missing '{closer}' for '{f.token}' opened on line {f.start_line}"

    if f.anchor is not None:
        line_no, column = f.anchor
        lines[line_no - 1] = _insert(lines[line_no - 1], column, closer)
        return "\n".join(lines), FixRecord(description, line_no, line_no)

    end = _code_end(lines, masked, idx)
    opener_last = end == f.column + 1
    if not opener_last:
        # inline: end of the opener's line, before a trailing block opener / colon / semicolon
        code = masked[idx][:end]
        column = end
        if code.endswith(_TRAILING_HEADER) and end - 1 > f.column:
            column = len(code[:-1].rstrip())
        lines[idx] = _insert(lines[idx], column, closer)
        return "\n".join(lines), FixRecord(description, f.start_line, f.start_line)

    base = indent_width(lines[idx])
    later = next((j for j in range(idx + 1, len(lines))
                  if masked[j].strip() and indent_width(lines[j]) <= base), None)
    if f.token == "{" and rules.uses_braces:
        pad = lines[idx][:len(lines[idx]) - len(lines[idx].lstrip())]
        if later is None:
            while lines and not lines[-1].strip():
                lines.pop()
            lines.append(pad + closer)
            at = len(lines)
        else:
            lines.insert(later, pad + closer)
            at = later + 1
        return "\n".join(lines), FixRecord(description, at, at)

    stop = later if later is not None else len(lines)
    target = next((j for j in range(stop - 1, idx, -1) if masked[j].strip()), idx)
    column = _code_end(lines, masked, target)
    lines[target] = _insert(lines[target], column, closer)
    return "\n".join(lines), FixRecord(description, target + 1, target + 1)


def _append_token(lines: list[str], f: AnalysisFinding, rules: LanguageRules) -> Edit:
    idx = f.start_line - 1
    masked = scan("\n".join(lines), rules).masked_lines()
    column = _code_end(lines, masked, idx)
    lines[idx] = _insert(lines[idx], column, f.expected)
    return "\n".join(lines), FixRecord(f"Added missing '{f.expected}'", f.start_line, f.start_line)


_TEMPLATES: dict[str, tuple[int, Template]] = {
    strings.UNTERMINATED_STRING: (0, _close_string),
    strings.UNTERMINATED_MULTILINE: (0, _close_multiline),
    strings.UNTERMINATED_BLOCK_COMMENT: (1, _close_block_comment),
    balance.UNMATCHED_CLOSER: (2, _delete_closer),
    balance.UNCLOSED_OPENER: (3, _insert_closer),
    blocks.MISSING_COLON: (4, _append_token),
    terminators.MISSING_TERMINATOR: (4, _append_token),
}


def _priority(f: AnalysisFinding) -> tuple:
    rank = _TEMPLATES[f.code][0]
    # innermost opener first
    offset = -(f.start_line * 100000 + f.column) if f.code == balance.UNCLOSED_OPENER else f.start_line
    return rank, offset


def _key(f: AnalysisFinding) -> tuple:
    return f.code, f.start_line, f.column, f.token


def fix_syntax_errors(code: str, language: str, config: EngineConfig | None = None) -> FixResult:
    """Apply one deterministic repair per Error finding until nothing fixable remains.

    Never raises for any input text; findings without a repair are returned
    as ``unresolved``. ``max_fix_passes`` is raised to the number of Error
    findings when the input has more, so every finding gets its pass.
    """
    config = config or DEFAULT_CONFIG
    rules = get_rules(language)
    text = code.replace("\r\n", "\n").replace("\r", "\n")
    fixes: list[FixRecord] = []
    attempted: set[tuple] = set()
    try:
        report = analyze_syntax(text, rules.name, config)
        # a repair can surface one new finding (a terminator after an inserted closer)
        budget = max(config.max_fix_passes, 2 * len(report.errors))
        for _ in range(budget):
            pending = [f for f in report.errors if f.code in _TEMPLATES and _key(f) not in attempted]
            if not pending:
                break
            finding = min(pending, key=_priority)
            attempted.add(_key(finding))
            edit = _TEMPLATES[finding.code][1](text.split("\n"), finding, rules)
            if edit is None or edit[0] == text:
                continue
            text = edit[0]
            fixes.append(edit[1])
            log.debug("fix.applied", code=finding.code, line=finding.start_line)
            report = analyze_syntax(text, rules.name, config)
    except Exception as exc:
        log.warning("fix.failed", language=rules.name, error=repr(exc))
        report = SyntaxReport()

    unresolved = report.errors
    if unresolved:
        log.info("fix.unresolved", language=rules.name, count=len(unresolved))
    log.info("fix.done", language=rules.name, fixes=len(fixes))
    return FixResult(code=text if fixes else code, fixes=tuple(fixes), unresolved=unresolved)
