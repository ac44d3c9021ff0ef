from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from polycode.languages.rules import LanguageRules

OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {v: k for k, v in OPENERS.items()}


@dataclass(frozen=True)
class LineInfo:
    number: int
    has_code: bool
    has_comment: bool
    depth: int
    continued: bool


@dataclass(frozen=True)
class Bracket:
    char: str
    line: int
    column: int
    offset: int


@dataclass(frozen=True)
class OpenString:
    quote: str
    line: int
    column: int
    multiline: bool


@dataclass(frozen=True)
class CommentSpan:
    start: int
    end: int
    line: int
    end_line: int
    trailing: bool


@dataclass
class ScanResult:
    masked: str
    lines: List[LineInfo]
    brackets: List[Bracket]
    unterminated: List[OpenString]
    comments: List[CommentSpan]
    open_block_comment: Optional[int] = None
    multiline_strings: List[Tuple[int, int]] = field(default_factory=list)

    def masked_lines(self) -> List[str]:
        return self.masked.split("\n")


@dataclass
class _LineState:
    code: bool = False
    comment: bool = False
    min_depth: int = 0


def scan(text: str, rules: LanguageRules) -> ScanResult:
    """Mask strings and comments, and record brackets, line classes and unterminated literals.

    The masked text keeps string delimiters and newlines so offsets and line
    numbers line up with ``text``.
    """
    out = list(text)
    n = len(text)
    lines: List[LineInfo] = []
    brackets: List[Bracket] = []
    unterminated: List[OpenString] = []
    comments: List[CommentSpan] = []
    spans: List[Tuple[int, int]] = []
    ml_quotes = sorted(rules.multiline_quotes, key=len, reverse=True)
    block_open, block_close = rules.block_comment or ("", "")

    line, line_start = 1, 0
    curly = 0
    nesting = 0
    cur = _LineState(min_depth=0)
    # (quote, start line, column, multiline, offset)
    string: Optional[Tuple[str, int, int, bool, int]] = None
    comment_start: Optional[Tuple[int, int, bool]] = None

    def end_line(continued: bool) -> None:
        nonlocal line, cur
        lines.append(LineInfo(line, cur.code, cur.comment, cur.min_depth, continued))
        line += 1
        cur = _LineState(min_depth=curly)

    i = 0
    while i < n:
        ch = text[i]
        if ch == "\n":
            if string is not None and not string[3]:
                unterminated.append(OpenString(string[0], string[1], string[2], False))
                string = None
            if comment_start is not None:
                cur.comment = True
            line_start = i + 1
            end_line(string is not None or comment_start is not None or nesting > 0 or _ends_with_backslash(text, i))
            i += 1
            continue

        if comment_start is not None:
            cur.comment = True
            if block_close and text.startswith(block_close, i):
                for j in range(i, i + len(block_close)):
                    out[j] = " "
                i += len(block_close)
                comments.append(CommentSpan(comment_start[0], i, comment_start[1], line, comment_start[2]))
                comment_start = None
                continue
            out[i] = " "
            i += 1
            continue

        if string is not None:
            quote = string[0]
            cur.code = True
            if ch == "\\" and quote not in rules.raw_quotes:
                out[i] = " "
                if i + 1 < n and text[i + 1] == "\n":
                    line_start = i + 2
                    end_line(True)
                else:
                    if i + 1 < n:
                        out[i + 1] = " "
                i += 2
                continue
            if text.startswith(quote, i):
                i += len(quote)
                if string[3]:
                    spans.append((string[4], i))
                string = None
                continue
            out[i] = " "
            i += 1
            continue

        if rules.line_comment and text.startswith(rules.line_comment, i):
            j = text.find("\n", i)
            j = n if j == -1 else j
            comments.append(CommentSpan(i, j, line, line, cur.code))
            for k in range(i, j):
                out[k] = " "
            cur.comment = True
            i = j
            continue
        if block_open and text.startswith(block_open, i):
            comment_start = (i, line, cur.code)
            cur.comment = True
            for k in range(i, i + len(block_open)):
                out[k] = " "
            i += len(block_open)
            continue
        opened = next((q for q in ml_quotes if text.startswith(q, i)), None)
        if opened is None and ch in rules.quotes:
            opened = ch
        if opened is not None:
            string = (opened, line, i - line_start, opened in rules.multiline_quotes, i)
            cur.code = True
            i += len(opened)
            continue

        if ch in OPENERS or ch in CLOSERS:
            brackets.append(Bracket(ch, line, i - line_start, i))
            if ch in OPENERS:
                nesting += 1
            else:
                nesting = max(0, nesting - 1)
            if ch == "{":
                curly += 1
            elif ch == "}":
                curly = max(0, curly - 1)
                cur.min_depth = min(cur.min_depth, curly)
        if not ch.isspace():
            cur.code = True
        i += 1

    if string is not None:
        unterminated.append(OpenString(string[0], string[1], string[2], string[3]))
        if string[3]:
            spans.append((string[4], n))
    open_block = None
    if comment_start is not None:
        open_block = comment_start[1]
        comments.append(CommentSpan(comment_start[0], n, comment_start[1], line, comment_start[2]))
    end_line(False)
    return ScanResult("".join(out), lines, brackets, unterminated, comments, open_block, spans)


def _ends_with_backslash(text: str, newline_at: int) -> bool:
    return newline_at > 0 and text[newline_at - 1] == "\\"


def indent_width(line: str) -> int:
    expanded = line.expandtabs(4)
    return len(expanded) - len(expanded.lstrip(" "))


# ---------- logical lines ----------

@dataclass(frozen=True)
class LogicalLine:
    text: str
    start_line: int
    end_line: int
    is_comment: bool = False
    trailing: bool = False
    indent: int = 0


_BLOCK_WORD_END = re.compile(r"(?:^|[\s)}])(?:else|try|do|finally|struct)$")
_BLOCK_LEADER = re.compile(
    r"^(?:[\w\s<>,.:\[\]@()]*\s)?(?:class|struct|interface|enum|namespace|record|union)\s+\w+"
    r"|^(?:if|for|foreach|while|switch|func|select|else|case|default|try|catch|finally|do|type|go|defer)\b"
)
_GO_FOR_CLAUSE = re.compile(r"^for\s+[^\s(]")
_CONTINUATION_END = ("=", "+", "-", "*", "/", "%", "&", "|", "^", "?", ",", ".", "(", "[", "<<", ">>", "=>")
_CONTINUATION_START = (".", "?", "&&", "||", "+ ", "- ", "* ", "/ ", ": ", "<<")


def is_block_brace(current: str) -> bool:
    s = current.strip()
    if not s or s.endswith((")", "=>", "->")):
        return True
    if _BLOCK_WORD_END.search(s):
        return True
    if s.endswith(("=", ",", "(", "[", ":", "return", "?", "&&", "||")):
        return False
    return bool(_BLOCK_LEADER.match(s))


def _is_continued(current: str, rest: str) -> bool:
    s = current.rstrip()
    if not s:
        return False
    if s.endswith(("++", "--")):
        return False
    if s.endswith(_CONTINUATION_END):
        return True
    return rest.lstrip(" \t").startswith(_CONTINUATION_START)


def split_statements(text: str, rules: LanguageRules, result: Optional[ScanResult] = None) -> List[LogicalLine]:
    """Split brace-language source into logical lines.

    ``{`` and ``}`` of blocks and top-level ``;`` end a logical line; braces of
    literals stay inline. Comments become their own logical lines and a lone
    ``{`` is merged into the header before it.
    """
    result = result or scan(text, rules)
    masked = result.masked
    comment_at = {c.start: c for c in result.comments}
    string_at = dict(result.multiline_strings)
    out: List[LogicalLine] = []
    buf: List[str] = []
    start_line = 1
    line = 1
    paren = 0
    expr = 0
    skip_ws = False
    n = len(text)

    def flush(end: int) -> None:
        nonlocal buf
        s = "".join(buf).strip()
        if s:
            out.append(LogicalLine(s, start_line, end))
        buf = []

    def begin() -> None:
        nonlocal start_line
        if not "".join(buf).strip():
            start_line = line

    i = 0
    while i < n:
        if i in comment_at:
            c = comment_at[i]
            if paren == 0 and expr == 0:
                flush(line)
            out.append(LogicalLine(text[c.start:c.end], c.line, c.end_line, is_comment=True, trailing=c.trailing))
            line = c.end_line
            i = c.end
            continue
        if i in string_at:
            begin()
            chunk = text[i:string_at[i]]
            buf.append(chunk)
            line += chunk.count("\n")
            skip_ws = False
            i = string_at[i]
            continue
        ch = text[i]
        m = masked[i]
        if skip_ws and ch in " \t":
            i += 1
            continue
        skip_ws = False
        if ch == "\n":
            rest_end = text.find("\n", i + 1)
            rest = masked[i + 1:n if rest_end == -1 else rest_end]
            if paren == 0 and expr == 0 and not _is_continued("".join(buf), rest):
                flush(line)
            else:
                buf.append(" ")
                skip_ws = True
            line += 1
            i += 1
            continue
        if m in "([":
            paren += 1
        elif m in ")]":
            paren = max(0, paren - 1)
        elif m == "{":
            if paren == 0 and expr == 0 and is_block_brace("".join(buf)):
                current = "".join(buf).strip()
                if not current and out and not out[-1].is_comment and not out[-1].text.endswith((";", "{", "}")):
                    prev = out.pop()
                    buf = [prev.text, " "]
                    start_line = prev.start_line
                else:
                    begin()
                buf.append("{")
                flush(line)
                i += 1
                continue
            expr += 1
        elif m == "}":
            if expr > 0:
                expr -= 1
            elif paren == 0:
                flush(line)
                out.append(LogicalLine("}", line, line))
                i += 1
                continue
        elif m == ";" and paren == 0 and expr == 0 and not _GO_FOR_CLAUSE.match("".join(buf).strip()):
            if not "".join(buf).strip() and out and out[-1].text == "}":
                last = out.pop()
                out.append(LogicalLine("};", last.start_line, line))
                i += 1
                continue
            begin()
            buf.append(";")
            flush(line)
            i += 1
            continue
        if not ch.isspace():
            begin()
        buf.append(ch)
        i += 1
    flush(line)
    return out


def python_logical_lines(text: str, rules: LanguageRules, result: Optional[ScanResult] = None) -> List[LogicalLine]:
    """Join physical Python lines into logical ones.

    Bracket continuations, backslash continuations and multi-line strings are
    joined; comment-only lines are flagged.
    """
    result = result or scan(text, rules)
    physical = text.split("\n")
    out: List[LogicalLine] = []
    idx = 0
    while idx < len(physical):
        raw = physical[idx]
        info = result.lines[idx] if idx < len(result.lines) else None
        if not raw.strip():
            idx += 1
            continue
        start = idx
        parts = [raw]
        while info is not None and info.continued and idx + 1 < len(physical):
            idx += 1
            parts.append(physical[idx])
            info = result.lines[idx] if idx < len(result.lines) else None
        stripped = raw.strip()
        is_comment = stripped.startswith(rules.line_comment) and len(parts) == 1
        multiline = _opens_docstring(stripped) or (len(parts) > 1 and any(q in raw for q in rules.multiline_quotes))
        joined = "\n".join(parts) if multiline else " ".join(p.strip() for p in parts)
        out.append(LogicalLine(joined.strip() if not is_comment else stripped, start + 1, idx + 1,
                               is_comment=is_comment, indent=indent_width(raw)))
        idx += 1
    return out


def _opens_docstring(stripped: str) -> bool:
    return stripped.lstrip("rRuUbB").startswith(('"""', "'''"))


# ---------- helpers shared by extractor and renderers ----------

def split_top_level(text: str, sep: str = ",") -> List[str]:
    """Split on ``sep`` outside brackets and string literals."""
    parts: List[str] = []
    depth = 0
    quote: Optional[str] = None
    buf: List[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if quote:
            buf.append(ch)
            if ch == "\\" and i + 1 < len(text):
                buf.append(text[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = None
            i += 1
            continue
        if ch in "\"'`":
            quote = ch
        elif ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(0, depth - 1)
        if depth == 0 and text.startswith(sep, i):
            parts.append("".join(buf).strip())
            buf = []
            i += len(sep)
            continue
        buf.append(ch)
        i += 1
    tail = "".join(buf).strip()
    if tail or parts:
        parts.append(tail)
    return [p for p in parts if p != ""] if parts else []


def split_trailing_comment(line: str, rules: LanguageRules) -> Tuple[str, str]:
    """Return ``(code, comment_text)`` for a single line."""
    token = rules.line_comment
    quote: Optional[str] = None
    i = 0
    while i < len(line):
        ch = line[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if line.startswith(quote, i):
                i += len(quote)
                quote = None
                continue
            i += 1
            continue
        ml = next((q for q in rules.multiline_quotes if line.startswith(q, i)), None)
        if ml or ch in rules.quotes:
            quote = ml or ch
            i += len(quote)
            continue
        if token and line.startswith(token, i):
            return line[:i].rstrip(), line[i + len(token):].strip()
        i += 1
    return line.rstrip(), ""


def strip_outer_parens(expr: str) -> str:
    s = expr.strip()
    while s.startswith("(") and s.endswith(")"):
        depth = 0
        for idx, ch in enumerate(s):
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0 and idx != len(s) - 1:
                    return s
        s = s[1:-1].strip()
    return s
