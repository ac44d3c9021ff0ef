from __future__ import annotations
import re

from polycode.languages.rules import LanguageRules

_OPERAND = r"((?:[A-Za-z_]\w*|\x00\d+\x00)(?:(?:\.|->)[A-Za-z_]\w*|\[[^\]]*\]|\(\))*?)"
_LEN_CALL = re.compile(r"\blen\(\s*" + _OPERAND + r"\s*\)")
_LEN_MEMBER = re.compile(_OPERAND + r"\.(?:length\(\)|size\(\)|length\b|Length\b|Count\b)")
_PLACEHOLDER = re.compile(r"\x00(\d+)\x00")
_NOT = re.compile(r"\bnot\s+(?!in\b)")
_OPERAND_STOP = re.compile(r"\s+(?:and|or|if|else)\b|\s*[,:;]")
_SIMPLE_OPERAND = re.compile(r"^(?:[\w.\x00]+(?:\([^()]*\)|\[[^\[\]]*\])*|\([^()]*\))$")
_POW_BASE = re.compile(r"(\([^()]*\)|[\w.\x00]+(?:\([^()]*\))?)\s*$")
_POW_EXPONENT = re.compile(r"\s*(-?(?:\([^()]*\)|[\w.\x00]+(?:\([^()]*\))?))")

_INT = re.compile(r"^[-+]?\d+[lL]?$")
_FLOAT = re.compile(r"^[-+]?(?:\d+\.\d*|\.\d+)(?:[eE][-+]?\d+)?[fFdDmM]?$")


def _mask_strings(expr: str, rules: LanguageRules) -> tuple[str, list[str]]:
    quotes = sorted(set(rules.quotes) | set(rules.multiline_quotes), key=len, reverse=True)
    out: list[str] = []
    found: list[str] = []
    i = 0
    while i < len(expr):
        quote = next((q for q in quotes if expr.startswith(q, i)), None)
        if quote is None:
            out.append(expr[i])
            i += 1
            continue
        j = i + len(quote)
        while j < len(expr) and not expr.startswith(quote, j):
            j += 2 if expr[j] == "\\" and quote not in rules.raw_quotes else 1
        j = min(len(expr), j + len(quote))
        out.append(f"\x00{len(found)}\x00")
        found.append(expr[i:j])
        i = j
    return "".join(out), found


def _requote(literal: str, source: LanguageRules, target: LanguageRules) -> str:
    if not target.char_literals or source.char_literals:
        return literal
    if len(literal) < 2 or literal[0] != "'" or literal.startswith("'''") or literal[-1] != "'":
        return literal
    body = literal[1:-1].replace("\\'", "'")
    body = re.sub(r'(?<!\\)"', r'\\"', body)
    return f'"{body}"'


def _operand_end(code: str, start: int) -> int:
    depth = 0
    i = start
    while i < len(code):
        ch = code[i]
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            if depth == 0:
                break
            depth -= 1
        elif depth == 0 and _OPERAND_STOP.match(code, i):
            break
        i += 1
    return i


def _negations(code: str, bang: str) -> str:
    """Rewrite ``not x`` as ``!x``, parenthesising operands that are not a single term.

    The operand runs to the next top-level ``and``/``or``, separator or
    closing bracket. The rightmost ``not`` is rewritten first.
    """
    while True:
        found = list(_NOT.finditer(code))
        if not found:
            return code
        m = found[-1]
        operand = code[m.end():_operand_end(code, m.end())].rstrip()
        rest = code[m.end() + len(operand):]
        if operand and not _SIMPLE_OPERAND.match(operand):
            operand = f"({operand})"
        code = code[:m.start()] + bang + operand + rest


def _powers(code: str, target: LanguageRules) -> str:
    """Rewrite ``a ** b`` as the target's power call, right to left."""
    while "**" in code:
        at = code.rfind("**")
        base = _POW_BASE.search(code, 0, at)
        exponent = _POW_EXPONENT.match(code, at + 2)
        if base is None or exponent is None:
            return code
        call = target.power.format(base.group(1), exponent.group(1))
        code = code[:base.start()] + call + code[exponent.end():]
    return code


def _logical(code: str, source: LanguageRules, target: LanguageRules) -> str:
    if source.logical == target.logical:
        return code
    if source.logical["and"] == "and":
        code = re.sub(r"\s+is\s+not\s+", " != ", code)
        code = re.sub(r"\s+is\s+", " == ", code)
        code = _negations(code, target.logical["not"])
        code = re.sub(r"\band\b", target.logical["and"], code)
        code = re.sub(r"\bor\b", target.logical["or"], code)
        return code
    code = re.sub(r"\s*&&\s*", f" {target.logical['and']} ", code)
    code = re.sub(r"\s*\|\|\s*", f" {target.logical['or']} ", code)
    code = re.sub(r"!(?!=)\s*", target.logical["not"] + " ", code)
    return code


def _literals(code: str, source: LanguageRules, target: LanguageRules) -> str:
    for key in ("true", "false", "null"):
        src, dst = source.literals[key], target.literals[key]
        if src != dst:
            code = re.sub(r"\b" + re.escape(src) + r"\b", dst, code)
    if source.name == "JavaScript":
        code = re.sub(r"\bundefined\b", target.literals["null"], code)
    return code


def _self_refs(code: str, source: LanguageRules, target: LanguageRules, source_self: str, target_self: str) -> str:
    if source_self and target_self and (source_self, source.member) != (target_self, target.member):
        code = re.sub(r"\b" + re.escape(source_self) + r"\s*" + re.escape(source.member),
                      target_self + target.member, code)
        code = re.sub(r"\b" + re.escape(source_self) + r"\b(?!\s*(?:\.|->))", target_self, code)
    if source.member != target.member and source.member == "->":
        code = code.replace("->", ".")
    return code


def _lengths(code: str, source: LanguageRules, target: LanguageRules) -> str:
    if source.length == target.length:
        return code
    form = source.length
    if form.startswith("len("):
        return _LEN_CALL.sub(lambda m: target.length.format(m.group(1)), code)
    return _LEN_MEMBER.sub(lambda m: target.length.format(m.group(1)), code)


def translate(expr: str, source: LanguageRules, target: LanguageRules,
              source_self: str | None = None, target_self: str | None = None) -> str:
    """Rewrite an expression's literals, operators and member idioms for ``target``.

    String literals are left alone apart from re-quoting single-quoted
    strings for targets where ``'`` delimits a character.
    """
    if not expr or source.name == target.name:
        return expr
    source_self = source.self_ref if source_self is None else source_self
    target_self = target.self_ref if target_self is None else target_self
    code, strings = _mask_strings(expr, source)
    code = _self_refs(code, source, target, source_self, target_self)
    code = _logical(code, source, target)
    code = _literals(code, source, target)
    code = _lengths(code, source, target)
    if target.power and source.name in ("Python", "JavaScript"):
        code = _powers(code, target)
    if target.name != "JavaScript":
        code = code.replace("===", "==").replace("!==", "!=")
    if not target.uses_braces:
        code = re.sub(r"\bnew\s+", "", code)
    elif not source.uses_braces:
        code = re.sub(r"\s*//\s*", " / ", code)
    strings = [_requote(s, source, target) for s in strings]
    return _PLACEHOLDER.sub(lambda m: strings[int(m.group(1))], code).strip()


def infer_type(value: str) -> str:
    """Canonical type of a literal, or ``""`` when it is not a plain literal."""
    v = (value or "").strip()
    if not v:
        return ""
    if _INT.match(v):
        return "int"
    if _FLOAT.match(v):
        return "float"
    if v[0] in "\"'`" and v[-1] == v[0] and len(v) >= 2:
        return "string"
    if v in ("true", "false", "True", "False"):
        return "bool"
    return ""


def type_name(canonical: str, target: LanguageRules) -> str:
    return target.type_name(canonical or "any")
