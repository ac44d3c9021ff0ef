from __future__ import annotations
import json
import re
import textwrap
from collections import Counter
from dataclasses import dataclass
from typing import Optional

from polycode.core.logging import get_logger
from polycode.languages.registry import get_rules
from polycode.languages.rules import ConstructPattern, LanguageRules, canonical_type
from polycode.parsing.ir import IRNode, NodeKind, Span, program, unknown
from polycode.parsing.lexical import (
    LogicalLine, python_logical_lines, scan, split_statements, split_top_level, split_trailing_comment,
    strip_outer_parens,
)

log = get_logger("polycode.extract")

_IDENT = re.compile(r"^[A-Za-z_]\w*$")
_ANNOTATION = re.compile(r"^(?:@[\w.]+(?:\([^)]*\))?\s+|\[[\w.]+(?:\([^)]*\))?\]\s*)+")
_ACCESS_LABEL = re.compile(r"^(?:public|private|protected)\s*:$")
_DOCSTRING = re.compile(r'^[rRuU]?("""|\'\'\')(?P<body>.*)\1$', re.DOTALL)
_PARAM_NAME = re.compile(r"([A-Za-z_]\w*)\s*(?:\[\s*\])*$")
_PARAM_MODIFIERS = re.compile(r"\b(?:final|const|ref|out|in|params|readonly|this)\s+")
_PRINT_KWARG = re.compile(r"^(?:sep|end|file|flush)\s*=(?!=)")
_STREAM_END = {"endl", "std::endl", '"\\n"', "'\\n'"}
_STATIC = re.compile(r"\bstatic\b")


def match_construct(patterns: tuple[ConstructPattern, ...], text: str) -> Optional[tuple[ConstructPattern, dict]]:
    """First pattern in priority order that matches ``text``."""
    for p in patterns:
        groups = p.match(text)
        if groups is not None:
            return p, groups
    return None


def _shared_lines(lines: list[LogicalLine]) -> set[int]:
    """Physical lines holding more than one statement."""
    counts = Counter(n for ln in lines if not ln.is_comment for n in range(ln.start_line, ln.end_line + 1))
    return {n for n, count in counts.items() if count > 1}


def _verbatim(physical: list[str], line: LogicalLine, shared: set[int]) -> str:
    """``line`` as written in the source, or its logical text when it shares a physical line."""
    if shared.intersection(range(line.start_line, line.end_line + 1)):
        return line.text.strip()
    return textwrap.dedent("\n".join(physical[line.start_line - 1:line.end_line])).strip()


def extract(source_text: str, source_lang: str) -> IRNode:
    """Build the IR ``Program`` for ``source_text``.

    Unsupported constructs become ``Unknown`` nodes; a failure of the whole
    pass yields a program holding the entire input as one ``Unknown``.
    """
    rules = get_rules(source_lang)
    text = source_text if isinstance(source_text, str) else ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    last_line = text.count("\n") + 1
    try:
        if rules.uses_braces:
            children = _BraceExtractor(rules).run(text)
        else:
            children = _IndentExtractor(rules).run(text)
    except Exception as exc:
        log.warning("extract.fallback", language=rules.name, error=repr(exc))
        children = [unknown(text, 1, last_line)] if text.strip() else []
    node = program(children, last_line)
    node.attributes["language"] = rules.name
    return node


# ---------- attribute normalisation ----------

def _params_python(raw: str, in_class: bool) -> tuple[list[str], list[str], list[str]]:
    names, types, defaults = [], [], []
    for i, part in enumerate(split_top_level(raw)):
        if part in ("*", "/"):
            continue
        default = ""
        pieces = split_top_level(part, "=")
        if len(pieces) > 1:
            part, default = pieces[0], "=".join(pieces[1:]).strip()
        name, _, annotation = part.partition(":")
        name = name.strip().lstrip("*")
        if i == 0 and in_class and name in ("self", "cls"):
            continue
        names.append(name)
        types.append(canonical_type(annotation.strip()) if annotation.strip() else "")
        defaults.append(default)
    return names, types, defaults


def _params_c_family(raw: str) -> tuple[list[str], list[str], list[str]]:
    names, types, defaults = [], [], []
    for part in split_top_level(raw):
        if part in ("void", "..."):
            continue
        default = ""
        pieces = split_top_level(part, "=")
        if len(pieces) > 1:
            part, default = pieces[0], "=".join(pieces[1:]).strip()
        part = _ANNOTATION.sub("", part.strip())
        m = _PARAM_NAME.search(part)
        if not m:
            names.append(part.strip())
            types.append("")
            defaults.append(default)
            continue
        spelled = _PARAM_MODIFIERS.sub("", part[:m.start()]).strip().replace("...", "")
        names.append(m.group(1))
        types.append(_spelled_type(spelled))
        defaults.append(default)
    return names, types, defaults


def _params_js(raw: str) -> tuple[list[str], list[str], list[str]]:
    names, defaults = [], []
    for part in split_top_level(raw):
        pieces = split_top_level(part, "=")
        names.append(pieces[0].strip().lstrip("."))
        defaults.append("=".join(pieces[1:]).strip() if len(pieces) > 1 else "")
    return names, [""] * len(names), defaults


def _params_go(raw: str) -> tuple[list[str], list[str], list[str]]:
    parts = split_top_level(raw)
    names: list[str] = []
    types: list[str] = []
    pending = ""
    for part in reversed(parts):
        bits = part.split(None, 1)
        if len(bits) == 2:
            pending = canonical_type(bits[1].replace("...", ""))
        names.append(bits[0])
        types.append(pending)
    names.reverse()
    types.reverse()
    return names, types, [""] * len(names)


def _spelled_type(spelled: str) -> str:
    if not spelled or spelled in ("var", "auto", "let", "const", "dynamic"):
        return ""
    if spelled.endswith("*") and canonical_type(spelled) == "any":
        return "any"
    return canonical_type(spelled)


def _go_return(spelled: str) -> str:
    s = spelled.strip()
    if not s:
        return "void"
    if s.startswith("("):
        inner = split_top_level(s[1:-1])
        return canonical_type(inner[0]) if len(inner) == 1 else "any"
    return canonical_type(s)


def _set_params(node: IRNode, names: list[str], types: list[str], defaults: list[str]) -> None:
    node.attributes["params"] = ", ".join(names)
    if any(types):
        node.attributes["param_types"] = ", ".join(t or "any" for t in types)
    if any(defaults):
        node.attributes["param_defaults"] = json.dumps(defaults)


def _comment_text(raw: str, rules: LanguageRules) -> tuple[str, bool]:
    s = raw.strip()
    if rules.block_comment and s.startswith(rules.block_comment[0]):
        doc = s.startswith(rules.block_comment[0] + "*")
        body = s[len(rules.block_comment[0]):]
        if body.endswith(rules.block_comment[1]):
            body = body[:-len(rules.block_comment[1])]
        lines = [ln.strip().lstrip("*").strip() for ln in body.strip("*").split("\n")]
        while lines and not lines[0]:
            lines.pop(0)
        while lines and not lines[-1]:
            lines.pop()
        return "\n".join(lines), doc
    if rules.line_comment and s.startswith(rules.line_comment):
        s = s[len(rules.line_comment):]
        if rules.line_comment == "//" and s.startswith("/"):
            s = s[1:]
    return s.strip(), False


def _range_bounds(node: IRNode) -> None:
    if node.attributes.pop("cmp", "<") == "<=":
        node.attributes["end"] = f"{node.attributes['end']} + 1"


def _print_args(groups: dict, shape: str) -> str:
    if shape == "stream":
        parts = [p for p in split_top_level(groups.get("stream", "").rstrip(";"), "<<") if p not in _STREAM_END]
        return ", ".join(parts)
    return ", ".join(p for p in split_top_level(groups.get("args", "")) if not _PRINT_KWARG.match(p))


def build_node(p: ConstructPattern, groups: dict, rules: LanguageRules, line: LogicalLine,
               owner: Optional[IRNode] = None) -> IRNode:
    """Typed IR node for a matched construct with normalised attributes."""
    attrs = {k: v for k, v in groups.items() if v != "" or k in ("value",)}
    node = IRNode(p.kind, attrs, [], Span(line.start_line, line.end_line))
    kind, shape = p.kind, p.shape

    if kind is NodeKind.FUNCTION_DECL:
        _function(node, groups, rules, shape, owner, line.text)
    elif kind is NodeKind.CLASS_DECL:
        if attrs.get("base") in ("object", "Object"):
            attrs.pop("base")
    elif kind is NodeKind.IF:
        attrs["variant"] = shape or "if"
        if "condition" in attrs:
            attrs["condition"] = strip_outer_parens(attrs["condition"]) if not rules.uses_braces else attrs["condition"]
    elif kind is NodeKind.FOR:
        attrs["style"] = shape
        attrs.pop("type", None)
        attrs.pop("index", None)
        if "range_args" in attrs:
            args = split_top_level(attrs.pop("range_args"))
            if len(args) == 1:
                attrs["start"], attrs["end"] = "0", args[0]
            elif len(args) >= 2:
                attrs["start"], attrs["end"] = args[0], args[1]
                if len(args) == 3 and args[2] != "1":
                    attrs["step"] = args[2]
        elif shape == "range":
            _range_bounds(node)
    elif kind is NodeKind.WHILE:
        if shape == "forever":
            attrs["condition"] = "true"
    elif kind is NodeKind.PRINT:
        node.attributes = {"args": _print_args(groups, shape)}
    elif kind is NodeKind.RETURN:
        attrs.pop("bare", None)
        attrs.setdefault("value", "")
    elif kind is NodeKind.VAR_DECL:
        attrs.pop("keyword", None)
        ptr = attrs.pop("ptr", "").strip()
        if "brace_init" in attrs:
            attrs["value"] = attrs.pop("brace_init")
        attrs["type"] = "any" if "*" in ptr else _spelled_type(attrs.get("type", ""))
        attrs.setdefault("value", "")
        if shape:
            attrs["form"] = shape
    elif kind is NodeKind.ASSIGNMENT:
        if shape == "increment":
            attrs["op"] = "+=" if attrs["op"] == "++" else "-="
            attrs["value"] = "1"
    return node


def _function(node: IRNode, groups: dict, rules: LanguageRules, shape: str, owner: Optional[IRNode],
              header: str = "") -> None:
    attrs = node.attributes
    for key in ("params", "fparams", "param", "receiver_type", "return_type"):
        attrs.pop(key, None)
    raw_params = groups.get("params") or groups.get("fparams") or groups.get("param") or ""
    name = groups.get("name", "")
    in_class = owner is not None and owner.kind is NodeKind.CLASS_DECL

    if rules.name == "Python":
        names, types, defaults = _params_python(raw_params, in_class)
    elif rules.name == "Go":
        names, types, defaults = _params_go(raw_params)
    elif rules.name == "JavaScript":
        names, types, defaults = _params_js(raw_params)
    else:
        names, types, defaults = _params_c_family(raw_params)
    _set_params(node, names, types, defaults)

    if rules.name == "Go":
        attrs["return_type"] = _go_return(groups.get("return_type", ""))
        if groups.get("receiver"):
            attrs["receiver_type"] = groups["receiver_type"]
    elif groups.get("return_type"):
        attrs["return_type"] = canonical_type(groups["return_type"])

    if "::" in name:
        scope, _, name = name.rpartition("::")
        attrs["name"] = name
        if scope.split("::")[-1] == name:
            attrs["role"] = "constructor"
    if in_class:
        cls = owner.attr("name")
        if name in ("__init__", "constructor", cls) or shape == "ctor":
            attrs["role"] = "constructor"
        else:
            attrs["role"] = "method"
            if rules.uses_braces and _STATIC.search(header.split("(", 1)[0]):
                attrs["static"] = "1"
    elif shape == "ctor" and "role" not in attrs and name[:1].isupper() and rules.name != "C++":
        attrs["role"] = "constructor"


# ---------- brace languages ----------

@dataclass
class _Frame:
    node: Optional[IRNode]
    children: list[IRNode]


class _BraceExtractor:
    def __init__(self, rules: LanguageRules):
        self.rules = rules

    def verbatim(self, line: LogicalLine) -> str:
        return _verbatim(self.physical, line, self.shared)

    def run(self, text: str) -> list[IRNode]:
        result = scan(text, self.rules)
        root = _Frame(None, [])
        stack = [root]
        lines = split_statements(text, self.rules, result)
        self.physical, self.shared = text.split("\n"), _shared_lines(lines)
        for line in lines:
            frame = stack[-1]
            try:
                self._line(line, stack)
            except Exception as exc:
                log.debug("extract.line_failed", line=line.start_line, error=repr(exc))
                del stack[stack.index(frame) + 1:]
                frame.children.append(unknown(self.verbatim(line), line.start_line, line.end_line))
        last = text.count("\n") + 1
        while len(stack) > 1:
            self._close(stack, last)
        if self.rules.name == "Go":
            _attach_receivers(root.children)
        return root.children

    def _close(self, stack: list[_Frame], end_line: int) -> None:
        frame = stack.pop()
        node = frame.node
        node.span = Span(node.span.start_line, max(end_line, node.span.start_line))

    def _line(self, line: LogicalLine, stack: list[_Frame]) -> None:
        rules = self.rules
        frame = stack[-1]
        if line.is_comment:
            text, doc = _comment_text(line.text, rules)
            prev = frame.children[-1] if frame.children else None
            if line.trailing and prev is not None and prev.span.end_line == line.start_line \
                    and prev.kind is not NodeKind.COMMENT and "\n" not in text:
                prev.attributes["comment"] = text
                return
            attrs = {"text": text}
            if doc:
                attrs["doc"] = "1"
            frame.children.append(IRNode(NodeKind.COMMENT, attrs, [], Span(line.start_line, line.end_line)))
            return

        stripped = line.text.strip()
        if stripped in ("}", "};"):
            if len(stack) > 1:
                self._close(stack, line.end_line)
            else:
                frame.children.append(unknown(self.verbatim(line), line.start_line, line.end_line))
            return

        if stripped.endswith("{"):
            header = _ANNOTATION.sub("", stripped[:-1].strip())
            found = match_construct(rules.headers, header)
            if found:
                node = build_node(found[0], found[1], rules, line, frame.node)
            else:
                node = IRNode(NodeKind.UNKNOWN, {"raw": self.verbatim(line), "block": "1"}, [],
                              Span(line.start_line, line.end_line))
            frame.children.append(node)
            stack.append(_Frame(node, node.children))
            return

        if _ACCESS_LABEL.match(stripped):
            return
        statement = stripped[:-1].rstrip() if stripped.endswith(";") else stripped
        if not statement:
            return
        found = match_construct(rules.statements, statement)
        if found is None:
            frame.children.append(unknown(self.verbatim(line), line.start_line, line.end_line))
            return
        node = build_node(found[0], found[1], rules, line, frame.node)
        owner = frame.node
        if owner is not None and owner.kind is NodeKind.CLASS_DECL and node.kind is NodeKind.ASSIGNMENT \
                and node.attr("op") == "=" and _IDENT.match(node.attr("target")):
            node = IRNode(NodeKind.VAR_DECL, {"name": node.attr("target"), "value": node.attr("value"), "type": ""},
                          [], node.span)
        frame.children.append(node)


def _attach_receivers(top: list[IRNode]) -> None:
    """Move Go methods into the struct their receiver names."""
    structs = {n.attr("name"): n for n in top if n.kind is NodeKind.CLASS_DECL}
    kept: list[IRNode] = []
    for node in top:
        target = structs.get(node.attr("receiver_type")) if node.kind is NodeKind.FUNCTION_DECL else None
        if target is None:
            kept.append(node)
            continue
        node.attributes["role"] = "method"
        target.children.append(node)
    top[:] = kept


# ---------- indentation languages ----------

@dataclass
class _Block:
    indent: int
    node: Optional[IRNode]
    children: list[IRNode]
    scope: set[str]


class _IndentExtractor:
    def __init__(self, rules: LanguageRules):
        self.rules = rules

    def verbatim(self, line: LogicalLine) -> str:
        return _verbatim(self.physical, line, self.shared)

    def run(self, text: str) -> list[IRNode]:
        result = scan(text, self.rules)
        root = _Block(-1, None, [], set())
        stack = [root]
        lines = python_logical_lines(text, self.rules, result)
        self.physical, self.shared = text.split("\n"), _shared_lines(lines)
        for line in lines:
            while len(stack) > 1 and line.indent <= stack[-1].indent:
                self._close(stack)
            block = stack[-1]
            try:
                self._line(line, stack)
            except Exception as exc:
                log.debug("extract.line_failed", line=line.start_line, error=repr(exc))
                del stack[stack.index(block) + 1:]
                block.children.append(unknown(self.verbatim(line), line.start_line, line.end_line))
        while len(stack) > 1:
            self._close(stack)
        return root.children

    def _close(self, stack: list[_Block]) -> None:
        block = stack.pop()
        node = block.node
        end = node.children[-1].span.end_line if node.children else node.span.end_line
        node.span = Span(node.span.start_line, end)

    def _line(self, line: LogicalLine, stack: list[_Block]) -> None:
        rules = self.rules
        block = stack[-1]
        span = Span(line.start_line, line.end_line)
        if line.is_comment:
            text, _ = _comment_text(line.text, rules)
            block.children.append(IRNode(NodeKind.COMMENT, {"text": text}, [], span))
            return

        doc = _DOCSTRING.match(line.text.strip())
        if doc:
            body = "\n".join(ln.strip() for ln in doc.group("body").strip().split("\n"))
            block.children.append(IRNode(NodeKind.COMMENT, {"text": body, "doc": "1"}, [], span))
            return

        code, comment = split_trailing_comment(line.text, rules)
        code = code.strip()
        if code.endswith(":"):
            header = code[:-1].rstrip()
            found = match_construct(rules.headers, header)
            if found:
                node = build_node(found[0], found[1], rules, line, block.node)
                scope = self._scope_for(node, block)
            else:
                node = IRNode(NodeKind.UNKNOWN, {"raw": self.verbatim(line), "block": "1"}, [], span)
                scope = block.scope
            if comment:
                node.attributes["comment"] = comment
            block.children.append(node)
            stack.append(_Block(line.indent, node, node.children, scope))
            return

        found = match_construct(rules.statements, code)
        if found is None:
            block.children.append(unknown(self.verbatim(line), line.start_line, line.end_line))
            return
        node = build_node(found[0], found[1], rules, line, block.node)
        if found[0].shape == "plain" and _IDENT.match(node.attr("target")):
            name = node.attr("target")
            if name not in block.scope:
                block.scope.add(name)
                node = IRNode(NodeKind.VAR_DECL, {"name": name, "value": node.attr("value"), "type": ""}, [], span)
        elif node.kind is NodeKind.VAR_DECL:
            block.scope.add(node.attr("name"))
        if comment:
            node.attributes["comment"] = comment
        block.children.append(node)

    @staticmethod
    def _scope_for(node: IRNode, parent: _Block) -> set[str]:
        if node.kind is NodeKind.FUNCTION_DECL:
            return {p.strip() for p in node.attr("params").split(",") if p.strip()}
        if node.kind is NodeKind.CLASS_DECL:
            return set()
        if node.kind is NodeKind.FOR:
            parent.scope.update(v.strip() for v in node.attr("var").split(","))
        return parent.scope
