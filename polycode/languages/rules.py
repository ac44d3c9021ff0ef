from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from polycode.parsing.ir import NodeKind

BlockStyle = str  # "indent" | "brace"


@dataclass(frozen=True)
class ConstructPattern:
    kind: NodeKind
    regex: re.Pattern
    captures: Tuple[str, ...]
    shape: str = ""

    def match(self, text: str) -> Optional[dict[str, str]]:
        m = self.regex.match(text)
        if not m:
            return None
        return {k: (v or "").strip() for k, v in m.groupdict().items() if v is not None}


def pattern(kind: NodeKind, regex: str, shape: str = "") -> ConstructPattern:
    compiled = re.compile(regex)
    return ConstructPattern(kind=kind, regex=compiled, captures=tuple(compiled.groupindex), shape=shape)


@dataclass(frozen=True)
class RenderTemplates:
    function: str
    method: str
    constructor: str
    param: str
    param_default: str
    klass: str
    klass_base: str
    class_closer: str
    if_: str
    elif_: str
    else_: str
    for_range: str
    for_each: str
    while_: str
    print_: str
    print_joiner: str
    return_value: str
    return_bare: str
    var_decl: str
    var_decl_typed: str
    field_decl: str
    field_init: str
    assignment: str
    expression: str
    class_preamble: Tuple[str, ...] = ()
    print_preamble: Tuple[str, ...] = ()
    preamble: Tuple[str, ...] = ()
    empty_body: str = ""
    ctor_prologue: Tuple[str, ...] = ()
    ctor_epilogue: Tuple[str, ...] = ()
    methods_outside: bool = False
    static_method: str = ""
    # concrete spelling for fields whose type is unknown, with what it needs in the preamble
    field_any: str = ""
    field_preamble: Tuple[str, ...] = ()
    math_preamble: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LanguageRules:
    name: str
    aliases: Tuple[str, ...]
    block_style: BlockStyle
    indent_unit: str
    line_comment: str
    block_comment: Optional[Tuple[str, str]]
    quotes: Tuple[str, ...]
    multiline_quotes: Tuple[str, ...]
    raw_quotes: Tuple[str, ...]
    terminator: str
    terminator_required: bool
    headers: Tuple[ConstructPattern, ...]
    statements: Tuple[ConstructPattern, ...]
    function_re: re.Pattern
    class_re: re.Pattern
    branch_re: re.Pattern
    literals: Mapping[str, str]
    logical: Mapping[str, str]
    self_ref: str
    member: str
    types: Mapping[str, str]
    length: str
    char_literals: bool
    typed: bool
    templates: RenderTemplates
    # "{0}" raised to "{1}"; empty when the language has a native "**"
    power: str = ""

    @property
    def uses_braces(self) -> bool:
        return self.block_style == "brace"

    def type_name(self, canonical: str) -> str:
        return self.types.get(canonical or "any", self.types.get("any", ""))


# Canonical spellings of the scalar types the renderers understand.
CANONICAL_TYPES: Mapping[str, str] = {
    "int": "int", "long": "int", "short": "int", "byte": "int", "Integer": "int", "Long": "int",
    "int32": "int", "int64": "int", "uint": "int", "size_t": "int", "unsigned": "int",
    "float": "float", "double": "float", "Double": "float", "Float": "float",
    "float32": "float", "float64": "float", "decimal": "float",
    "str": "string", "String": "string", "string": "string", "std::string": "string",
    "char*": "string", "const char*": "string",
    "bool": "bool", "boolean": "bool", "Boolean": "bool",
    "void": "void", "None": "void",
}


def canonical_type(spelled: str | None) -> str:
    if not spelled:
        return ""
    s = spelled.strip()
    if s.startswith("const "):
        s = s[len("const "):].strip()
    s = s.rstrip("&").strip()
    return CANONICAL_TYPES.get(s, "any")
