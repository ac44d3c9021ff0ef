from __future__ import annotations
import re

from polycode.languages.common import CURLY_LOGICAL, IDENT, TARGET, NOT_EQ, keyword_regex
from polycode.languages.rules import LanguageRules, RenderTemplates, pattern
from polycode.parsing.ir import NodeKind as K

GO_TYPE = r"[\w.\[\]*]+(?:\{\})?"

HEADERS = (
    pattern(
        K.FUNCTION_DECL,
        r"^func\s*\(\s*(?P<receiver>" + IDENT + r")\s+\*?(?P<receiver_type>" + IDENT + r")\s*\)\s*"
        r"(?P<name>" + IDENT + r")\s*\((?P<params>[^)]*)\)\s*(?P<return_type>.*)$",
        "method",
    ),
    pattern(K.FUNCTION_DECL, r"^func\s+(?P<name>" + IDENT + r")\s*\((?P<params>[^)]*)\)\s*(?P<return_type>.*)$"),
    pattern(K.CLASS_DECL, r"^type\s+(?P<name>" + IDENT + r")\s+struct$"),
    pattern(K.IF, r"^else\s+if\s+(?P<condition>.+)$", "elif"),
    pattern(K.IF, r"^if\s+(?P<condition>.+)$", "if"),
    pattern(K.IF, r"^else$", "else"),
    pattern(
        K.FOR,
        r"^for\s+(?P<var>" + IDENT + r")\s*:=\s*(?P<start>[^;]+);\s*(?P=var)\s*(?P<cmp><=|<)\s*(?P<end>[^;]+);"
        r"\s*(?:(?P=var)\+\+|(?P=var)\s*\+=\s*1)$",
        "range",
    ),
    pattern(
        K.FOR,
        r"^for\s+(?:(?P<index>" + IDENT + r")\s*,\s*)?(?P<var>" + IDENT + r")\s*:=\s*range\s+(?P<iterable>.+)$",
        "each",
    ),
    pattern(K.WHILE, r"^for\s+(?P<condition>[^;]+)$"),
    pattern(K.WHILE, r"^for$", "forever"),
)

STATEMENTS = (
    pattern(K.PRINT, r"^fmt\.(?:Println|Print|Printf)\s*\((?P<args>.*)\)$"),
    pattern(K.RETURN, r"^return(?:\s+(?P<value>.+)|\s*(?P<bare>))$"),
    pattern(K.VAR_DECL, r"^(?P<name>" + IDENT + r")\s*:=\s*(?P<value>.+)$"),
    pattern(K.VAR_DECL, r"^var\s+(?P<name>" + IDENT + r")(?:\s+(?P<type>" + GO_TYPE + r"))?(?:\s*=\s*(?P<value>.+))?$"),
    pattern(K.ASSIGNMENT, r"^" + TARGET + r"\s*(?P<op>\+\+|--)$", "increment"),
    pattern(K.ASSIGNMENT, r"^" + TARGET + r"\s*(?P<op>[+\-*/%]?=|<<=|>>=|&=|\|=|\^=)" + NOT_EQ + r"\s*(?P<value>.+)$"),
    pattern(K.EXPRESSION, r"^(?P<expr>(?:break|continue))$"),
    pattern(K.EXPRESSION, r"^(?!(?:if|for|switch|return|else|go|defer|select)\b)(?P<expr>[A-Za-z_][\w.]*\s*\(.*\))$"),
    pattern(K.VAR_DECL, r"^(?P<name>" + IDENT + r")\s+(?P<type>" + GO_TYPE + r")$", "field"),
)

RULES = LanguageRules(
    name="Go",
    aliases=("go", "golang"),
    block_style="brace",
    indent_unit="\t",
    line_comment="//",
    block_comment=("/*", "*/"),
    quotes=('"', "'"),
    multiline_quotes=("`",),
    raw_quotes=("`",),
    terminator="",
    terminator_required=False,
    headers=HEADERS,
    statements=STATEMENTS,
    function_re=re.compile(r"^[ \t]*func\b", re.MULTILINE),
    class_re=re.compile(r"\btype[ \t]+\w+[ \t]+struct\b"),
    branch_re=keyword_regex(("if", "for", "case", "select"), ("&&", "||")),
    literals={"true": "true", "false": "false", "null": "nil"},
    logical=CURLY_LOGICAL,
    self_ref="",
    member=".",
    types={"int": "int", "float": "float64", "string": "string", "bool": "bool", "void": "", "any": "any"},
    length="len({0})",
    char_literals=True,
    typed=True,
    power="math.Pow({0}, {1})",
    templates=RenderTemplates(
        function="func {name}({params}){ret} {{",
        method="func ({recv} *{cls}) {name}({params}){ret} {{",
        constructor="func New{cls}({params}) *{cls} {{",
        param="{name} {type}",
        param_default="{param}",
        klass="type {name} struct {{",
        klass_base="type {name} struct {{",
        class_closer="}",
        if_="if {condition} {{",
        elif_="else if {condition} {{",
        else_="else {{",
        for_range="for {var} := {start}; {var} < {end}; {var}++ {{",
        for_each="for _, {var} := range {iterable} {{",
        while_="for {condition} {{",
        print_="fmt.Println({args})",
        print_joiner=", ",
        return_value="return {value}",
        return_bare="return",
        var_decl="{name} := {value}",
        var_decl_typed="var {name} {type}",
        field_decl="{name} {type}",
        field_init="",
        assignment="{target} {op} {value}",
        expression="{expr}",
        preamble=("package main",),
        print_preamble=('import "fmt"',),
        math_preamble=('import "math"',),
        ctor_prologue=("{recv} := &{cls}{{}}",),
        ctor_epilogue=("return {recv}",),
        methods_outside=True,
    ),
)
