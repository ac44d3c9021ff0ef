from __future__ import annotations
import re

from polycode.languages.common import IDENT, NOT_EQ, TARGET, keyword_regex
from polycode.languages.rules import LanguageRules, RenderTemplates, pattern
from polycode.parsing.ir import NodeKind as K

HEADERS = (
    pattern(K.FUNCTION_DECL, r"^(?:async\s+)?def\s+(?P<name>" + IDENT + r")\s*\((?P<params>.*)\)\s*(?:->\s*(?P<return_type>.+))?$"),
    pattern(K.CLASS_DECL, r"^class\s+(?P<name>" + IDENT + r")\s*(?:\((?P<base>[^)]*)\))?$"),
    pattern(K.IF, r"^elif\s+(?P<condition>.+)$", "elif"),
    pattern(K.IF, r"^if\s+(?P<condition>.+)$", "if"),
    pattern(K.IF, r"^else$", "else"),
    pattern(K.FOR, r"^for\s+(?P<var>" + IDENT + r")\s+in\s+range\s*\((?P<range_args>.*)\)$", "range"),
    pattern(K.FOR, r"^for\s+(?P<var>.+?)\s+in\s+(?P<iterable>.+)$", "each"),
    pattern(K.WHILE, r"^while\s+(?P<condition>.+)$"),
)

STATEMENTS = (
    pattern(K.PRINT, r"^print\s*\((?P<args>.*)\)$"),
    pattern(K.RETURN, r"^return(?:\s+(?P<value>.+)|\s*(?P<bare>))$"),
    pattern(K.VAR_DECL, r"^(?P<name>" + IDENT + r")\s*:\s*(?P<type>[\w.\[\], ]+?)\s*=" + NOT_EQ + r"\s*(?P<value>.+)$", "annotated"),
    pattern(K.ASSIGNMENT, r"^" + TARGET + r"\s*(?P<op>\+=|-=|\*=|/=|//=|%=|\*\*=|&=|\|=|\^=|<<=|>>=)\s*(?P<value>.+)$"),
    pattern(K.ASSIGNMENT, r"^" + TARGET + r"\s*(?P<op>=)" + NOT_EQ + r"\s*(?P<value>.+)$", "plain"),
    pattern(K.EXPRESSION, r"^(?P<expr>(?:break|continue|pass))$"),
    pattern(K.EXPRESSION, r"^(?!(?:if|for|while|return|elif|with|assert|del|raise)\b)(?P<expr>(?:await\s+)?[A-Za-z_][\w.]*\s*\(.*\))$"),
)

RULES = LanguageRules(
    name="Python",
    aliases=("python", "py", "python3"),
    block_style="indent",
    indent_unit="    ",
    line_comment="#",
    block_comment=None,
    quotes=('"', "'"),
    multiline_quotes=('"""', "'''"),
    raw_quotes=(),
    terminator="",
    terminator_required=False,
    headers=HEADERS,
    statements=STATEMENTS,
    function_re=re.compile(r"^[ \t]*(?:async[ \t]+)?def[ \t]+\w+[ \t]*\(", re.MULTILINE),
    class_re=re.compile(r"^[ \t]*class[ \t]+\w+", re.MULTILINE),
    branch_re=keyword_regex(("if", "elif", "for", "while", "and", "or", "except", "case")),
    literals={"true": "True", "false": "False", "null": "None"},
    logical={"and": "and", "or": "or", "not": "not"},
    self_ref="self",
    member=".",
    types={"int": "int", "float": "float", "string": "str", "bool": "bool", "void": "None", "any": ""},
    length="len({0})",
    char_literals=False,
    typed=False,
    templates=RenderTemplates(
        function="def {name}({params}):",
        method="def {name}({params}):",
        constructor="def __init__({params}):",
        param="{name}",
        param_default="{param}={default}",
        klass="class {name}:",
        klass_base="class {name}({base}):",
        class_closer="",
        if_="if {condition}:",
        elif_="elif {condition}:",
        else_="else:",
        for_range="for {var} in range({range}):",
        for_each="for {var} in {iterable}:",
        while_="while {condition}:",
        print_="print({args})",
        print_joiner=", ",
        return_value="return {value}",
        return_bare="return",
        var_decl="{name} = {value}",
        var_decl_typed="{name} = None",
        field_decl="{name}{init}",
        field_init=" = {value}",
        assignment="{target} {op} {value}",
        expression="{expr}",
        empty_body="pass",
        static_method="@staticmethod\ndef {name}({params}):",
    ),
)
