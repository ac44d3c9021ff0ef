from __future__ import annotations
import re

from polycode.languages.common import (
    CURLY_LITERALS, CURLY_LOGICAL, IDENT, counting_for, curly_statements, curly_templates, keyword_regex,
    paren_conditionals,
)
from polycode.languages.rules import LanguageRules, RenderTemplates, pattern
from polycode.parsing.ir import NodeKind as K

MODIFIERS = r"(?:(?:public|private|protected|static|final|abstract|synchronized|native|default|transient|volatile)\s+)*"
TYPE = r"[A-Za-z_][\w.]*(?:<[^()=;]*>)?(?:\[\])*"

HEADERS = (
    pattern(
        K.CLASS_DECL,
        r"^" + MODIFIERS + r"(?:class|interface|enum|record)\s+(?P<name>" + IDENT + r")(?:<[^>]*>)?"
        r"(?:\s+extends\s+(?P<base>[\w.]+)(?:<[^>]*>)?)?(?:\s+implements\s+[\w.,<>\s]+)?$",
    ),
    *paren_conditionals(),
    counting_for(r"int|long|short|byte|var"),
    pattern(K.FOR, r"^for\s*\(\s*(?:final\s+)?(?P<type>" + TYPE + r")\s+(?P<var>" + IDENT + r")\s*:\s*(?P<iterable>.+)\)$", "each"),
    pattern(
        K.FUNCTION_DECL,
        r"^(?:(?:public|private|protected)\s+)?(?P<name>[A-Z]\w*)\s*\((?P<params>[^)]*)\)(?:\s*throws\s+[\w.,\s]+)?$",
        "ctor",
    ),
    pattern(
        K.FUNCTION_DECL,
        r"^" + MODIFIERS + r"(?:<[^>]+>\s+)?(?!(?:return|new|else|throw)\b)(?P<return_type>" + TYPE + r")\s+"
        r"(?P<name>" + IDENT + r")\s*\((?P<params>[^)]*)\)(?:\s*throws\s+[\w.,\s]+)?$",
    ),
)

STATEMENTS = curly_statements(
    r"^System\.out\.(?:println|print|printf)\s*\((?P<args>.*)\)$",
    pattern(
        K.VAR_DECL,
        r"^" + MODIFIERS + r"(?!(?:return|throw|new|else|case|goto|yield|package|import|assert)\b)"
        r"(?P<type>" + TYPE + r")\s+(?P<name>" + IDENT + r")(?:\s*=\s*(?P<value>.+))?$",
    ),
)

RULES = LanguageRules(
    name="Java",
    aliases=("java",),
    block_style="brace",
    indent_unit="    ",
    line_comment="//",
    block_comment=("/*", "*/"),
    quotes=('"', "'"),
    multiline_quotes=('"""',),
    raw_quotes=(),
    terminator=";",
    terminator_required=True,
    headers=HEADERS,
    statements=STATEMENTS,
    function_re=re.compile(
        r"^[ \t]*(?:(?:public|private|protected|static|final|abstract|synchronized|native|default)[ \t]+)*"
        r"(?:<[^>\n]+>[ \t]+)?(?!(?:return|new|else|throw|if|for|while|switch|catch)\b)"
        r"[\w.<>\[\],?]+[ \t]+\w+[ \t]*\([^;{}\n]*\)[ \t]*(?:throws[ \t]+[\w., \t]+)?\{?[ \t]*$"
        r"|^[ \t]*(?:public|private|protected)[ \t]+[A-Z]\w*[ \t]*\([^;{}\n]*\)[ \t]*\{?[ \t]*$",
        re.MULTILINE,
    ),
    class_re=re.compile(r"\b(?:class|interface|enum|record)[ \t]+\w+"),
    branch_re=keyword_regex(("if", "for", "while", "case", "catch"), ("&&", "||", "?")),
    literals=CURLY_LITERALS,
    logical=CURLY_LOGICAL,
    self_ref="this",
    member=".",
    types={"int": "int", "float": "double", "string": "String", "bool": "boolean", "void": "void", "any": "Object"},
    length="{0}.length",
    char_literals=True,
    typed=True,
    power="Math.pow({0}, {1})",
    templates=RenderTemplates(**curly_templates(
        function="public static {ret} {name}({params}) {{",
        method="public {ret} {name}({params}) {{",
        constructor="public {cls}({params}) {{",
        static_method="public static {ret} {name}({params}) {{",
        param="{type} {name}",
        param_default="{param}",
        klass="class {name} {{",
        klass_base="class {name} extends {base} {{",
        for_range="for (int {var} = {start}; {var} < {end}; {var}++) {{",
        for_each="for (var {var} : {iterable}) {{",
        print_="System.out.println({args});",
        print_joiner=' + " " + ',
        var_decl="var {name} = {value};",
        var_decl_typed="{type} {name};",
        field_decl="private {type} {name}{init};",
    )),
)
