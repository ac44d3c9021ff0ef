from __future__ import annotations
import re

from polycode.languages.common import (
    CURLY_LITERALS, CURLY_LOGICAL, IDENT, counting_for, curly_statements, curly_templates, keyword_regex,
    paren_conditionals,
)
from polycode.languages.rules import LanguageRules, RenderTemplates, pattern
from polycode.parsing.ir import NodeKind as K

MODIFIERS = (
    r"(?:(?:public|private|protected|internal|static|readonly|const|virtual|override|abstract|"
    r"sealed|async|partial|new|extern|unsafe|volatile)\s+)*"
)
TYPE = r"[A-Za-z_][\w.]*(?:<[^()=;]*>)?(?:\[,*\])*\??"

HEADERS = (
    pattern(
        K.CLASS_DECL,
        r"^" + MODIFIERS + r"(?:class|struct|interface|record)\s+(?P<name>" + IDENT + r")(?:<[^>]*>)?"
        r"(?:\s*:\s*(?P<base>[\w.]+)(?:<[^>]*>)?(?:\s*,\s*[\w.<>]+)*)?$",
    ),
    *paren_conditionals(),
    counting_for(r"int|long|short|byte|var"),
    pattern(
        K.FOR,
        r"^foreach\s*\(\s*(?P<type>" + TYPE + r")\s+(?P<var>" + IDENT + r")\s+in\s+(?P<iterable>.+)\)$",
        "each",
    ),
    pattern(
        K.FUNCTION_DECL,
        r"^(?:(?:public|private|protected|internal|static)\s+)*(?P<name>[A-Z]\w*)\s*\((?P<params>[^)]*)\)"
        r"(?:\s*:\s*(?:base|this)\s*\(.*\))?$",
        "ctor",
    ),
    pattern(
        K.FUNCTION_DECL,
        r"^" + MODIFIERS + r"(?!(?:return|new|else|throw|await)\b)(?P<return_type>" + TYPE + r")\s+"
        r"(?P<name>" + IDENT + r")(?:<[^>]*>)?\s*\((?P<params>[^)]*)\)$",
    ),
)

STATEMENTS = curly_statements(
    r"^Console\.(?:WriteLine|Write)\s*\((?P<args>.*)\)$",
    pattern(
        K.VAR_DECL,
        r"^" + MODIFIERS + r"(?!(?:return|throw|new|else|case|goto|yield|using|namespace|await)\b)"
        r"(?P<type>" + TYPE + r")\s+(?P<name>" + IDENT + r")(?:\s*=\s*(?P<value>.+))?$",
    ),
)

RULES = LanguageRules(
    name="C#",
    aliases=("c#", "csharp", "cs", "c-sharp", "dotnet"),
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
        r"^[ \t]*(?:(?:public|private|protected|internal|static|virtual|override|abstract|sealed|async|extern)[ \t]+)*"
        r"(?!(?:return|new|else|throw|if|for|foreach|while|switch|catch|using|await)\b)"
        r"[\w.<>\[\],?]+[ \t]+\w+(?:<[^>\n]*>)?[ \t]*\([^;{}\n]*\)[ \t]*\{?[ \t]*$"
        r"|^[ \t]*(?:public|private|protected|internal)[ \t]+[A-Z]\w*[ \t]*\([^;{}\n]*\)[ \t]*\{?[ \t]*$",
        re.MULTILINE,
    ),
    class_re=re.compile(r"\b(?:class|struct|interface|record)[ \t]+\w+"),
    branch_re=keyword_regex(("if", "for", "foreach", "while", "case", "catch"), ("&&", "||", "??")),
    literals=CURLY_LITERALS,
    logical=CURLY_LOGICAL,
    self_ref="this",
    member=".",
    types={"int": "int", "float": "double", "string": "string", "bool": "bool", "void": "void", "any": "dynamic"},
    length="{0}.Length",
    char_literals=True,
    typed=True,
    power="Math.Pow({0}, {1})",
    templates=RenderTemplates(**curly_templates(
        function="public static {ret} {name}({params}) {{",
        method="public {ret} {name}({params}) {{",
        constructor="public {cls}({params}) {{",
        static_method="public static {ret} {name}({params}) {{",
        param="{type} {name}",
        klass="class {name} {{",
        klass_base="class {name} : {base} {{",
        for_range="for (int {var} = {start}; {var} < {end}; {var}++) {{",
        for_each="foreach (var {var} in {iterable}) {{",
        print_="Console.WriteLine({args});",
        print_joiner=' + " " + ',
        var_decl="var {name} = {value};",
        var_decl_typed="{type} {name};",
        field_decl="public {type} {name}{init};",
        print_preamble=("using System;",),
        math_preamble=("using System;",),
    )),
)
