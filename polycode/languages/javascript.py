from __future__ import annotations
import re

from polycode.languages.common import (
    CURLY_LOGICAL, IDENT, counting_for, curly_statements, curly_templates, keyword_regex, paren_conditionals,
)
from polycode.languages.rules import LanguageRules, RenderTemplates, pattern
from polycode.parsing.ir import NodeKind as K

HEADERS = (
    pattern(K.FUNCTION_DECL, r"^(?:export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*(?P<name>" + IDENT + r")\s*\((?P<params>[^)]*)\)$"),
    pattern(
        K.FUNCTION_DECL,
        r"^(?:export\s+)?(?:const|let|var)\s+(?P<name>" + IDENT + r")\s*=\s*(?:async\s+)?"
        r"(?:function\s*\((?P<fparams>[^)]*)\)|(?:\((?P<params>[^)]*)\)|(?P<param>" + IDENT + r"))\s*=>)$",
        "arrow",
    ),
    pattern(K.CLASS_DECL, r"^(?:export\s+)?(?:default\s+)?class\s+(?P<name>" + IDENT + r")(?:\s+extends\s+(?P<base>[\w.$]+))?$"),
    *paren_conditionals(),
    counting_for(r"let|var|const"),
    pattern(K.FOR, r"^for\s*\(\s*(?:const|let|var)?\s*(?P<var>" + IDENT + r")\s+of\s+(?P<iterable>.+)\)$", "each"),
    pattern(
        K.FUNCTION_DECL,
        r"^(?:static\s+)?(?:async\s+)?(?!(?:if|for|while|switch|catch|function|return|with)\b)(?P<name>" + IDENT + r")\s*\((?P<params>[^)]*)\)$",
        "method",
    ),
)

STATEMENTS = curly_statements(
    r"^console\.(?:log|info|warn|error)\s*\((?P<args>.*)\)$",
    pattern(K.VAR_DECL, r"^(?P<keyword>let|const|var)\s+(?P<name>" + IDENT + r")(?:\s*=\s*(?P<value>.+))?$"),
)

RULES = LanguageRules(
    name="JavaScript",
    aliases=("javascript", "js", "node", "nodejs", "ecmascript"),
    block_style="brace",
    indent_unit="  ",
    line_comment="//",
    block_comment=("/*", "*/"),
    quotes=('"', "'"),
    multiline_quotes=("`",),
    raw_quotes=(),
    terminator=";",
    terminator_required=False,
    headers=HEADERS,
    statements=STATEMENTS,
    function_re=re.compile(
        r"\bfunction\b[ \t]*\*?[ \t]*\w*[ \t]*\(|\b(?:const|let|var)[ \t]+\w+[ \t]*=[ \t]*(?:async[ \t]*)?(?:\([^()\n]*\)|[A-Za-z_$][\w$]*)[ \t]*=>"
    ),
    class_re=re.compile(r"\bclass[ \t]+\w+"),
    branch_re=keyword_regex(("if", "for", "while", "case", "catch"), ("&&", "||", "?")),
    literals={"true": "true", "false": "false", "null": "null"},
    logical=CURLY_LOGICAL,
    self_ref="this",
    member=".",
    types={"any": ""},
    length="{0}.length",
    char_literals=False,
    typed=False,
    templates=RenderTemplates(**curly_templates(
        function="function {name}({params}) {{",
        method="{name}({params}) {{",
        constructor="constructor({params}) {{",
        static_method="static {name}({params}) {{",
        param="{name}",
        klass="class {name} {{",
        klass_base="class {name} extends {base} {{",
        for_range="for (let {var} = {start}; {var} < {end}; {var}++) {{",
        for_each="for (const {var} of {iterable}) {{",
        print_="console.log({args});",
        print_joiner=", ",
        var_decl="let {name} = {value};",
        var_decl_typed="let {name};",
        field_decl="{name}{init};",
    )),
)
