from __future__ import annotations
import re

from polycode.languages.common import (
    CURLY_LOGICAL, IDENT, counting_for, curly_statements, curly_templates, keyword_regex, paren_conditionals,
)
from polycode.languages.rules import LanguageRules, RenderTemplates, pattern
from polycode.parsing.ir import NodeKind as K

QUALIFIERS = r"(?:(?:static|const|constexpr|unsigned|signed|volatile|mutable|inline|extern|thread_local)\s+)*"
TYPE = r"[A-Za-z_][\w:]*(?:<[^()=;]*>)?"
NOT_KEYWORD = r"(?!(?:return|throw|new|delete|else|case|goto|using|namespace|typedef|template|if|while|for|switch)\b)"

HEADERS = (
    pattern(
        K.CLASS_DECL,
        r"^(?:template\s*<[^>]*>\s*)?(?:class|struct)\s+(?P<name>" + IDENT + r")"
        r"(?:\s+final)?(?:\s*:\s*(?:(?:public|private|protected|virtual)\s+)*(?P<base>[\w:<>]+)(?:\s*,.*)?)?$",
    ),
    *paren_conditionals(),
    counting_for(r"int|long|unsigned|unsigned int|size_t|std::size_t|auto"),
    pattern(
        K.FOR,
        r"^for\s*\(\s*(?:const\s+)?(?P<type>" + TYPE + r")\s*[&*]?\s*(?P<var>" + IDENT + r")\s*:\s*(?P<iterable>.+)\)$",
        "each",
    ),
    pattern(
        K.FUNCTION_DECL,
        r"^(?:(?:static|inline|virtual|constexpr|extern|explicit|friend)\s+)*" + NOT_KEYWORD
        + r"(?P<return_type>" + TYPE + r"(?:\s*[*&]+)?)\s+(?P<name>~?[A-Za-z_][\w:~]*)\s*\((?P<params>[^)]*)\)"
        r"\s*(?:const)?\s*(?:override|noexcept|final)?$",
    ),
    pattern(
        K.FUNCTION_DECL,
        r"^(?:explicit\s+)?" + NOT_KEYWORD + r"(?P<name>(?:\w+::)?~?[A-Za-z_]\w*)\s*\((?P<params>[^)]*)\)(?:\s*:\s*.+)?$",
        "ctor",
    ),
)

STATEMENTS = (
    pattern(K.PRINT, r"^(?:std::)?cout\s*<<\s*(?P<stream>.+)$", "stream"),
    *curly_statements(
        r"^(?:std::)?printf\s*\((?P<args>.*)\)$",
        pattern(
            K.VAR_DECL,
            r"^" + QUALIFIERS + NOT_KEYWORD + r"(?P<type>" + TYPE + r")(?P<ptr>\s*[*&]+\s*|\s+)(?P<name>" + IDENT + r")"
            r"(?:\[[^\]]*\])?(?:\s*=\s*(?P<value>.+)|\s*\{(?P<brace_init>.*)\})?$",
        ),
    ),
)

RULES = LanguageRules(
    name="C++",
    aliases=("c++", "cpp", "cxx", "cplusplus"),
    block_style="brace",
    indent_unit="    ",
    line_comment="//",
    block_comment=("/*", "*/"),
    quotes=('"', "'"),
    multiline_quotes=(),
    raw_quotes=(),
    terminator=";",
    terminator_required=True,
    headers=HEADERS,
    statements=STATEMENTS,
    function_re=re.compile(
        r"^[ \t]*(?:(?:static|inline|virtual|constexpr|extern|explicit)[ \t]+)*"
        r"(?!(?:return|new|delete|else|throw|if|for|while|switch|case)\b)"
        r"[\w:<>]+(?:[ \t]*[*&]+)?[ \t]+[*&]?[\w:~]+[ \t]*\([^;{}\n]*\)[ \t]*(?:const)?[ \t]*(?:override)?[ \t]*\{?[ \t]*$",
        re.MULTILINE,
    ),
    class_re=re.compile(r"\b(?:class|struct)[ \t]+\w+[^;\n]*$", re.MULTILINE),
    branch_re=keyword_regex(("if", "for", "while", "case", "catch"), ("&&", "||", "?")),
    literals={"true": "true", "false": "false", "null": "nullptr"},
    logical=CURLY_LOGICAL,
    self_ref="this",
    member="->",
    types={"int": "int", "float": "double", "string": "std::string", "bool": "bool", "void": "void", "any": "auto"},
    length="{0}.size()",
    char_literals=True,
    typed=True,
    power="std::pow({0}, {1})",
    templates=RenderTemplates(**curly_templates(
        function="{ret} {name}({params}) {{",
        method="{ret} {name}({params}) {{",
        constructor="{cls}({params}) {{",
        static_method="static {ret} {name}({params}) {{",
        param="{type} {name}",
        klass="class {name} {{",
        klass_base="class {name} : public {base} {{",
        class_closer="};",
        for_range="for (int {var} = {start}; {var} < {end}; {var}++) {{",
        for_each="for (auto {var} : {iterable}) {{",
        print_="std::cout << {args} << std::endl;",
        print_joiner=" << ",
        var_decl="auto {name} = {value};",
        var_decl_typed="{type} {name};",
        field_decl="{type} {name}{init};",
        class_preamble=("public:",),
        print_preamble=("#include <iostream>",),
        math_preamble=("#include <cmath>",),
        field_any="std::any",
        field_preamble=("#include <any>",),
    )),
)
