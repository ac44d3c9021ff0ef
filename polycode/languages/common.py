from __future__ import annotations
import re
from typing import Tuple

from polycode.languages.rules import ConstructPattern, pattern
from polycode.parsing.ir import NodeKind as K

IDENT = r"[A-Za-z_]\w*"
TARGET = r"(?P<target>[A-Za-z_][\w.$]*(?:\[[^\]]*\])*(?:(?:\.|->)[A-Za-z_]\w*)*)"
NOT_EQ = r"(?!=)"

CURLY_LITERALS = {"true": "true", "false": "false", "null": "null"}
CURLY_LOGICAL = {"and": "&&", "or": "||", "not": "!"}


def paren_conditionals() -> Tuple[ConstructPattern, ...]:
    return (
        pattern(K.IF, r"^else\s+if\s*\((?P<condition>.*)\)$", "elif"),
        pattern(K.IF, r"^if\s*\((?P<condition>.*)\)$", "if"),
        pattern(K.IF, r"^else$", "else"),
        pattern(K.WHILE, r"^while\s*\((?P<condition>.*)\)$"),
    )


def counting_for(decl_types: str) -> ConstructPattern:
    return pattern(
        K.FOR,
        r"^for\s*\(\s*(?:(?:" + decl_types + r")\s+)?(?P<var>" + IDENT + r")\s*=\s*(?P<start>[^;]+);"
        r"\s*(?P=var)\s*(?P<cmp><=|<)\s*(?P<end>[^;]+);"
        r"\s*(?:(?P=var)\s*\+\+|\+\+\s*(?P=var)|(?P=var)\s*\+=\s*1)\s*\)$",
        "range",
    )


def curly_statements(print_regex: str, decl: ConstructPattern) -> Tuple[ConstructPattern, ...]:
    return (
        pattern(K.PRINT, print_regex),
        pattern(K.RETURN, r"^return(?:\s+(?P<value>.+)|\s*(?P<bare>))$"),
        decl,
        pattern(K.ASSIGNMENT, r"^" + TARGET + r"\s*(?P<op>\+\+|--)$", "increment"),
        pattern(K.ASSIGNMENT, r"^(?P<op>\+\+|--)\s*" + TARGET + r"$", "increment"),
        pattern(K.ASSIGNMENT, r"^" + TARGET + r"\s*(?P<op>[+\-*/%]?=|<<=|>>=|&=|\|=|\^=)" + NOT_EQ + r"\s*(?P<value>.+)$"),
        pattern(K.EXPRESSION, r"^(?P<expr>(?:break|continue))$"),
        pattern(K.EXPRESSION, r"^(?!(?:if|for|foreach|while|switch|return|else|do|catch|using|lock)\b)(?P<expr>(?:new\s+)?[A-Za-z_][\w.:<>$]*(?:->\w+)*\s*\(.*\))$"),
    )


def keyword_regex(words: Tuple[str, ...], ops: Tuple[str, ...] = ()) -> re.Pattern:
    parts = [r"\b" + re.escape(w) + r"\b" for w in words] + [re.escape(o) for o in ops]
    return re.compile("|".join(parts))


def curly_templates(**overrides) -> dict:
    base = dict(
        if_="if ({condition}) {{",
        elif_="else if ({condition}) {{",
        else_="else {{",
        while_="while ({condition}) {{",
        class_closer="}",
        return_value="return {value};",
        return_bare="return;",
        assignment="{target} {op} {value};",
        expression="{expr};",
        param_default="{param} = {default}",
        field_init=" = {value}",
    )
    base.update(overrides)
    return base
