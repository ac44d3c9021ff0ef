from __future__ import annotations
from typing import Dict, List

from polycode.core.errors import UnsupportedLanguage
from polycode.languages import cpp, csharp, go, java, javascript, python
from polycode.languages.rules import LanguageRules

_TABLES: Dict[str, LanguageRules] = {
    rules.name: rules
    for rules in (python.RULES, javascript.RULES, java.RULES, csharp.RULES, cpp.RULES, go.RULES)
}

_ALIASES: Dict[str, str] = {}
for _rules in _TABLES.values():
    _ALIASES[_rules.name.lower()] = _rules.name
    for _alias in _rules.aliases:
        _ALIASES[_alias.lower()] = _rules.name


def supported_languages() -> List[str]:
    return list(_TABLES)


def normalize_language(tag: object) -> str:
    if not isinstance(tag, str) or tag.strip().lower() not in _ALIASES:
        raise UnsupportedLanguage(tag, supported_languages())
    return _ALIASES[tag.strip().lower()]


def get_rules(tag: object) -> LanguageRules:
    return _TABLES[normalize_language(tag)]
