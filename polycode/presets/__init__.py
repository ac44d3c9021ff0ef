from __future__ import annotations
import copy
from pathlib import Path
import yaml

BUNDLED_RULES = Path(__file__).with_name("rules.yaml")

DEFAULT_RULES = {
    "readability": {
        "line_length": 80,
        "comment_ratio": 0.10,
        "nesting": 3,
        "buckets": {0: "Poor", 1: "Fair", 2: "Good", 3: "Excellent"},
    },
    "syntax": {"max_line_length": 100, "nesting_warn_at": 4, "long_file_lines": 20},
    "fix": {"max_passes": 100},
    "conversion": {"mark_untranslated": True},
}


def load_rules(rules_path: Path | None) -> dict:
    """Rules from ``rules_path``, or the bundled preset when no path is given."""
    p = Path(rules_path) if rules_path else BUNDLED_RULES
    if p.exists():
        try:
            return yaml.safe_load(p.read_text(encoding="utf-8")) or copy.deepcopy(DEFAULT_RULES)
        except yaml.YAMLError:
            return copy.deepcopy(DEFAULT_RULES)
    return copy.deepcopy(DEFAULT_RULES)


def save_rules(rules: dict, rules_path: Path | None) -> Path:
    p = Path(rules_path) if rules_path else Path("polycode-rules.yaml")
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(yaml.safe_dump(rules, sort_keys=False), encoding="utf-8")
    return p
