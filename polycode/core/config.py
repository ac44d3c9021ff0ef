from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping

from polycode.presets import DEFAULT_RULES, load_rules

Readability = str  # "Poor" | "Fair" | "Good" | "Excellent"


@dataclass(frozen=True)
class ReadabilityThresholds:
    line_length: float = 80.0
    comment_ratio: float = 0.10
    nesting: float = 3.0
    buckets: Dict[int, Readability] = field(
        default_factory=lambda: {0: "Poor", 1: "Fair", 2: "Good", 3: "Excellent"}
    )

    def bucket(self, points: int) -> Readability:
        points = max(0, min(points, max(self.buckets)))
        return self.buckets.get(points, "Fair")


@dataclass(frozen=True)
class EngineConfig:
    readability: ReadabilityThresholds = field(default_factory=ReadabilityThresholds)
    max_line_length: int = 100
    nesting_warn_at: int = 4
    long_file_lines: int = 20
    max_fix_passes: int = 100
    mark_untranslated: bool = True

    @classmethod
    def from_rules(cls, rules: Mapping | None) -> "EngineConfig":
        rules = rules or {}
        r = {**DEFAULT_RULES["readability"], **(rules.get("readability") or {})}
        s = {**DEFAULT_RULES["syntax"], **(rules.get("syntax") or {})}
        f = {**DEFAULT_RULES["fix"], **(rules.get("fix") or {})}
        c = {**DEFAULT_RULES["conversion"], **(rules.get("conversion") or {})}
        buckets = {int(k): str(v) for k, v in (r.get("buckets") or {}).items()}
        return cls(
            readability=ReadabilityThresholds(
                line_length=float(r["line_length"]),
                comment_ratio=float(r["comment_ratio"]),
                nesting=float(r["nesting"]),
                buckets=buckets or ReadabilityThresholds().buckets,
            ),
            max_line_length=int(s["max_line_length"]),
            nesting_warn_at=int(s["nesting_warn_at"]),
            long_file_lines=int(s["long_file_lines"]),
            max_fix_passes=int(f["max_passes"]),
            mark_untranslated=bool(c["mark_untranslated"]),
        )


DEFAULT_CONFIG = EngineConfig.from_rules(DEFAULT_RULES)


def load_config(rules_path: Path | None = None) -> EngineConfig:
    return EngineConfig.from_rules(load_rules(rules_path))
