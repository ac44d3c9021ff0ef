from __future__ import annotations

from polycode.analysis.detectors.style import nesting_levels
from polycode.analysis.findings import QualityMetrics
from polycode.core.config import DEFAULT_CONFIG, EngineConfig
from polycode.core.logging import get_logger
from polycode.languages.registry import get_rules
from polycode.parsing.lexical import scan

log = get_logger("polycode.metrics")


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def generate_quality_metrics(code: str, language: str, config: EngineConfig | None = None) -> QualityMetrics:
    """Structural metrics of ``code``: LOC, declarations, complexity and a readability bucket."""
    config = config or DEFAULT_CONFIG
    rules = get_rules(language)
    text = code.replace("\r\n", "\n").replace("\r", "\n")
    result = scan(text, rules)
    masked = result.masked
    physical = text.split("\n")

    code_lines = [info for info in result.lines if info.has_code]
    commented = sum(1 for info in result.lines if info.has_comment)
    non_blank = sum(1 for info in result.lines if info.has_code or info.has_comment)

    avg_length = _mean([len(physical[info.number - 1].rstrip()) for info in code_lines])
    comment_ratio = commented / non_blank if non_blank else 0.0
    avg_nesting = _mean([float(level) for level in nesting_levels(text, result, rules)])

    thresholds = config.readability
    points = sum((
        avg_length <= thresholds.line_length,
        comment_ratio >= thresholds.comment_ratio,
        avg_nesting <= thresholds.nesting,
    ))
    metrics = QualityMetrics(
        lines_of_code=len(code_lines),
        functions=len(rules.function_re.findall(masked)),
        classes=len(rules.class_re.findall(masked)),
        complexity=1 + len(rules.branch_re.findall(masked)),
        readability=thresholds.bucket(points),
    )
    log.debug("metrics.done", language=rules.name, loc=metrics.lines_of_code, readability=metrics.readability)
    return metrics
