from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from polycode.core.config import DEFAULT_CONFIG, EngineConfig
from polycode.core.errors import InvalidInput, PolycodeError
from polycode.core.logging import get_logger
from polycode.languages.registry import normalize_language
from polycode.parsing.extractor import extract
from polycode.parsing.ir import NodeKind
from polycode.rendering.renderer import render
from polycode.reporting.text import conversion_lines

log = get_logger("polycode.convert")


class ConversionStatus(str, Enum):
    COMPLETE = "Complete"
    PARTIAL = "PartialTranslation"
    UNCHANGED = "Unchanged"
    FAILED = "Failed"


@dataclass(frozen=True)
class ConversionResult:
    success: bool
    output_code: str
    analysis: list[str] = field(default_factory=list)
    error: Optional[str] = None
    status: ConversionStatus = ConversionStatus.COMPLETE
    counts: dict[str, int] = field(default_factory=dict)


def validate_source(source_text: object) -> str:
    if not isinstance(source_text, str):
        raise InvalidInput("Input code must be text")
    if not source_text.strip():
        raise InvalidInput("Input code is empty")
    return source_text


def convert_code(source_text: object, source_lang: object, target_lang: object,
                 config: EngineConfig | None = None) -> ConversionResult:
    """Convert ``source_text`` between two supported languages.

    Only an unsupported language tag or empty / non-text input fail the
    request; unrecognised constructs degrade to marked, untranslated output.
    """
    config = config or DEFAULT_CONFIG
    try:
        source = normalize_language(source_lang)
        target = normalize_language(target_lang)
        text = validate_source(source_text)
    except PolycodeError as exc:
        log.info("convert.rejected", error=str(exc))
        return ConversionResult(success=False, output_code="", error=str(exc), status=ConversionStatus.FAILED)

    if source == target:
        return ConversionResult(
            success=True,
            output_code=text,
            analysis=[f"Source and target are both {source}; code returned unchanged"],
            status=ConversionStatus.UNCHANGED,
        )

    program = extract(text, source)
    output = render(program, target, config)
    counts: Counter = program.count_kinds()
    status = ConversionStatus.PARTIAL if counts.get(NodeKind.UNKNOWN) else ConversionStatus.COMPLETE
    log.info("convert.done", source=source, target=target, status=status.value,
             untranslated=counts.get(NodeKind.UNKNOWN, 0))
    return ConversionResult(
        success=True,
        output_code=output,
        analysis=conversion_lines(source, target, counts),
        status=status,
        counts={kind.value: n for kind, n in sorted(counts.items(), key=lambda kv: kv[0].value)},
    )
