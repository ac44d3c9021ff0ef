from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class Severity(str, Enum):
    ERROR = "Error"
    WARNING = "Warning"
    SUGGESTION = "Suggestion"


@dataclass(frozen=True)
class AnalysisFinding:
    severity: Severity
    code: str
    message: str
    start_line: int
    end_line: int
    column: int = 0
    token: str = ""
    expected: str = ""
    # (line, column) where a repair should be made, when the detector knows it
    anchor: Optional[Tuple[int, int]] = None

    def describe(self) -> str:
        where = f"Line {self.start_line}" if self.start_line == self.end_line \
            else f"Lines {self.start_line}-{self.end_line}"
        return f"{where}: {self.message}"

    @property
    def sort_key(self) -> tuple:
        return (self.start_line, self.column, self.code)


@dataclass(frozen=True)
class FixRecord:
    description: str
    start_line: int
    end_line: int

    def describe(self) -> str:
        return f"{self.description} (line {self.start_line})"


@dataclass(frozen=True)
class SyntaxReport:
    errors: Tuple[AnalysisFinding, ...] = ()
    warnings: Tuple[AnalysisFinding, ...] = ()
    suggestions: Tuple[AnalysisFinding, ...] = ()

    @property
    def findings(self) -> Tuple[AnalysisFinding, ...]:
        return self.errors + self.warnings + self.suggestions

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def with_code(self, code: str) -> Tuple[AnalysisFinding, ...]:
        return tuple(f for f in self.findings if f.code == code)


@dataclass(frozen=True)
class FixResult:
    code: str
    fixes: Tuple[FixRecord, ...] = ()
    unresolved: Tuple[AnalysisFinding, ...] = ()


@dataclass(frozen=True)
class QualityMetrics:
    lines_of_code: int
    functions: int
    classes: int
    complexity: int
    readability: str
