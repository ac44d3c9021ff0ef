from __future__ import annotations
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from polycode.analysis.findings import AnalysisFinding, FixRecord, QualityMetrics

# Severities used across the report
Severity = Literal["Error", "Warning", "Suggestion"]
Readability = Literal["Poor", "Fair", "Good", "Excellent"]


class FindingJSON(BaseModel):
    severity: Severity = Field(..., description="Error | Warning | Suggestion")
    code: str = Field(..., description="Stable finding code, e.g. unterminated-string")
    message: str = Field(..., description="One-line summary")
    start_line: int = Field(..., ge=1, description="1-based start line")
    end_line: int = Field(..., ge=1, description="1-based end line (inclusive)")
    column: int = Field(0, ge=0, description="0-based column on the start line")
    expected: Optional[str] = Field(None, description="Token a repair would insert")

    @classmethod
    def from_finding(cls, f: AnalysisFinding) -> "FindingJSON":
        return cls(
            severity=f.severity.value,
            code=f.code,
            message=f.message,
            start_line=f.start_line,
            end_line=max(f.end_line, f.start_line),
            column=f.column,
            expected=f.expected or None,
        )


class FixRecordJSON(BaseModel):
    description: str
    start_line: int = Field(..., ge=1)
    end_line: int = Field(..., ge=1)

    @classmethod
    def from_record(cls, r: FixRecord) -> "FixRecordJSON":
        return cls(description=r.description, start_line=r.start_line, end_line=max(r.end_line, r.start_line))


class QualityMetricsJSON(BaseModel):
    lines_of_code: int = Field(..., ge=0, description="Lines carrying code (blank and comment-only lines excluded)")
    functions: int = Field(..., ge=0)
    classes: int = Field(..., ge=0)
    complexity: int = Field(..., ge=1, description="1 + branch / loop / boolean-combinator occurrences")
    readability: Readability

    @classmethod
    def from_metrics(cls, m: QualityMetrics) -> "QualityMetricsJSON":
        return cls(
            lines_of_code=m.lines_of_code,
            functions=m.functions,
            classes=m.classes,
            complexity=m.complexity,
            readability=m.readability,
        )


class ConvertResponse(BaseModel):
    success: bool
    output_code: str = ""
    analysis_lines: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    status: str = Field("Complete", description="Complete | PartialTranslation | Unchanged | Failed")
    metrics: Optional[QualityMetricsJSON] = None


class AnalyzeResponse(BaseModel):
    errors: List[FindingJSON]
    warnings: List[FindingJSON]
    suggestions: List[FindingJSON]
    metrics: QualityMetricsJSON
    report: str = Field(..., description="Plain-text analysis report")


class FixResponse(BaseModel):
    output_code: str
    fixes: List[FixRecordJSON]
    unresolved: List[FindingJSON] = Field(default_factory=list)
    metrics: QualityMetricsJSON
    analysis_lines: List[str] = Field(default_factory=list)


class LanguagesResponse(BaseModel):
    languages: List[str]
    engine: str = "rule-based"
