"""
Issue Models — Severity levels, source locations and recorded findings.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class SourceLocation(BaseModel):
    """Position in the analyzed file. Line is 1-based, column 0-based."""

    line: int = 0
    column: int = 0
    method: str | None = Field(default=None, description="Enclosing method, if any")

    model_config = {"frozen": True}


class ParseError(BaseModel):
    """A recoverable parse failure; parsing resumed after it."""

    message: str
    line: int
    column: int
    context: str = Field(
        default="program",
        description="Nearest enclosing declaration, e.g. 'class Counter'",
    )

    model_config = {"frozen": True}


class ValidationResult(BaseModel):
    """A meaningful, non-fatal analysis finding."""

    type: str = Field(..., description="Finding identifier, e.g. 'lifecycle-missing-super'")
    message: str
    severity: Severity
    location: SourceLocation | None = None
    suggestion: str | None = None
    affected_item: str | None = Field(
        default=None, description="Name of the field, method or class concerned"
    )

    model_config = {"frozen": True}


def count_by_severity(results: list[ValidationResult], severity: Severity) -> int:
    return sum(1 for r in results if r.severity == severity)
