"""
Import Models — Raw imports and their resolutions.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from widgetlens.models.issue_models import ValidationResult


class ImportSpec(BaseModel):
    imported: str
    local: str

    model_config = {"frozen": True}


class ImportInfo(BaseModel):
    """An import as written in the source."""

    source: str
    items: list[str] = Field(default_factory=list, description="Local binding names")
    specifiers: list[ImportSpec] = Field(default_factory=list)
    default_binding: str | None = None
    namespace: str | None = None
    line: int = 0

    model_config = {"frozen": True}


class ResolutionStatus(str, Enum):
    RESOLVED = "resolved"
    UNRESOLVED = "unresolved"
    ERROR = "error"


class ImportOrigin(str, Enum):
    FRAMEWORK = "framework"
    LOCAL = "local"
    CACHE = "cache"
    ALIAS = "alias"


class ImportResolution(BaseModel):
    source: str
    items: list[str] = Field(default_factory=list)
    status: ResolutionStatus
    origin: ImportOrigin | None = None
    location: str | None = None
    reason: str | None = Field(default=None, description="Why resolution failed")
    searched: list[str] = Field(
        default_factory=list, description="Candidates tried, in order"
    )
    line: int = 0

    model_config = {"frozen": True}


class ImportSummary(BaseModel):
    total: int = 0
    resolved: int = 0
    unresolved: int = 0
    errors: int = 0
    resolution_rate: float = Field(default=0.0, description="Resolved share, 0-100")
    by_origin: dict[str, int] = Field(default_factory=dict)

    model_config = {"frozen": True}


class ImportResolutionResult(BaseModel):
    resolved: list[ImportResolution] = Field(default_factory=list)
    unresolved: list[ImportResolution] = Field(default_factory=list)
    errors: list[ImportResolution] = Field(default_factory=list)
    issues: list[ValidationResult] = Field(default_factory=list)
    summary: ImportSummary = Field(default_factory=ImportSummary)

    model_config = {"frozen": True}
