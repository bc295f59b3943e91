"""
SSR Models — Render-safety patterns, hydration needs and migration steps.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from widgetlens.models.issue_models import SourceLocation, ValidationResult


class Compatibility(str, Enum):
    FULL = "full"
    PARTIAL = "partial"
    LIMITED = "limited"
    NONE = "none"


class Effort(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class EstimatedEffort(str, Enum):
    MINIMAL = "minimal"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"
    MAJOR_REWRITE = "major-rewrite"


class SSRPattern(BaseModel):
    """One occurrence of a catalogued usage shape."""

    pattern_id: str
    description: str
    safe: bool
    penalty: int = Field(default=0, ge=0, description="Score points deducted (unsafe only)")
    critical: bool = False
    affected: list[str] = Field(default_factory=list)
    location: SourceLocation | None = None
    suggestion: str | None = None

    model_config = {"frozen": True}


class HydrationRequirement(BaseModel):
    widget: str
    reason: str
    order: int = Field(..., description="0 = hydrate first")

    model_config = {"frozen": True}


class MigrationStep(BaseModel):
    order: int
    action: str
    description: str
    touches: int = Field(default=0, description="Unsafe pattern occurrences addressed")
    affected: list[str] = Field(default_factory=list)
    effort: Effort
    priority: str = Field(..., description="critical | high | medium | low")

    model_config = {"frozen": True}


class LazyLoadOpportunity(BaseModel):
    """A provider that can be split out and loaded on first use."""

    target: str
    type: str = Field(..., description="widget | notifier")
    reason: str
    recommendation: str
    priority: str = Field(default="low", description="high | medium | low")

    model_config = {"frozen": True}


class SSRSummary(BaseModel):
    compatibility: Compatibility
    score: int = Field(..., ge=0, le=100)
    safe_pattern_count: int = 0
    unsafe_pattern_count: int = 0
    hydration_count: int = 0
    migration_steps: int = 0
    lazy_load_count: int = 0
    estimated_effort: EstimatedEffort

    model_config = {"frozen": True}


class SSRAnalysisResult(BaseModel):
    safe_patterns: list[SSRPattern] = Field(default_factory=list)
    unsafe_patterns: list[SSRPattern] = Field(default_factory=list)
    hydration_requirements: list[HydrationRequirement] = Field(default_factory=list)
    migration_path: list[MigrationStep] = Field(default_factory=list)
    lazy_load_opportunities: list[LazyLoadOpportunity] = Field(default_factory=list)
    issues: list[ValidationResult] = Field(default_factory=list)
    patterns_executed: list[str] = Field(default_factory=list)
    summary: SSRSummary

    model_config = {"frozen": True}
