"""
Analysis Models — Per-file results and batch request/response schemas.

AnalysisResult is the fully realized output of one pipeline run; these are also
the public-facing models returned by the FastAPI endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from widgetlens.models.context_models import ContextAnalysisResult
from widgetlens.models.import_models import ImportResolutionResult
from widgetlens.models.issue_models import ParseError
from widgetlens.models.ssr_models import SSRAnalysisResult
from widgetlens.models.state_models import StateAnalysisResult
from widgetlens.models.tokens import LexerWarning
from widgetlens.models.widget_models import WidgetAnalysisResult


class FileInput(BaseModel):
    """A single source file submitted for analysis."""

    path: str = Field(..., description="File path used in reports and import resolution")
    source: str = Field(..., description="File source text")


class AnalysisResult(BaseModel):
    file_path: str
    token_count: int = 0
    ast_node_count: int = 0
    lexer_warnings: list[LexerWarning] = Field(default_factory=list)
    parse_errors: list[ParseError] = Field(default_factory=list)
    widgets: WidgetAnalysisResult
    imports: ImportResolutionResult
    state: StateAnalysisResult
    context: ContextAnalysisResult
    ssr: SSRAnalysisResult
    stage_durations: dict[str, float] = Field(
        default_factory=dict, description="Milliseconds spent in each stage, in run order"
    )
    duration_ms: float = 0.0

    model_config = {"frozen": True}


class FileFailure(BaseModel):
    """A file whose analysis aborted in a fatal stage failure."""

    file_path: str
    stage: str = Field(..., description="Stage that raised, e.g. 'parse' or 'read'")
    message: str

    model_config = {"frozen": True}


class BatchReport(BaseModel):
    results: list[AnalysisResult] = Field(default_factory=list)
    failures: list[FileFailure] = Field(default_factory=list)
    skipped: list[str] = Field(
        default_factory=list, description="Files not started before cancellation"
    )
    duration_ms: float = 0.0

    model_config = {"frozen": True}
