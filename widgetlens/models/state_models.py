"""
State Models — Metadata extracted from state-holder classes.

Mutations are modelled in two steps: RawMutation is produced while walking
method bodies; ValidatedMutation wraps it together with the wrapped-in-update
flag derived during validation. Neither record is filled in after construction.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from widgetlens.models.issue_models import SourceLocation, ValidationResult


class RawMutation(BaseModel):
    """A write to `this.<field>` as found during extraction."""

    field: str
    method: str
    operator: str = Field(..., description="'=', '+=', '++', '--', ...")
    line: int = 0
    column: int = 0
    update_call: SourceLocation | None = Field(
        default=None, description="Enclosing setState() call, if any"
    )

    model_config = {"frozen": True}


class ValidatedMutation(BaseModel):
    mutation: RawMutation
    wrapped_in_state_update: bool

    model_config = {"frozen": True}


class StateField(BaseModel):
    name: str
    type: str = "any"
    initial_value: Any = None
    mutations: list[ValidatedMutation] = Field(default_factory=list)
    used_in_methods: list[str] = Field(default_factory=list)
    mutated_in_methods: list[str] = Field(default_factory=list)
    used_in_build: bool = False
    line: int = 0

    model_config = {"frozen": True}


class LifecycleMethod(BaseModel):
    name: str
    calls_super: bool = False
    has_side_effects: bool = False
    should_call_super: bool = False
    issues: list[str] = Field(default_factory=list)
    line: int = 0

    model_config = {"frozen": True}


class StateUpdateCall(BaseModel):
    location: SourceLocation
    method: str
    updates: list[str] = Field(default_factory=list, description="Fields written by the call")
    called_during_build: bool = False
    is_valid: bool = True
    issues: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class EventHandler(BaseModel):
    event: str = Field(..., description="Property name, e.g. 'onPressed'")
    handler: str = Field(..., description="Target method name, or '<inline>'")
    component: str | None = Field(default=None, description="Widget receiving the handler")
    method: str = Field(..., description="Method where the handler is bound")
    triggers_set_state: bool = False
    location: SourceLocation
    is_valid: bool = True
    issues: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class DependencyGraph(BaseModel):
    state_to_methods: dict[str, list[str]] = Field(default_factory=dict)
    method_to_state: dict[str, list[str]] = Field(default_factory=dict)
    event_to_state: dict[str, list[str]] = Field(default_factory=dict)
    method_to_methods: dict[str, list[str]] = Field(default_factory=dict)

    model_config = {"frozen": True}


class StateClassMetadata(BaseModel):
    name: str
    managed_widget: str | None = Field(
        default=None, description="Stateful widget this class manages (by name)"
    )
    state_fields: list[StateField] = Field(default_factory=list)
    lifecycle_methods: list[LifecycleMethod] = Field(default_factory=list)
    state_update_calls: list[StateUpdateCall] = Field(default_factory=list)
    event_handlers: list[EventHandler] = Field(default_factory=list)
    other_methods: list[str] = Field(default_factory=list)
    dependency_graph: DependencyGraph = Field(default_factory=DependencyGraph)
    line: int = 0

    model_config = {"frozen": True}

    def field(self, name: str) -> StateField | None:
        for f in self.state_fields:
            if f.name == name:
                return f
        return None


class StateSummary(BaseModel):
    state_classes: int = 0
    state_fields: int = 0
    set_state_calls: int = 0
    lifecycle_methods: int = 0
    event_handlers: int = 0
    validation_issues: int = 0
    errors: int = 0
    warnings: int = 0
    complexity_score: int = Field(default=0, ge=0, le=100)
    health_score: int = Field(default=100, ge=0, le=100)

    model_config = {"frozen": True}


class RenderPathCall(BaseModel):
    """A call made while rendering whose result differs between server and client."""

    call: str = Field(..., description="'Math.random', 'setTimeout', 'new Date', ...")
    category: str = Field(..., description="nondeterministic | timer")
    widget: str = Field(..., description="Widget being rendered")
    method: str = Field(..., description="Method or '<field>' initializer containing the call")
    location: SourceLocation

    model_config = {"frozen": True}


class StateAnalysisResult(BaseModel):
    state_classes: list[StateClassMetadata] = Field(default_factory=list)
    dependency_graph: DependencyGraph = Field(
        default_factory=DependencyGraph,
        description="All classes merged; keys are qualified as 'Class.member'",
    )
    render_path_calls: list[RenderPathCall] = Field(
        default_factory=list,
        description="Nondeterministic and timer calls reached while rendering any widget",
    )
    validation_results: list[ValidationResult] = Field(default_factory=list)
    summary: StateSummary = Field(default_factory=StateSummary)

    model_config = {"frozen": True}
