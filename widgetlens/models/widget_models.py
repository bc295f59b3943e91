"""
Widget Models — Classified widget classes, entry point and reconstructed tree.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from widgetlens.models.import_models import ImportInfo
from widgetlens.models.issue_models import ValidationResult


class WidgetKind(str, Enum):
    STATELESS = "stateless"
    STATEFUL = "stateful"
    STATE = "state"
    COMPONENT = "component"


class FieldInfo(BaseModel):
    name: str
    type: str = "any"
    initial_value: Any = None
    is_static: bool = False
    line: int = 0

    model_config = {"frozen": True}


class MethodInfo(BaseModel):
    name: str
    params: list[str] = Field(default_factory=list)
    is_async: bool = False
    is_static: bool = False
    field_references: list[str] = Field(
        default_factory=list, description="Names read or written through `this.<name>`"
    )
    method_calls: list[str] = Field(
        default_factory=list, description="Sibling methods invoked as `this.<name>()`"
    )
    line: int = 0

    model_config = {"frozen": True}


class ConstructorInfo(BaseModel):
    params: list[str] = Field(default_factory=list)
    calls_super: bool = False
    line: int = 0

    model_config = {"frozen": True}


class Widget(BaseModel):
    """One class declaration. `kind` is derived from the superclass name."""

    name: str
    kind: WidgetKind
    superclass_name: str | None = None
    type_arguments: list[str] = Field(default_factory=list)
    constructor_info: ConstructorInfo | None = None
    fields: list[FieldInfo] = Field(default_factory=list)
    methods: list[MethodInfo] = Field(default_factory=list)
    line: int = 0

    model_config = {"frozen": True}

    def method(self, name: str) -> MethodInfo | None:
        for m in self.methods:
            if m.name == name:
                return m
        return None


class FunctionInfo(BaseModel):
    name: str
    params: list[str] = Field(default_factory=list)
    is_async: bool = False
    line: int = 0

    model_config = {"frozen": True}


class EntryPoint(BaseModel):
    function: str = Field(..., description="Name of the entry function, normally 'main'")
    root_widget: str | None = None
    via: str = Field(default="return", description="'return' or the bootstrap call name")
    line: int = 0

    model_config = {"frozen": True}


class WidgetNode(BaseModel):
    """
    A node of the reconstructed widget tree.

    `parent` is the parent's widget name only; it is never followed during
    serialization, so the tree stays acyclic on the wire.
    """

    widget: str
    kind: WidgetKind | None = Field(
        default=None, description="None for widgets not declared in this file"
    )
    depth: int = 0
    parent: str | None = None
    type_arguments: list[str] = Field(default_factory=list)
    children: list[WidgetNode] = Field(default_factory=list)
    recursive: bool = Field(
        default=False, description="Class already on the path; not expanded again"
    )
    truncated: bool = Field(default=False, description="Depth or node bound reached")
    line: int = 0

    model_config = {"frozen": True}

    def iter_nodes(self):
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def max_depth(self) -> int:
        return max(n.depth for n in self.iter_nodes())


class WidgetSummary(BaseModel):
    widgets: int = 0
    stateless: int = 0
    stateful: int = 0
    state: int = 0
    component: int = 0
    functions: int = 0
    imports: int = 0
    entry_point: str | None = None
    root_widget: str | None = None
    tree_nodes: int = 0
    tree_depth: int = 0

    model_config = {"frozen": True}


class WidgetAnalysisResult(BaseModel):
    widgets: list[Widget] = Field(default_factory=list)
    functions: list[FunctionInfo] = Field(default_factory=list)
    imports: list[ImportInfo] = Field(default_factory=list)
    external_dependencies: list[str] = Field(default_factory=list)
    state_links: dict[str, str] = Field(
        default_factory=dict, description="Stateful widget name -> state class name"
    )
    entry_point: EntryPoint | None = None
    root_widget: str | None = None
    widget_tree: WidgetNode | None = None
    errors: list[ValidationResult] = Field(default_factory=list)
    summary: WidgetSummary = Field(default_factory=WidgetSummary)

    model_config = {"frozen": True}

    def widget(self, name: str) -> Widget | None:
        for w in self.widgets:
            if w.name == name:
                return w
        return None

    def of_kind(self, kind: WidgetKind) -> list[Widget]:
        return [w for w in self.widgets if w.kind == kind]
