"""
Context Models — Context providers, consumer lookups and the links between them.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from widgetlens.models.issue_models import SourceLocation, ValidationResult


class ProviderKind(str, Enum):
    INHERITED_WIDGET = "inherited-widget"
    CHANGE_NOTIFIER = "change-notifier"
    PROVIDER = "provider"


class UsagePattern(str, Enum):
    INHERITED_LOOKUP = "inherited-lookup"
    DEPENDENCY_LOOKUP = "dependency-lookup"
    PROVIDER_WATCH = "provider-watch"
    PROVIDER_READ = "provider-read"
    PROVIDER_SELECT = "provider-select"
    CONSUMER_WIDGET = "consumer-widget"
    NOTIFY_LISTENERS = "notify-listeners"
    NAVIGATION_ACCESS = "navigation-access"


class ContextProvider(BaseModel):
    """A value made visible to a whole subtree."""

    name: str
    provider_kind: ProviderKind
    value_type: str | None = Field(default=None, description="Type consumers look up")
    provided_by: list[str] = Field(
        default_factory=list, description="Widgets whose build() instantiates it"
    )
    notifies_on_change: bool = Field(
        default=False, description="Has a notify predicate or notifying methods"
    )
    has_of_accessor: bool = False
    notifying_methods: list[str] = Field(default_factory=list)
    method_count: int = Field(default=0, description="Methods declared, constructor excluded")
    requires_browser: bool = False
    browser_apis: list[str] = Field(default_factory=list)
    line: int = 0

    model_config = {"frozen": True}


class ContextUsage(BaseModel):
    """A typed lookup (or notification) performed by a widget."""

    pattern: UsagePattern
    usage_type: str = Field(..., description="read | subscribe | mutate | navigate")
    widget: str = Field(..., description="Class containing the usage")
    method: str
    lookup_type: str | None = None
    ssr_safe: bool
    reason: str
    location: SourceLocation

    model_config = {"frozen": True}


class ContextDependency(BaseModel):
    """Links a providing ancestor to a descendant lookup."""

    provider_kind: ProviderKind
    provider_name: str
    consumer_widget: str
    consumer_location: SourceLocation
    access_path: list[str] = Field(
        default_factory=list, description="Widget names from provider down to consumer"
    )
    resolved: bool = Field(
        default=False, description="Provider found among the consumer's tree ancestors"
    )

    model_config = {"frozen": True}


class ContextSummary(BaseModel):
    providers: int = 0
    inherited_widgets: int = 0
    change_notifiers: int = 0
    provider_instances: int = 0
    usages: int = 0
    dependencies: int = 0
    unresolved_dependencies: int = 0
    ssr_safe_usages: int = 0
    ssr_unsafe_usages: int = 0
    issues: int = 0

    model_config = {"frozen": True}


class ContextAnalysisResult(BaseModel):
    providers: list[ContextProvider] = Field(default_factory=list)
    usages: list[ContextUsage] = Field(default_factory=list)
    dependencies: list[ContextDependency] = Field(default_factory=list)
    issues: list[ValidationResult] = Field(default_factory=list)
    summary: ContextSummary = Field(default_factory=ContextSummary)

    model_config = {"frozen": True}
