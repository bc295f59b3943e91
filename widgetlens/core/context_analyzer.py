"""
Context Analyzer — Context providers, consumers and the ancestor chains linking them.

Providers:
- classes extending an inherited-widget base (value visible to the subtree,
  re-render gated by updateShouldNotify)
- classes extending a change-notifier base (notifyListeners())
- Provider<T>(...) style instantiations inside methods

Consumers are typed lookups (`X.of(context)`, `context.watch<T>()`, ...) and
each carries an SSR-safety verdict from USAGE_SAFETY. Independent of the state
analyzer; it reads only the AST and the widget analysis.
"""

from __future__ import annotations

import logging

from widgetlens.core.expressions import named_argument, return_values, widget_constructor
from widgetlens.models import ast_nodes as ast
from widgetlens.models.context_models import (
    ContextAnalysisResult,
    ContextDependency,
    ContextProvider,
    ContextSummary,
    ContextUsage,
    ProviderKind,
    UsagePattern,
)
from widgetlens.models.issue_models import Severity, SourceLocation, ValidationResult
from widgetlens.models.widget_models import WidgetAnalysisResult, WidgetNode

logger = logging.getLogger("widgetlens.context")

INHERITED_BASES = frozenset({"InheritedWidget", "InheritedNotifier", "InheritedModel"})
NOTIFIER_BASES = frozenset({"ChangeNotifier", "ValueNotifier"})
PROVIDER_CONSTRUCTORS = frozenset({
    "Provider", "ChangeNotifierProvider", "ListenableProvider",
    "ValueListenableProvider", "FutureProvider", "StreamProvider",
})
CONSUMER_WIDGETS = frozenset({"Consumer", "Selector"})
BROWSER_GLOBALS = frozenset({"window", "document", "localStorage", "sessionStorage", "navigator"})

NOTIFY_LISTENERS = "notifyListeners"
NOTIFY_PREDICATE = "updateShouldNotify"
EXACT_TYPE_LOOKUP = "dependOnInheritedWidgetOfExactType"
NAVIGATOR = "Navigator"

# Lookups the framework provides without a declaration in the analyzed file
FRAMEWORK_LOOKUPS = frozenset({"Theme", "MediaQuery", "Localizations", "DefaultTextStyle"})
CONTEXT_SHORTCUTS: dict[str, str] = {"theme": "Theme", "mediaQuery": "MediaQuery"}

# pattern -> (usage type, SSR safe, reason)
USAGE_SAFETY: dict[UsagePattern, tuple[str, bool, str]] = {
    UsagePattern.INHERITED_LOOKUP: (
        "read", True, "Reads an ancestor value once during render",
    ),
    UsagePattern.DEPENDENCY_LOOKUP: (
        "read", True, "Exact-type ancestor lookup resolves during render",
    ),
    UsagePattern.PROVIDER_READ: (
        "read", True, "One-time read without a subscription",
    ),
    UsagePattern.PROVIDER_WATCH: (
        "subscribe", False, "Subscribes to changes; needs client-side reactivity",
    ),
    UsagePattern.PROVIDER_SELECT: (
        "subscribe", False, "Subscribes to a selected slice; needs client-side reactivity",
    ),
    UsagePattern.CONSUMER_WIDGET: (
        "subscribe", False, "Consumer rebuilds on change; needs client-side reactivity",
    ),
    UsagePattern.NOTIFY_LISTENERS: (
        "mutate", False, "Notifies listeners; only meaningful once hydrated",
    ),
    UsagePattern.NAVIGATION_ACCESS: (
        "navigate", False, "Navigator state exists only in the browser",
    ),
}

PROVIDER_READ_METHODS: dict[str, UsagePattern] = {
    "watch": UsagePattern.PROVIDER_WATCH,
    "read": UsagePattern.PROVIDER_READ,
    "select": UsagePattern.PROVIDER_SELECT,
}


def _base_name(superclass: str | None) -> str:
    return superclass.rsplit(".", 1)[-1] if superclass else ""


def _method_count(cls: ast.ClassDeclaration) -> int:
    return sum(1 for m in cls.methods if m.name != "constructor")


def _browser_apis(node: ast.Node | None) -> list[str]:
    if node is None:
        return []
    found: list[str] = []
    for n in ast.walk(node):
        if isinstance(n, ast.Identifier) and n.name in BROWSER_GLOBALS and n.name not in found:
            found.append(n.name)
    return found


def _is_notify_call(node: ast.Node) -> bool:
    if not isinstance(node, ast.CallExpression):
        return False
    callee = node.callee
    if isinstance(callee, ast.Identifier):
        return callee.name == NOTIFY_LISTENERS
    return ast.this_member(callee) == NOTIFY_LISTENERS


class ContextAnalyzer:
    """Detects context providers and consumers in one Program."""

    def __init__(self, program: ast.Program, widgets: WidgetAnalysisResult) -> None:
        self.program = program
        self.widgets = widgets
        self.classes = [n for n in program.body if isinstance(n, ast.ClassDeclaration)]
        self.issues: list[ValidationResult] = []

    def analyze(self) -> ContextAnalysisResult:
        providers = self._class_providers()
        providers.extend(self._instance_providers())
        usages = self._usages()
        dependencies = self._dependencies(providers, usages)
        self._check_unused(providers, usages)

        inherited = sum(1 for p in providers if p.provider_kind == ProviderKind.INHERITED_WIDGET)
        notifiers = sum(1 for p in providers if p.provider_kind == ProviderKind.CHANGE_NOTIFIER)
        summary = ContextSummary(
            providers=len(providers),
            inherited_widgets=inherited,
            change_notifiers=notifiers,
            provider_instances=len(providers) - inherited - notifiers,
            usages=len(usages),
            dependencies=len(dependencies),
            unresolved_dependencies=sum(1 for d in dependencies if not d.resolved),
            ssr_safe_usages=sum(1 for u in usages if u.ssr_safe),
            ssr_unsafe_usages=sum(1 for u in usages if not u.ssr_safe),
            issues=len(self.issues),
        )
        logger.debug(
            f"Context: {summary.providers} providers, {summary.usages} usages, "
            f"{summary.dependencies} dependencies"
        )
        return ContextAnalysisResult(
            providers=providers,
            usages=usages,
            dependencies=dependencies,
            issues=self.issues,
            summary=summary,
        )

    def _issue(self, type_: str, message: str, severity: Severity, line: int,
               affected: str, suggestion: str | None = None) -> None:
        self.issues.append(
            ValidationResult(
                type=type_,
                message=message,
                severity=severity,
                location=SourceLocation(line=line),
                suggestion=suggestion,
                affected_item=affected,
            )
        )

    # ── Providers ──

    def _constructed_by(self) -> dict[str, list[str]]:
        """Constructed class name -> classes whose methods construct it."""
        built: dict[str, list[str]] = {}
        for cls in self.classes:
            for method in cls.methods:
                if method.body is None:
                    continue
                for node in ast.walk(method.body):
                    found = widget_constructor(node)
                    if found is None:
                        continue
                    owners = built.setdefault(found[0], [])
                    if cls.name not in owners:
                        owners.append(cls.name)
        return built

    def _class_providers(self) -> list[ContextProvider]:
        built = self._constructed_by()
        providers: list[ContextProvider] = []
        for cls in self.classes:
            base = _base_name(cls.superclass)
            if base in INHERITED_BASES:
                providers.append(self._inherited_provider(cls, built.get(cls.name, [])))
            elif base in NOTIFIER_BASES:
                providers.append(self._notifier_provider(cls, built.get(cls.name, [])))
        return providers

    def _inherited_provider(self, cls: ast.ClassDeclaration, provided_by: list[str]) -> ContextProvider:
        has_predicate = cls.method(NOTIFY_PREDICATE) is not None
        has_of = cls.method("of") is not None
        ctor = cls.method("constructor")
        has_child = (
            any(f.name == "child" for f in cls.fields)
            or (ctor is not None and any(
                p.name == "child" or "child" in p.destructured for p in ctor.params
            ))
        )
        if not has_predicate:
            self._issue(
                "missing-update-should-notify",
                f"Inherited widget '{cls.name}' does not define {NOTIFY_PREDICATE}()",
                Severity.WARNING,
                cls.line,
                cls.name,
                suggestion=f"Add {NOTIFY_PREDICATE}(oldWidget) comparing the provided value",
            )
        if not has_of:
            self._issue(
                "missing-of-accessor",
                f"Inherited widget '{cls.name}' has no static of(context) accessor",
                Severity.INFO,
                cls.line,
                cls.name,
                suggestion=f"Add static of(context) using {EXACT_TYPE_LOOKUP}",
            )
        if not has_child:
            self._issue(
                "missing-child-property",
                f"Inherited widget '{cls.name}' does not take a child",
                Severity.INFO,
                cls.line,
                cls.name,
            )
        apis = _browser_apis(cls)
        return ContextProvider(
            name=cls.name,
            provider_kind=ProviderKind.INHERITED_WIDGET,
            value_type=cls.name,
            provided_by=provided_by,
            notifies_on_change=has_predicate,
            has_of_accessor=has_of,
            method_count=_method_count(cls),
            requires_browser=bool(apis),
            browser_apis=apis,
            line=cls.line,
        )

    def _notifier_provider(self, cls: ast.ClassDeclaration, provided_by: list[str]) -> ContextProvider:
        notifying: list[str] = []
        for method in cls.methods:
            if method.body is None:
                continue
            nodes = list(ast.walk(method.body))
            notifies = any(_is_notify_call(n) for n in nodes)
            if notifies:
                notifying.append(method.name)
            mutates = any(
                (isinstance(n, ast.AssignmentExpression) and ast.this_member(n.target))
                or (isinstance(n, ast.UpdateExpression) and ast.this_member(n.argument))
                for n in nodes
            )
            if mutates and not notifies and method.name not in ("constructor", "dispose"):
                self._issue(
                    "mutation-without-notify",
                    f"'{cls.name}.{method.name}' changes state without calling {NOTIFY_LISTENERS}()",
                    Severity.WARNING,
                    method.line,
                    f"{cls.name}.{method.name}",
                    suggestion=f"Call this.{NOTIFY_LISTENERS}() after the change",
                )
        apis = _browser_apis(cls)
        return ContextProvider(
            name=cls.name,
            provider_kind=ProviderKind.CHANGE_NOTIFIER,
            value_type=cls.name,
            provided_by=provided_by,
            notifies_on_change=bool(notifying),
            notifying_methods=notifying,
            method_count=_method_count(cls),
            requires_browser=bool(apis),
            browser_apis=apis,
            line=cls.line,
        )

    def _instance_providers(self) -> list[ContextProvider]:
        browser_classes = {
            cls.name: _browser_apis(cls) for cls in self.classes if _browser_apis(cls)
        }
        providers: list[ContextProvider] = []
        for cls in self.classes:
            for method in cls.methods:
                if method.body is None:
                    continue
                for node in ast.walk(method.body):
                    found = widget_constructor(node)
                    if found is None or found[0] not in PROVIDER_CONSTRUCTORS:
                        continue
                    providers.append(self._instance_provider(node, found, cls.name, browser_classes))
        return providers

    def _instance_provider(
        self,
        node: ast.NewExpression | ast.CallExpression,
        found: tuple[str, tuple[str, ...]],
        owner: str,
        browser_classes: dict[str, list[str]],
    ) -> ContextProvider:
        ctor, type_arguments = found
        create = named_argument(node, "create") or named_argument(node, "value")
        value_type = type_arguments[0] if type_arguments else None
        if value_type is None and isinstance(create, ast.ArrowFunction):
            for value in return_values(create.body):
                created = widget_constructor(value)
                if created:
                    value_type = created[0]
                    break

        name = f"{ctor}<{value_type}>" if value_type else ctor
        if create is None:
            self._issue(
                "provider-missing-create",
                f"{name} in '{owner}' has neither create nor value",
                Severity.ERROR,
                node.line,
                name,
                suggestion="Pass create: (context) => new Model()",
            )
        apis = _browser_apis(create)
        for api in browser_classes.get(value_type or "", []):
            if api not in apis:
                apis.append(api)
        return ContextProvider(
            name=name,
            provider_kind=ProviderKind.PROVIDER,
            value_type=value_type,
            provided_by=[owner],
            notifies_on_change=ctor != "Provider",
            requires_browser=bool(apis),
            browser_apis=apis,
            line=node.line,
        )

    # ── Consumers ──

    def _usages(self) -> list[ContextUsage]:
        inherited = {
            cls.name for cls in self.classes if _base_name(cls.superclass) in INHERITED_BASES
        }
        usages: list[ContextUsage] = []
        for cls in self.classes:
            for method in cls.methods:
                if method.body is None:
                    continue
                # The accessor implementation itself is not a consumer
                skip_exact_lookup = cls.name in inherited and method.name == "of"
                for node in ast.walk(method.body):
                    usage = self._classify(node, inherited, skip_exact_lookup)
                    if usage is None:
                        continue
                    pattern, lookup_type = usage
                    usage_type, safe, reason = USAGE_SAFETY[pattern]
                    usages.append(
                        ContextUsage(
                            pattern=pattern,
                            usage_type=usage_type,
                            widget=cls.name,
                            method=method.name,
                            lookup_type=lookup_type,
                            ssr_safe=safe,
                            reason=reason,
                            location=SourceLocation(line=node.line, column=node.column, method=method.name),
                        )
                    )
        return usages

    @staticmethod
    def _classify(
        node: ast.Node,
        inherited: set[str],
        skip_exact_lookup: bool,
    ) -> tuple[UsagePattern, str | None] | None:
        if isinstance(node, ast.CallExpression):
            if _is_notify_call(node):
                return UsagePattern.NOTIFY_LISTENERS, None
            callee = node.callee
            if isinstance(callee, ast.MemberExpression):
                obj = callee.object
                if callee.property == "of" and isinstance(obj, ast.Identifier):
                    if obj.name == NAVIGATOR:
                        return UsagePattern.NAVIGATION_ACCESS, NAVIGATOR
                    if obj.name in inherited or obj.name in FRAMEWORK_LOOKUPS:
                        return UsagePattern.INHERITED_LOOKUP, obj.name
                if callee.property == EXACT_TYPE_LOOKUP and not skip_exact_lookup:
                    lookup = node.type_arguments[0] if node.type_arguments else None
                    return UsagePattern.DEPENDENCY_LOOKUP, lookup
                if callee.property in PROVIDER_READ_METHODS and isinstance(obj, ast.Identifier) \
                        and (node.type_arguments or obj.name == "context"):
                    lookup = node.type_arguments[0] if node.type_arguments else None
                    return PROVIDER_READ_METHODS[callee.property], lookup
        if isinstance(node, ast.MemberExpression) and isinstance(node.object, ast.Identifier) \
                and node.object.name == "context" and node.property in CONTEXT_SHORTCUTS:
            return UsagePattern.INHERITED_LOOKUP, CONTEXT_SHORTCUTS[node.property]
        found = widget_constructor(node)
        if found is not None and found[0] in CONSUMER_WIDGETS:
            return UsagePattern.CONSUMER_WIDGET, found[1][0] if found[1] else None
        return None

    # ── Dependencies ──

    def _dependencies(
        self,
        providers: list[ContextProvider],
        usages: list[ContextUsage],
    ) -> list[ContextDependency]:
        by_type: dict[str, ContextProvider] = {}
        for p in providers:
            if p.value_type and p.value_type not in by_type:
                by_type[p.value_type] = p

        state_to_widget = {state: widget for widget, state in self.widgets.state_links.items()}
        tree = self.widgets.widget_tree
        dependencies: list[ContextDependency] = []
        for usage in usages:
            provider = by_type.get(usage.lookup_type or "")
            if provider is None:
                continue
            consumer = state_to_widget.get(usage.widget, usage.widget)
            path = _ancestor_path(tree, consumer, provider) if tree else None
            dependencies.append(
                ContextDependency(
                    provider_kind=provider.provider_kind,
                    provider_name=provider.name,
                    consumer_widget=consumer,
                    consumer_location=usage.location,
                    access_path=path or [],
                    resolved=path is not None,
                )
            )
        return dependencies

    def _check_unused(self, providers: list[ContextProvider], usages: list[ContextUsage]) -> None:
        looked_up = {u.lookup_type for u in usages if u.lookup_type}
        for p in providers:
            if p.provider_kind == ProviderKind.PROVIDER and p.value_type and p.value_type not in looked_up:
                self._issue(
                    "unused-provider",
                    f"{p.name} is provided but never looked up in this file",
                    Severity.INFO,
                    p.line,
                    p.name,
                )


def _provides(node: WidgetNode, provider: ContextProvider) -> bool:
    if provider.provider_kind == ProviderKind.PROVIDER:
        return node.widget in PROVIDER_CONSTRUCTORS and node.type_arguments[:1] == [provider.value_type]
    if provider.provider_kind == ProviderKind.CHANGE_NOTIFIER:
        return node.widget in PROVIDER_CONSTRUCTORS and node.type_arguments[:1] == [provider.name]
    return node.widget == provider.name


def _ancestor_path(root: WidgetNode, consumer: str, provider: ContextProvider) -> list[str] | None:
    """Names from the nearest providing ancestor down to the first `consumer` node."""
    stack: list[tuple[WidgetNode, list[WidgetNode]]] = [(root, [])]
    while stack:
        node, ancestors = stack.pop()
        if node.widget == consumer:
            for i in range(len(ancestors) - 1, -1, -1):
                if _provides(ancestors[i], provider):
                    return [a.widget for a in ancestors[i:]] + [node.widget]
        chain = ancestors + [node]
        for child in reversed(node.children):
            stack.append((child, chain))
    return None
