"""
State Analyzer — Lifecycle and update discipline of state-holder classes.

Only classes classified as `state` are analyzed. Extraction walks every method
once and records raw facts (mutations, reads, setState calls, event handler
bindings, this-method calls). Validation then derives ValidatedMutation records,
lifecycle findings and update-call findings from those facts.

Render-path calls (random values, timestamps, timers) are also collected from
the build path of every stateless and state class, for the SSR analyzer.

Scores:
    complexity = min(10·fields, 40) + min(5·updates, 30) + min(2·handlers, 20)
    health     = 100 − 10·errors − 2·warnings − 10 if complexity > 70
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from widgetlens.core.expressions import (
    constructor_name,
    infer_type,
    literal_value,
    walk_shallow,
    widget_constructor,
)
from widgetlens.core.scorer import calculate_complexity, calculate_health
from widgetlens.core.widget_analyzer import create_state_target
from widgetlens.models import ast_nodes as ast
from widgetlens.models.issue_models import (
    Severity,
    SourceLocation,
    ValidationResult,
    count_by_severity,
)
from widgetlens.models.state_models import (
    DependencyGraph,
    EventHandler,
    LifecycleMethod,
    RawMutation,
    RenderPathCall,
    StateAnalysisResult,
    StateClassMetadata,
    StateField,
    StateSummary,
    StateUpdateCall,
    ValidatedMutation,
)
from widgetlens.models.widget_models import WidgetAnalysisResult, WidgetKind

logger = logging.getLogger("widgetlens.state")

SET_STATE = "setState"
BUILD_METHOD = "build"
INLINE_HANDLER = "<inline>"
EVENT_HANDLER_PATTERN = re.compile(r"^on[A-Z]")

# Methods where direct field writes are expected without setState()
MUTATION_EXEMPT_METHODS = frozenset({"constructor", "initState", "didUpdateWidget", "dispose"})

# Methods that run while a widget is rendered, on the server as well as the client
RENDER_PATH_METHODS: dict[WidgetKind, tuple[str, ...]] = {
    WidgetKind.STATELESS: ("constructor", "build"),
    WidgetKind.STATE: ("constructor", "initState", "build"),
}
FIELD_INITIALIZER = "<field>"

NONDETERMINISTIC_CALLS = frozenset({"Math.random", "Date.now", "performance.now", "crypto.randomUUID"})
TIMER_CALLS = frozenset({"setTimeout", "setInterval", "setImmediate", "requestAnimationFrame"})


@dataclass(frozen=True)
class LifecycleHook:
    name: str
    phase: str
    must_call_super: bool
    missing_super_severity: Severity | None = None


LIFECYCLE_HOOKS: dict[str, LifecycleHook] = {
    "initState": LifecycleHook("initState", "setup", True, Severity.ERROR),
    "dispose": LifecycleHook("dispose", "teardown", True, Severity.ERROR),
    "didUpdateWidget": LifecycleHook("didUpdateWidget", "update", True, Severity.WARNING),
    "build": LifecycleHook("build", "render", False),
}


@dataclass
class _UpdateScan:
    location: SourceLocation
    method: str
    object_keys: list[str] = field(default_factory=list)
    deferred: bool = False


@dataclass
class _HandlerScan:
    event: str
    handler: str
    target: str | None
    component: str | None
    method: str
    location: SourceLocation
    inline: ast.Node | None = None


@dataclass
class _MethodScan:
    name: str
    mutations: list[RawMutation] = field(default_factory=list)
    reads: list[str] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    updates: list[_UpdateScan] = field(default_factory=list)
    handlers: list[_HandlerScan] = field(default_factory=list)


def is_set_state_call(node: ast.Node) -> bool:
    if not isinstance(node, ast.CallExpression):
        return False
    callee = node.callee
    if isinstance(callee, ast.Identifier):
        return callee.name == SET_STATE
    return ast.this_member(callee) == SET_STATE


def _root_this_field(node: ast.Node) -> str | None:
    """`this.f`, `this.f.x` and `this.f[i]` all write into field `f`."""
    while isinstance(node, (ast.MemberExpression, ast.IndexExpression)):
        name = ast.this_member(node)
        if name is not None:
            return name
        node = node.object
    return None


def _calls_super(body: ast.Block | None, name: str) -> bool:
    if body is None:
        return False
    for node in ast.walk(body):
        if isinstance(node, ast.CallExpression) and isinstance(node.callee, ast.MemberExpression):
            obj = node.callee.object
            if isinstance(obj, ast.Identifier) and obj.name == "super" and node.callee.property == name:
                return True
    return False


def _has_side_effects(body: ast.Block | None) -> bool:
    if body is None:
        return False
    for stmt in body.body:
        if not isinstance(stmt, ast.ExpressionStatement):
            continue
        expr = stmt.expression
        if isinstance(expr, ast.CallExpression) and isinstance(expr.callee, ast.MemberExpression) \
                and isinstance(expr.callee.object, ast.Identifier) \
                and expr.callee.object.name == "super":
            continue
        if isinstance(expr, (ast.AssignmentExpression, ast.UpdateExpression, ast.CallExpression)):
            return True
    return False


def _add(mapping: dict[str, list[str]], key: str, value: str) -> None:
    bucket = mapping.setdefault(key, [])
    if value not in bucket:
        bucket.append(value)


def render_call(node: ast.Node) -> tuple[str, str] | None:
    """(call name, category) when `node` is a nondeterministic or timer call."""
    if isinstance(node, ast.NewExpression):
        if constructor_name(node) == "Date" and not node.arguments:
            return "new Date", "nondeterministic"
        return None
    if not isinstance(node, ast.CallExpression):
        return None
    name = ast.dotted_name(node.callee)
    if name.startswith("window."):
        name = name[len("window."):]
    if name in NONDETERMINISTIC_CALLS:
        return name, "nondeterministic"
    if name in TIMER_CALLS:
        return name, "timer"
    return None


class StateAnalyzer:
    """Analyzes every state-kind class of one Program."""

    def __init__(self, program: ast.Program, widgets: WidgetAnalysisResult) -> None:
        self.program = program
        self.widgets = widgets
        self.classes: dict[str, ast.ClassDeclaration] = {
            n.name: n for n in program.body if isinstance(n, ast.ClassDeclaration)
        }
        self.validation: list[ValidationResult] = []

    def analyze(self) -> StateAnalysisResult:
        self._validate_stateful_widgets()

        managed_by = {state: widget for widget, state in self.widgets.state_links.items()}
        metadata: list[StateClassMetadata] = []
        for widget in self.widgets.of_kind(WidgetKind.STATE):
            cls = self.classes.get(widget.name)
            if cls is None:
                continue
            managed = managed_by.get(cls.name)
            if managed is None:
                self._issue(
                    "unlinked-state-class",
                    f"State class '{cls.name}' is not linked to any stateful widget",
                    Severity.INFO,
                    SourceLocation(line=cls.line),
                    affected=cls.name,
                )
            metadata.append(self._analyze_class(cls, managed))

        fields = sum(len(m.state_fields) for m in metadata)
        updates = sum(len(m.state_update_calls) for m in metadata)
        handlers = sum(len(m.event_handlers) for m in metadata)
        errors = count_by_severity(self.validation, Severity.ERROR)
        warnings = count_by_severity(self.validation, Severity.WARNING)
        complexity = calculate_complexity(fields, updates, handlers)

        summary = StateSummary(
            state_classes=len(metadata),
            state_fields=fields,
            set_state_calls=updates,
            lifecycle_methods=sum(len(m.lifecycle_methods) for m in metadata),
            event_handlers=handlers,
            validation_issues=len(self.validation),
            errors=errors,
            warnings=warnings,
            complexity_score=complexity,
            health_score=calculate_health(errors, warnings, complexity),
        )
        logger.debug(
            f"State: {summary.state_classes} classes, {summary.set_state_calls} setState calls, "
            f"{errors} errors, {warnings} warnings, health={summary.health_score}"
        )
        return StateAnalysisResult(
            state_classes=metadata,
            dependency_graph=_merge_graphs(metadata),
            render_path_calls=self._render_path_calls(managed_by),
            validation_results=self.validation,
            summary=summary,
        )

    def _issue(
        self,
        type_: str,
        message: str,
        severity: Severity,
        location: SourceLocation | None,
        affected: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        self.validation.append(
            ValidationResult(
                type=type_,
                message=message,
                severity=severity,
                location=location,
                suggestion=suggestion,
                affected_item=affected,
            )
        )

    # ── Render path ──

    def _render_path_calls(self, managed_by: dict[str, str]) -> list[RenderPathCall]:
        """Nondeterministic and timer calls made while rendering, outside closures."""
        found: list[RenderPathCall] = []
        for widget in self.widgets.widgets:
            methods = RENDER_PATH_METHODS.get(widget.kind)
            cls = self.classes.get(widget.name)
            if methods is None or cls is None:
                continue
            rendered = managed_by.get(cls.name, cls.name)

            bodies: list[tuple[str, ast.Node]] = []
            if widget.kind == WidgetKind.STATE:
                bodies.extend(
                    (FIELD_INITIALIZER, f.initializer)
                    for f in cls.fields
                    if f.initializer is not None and not f.is_static
                    and not isinstance(f.initializer, ast.ArrowFunction)
                )
            for name in methods:
                method = cls.method(name)
                if method is not None and method.body is not None:
                    bodies.append((name, method.body))

            for method_name, body in bodies:
                for node in walk_shallow(body):
                    hit = render_call(node)
                    if hit is None:
                        continue
                    call, category = hit
                    found.append(
                        RenderPathCall(
                            call=call,
                            category=category,
                            widget=rendered,
                            method=method_name,
                            location=SourceLocation(
                                line=node.line, column=node.column, method=method_name
                            ),
                        )
                    )
        return found

    # ── Stateful widget linkage ──

    def _validate_stateful_widgets(self) -> None:
        for widget in self.widgets.of_kind(WidgetKind.STATEFUL):
            cls = self.classes.get(widget.name)
            if cls is None:
                continue
            location = SourceLocation(line=cls.line)
            if cls.method("createState") is None:
                self._issue(
                    "missing-create-state",
                    f"Stateful widget '{cls.name}' has no createState() method",
                    Severity.WARNING,
                    location,
                    affected=cls.name,
                    suggestion=f"Add createState() {{ return new _{cls.name}State(); }}",
                )
                continue
            target = create_state_target(cls)
            if target is None:
                self._issue(
                    "unparsable-create-state",
                    f"createState() of '{cls.name}' does not return a state instance",
                    Severity.WARNING,
                    location,
                    affected=cls.name,
                )
            elif target not in self.classes:
                self._issue(
                    "missing-state-class",
                    f"createState() of '{cls.name}' returns undeclared class '{target}'",
                    Severity.WARNING,
                    location,
                    affected=target,
                )
            elif self.widgets.widget(target) and self.widgets.widget(target).kind != WidgetKind.STATE:
                self._issue(
                    "invalid-state-class",
                    f"'{target}' returned by createState() of '{cls.name}' does not extend State",
                    Severity.ERROR,
                    location,
                    affected=target,
                    suggestion=f"Declare it as 'class {target} extends State<{cls.name}>'",
                )

    # ── Per-class analysis ──

    def _analyze_class(self, cls: ast.ClassDeclaration, managed: str | None) -> StateClassMetadata:
        method_names = {m.name for m in cls.methods}
        declared = self._declared_fields(cls)
        scans = {m.name: self._scan_method(m, method_names) for m in cls.methods}

        update_calls = self._validate_update_calls(cls, scans, declared)
        fields = self._build_fields(cls, scans, declared)
        lifecycle = self._lifecycle_methods(cls)
        reach_set_state = self._set_state_reach(scans)
        handlers = self._event_handlers(cls, scans, method_names, reach_set_state)
        graph = self._dependency_graph(scans, declared)

        other = [
            m.name for m in cls.methods
            if m.name not in LIFECYCLE_HOOKS and m.name != "constructor"
        ]
        return StateClassMetadata(
            name=cls.name,
            managed_widget=managed,
            state_fields=fields,
            lifecycle_methods=lifecycle,
            state_update_calls=update_calls,
            event_handlers=handlers,
            other_methods=other,
            dependency_graph=graph,
            line=cls.line,
        )

    @staticmethod
    def _declared_fields(cls: ast.ClassDeclaration) -> dict[str, tuple[ast.Node | None, int]]:
        """Instance fields: class field declarations plus `this.x = ...` in the constructor."""
        declared: dict[str, tuple[ast.Node | None, int]] = {}
        for f in cls.fields:
            if not f.is_static:
                declared[f.name] = (f.initializer, f.line)
        ctor = cls.method("constructor")
        if ctor is not None and ctor.body is not None:
            for node in ast.walk(ctor.body):
                if isinstance(node, ast.AssignmentExpression) and node.operator == "=":
                    name = ast.this_member(node.target)
                    if name and name not in declared:
                        declared[name] = (node.value, node.line)
        return declared

    def _scan_method(self, method: ast.MethodDeclaration, method_names: set[str]) -> _MethodScan:
        scan = _MethodScan(name=method.name)
        if method.body is None:
            return scan

        # deferred: inside a closure that runs later, e.g. an event handler
        stack: list[tuple[ast.Node, SourceLocation | None, str | None, bool]] = [
            (method.body, None, None, False)
        ]
        while stack:
            node, update, component, deferred = stack.pop()
            pushed: list[ast.Node] | None = None

            if isinstance(node, ast.CallExpression) and is_set_state_call(node):
                update = SourceLocation(line=node.line, column=node.column, method=method.name)
                keys: list[str] = []
                if node.arguments and isinstance(node.arguments[0], ast.ObjectLiteral):
                    keys = [
                        p.key for p in node.arguments[0].properties
                        if isinstance(p, ast.Property) and p.key
                    ]
                scan.updates.append(
                    _UpdateScan(location=update, method=method.name, object_keys=keys, deferred=deferred)
                )
                pushed = list(node.arguments)
            elif isinstance(node, ast.CallExpression):
                target = ast.this_member(node.callee)
                if target in method_names and target not in scan.calls:
                    scan.calls.append(target)
            elif isinstance(node, ast.AssignmentExpression):
                name = _root_this_field(node.target)
                if name is not None:
                    scan.mutations.append(
                        RawMutation(
                            field=name, method=method.name, operator=node.operator,
                            line=node.line, column=node.column, update_call=update,
                        )
                    )
                    if node.operator != "=" or ast.this_member(node.target) is None:
                        scan.reads.append(name)
                    pushed = [node.value]
            elif isinstance(node, ast.UpdateExpression):
                name = _root_this_field(node.argument)
                if name is not None:
                    scan.mutations.append(
                        RawMutation(
                            field=name, method=method.name, operator=node.operator,
                            line=node.line, column=node.column, update_call=update,
                        )
                    )
                    scan.reads.append(name)
                    pushed = []
            elif isinstance(node, ast.MemberExpression):
                name = ast.this_member(node)
                if name is not None and name not in method_names:
                    scan.reads.append(name)
            elif isinstance(node, ast.Property) and node.key \
                    and EVENT_HANDLER_PATTERN.match(node.key):
                scan.handlers.append(self._handler_scan(node, component, method.name))

            found = widget_constructor(node)
            if found is not None:
                component = found[0]

            children = pushed if pushed is not None else list(ast.children(node))
            if isinstance(node, ast.ArrowFunction):
                deferred = True
            for child in reversed(children):
                stack.append((child, update, component, deferred))
        return scan

    @staticmethod
    def _handler_scan(prop: ast.Property, component: str | None, method: str) -> _HandlerScan:
        value = prop.value
        location = SourceLocation(line=prop.line, column=prop.column, method=method)

        def scan(handler: str, target: str | None, inline: ast.Node | None = None) -> _HandlerScan:
            return _HandlerScan(
                event=prop.key, handler=handler, target=target, component=component,
                method=method, location=location, inline=inline,
            )

        name = ast.this_member(value)
        if name is not None:
            return scan(name, name)
        if isinstance(value, ast.Identifier):
            return scan(value.name, None)
        if isinstance(value, ast.ArrowFunction):
            body = value.body
            if isinstance(body, ast.Block) and len(body.body) == 1 \
                    and isinstance(body.body[0], ast.ExpressionStatement):
                body = body.body[0].expression
            if isinstance(body, ast.CallExpression) and not is_set_state_call(body):
                target = ast.this_member(body.callee)
                if target is not None:
                    return scan(target, target, value)
                if isinstance(body.callee, ast.Identifier):
                    return scan(body.callee.name, None, value)
            return scan(INLINE_HANDLER, None, value)
        return scan(INLINE_HANDLER, None)

    # ── Validation ──

    def _validate_update_calls(
        self,
        cls: ast.ClassDeclaration,
        scans: dict[str, _MethodScan],
        declared: dict[str, tuple[ast.Node | None, int]],
    ) -> list[StateUpdateCall]:
        calls: list[StateUpdateCall] = []
        for scan in scans.values():
            for update in scan.updates:
                written: list[str] = []
                for other in scans.values():
                    for m in other.mutations:
                        if m.update_call == update.location and m.field not in written:
                            written.append(m.field)
                for key in update.object_keys:
                    if key not in written:
                        written.append(key)

                issues: list[str] = []
                if not written:
                    issues.append("setState() writes no state fields")
                    self._issue(
                        "empty-state-update",
                        f"setState() in '{cls.name}.{update.method}' does not change any field",
                        Severity.WARNING,
                        update.location,
                        affected=update.method,
                        suggestion="Remove the call or assign the changed field inside the callback",
                    )
                for name in written:
                    if name not in declared:
                        issues.append(f"unknown field '{name}'")
                        self._issue(
                            "unknown-state-field",
                            f"setState() in '{cls.name}.{update.method}' writes undeclared field '{name}'",
                            Severity.ERROR,
                            update.location,
                            affected=name,
                            suggestion=f"Declare '{name}' as a field of {cls.name}",
                        )
                during_build = update.method == BUILD_METHOD and not update.deferred
                if during_build:
                    issues.append("setState() called during build")
                    self._issue(
                        "set-state-during-build",
                        f"setState() is called inside '{cls.name}.build'",
                        Severity.ERROR,
                        update.location,
                        affected=BUILD_METHOD,
                        suggestion="Move the update into an event handler or initState()",
                    )
                calls.append(
                    StateUpdateCall(
                        location=update.location,
                        method=update.method,
                        updates=written,
                        called_during_build=during_build,
                        is_valid=not issues,
                        issues=issues,
                    )
                )
        return calls

    def _build_fields(
        self,
        cls: ast.ClassDeclaration,
        scans: dict[str, _MethodScan],
        declared: dict[str, tuple[ast.Node | None, int]],
    ) -> list[StateField]:
        fields: list[StateField] = []
        for name, (initializer, line) in declared.items():
            mutations: list[ValidatedMutation] = []
            used_in: list[str] = []
            mutated_in: list[str] = []
            for scan in scans.values():
                if name in scan.reads and scan.name != "constructor":
                    used_in.append(scan.name)
                for raw in scan.mutations:
                    if raw.field != name:
                        continue
                    wrapped = raw.update_call is not None
                    mutations.append(ValidatedMutation(mutation=raw, wrapped_in_state_update=wrapped))
                    if raw.method not in mutated_in:
                        mutated_in.append(raw.method)
                    if not wrapped and raw.method not in MUTATION_EXEMPT_METHODS:
                        self._issue(
                            "mutation-outside-set-state",
                            f"Field '{name}' is mutated in '{cls.name}.{raw.method}' outside setState()",
                            Severity.ERROR,
                            SourceLocation(line=raw.line, column=raw.column, method=raw.method),
                            affected=name,
                            suggestion="Wrap the change: this.setState(() => { ... })",
                        )

            if not used_in:
                self._issue(
                    "unused-state-field",
                    f"Field '{name}' of '{cls.name}' is never read",
                    Severity.WARNING,
                    SourceLocation(line=line),
                    affected=name,
                    suggestion="Remove the field or use it in build()",
                )
            fields.append(
                StateField(
                    name=name,
                    type=infer_type(initializer),
                    initial_value=literal_value(initializer),
                    mutations=mutations,
                    used_in_methods=used_in,
                    mutated_in_methods=mutated_in,
                    used_in_build=BUILD_METHOD in used_in,
                    line=line,
                )
            )
        return fields

    def _lifecycle_methods(self, cls: ast.ClassDeclaration) -> list[LifecycleMethod]:
        methods: list[LifecycleMethod] = []
        for m in cls.methods:
            hook = LIFECYCLE_HOOKS.get(m.name)
            if hook is None:
                continue
            calls_super = _calls_super(m.body, m.name)
            issues: list[str] = []
            if hook.must_call_super and not calls_super:
                issues.append(f"missing super.{m.name}()")
                self._issue(
                    "lifecycle-missing-super",
                    f"'{cls.name}.{m.name}' must call super.{m.name}()",
                    hook.missing_super_severity or Severity.WARNING,
                    SourceLocation(line=m.line, column=m.column, method=m.name),
                    affected=m.name,
                    suggestion=f"Call super.{m.name}() in {m.name}()",
                )
            methods.append(
                LifecycleMethod(
                    name=m.name,
                    calls_super=calls_super,
                    has_side_effects=_has_side_effects(m.body),
                    should_call_super=hook.must_call_super,
                    issues=issues,
                    line=m.line,
                )
            )
        return methods

    @staticmethod
    def _set_state_reach(scans: dict[str, _MethodScan]) -> set[str]:
        """Methods from which a setState() call is reachable via this-method calls."""
        reach = {name for name, scan in scans.items() if scan.updates}
        changed = True
        while changed:
            changed = False
            for name, scan in scans.items():
                if name not in reach and any(c in reach for c in scan.calls):
                    reach.add(name)
                    changed = True
        return reach

    def _event_handlers(
        self,
        cls: ast.ClassDeclaration,
        scans: dict[str, _MethodScan],
        method_names: set[str],
        reach_set_state: set[str],
    ) -> list[EventHandler]:
        handlers: list[EventHandler] = []
        for scan in scans.values():
            for h in scan.handlers:
                issues: list[str] = []
                if h.target is not None and h.target not in method_names:
                    issues.append(f"handler method '{h.target}' not found")
                    self._issue(
                        "missing-event-handler",
                        f"{h.event} in '{cls.name}.{h.method}' refers to missing method '{h.target}'",
                        Severity.ERROR,
                        h.location,
                        affected=h.target,
                        suggestion=f"Declare {h.target}() on {cls.name}",
                    )
                triggers = (h.target or h.handler) in reach_set_state
                if h.inline is not None:
                    triggers = triggers or _inline_triggers(h.inline, reach_set_state)
                handlers.append(
                    EventHandler(
                        event=h.event,
                        handler=h.handler,
                        component=h.component,
                        method=h.method,
                        triggers_set_state=triggers,
                        location=h.location,
                        is_valid=not issues,
                        issues=issues,
                    )
                )
        return handlers

    @staticmethod
    def _dependency_graph(
        scans: dict[str, _MethodScan],
        declared: dict[str, tuple[ast.Node | None, int]],
    ) -> DependencyGraph:
        state_to_methods: dict[str, list[str]] = {}
        method_to_state: dict[str, list[str]] = {}
        method_to_methods: dict[str, list[str]] = {}
        mutated_by: dict[str, set[str]] = {}

        for scan in scans.values():
            touched = [n for n in scan.reads if n in declared]
            touched += [m.field for m in scan.mutations if m.field in declared]
            for name in touched:
                _add(state_to_methods, name, scan.name)
                _add(method_to_state, scan.name, name)
            for callee in scan.calls:
                _add(method_to_methods, scan.name, callee)
            mutated_by[scan.name] = {m.field for m in scan.mutations if m.field in declared}

        event_to_state: dict[str, list[str]] = {}
        handlers = [h for scan in scans.values() for h in scan.handlers]
        for h in handlers:
            pending = [h.target] if h.target in scans else []
            if h.inline is not None:
                for node in ast.walk(h.inline):
                    if isinstance(node, ast.AssignmentExpression):
                        name = _root_this_field(node.target)
                    elif isinstance(node, ast.UpdateExpression):
                        name = _root_this_field(node.argument)
                    else:
                        name = None
                        callee = ast.this_member(node.callee) if isinstance(node, ast.CallExpression) else None
                        if callee in scans:
                            pending.append(callee)
                    if name in declared:
                        _add(event_to_state, h.event, name)
            seen: set[str] = set()
            while pending:
                current = pending.pop()
                if current in seen:
                    continue
                seen.add(current)
                pending.extend(method_to_methods.get(current, []))
            for method in sorted(seen):
                for name in sorted(mutated_by.get(method, ())):
                    _add(event_to_state, h.event, name)

        return DependencyGraph(
            state_to_methods=state_to_methods,
            method_to_state=method_to_state,
            event_to_state=event_to_state,
            method_to_methods=method_to_methods,
        )


def _inline_triggers(node: ast.Node, reach_set_state: set[str]) -> bool:
    for n in ast.walk(node):
        if is_set_state_call(n):
            return True
        if isinstance(n, ast.CallExpression) and ast.this_member(n.callee) in reach_set_state:
            return True
    return False


def _merge_graphs(classes: list[StateClassMetadata]) -> DependencyGraph:
    merged: dict[str, dict[str, list[str]]] = {
        "state_to_methods": {},
        "method_to_state": {},
        "event_to_state": {},
        "method_to_methods": {},
    }
    for meta in classes:
        graph = meta.dependency_graph
        for attr, target in merged.items():
            for key, values in getattr(graph, attr).items():
                for value in values:
                    _add(target, f"{meta.name}.{key}", f"{meta.name}.{value}")
    return DependencyGraph(**merged)
