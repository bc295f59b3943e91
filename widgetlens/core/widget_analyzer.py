"""
Widget Analyzer — Classifies classes into widget kinds and rebuilds the widget tree.

Phases:
1. Extract classes and functions, classifying each class by its superclass
2. Extract imports
3. Find the entry point (`main`) and its root widget
4. Reconstruct the widget tree from `build()` return expressions

Tree reconstruction tracks the classes on the current path and stops at a
configured depth and node budget, so self- or mutually-referential widgets
terminate and classes shared along many paths cannot blow the tree up.
"""

from __future__ import annotations

import logging

from widgetlens.core.expressions import (
    infer_type,
    is_call_to,
    literal_value,
    param_names,
    return_values,
    widget_constructor,
)
from widgetlens.models import ast_nodes as ast
from widgetlens.models.import_models import ImportInfo, ImportSpec
from widgetlens.models.issue_models import Severity, SourceLocation, ValidationResult
from widgetlens.models.widget_models import (
    ConstructorInfo,
    EntryPoint,
    FieldInfo,
    FunctionInfo,
    MethodInfo,
    Widget,
    WidgetAnalysisResult,
    WidgetKind,
    WidgetNode,
    WidgetSummary,
)

logger = logging.getLogger("widgetlens.widgets")

STATELESS_BASE = "StatelessWidget"
STATEFUL_BASE = "StatefulWidget"
STATE_BASE = "State"
ENTRY_FUNCTION = "main"
BOOTSTRAP_FUNCTION = "runApp"

DEFAULT_MAX_TREE_DEPTH = 64
DEFAULT_MAX_TREE_NODES = 2000


def classify_widget(superclass: str | None) -> WidgetKind:
    """Widget kind from a superclass name (the `State<X>` generic is already stripped)."""
    if not superclass:
        return WidgetKind.COMPONENT
    base = superclass.rsplit(".", 1)[-1]
    if base == STATELESS_BASE:
        return WidgetKind.STATELESS
    if base == STATEFUL_BASE:
        return WidgetKind.STATEFUL
    if base.startswith(STATE_BASE):
        return WidgetKind.STATE
    return WidgetKind.COMPONENT


def create_state_target(cls: ast.ClassDeclaration) -> str | None:
    """Class instantiated by `createState() { return new X(); }`, if any."""
    method = cls.method("createState")
    if method is None:
        return None
    for value in return_values(method.body):
        if isinstance(value, (ast.NewExpression, ast.CallExpression)):
            found = widget_constructor(value)
            if found:
                return found[0]
        if isinstance(value, ast.Identifier):
            return value.name
    return None


def link_state_classes(classes: list[ast.ClassDeclaration]) -> dict[str, str]:
    """Map stateful widget name -> state class name.

    A `createState()` target wins; otherwise a state class declared as
    `State<Widget>` claims its widget.
    """
    by_name = {c.name: c for c in classes}
    links: dict[str, str] = {}
    for cls in classes:
        if classify_widget(cls.superclass) != WidgetKind.STATEFUL:
            continue
        target = create_state_target(cls)
        if target and target in by_name:
            links[cls.name] = target
    for cls in classes:
        if classify_widget(cls.superclass) != WidgetKind.STATE or not cls.type_arguments:
            continue
        managed = cls.type_arguments[0]
        if managed in by_name and managed not in links:
            links[managed] = cls.name
    return links


class WidgetAnalyzer:
    """Extracts widget metadata and the widget tree from one Program."""

    def __init__(
        self,
        program: ast.Program,
        max_tree_depth: int = DEFAULT_MAX_TREE_DEPTH,
        max_tree_nodes: int = DEFAULT_MAX_TREE_NODES,
    ) -> None:
        self.program = program
        self.max_tree_depth = max_tree_depth
        self.max_tree_nodes = max_tree_nodes
        self._tree_nodes = 0
        self.classes: dict[str, ast.ClassDeclaration] = {}
        self.errors: list[ValidationResult] = []
        self._kinds: dict[str, WidgetKind] = {}
        self._state_links: dict[str, str] = {}

    def analyze(self) -> WidgetAnalysisResult:
        widgets = self._extract_widgets()
        functions = self._extract_functions()
        imports = self._extract_imports()
        entry_point = self._find_entry_point()
        root = entry_point.root_widget if entry_point else None

        tree = None
        if root:
            tree = self._build_class_node(root, (), depth=0, parent=None, path=frozenset(), line=entry_point.line)
            if root not in self.classes:
                self._issue(
                    "unknown-root-widget",
                    f"Root widget '{root}' is not declared in this file",
                    Severity.WARNING,
                    entry_point.line,
                    affected=root,
                )

        external = sorted({
            i.source for i in imports if not i.source.startswith((".", "/"))
        })
        summary = WidgetSummary(
            widgets=len(widgets),
            stateless=sum(1 for w in widgets if w.kind == WidgetKind.STATELESS),
            stateful=sum(1 for w in widgets if w.kind == WidgetKind.STATEFUL),
            state=sum(1 for w in widgets if w.kind == WidgetKind.STATE),
            component=sum(1 for w in widgets if w.kind == WidgetKind.COMPONENT),
            functions=len(functions),
            imports=len(imports),
            entry_point=entry_point.function if entry_point else None,
            root_widget=root,
            tree_nodes=sum(1 for _ in tree.iter_nodes()) if tree else 0,
            tree_depth=tree.max_depth() if tree else 0,
        )
        logger.debug(
            f"Widgets: {summary.widgets} ({summary.stateful} stateful, "
            f"{summary.stateless} stateless), root={root}"
        )

        return WidgetAnalysisResult(
            widgets=widgets,
            functions=functions,
            imports=imports,
            external_dependencies=external,
            state_links=dict(self._state_links),
            entry_point=entry_point,
            root_widget=root,
            widget_tree=tree,
            errors=self.errors,
            summary=summary,
        )

    def _issue(
        self,
        type_: str,
        message: str,
        severity: Severity,
        line: int,
        affected: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        self.errors.append(
            ValidationResult(
                type=type_,
                message=message,
                severity=severity,
                location=SourceLocation(line=line),
                affected_item=affected,
                suggestion=suggestion,
            )
        )

    # ── Phase 1: classes and functions ──

    def _extract_widgets(self) -> list[Widget]:
        widgets: list[Widget] = []
        for node in self.program.body:
            if not isinstance(node, ast.ClassDeclaration):
                continue
            if node.name in self.classes:
                self._issue(
                    "duplicate-class",
                    f"Class '{node.name}' is declared more than once; the last declaration wins",
                    Severity.WARNING,
                    node.line,
                    affected=node.name,
                )
                widgets = [w for w in widgets if w.name != node.name]
            self.classes[node.name] = node
            widgets.append(self._widget_from_class(node))

        self._kinds = {w.name: w.kind for w in widgets}
        self._state_links = link_state_classes(list(self.classes.values()))
        return widgets

    def _widget_from_class(self, cls: ast.ClassDeclaration) -> Widget:
        method_names = {m.name for m in cls.methods}
        fields = [
            FieldInfo(
                name=f.name,
                type=infer_type(f.initializer),
                initial_value=literal_value(f.initializer),
                is_static=f.is_static,
                line=f.line,
            )
            for f in cls.fields
        ]

        constructor_info = None
        methods: list[MethodInfo] = []
        for m in cls.methods:
            if m.name == "constructor":
                constructor_info = ConstructorInfo(
                    params=param_names(m.params),
                    calls_super=any(
                        isinstance(n, ast.CallExpression)
                        and isinstance(n.callee, ast.Identifier)
                        and n.callee.name == "super"
                        for n in ast.walk(m.body)
                    ) if m.body else False,
                    line=m.line,
                )
                continue
            refs, calls = _this_references(m, method_names)
            methods.append(
                MethodInfo(
                    name=m.name,
                    params=param_names(m.params),
                    is_async=m.is_async,
                    is_static=m.is_static,
                    field_references=refs,
                    method_calls=calls,
                    line=m.line,
                )
            )

        return Widget(
            name=cls.name,
            kind=classify_widget(cls.superclass),
            superclass_name=cls.superclass,
            type_arguments=list(cls.type_arguments),
            constructor_info=constructor_info,
            fields=fields,
            methods=methods,
            line=cls.line,
        )

    def _extract_functions(self) -> list[FunctionInfo]:
        return [
            FunctionInfo(
                name=n.name,
                params=param_names(n.params),
                is_async=n.is_async,
                line=n.line,
            )
            for n in self.program.body
            if isinstance(n, ast.FunctionDeclaration)
        ]

    # ── Phase 2: imports ──

    def _extract_imports(self) -> list[ImportInfo]:
        imports: list[ImportInfo] = []
        for node in self.program.body:
            if not isinstance(node, ast.ImportDeclaration):
                continue
            items = [s.local for s in node.specifiers]
            if node.default_binding:
                items.insert(0, node.default_binding)
            if node.namespace:
                items.append(node.namespace)
            imports.append(
                ImportInfo(
                    source=node.source,
                    items=items,
                    specifiers=[ImportSpec(imported=s.imported, local=s.local) for s in node.specifiers],
                    default_binding=node.default_binding,
                    namespace=node.namespace,
                    line=node.line,
                )
            )
        return imports

    # ── Phase 3: entry point ──

    def _find_entry_point(self) -> EntryPoint | None:
        main = next(
            (
                n for n in self.program.body
                if isinstance(n, ast.FunctionDeclaration) and n.name == ENTRY_FUNCTION
            ),
            None,
        )
        if main is None or main.body is None:
            self._issue(
                "missing-entry-point",
                f"No '{ENTRY_FUNCTION}' function found; widget tree not reconstructed",
                Severity.INFO,
                0,
            )
            return None

        locals_: dict[str, ast.Node] = {
            n.name: n.initializer
            for n in ast.walk(main.body)
            if isinstance(n, ast.VariableDeclaration) and n.initializer is not None
        }

        for node in ast.walk(main.body):
            if is_call_to(node, BOOTSTRAP_FUNCTION) and node.arguments:
                root = _root_reference(node.arguments[0], locals_)
                return EntryPoint(
                    function=main.name, root_widget=root, via=BOOTSTRAP_FUNCTION, line=node.line
                )
            if isinstance(node, ast.ReturnStatement) and node.argument is not None:
                root = _root_reference(node.argument, locals_)
                if root:
                    return EntryPoint(function=main.name, root_widget=root, via="return", line=node.line)

        self._issue(
            "missing-root-widget",
            f"'{ENTRY_FUNCTION}' neither returns a widget nor calls {BOOTSTRAP_FUNCTION}()",
            Severity.WARNING,
            main.line,
            suggestion=f"Call {BOOTSTRAP_FUNCTION}(new App()) from {ENTRY_FUNCTION}()",
        )
        return EntryPoint(function=main.name, line=main.line)

    # ── Phase 4: widget tree ──

    def _build_method_for(self, name: str) -> tuple[ast.MethodDeclaration | None, str | None]:
        """The build method rendering class `name`, and the state class it lives in."""
        cls = self.classes.get(name)
        if cls is None:
            return None, None
        if self._kinds.get(name) == WidgetKind.STATEFUL:
            state_name = self._state_links.get(name)
            state_cls = self.classes.get(state_name) if state_name else None
            if state_cls is not None:
                return state_cls.method("build"), state_name
        return cls.method("build"), None

    def _build_class_node(
        self,
        name: str,
        type_arguments: tuple[str, ...],
        depth: int,
        parent: str | None,
        path: frozenset[str],
        line: int = 0,
        arguments: tuple[ast.Node, ...] = (),
    ) -> WidgetNode:
        kind = self._kinds.get(name)
        common = dict(
            widget=name, kind=kind, depth=depth, parent=parent,
            type_arguments=list(type_arguments), line=line,
        )
        self._tree_nodes += 1
        if name in path:
            return WidgetNode(**common, recursive=True)
        if depth >= self.max_tree_depth:
            self._note_truncation(name, line, f"exceeds depth {self.max_tree_depth}")
            return WidgetNode(**common, truncated=True)
        if self._tree_nodes > self.max_tree_nodes:
            self._note_truncation(name, line, f"exceeds {self.max_tree_nodes} nodes")
            return WidgetNode(**common, truncated=True)

        children: list[WidgetNode] = []
        if kind is not None:
            inner_path = path | {name}
            build, state_name = self._build_method_for(name)
            if state_name:
                inner_path = inner_path | {state_name}
            if build is not None:
                for value in return_values(build.body):
                    children.extend(self._expand(value, depth + 1, name, inner_path))
            for arg in arguments:
                children.extend(self._expand(arg, depth + 1, name, path))
        else:
            for arg in arguments:
                children.extend(self._expand(arg, depth + 1, name, path))

        return WidgetNode(**common, children=children)

    def _expand(
        self,
        expr: ast.Node,
        depth: int,
        parent: str,
        path: frozenset[str],
    ) -> list[WidgetNode]:
        """Widget nodes reachable from one expression, unwrapping named arguments.

        Iterative over the expression itself, so long member or call chains
        cannot exhaust the stack; recursion happens only per widget level.
        """
        nodes: list[WidgetNode] = []
        stack = [expr]
        while stack:
            current = stack.pop()
            found = widget_constructor(current)
            if found is not None:
                name, type_arguments = found
                nodes.append(
                    self._build_class_node(
                        name, type_arguments, depth, parent, path,
                        line=current.line, arguments=current.arguments,
                    )
                )
                continue

            if depth > self.max_tree_depth:
                self._note_truncation(parent, current.line, f"exceeds depth {self.max_tree_depth}")
                continue

            nested: list[ast.Node] = []
            if isinstance(current, ast.ObjectLiteral):
                nested = [p.value if isinstance(p, ast.Property) else p for p in current.properties]
            elif isinstance(current, ast.ArrayLiteral):
                nested = list(current.elements)
            elif isinstance(current, ast.SpreadElement):
                nested = [current.argument]
            elif isinstance(current, ast.ConditionalExpression):
                nested = [current.consequent, current.alternate]
            elif isinstance(current, ast.LogicalExpression):
                nested = [current.right]
            elif isinstance(current, ast.ArrowFunction):
                nested = return_values(current.body)
            elif isinstance(current, (ast.CallExpression, ast.NewExpression)):
                nested = list(current.arguments)
                if isinstance(current.callee, ast.MemberExpression):
                    nested.insert(0, current.callee.object)
            elif isinstance(current, ast.MemberExpression):
                nested = [current.object]
            stack.extend(reversed(nested))
        return nodes

    def _note_truncation(self, name: str, line: int, reason: str) -> None:
        if any(e.type == "widget-tree-truncated" for e in self.errors):
            return
        self._issue(
            "widget-tree-truncated",
            f"Widget tree {reason} at '{name}'; deeper nodes omitted",
            Severity.WARNING,
            line,
            affected=name,
        )


def _this_references(
    method: ast.MethodDeclaration,
    method_names: set[str],
) -> tuple[list[str], list[str]]:
    """(`this.<field>` names, `this.<method>()` names) used in a method body."""
    if method.body is None:
        return [], []
    refs: list[str] = []
    calls: list[str] = []
    callees: set[int] = set()
    for node in ast.walk(method.body):
        if isinstance(node, ast.CallExpression):
            callees.add(id(node.callee))
            target = ast.this_member(node.callee)
            if target in method_names and target not in calls:
                calls.append(target)
        if id(node) in callees:
            continue
        name = ast.this_member(node)
        if name and name not in method_names and name not in refs:
            refs.append(name)
    return refs, calls


def _root_reference(expr: ast.Node, locals_: dict[str, ast.Node], _hops: int = 0) -> str | None:
    """Unwrap `new X(...)`, `X(...)`, `runApp(...)` or a bare identifier to a widget name."""
    if _hops > 8:
        return None
    if is_call_to(expr, BOOTSTRAP_FUNCTION) and expr.arguments:
        return _root_reference(expr.arguments[0], locals_, _hops + 1)
    found = widget_constructor(expr)
    if found:
        return found[0]
    if isinstance(expr, ast.CallExpression) and isinstance(expr.callee, ast.Identifier):
        return expr.callee.name
    if isinstance(expr, ast.Identifier):
        if expr.name in locals_:
            return _root_reference(locals_[expr.name], locals_, _hops + 1)
        return expr.name
    return None
