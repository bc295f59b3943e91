"""
Expression Helpers — Small queries over AST expressions shared by the analyzers.
"""

from __future__ import annotations

from typing import Any, Iterator

from widgetlens.models import ast_nodes as ast

# Capitalized callees that are plainly not widgets
NON_WIDGET_CALLEES = frozenset({
    "Math", "Object", "Array", "String", "Number", "Boolean", "JSON", "Date",
    "Promise", "Map", "Set", "Error", "Symbol", "RegExp", "Duration",
})

MAX_LITERAL_DEPTH = 8


def infer_type(node: ast.Node | None) -> str:
    """Coarse type of an initializer expression."""
    if node is None:
        return "undefined"
    if isinstance(node, ast.Literal):
        return node.kind
    if isinstance(node, ast.ArrayLiteral):
        return "array"
    if isinstance(node, ast.ObjectLiteral):
        return "object"
    if isinstance(node, ast.ArrowFunction):
        return "function"
    if isinstance(node, ast.NewExpression):
        return constructor_name(node) or "object"
    if isinstance(node, ast.UnaryExpression) and node.operator == "-" \
            and isinstance(node.argument, ast.Literal) and node.argument.kind == "number":
        return "number"
    if isinstance(node, ast.UnaryExpression) and node.operator == "!":
        return "boolean"
    return "any"


def literal_value(node: ast.Node | None, _depth: int = 0) -> Any:
    """JSON-compatible value of a literal initializer; a short description otherwise."""
    if node is None:
        return None
    if _depth > MAX_LITERAL_DEPTH:
        return "..."
    if isinstance(node, ast.Literal):
        return node.value
    if isinstance(node, ast.UnaryExpression) and node.operator == "-" \
            and isinstance(node.argument, ast.Literal) and node.argument.kind == "number":
        return -node.argument.value
    if isinstance(node, ast.ArrayLiteral):
        return [literal_value(e, _depth + 1) for e in node.elements]
    if isinstance(node, ast.ObjectLiteral):
        return {
            p.key: literal_value(p.value, _depth + 1)
            for p in node.properties
            if isinstance(p, ast.Property) and p.key is not None
        }
    return describe(node)


def describe(node: ast.Node | None) -> str:
    """One-line rendering of an expression, for messages and summaries."""
    if node is None:
        return ""
    if isinstance(node, ast.Literal):
        return repr(node.value) if node.kind == "string" else node.raw
    if isinstance(node, (ast.Identifier, ast.ThisExpression, ast.MemberExpression)):
        return ast.dotted_name(node) or "<expression>"
    if isinstance(node, ast.NewExpression):
        prefix = "const new" if node.is_const else "new"
        return f"{prefix} {ast.dotted_name(node.callee)}(...)"
    if isinstance(node, ast.CallExpression):
        return f"{ast.dotted_name(node.callee) or '<call>'}(...)"
    if isinstance(node, ast.ArrowFunction):
        return "(...) => {...}"
    if isinstance(node, ast.ArrayLiteral):
        return "[...]"
    if isinstance(node, ast.ObjectLiteral):
        return "{...}"
    return "<expression>"


def constructor_name(node: ast.NewExpression | ast.CallExpression) -> str:
    """Last segment of a constructor callee: `new m.Text()` -> 'Text'."""
    name = ast.dotted_name(node.callee)
    return name.rsplit(".", 1)[-1] if name else ""


def widget_constructor(node: ast.Node) -> tuple[str, tuple[str, ...]] | None:
    """
    Recognize a widget instantiation.

    `new Text(...)`, `const new Text(...)` and capitalized bare calls
    `Text(...)` qualify. Returns (name, type arguments) or None.
    """
    if isinstance(node, ast.NewExpression):
        name = constructor_name(node)
        if name and name not in NON_WIDGET_CALLEES:
            return name, node.type_arguments
        return None
    if isinstance(node, ast.CallExpression) and isinstance(node.callee, ast.Identifier):
        name = node.callee.name
        if name[:1].isupper() and name not in NON_WIDGET_CALLEES:
            return name, node.type_arguments
    return None


def named_argument(node: ast.NewExpression | ast.CallExpression, key: str) -> ast.Node | None:
    """Value of `key` in the first object-literal argument, if present."""
    for arg in node.arguments:
        if isinstance(arg, ast.ObjectLiteral):
            for prop in arg.properties:
                if isinstance(prop, ast.Property) and prop.key == key:
                    return prop.value
    return None


def is_call_to(node: ast.Node, dotted: str) -> bool:
    return isinstance(node, ast.CallExpression) and ast.dotted_name(node.callee) == dotted


def walk_shallow(node: ast.Node) -> Iterator[ast.Node]:
    """Pre-order walk that does not descend into nested arrow functions."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        if current is not node and isinstance(current, ast.ArrowFunction):
            continue
        stack.extend(reversed(ast.children(current)))


def return_values(body: ast.Node | None) -> list[ast.Node]:
    """Arguments of the return statements that belong to `body` itself."""
    if body is None:
        return []
    if not isinstance(body, ast.Block):
        return [body]
    return [
        n.argument
        for n in walk_shallow(body)
        if isinstance(n, ast.ReturnStatement) and n.argument is not None
    ]


def param_names(params: tuple[ast.Parameter, ...]) -> list[str]:
    names: list[str] = []
    for p in params:
        names.extend(p.destructured if p.destructured else (p.name,))
    return names
