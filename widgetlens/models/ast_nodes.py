"""
AST Node Models — Closed set of immutable syntax nodes for the subject language.

Every node is a frozen dataclass holding tuples (never lists) and carries the
line/column of its first token. Traversal goes through `children()`, which
dispatches over the closed node set and rejects anything else.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator


@dataclass(frozen=True)
class Node:
    line: int = field(default=0, kw_only=True)
    column: int = field(default=0, kw_only=True)


# ── Declarations ──


@dataclass(frozen=True)
class Program(Node):
    body: tuple[Node, ...] = ()


@dataclass(frozen=True)
class ImportSpecifier(Node):
    imported: str
    local: str


@dataclass(frozen=True)
class ImportDeclaration(Node):
    source: str
    specifiers: tuple[ImportSpecifier, ...] = ()
    default_binding: str | None = None
    namespace: str | None = None


@dataclass(frozen=True)
class Parameter(Node):
    """A parameter. Object-pattern parameters (`{ key, title }`) list their
    bound names in `destructured` and use "{}" as the name."""

    name: str
    default: Node | None = None
    destructured: tuple[str, ...] = ()
    rest: bool = False


@dataclass(frozen=True)
class FieldDeclaration(Node):
    name: str
    initializer: Node | None = None
    is_static: bool = False


@dataclass(frozen=True)
class MethodDeclaration(Node):
    name: str
    params: tuple[Parameter, ...] = ()
    body: Block | None = None
    is_static: bool = False
    is_async: bool = False


@dataclass(frozen=True)
class ClassDeclaration(Node):
    name: str
    superclass: str | None = None
    type_arguments: tuple[str, ...] = ()
    fields: tuple[FieldDeclaration, ...] = ()
    methods: tuple[MethodDeclaration, ...] = ()

    def method(self, name: str) -> MethodDeclaration | None:
        for m in self.methods:
            if m.name == name:
                return m
        return None


@dataclass(frozen=True)
class FunctionDeclaration(Node):
    name: str
    params: tuple[Parameter, ...] = ()
    body: Block | None = None
    is_async: bool = False


# ── Statements ──


@dataclass(frozen=True)
class Block(Node):
    body: tuple[Node, ...] = ()


@dataclass(frozen=True)
class ReturnStatement(Node):
    argument: Node | None = None


@dataclass(frozen=True)
class ExpressionStatement(Node):
    expression: Node


@dataclass(frozen=True)
class VariableDeclaration(Node):
    kind: str
    name: str
    initializer: Node | None = None


@dataclass(frozen=True)
class IfStatement(Node):
    test: Node
    consequent: Node
    alternate: Node | None = None


# ── Expressions ──


@dataclass(frozen=True)
class Identifier(Node):
    name: str


@dataclass(frozen=True)
class ThisExpression(Node):
    pass


@dataclass(frozen=True)
class Literal(Node):
    kind: str  # string | number | boolean | null | undefined
    value: Any
    raw: str


@dataclass(frozen=True)
class CallExpression(Node):
    callee: Node
    arguments: tuple[Node, ...] = ()
    type_arguments: tuple[str, ...] = ()


@dataclass(frozen=True)
class NewExpression(Node):
    callee: Node
    arguments: tuple[Node, ...] = ()
    type_arguments: tuple[str, ...] = ()
    is_const: bool = False


@dataclass(frozen=True)
class MemberExpression(Node):
    object: Node
    property: str
    optional: bool = False


@dataclass(frozen=True)
class IndexExpression(Node):
    object: Node
    index: Node


@dataclass(frozen=True)
class BinaryExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass(frozen=True)
class LogicalExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass(frozen=True)
class ConditionalExpression(Node):
    test: Node
    consequent: Node
    alternate: Node


@dataclass(frozen=True)
class UnaryExpression(Node):
    operator: str
    argument: Node


@dataclass(frozen=True)
class UpdateExpression(Node):
    operator: str
    argument: Node
    prefix: bool = False


@dataclass(frozen=True)
class AssignmentExpression(Node):
    operator: str
    target: Node
    value: Node


@dataclass(frozen=True)
class ArrowFunction(Node):
    params: tuple[Parameter, ...] = ()
    body: Node | None = None
    is_async: bool = False


@dataclass(frozen=True)
class ArrayLiteral(Node):
    elements: tuple[Node, ...] = ()


@dataclass(frozen=True)
class Property(Node):
    key: str | None
    value: Node
    computed_key: Node | None = None
    shorthand: bool = False


@dataclass(frozen=True)
class ObjectLiteral(Node):
    properties: tuple[Node, ...] = ()


@dataclass(frozen=True)
class SpreadElement(Node):
    argument: Node


# ── Traversal ──


def _opt(*nodes: Node | None) -> tuple[Node, ...]:
    return tuple(n for n in nodes if n is not None)


_CHILDREN: dict[type, Callable[[Any], tuple[Node, ...]]] = {
    Program: lambda n: n.body,
    ImportSpecifier: lambda n: (),
    ImportDeclaration: lambda n: n.specifiers,
    Parameter: lambda n: _opt(n.default),
    FieldDeclaration: lambda n: _opt(n.initializer),
    MethodDeclaration: lambda n: n.params + _opt(n.body),
    ClassDeclaration: lambda n: n.fields + n.methods,
    FunctionDeclaration: lambda n: n.params + _opt(n.body),
    Block: lambda n: n.body,
    ReturnStatement: lambda n: _opt(n.argument),
    ExpressionStatement: lambda n: (n.expression,),
    VariableDeclaration: lambda n: _opt(n.initializer),
    IfStatement: lambda n: _opt(n.test, n.consequent, n.alternate),
    Identifier: lambda n: (),
    ThisExpression: lambda n: (),
    Literal: lambda n: (),
    CallExpression: lambda n: (n.callee,) + n.arguments,
    NewExpression: lambda n: (n.callee,) + n.arguments,
    MemberExpression: lambda n: (n.object,),
    IndexExpression: lambda n: (n.object, n.index),
    BinaryExpression: lambda n: (n.left, n.right),
    LogicalExpression: lambda n: (n.left, n.right),
    ConditionalExpression: lambda n: (n.test, n.consequent, n.alternate),
    UnaryExpression: lambda n: (n.argument,),
    UpdateExpression: lambda n: (n.argument,),
    AssignmentExpression: lambda n: (n.target, n.value),
    ArrowFunction: lambda n: n.params + _opt(n.body),
    ArrayLiteral: lambda n: n.elements,
    Property: lambda n: _opt(n.computed_key, n.value),
    ObjectLiteral: lambda n: n.properties,
    SpreadElement: lambda n: (n.argument,),
}


def children(node: Node) -> tuple[Node, ...]:
    """Direct children of a node, in source order.

    Raises:
        TypeError: if `node` is not one of the known node types.
    """
    getter = _CHILDREN.get(type(node))
    if getter is None:
        raise TypeError(f"Unknown AST node type: {type(node).__name__}")
    return getter(node)


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal, iterative so deep trees cannot exhaust the stack."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(children(current)))


def count_nodes(node: Node) -> int:
    return sum(1 for _ in walk(node))


def this_member(node: Node) -> str | None:
    """Return `x` for `this.x`, else None."""
    if isinstance(node, MemberExpression) and isinstance(node.object, ThisExpression):
        return node.property
    return None


def dotted_name(node: Node) -> str:
    """Best-effort dotted name of a callee: `Theme.of`, `this.setState`, `runApp`."""
    parts: list[str] = []
    while isinstance(node, MemberExpression):
        parts.append(node.property)
        node = node.object
    if isinstance(node, Identifier):
        parts.append(node.name)
    elif isinstance(node, ThisExpression):
        parts.append("this")
    return ".".join(reversed(parts))
