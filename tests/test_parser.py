"""
Tests for the Parser — declarations, expressions and error recovery.
"""

import pytest

from widgetlens.core.lexer import tokenize
from widgetlens.core.parser import parse
from widgetlens.models import ast_nodes as ast


def _parse(source):
    tokens, _ = tokenize(source)
    return parse(tokens)


def _classes(program):
    return {n.name: n for n in program.body if isinstance(n, ast.ClassDeclaration)}


def test_class_with_generic_superclass(counter_source):
    program, errors = _parse(counter_source)
    assert errors == []
    classes = _classes(program)
    state = classes["_CounterState"]
    assert state.superclass == "State"
    assert state.type_arguments == ("Counter",)
    assert [f.name for f in state.fields] == ["count"]
    assert [m.name for m in state.methods] == ["increment"]


def test_imports():
    program, errors = _parse(
        "import App, { Text as T, Row } from '@flutterjs/material';\n"
        "import * as fx from './fx.js';\n"
        "import './side-effect.js';"
    )
    assert errors == []
    first, second, third = program.body
    assert first.source == "@flutterjs/material"
    assert first.default_binding == "App"
    assert [(s.imported, s.local) for s in first.specifiers] == [("Text", "T"), ("Row", "Row")]
    assert second.namespace == "fx"
    assert third.source == "./side-effect.js"
    assert third.specifiers == ()


def test_member_modifiers_and_destructured_params():
    program, errors = _parse(
        "class Scope extends InheritedWidget {\n"
        "  static count = 0;\n"
        "  #secret;\n"
        "  constructor({ color, child }) { super({ child }); }\n"
        "  static of(context) { return context.dependOnInheritedWidgetOfExactType<Scope>(); }\n"
        "  async load() { await fetch('x'); }\n"
        "}"
    )
    assert errors == []
    scope = _classes(program)["Scope"]
    assert scope.fields[0].is_static
    assert scope.fields[1].name == "#secret"
    ctor = scope.method("constructor")
    assert ctor.params[0].destructured == ("color", "child")
    assert scope.method("of").is_static
    assert scope.method("load").is_async

    ret = scope.method("of").body.body[0]
    assert isinstance(ret.argument, ast.CallExpression)
    assert ret.argument.type_arguments == ("Scope",)


def test_generic_call_does_not_swallow_comparisons():
    program, errors = _parse("function f(a, b) { return a < b; }")
    assert errors == []
    ret = program.body[0].body.body[0]
    assert isinstance(ret.argument, ast.BinaryExpression)
    assert ret.argument.operator == "<"


def test_const_new_and_type_arguments():
    program, errors = _parse("const w = const new Provider<Cart>({ create: (c) => new Cart() });")
    assert errors == []
    decl = program.body[0]
    assert isinstance(decl, ast.VariableDeclaration)
    assert isinstance(decl.initializer, ast.NewExpression)
    assert decl.initializer.is_const
    assert decl.initializer.type_arguments == ("Cart",)


def test_operator_precedence():
    program, _ = _parse("x = 1 + 2 * 3;")
    assign = program.body[0].expression
    assert isinstance(assign, ast.AssignmentExpression)
    add = assign.value
    assert add.operator == "+"
    assert isinstance(add.right, ast.BinaryExpression)
    assert add.right.operator == "*"


def test_statements_without_semicolons():
    program, errors = _parse("function main() {\n  let a = 1\n  a++\n  return a\n}")
    assert errors == []
    body = program.body[0].body.body
    assert isinstance(body[0], ast.VariableDeclaration)
    assert isinstance(body[1].expression, ast.UpdateExpression)
    assert isinstance(body[2], ast.ReturnStatement)


def test_recovery_keeps_following_declarations(malformed_source):
    program, errors = _parse(malformed_source)
    assert len(errors) >= 2
    classes = _classes(program)
    assert "Broken" in classes
    assert "Fine" in classes
    assert classes["Fine"].method("build") is not None
    contexts = {e.context for e in errors}
    assert "class Broken.build" in contexts
    assert "class Broken" in contexts


@pytest.mark.parametrize("source", [
    "",
    "}}}}",
    "class",
    "class A extends {",
    "class A { build( { return",
    "new new new",
    "import { from",
    "((((((",
    "x = => ;",
    "class A { @ # ! }",
    "function (",
    "{" * 2000,
])
def test_parse_is_total(source):
    program, errors = _parse(source)
    assert isinstance(program, ast.Program)
    assert isinstance(errors, list)


def test_parsing_same_tokens_twice_is_structurally_equal(counter_source, provider_source):
    for source in (counter_source, provider_source):
        tokens, _ = tokenize(source)
        first, first_errors = parse(tokens)
        second, second_errors = parse(tokens)
        assert first == second
        assert first_errors == second_errors


def test_unknown_node_type_is_rejected():
    class Stray(ast.Node):
        pass

    with pytest.raises(TypeError):
        ast.children(Stray(line=1, column=0))


def test_cascade_is_member_access_on_the_receiver():
    program, errors = _parse("function main() { list..add(1)..add(2); }")
    assert errors == []
    statement = program.body[0].body.body[0]
    call = statement.expression
    assert isinstance(call, ast.CallExpression)
    assert ast.dotted_name(call.callee) == "list.add.add"


def test_dotted_name_handles_long_chains():
    program, errors = _parse("app" + ".x" * 3000 + ";")
    assert errors == []
    name = ast.dotted_name(program.body[0].expression)
    assert name == "app" + ".x" * 3000
    assert ast.dotted_name(ast.Identifier(name="solo")) == "solo"
