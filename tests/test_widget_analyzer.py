"""
Tests for the Widget Analyzer — kinds, linkage, entry point and widget tree.
"""

import pytest

from widgetlens.core.lexer import tokenize
from widgetlens.core.parser import parse
from widgetlens.core.widget_analyzer import WidgetAnalyzer, classify_widget
from widgetlens.models.widget_models import WidgetKind


def _analyze(source, **kwargs):
    tokens, _ = tokenize(source)
    program, _ = parse(tokens)
    return WidgetAnalyzer(program, **kwargs).analyze()


@pytest.mark.parametrize("superclass, kind", [
    (None, WidgetKind.COMPONENT),
    ("StatelessWidget", WidgetKind.STATELESS),
    ("StatefulWidget", WidgetKind.STATEFUL),
    ("State", WidgetKind.STATE),
    ("material.StatelessWidget", WidgetKind.STATELESS),
    ("ChangeNotifier", WidgetKind.COMPONENT),
])
def test_classify_widget(superclass, kind):
    assert classify_widget(superclass) == kind


def test_kinds_from_source():
    result = _analyze(
        "class Plain {}\n"
        "class Label extends StatelessWidget {}\n"
        "class Counter extends StatefulWidget {}\n"
        "class _CounterState extends State<Counter> {}\n"
    )
    kinds = {w.name: w.kind for w in result.widgets}
    assert kinds == {
        "Plain": WidgetKind.COMPONENT,
        "Label": WidgetKind.STATELESS,
        "Counter": WidgetKind.STATEFUL,
        "_CounterState": WidgetKind.STATE,
    }
    assert result.widget("_CounterState").type_arguments == ["Counter"]
    assert result.summary.stateful == 1
    assert result.summary.state == 1


def test_state_linking_prefers_create_state():
    result = _analyze(
        "class Page extends StatefulWidget { createState() { return new PageState(); } }\n"
        "class PageState extends State<Other> {}\n"
        "class Counter extends StatefulWidget {}\n"
        "class _CounterState extends State<Counter> {}\n"
    )
    assert result.state_links == {"Page": "PageState", "Counter": "_CounterState"}


def test_method_metadata(counter_source):
    result = _analyze(counter_source)
    state = result.widget("_CounterState")
    assert [f.name for f in state.fields] == ["count"]
    assert state.fields[0].type == "number"
    assert state.fields[0].initial_value == 0
    increment = state.method("increment")
    assert increment.field_references == ["count"]


def test_entry_point_and_tree(provider_source):
    result = _analyze(provider_source)
    assert result.entry_point.function == "main"
    assert result.entry_point.via == "runApp"
    assert result.root_widget == "App"

    tree = result.widget_tree
    assert tree.widget == "App"
    assert tree.kind == WidgetKind.STATELESS
    names = [n.widget for n in tree.iter_nodes()]
    assert names[:2] == ["App", "ChangeNotifierProvider"]
    assert "CartBadge" in names
    assert "Text" in names
    provider = tree.children[0]
    assert provider.type_arguments == ["CartModel"]
    assert provider.parent == "App"


def test_entry_point_through_local_variable():
    result = _analyze(
        "class Home extends StatelessWidget {}\n"
        "function main() { const app = new Home(); runApp(app); }"
    )
    assert result.root_widget == "Home"


def test_missing_entry_point_is_informational(counter_source):
    result = _analyze(counter_source)
    assert result.entry_point is None
    assert result.widget_tree is None
    assert [e.type for e in result.errors] == ["missing-entry-point"]


def test_stateful_widget_renders_through_its_state_class(lifecycle_source):
    result = _analyze(lifecycle_source)
    tree = result.widget_tree
    assert tree.widget == "Ticker"
    assert [c.widget for c in tree.children] == ["Text"]


def test_mutually_recursive_widgets_terminate():
    result = _analyze(
        "class A extends StatelessWidget { build(c) { return new B(); } }\n"
        "class B extends StatelessWidget { build(c) { return new A(); } }\n"
        "function main() { runApp(new A()); }"
    )
    tree = result.widget_tree
    b = tree.children[0]
    again = b.children[0]
    assert (b.widget, again.widget) == ("B", "A")
    assert again.recursive
    assert again.children == []


def test_depth_bound_truncates_tree():
    result = _analyze(
        "class A extends StatelessWidget { build(c) { return new B(); } }\n"
        "class B extends StatelessWidget { build(c) { return new C(); } }\n"
        "class C extends StatelessWidget { build(c) { return new D(); } }\n"
        "class D extends StatelessWidget {}\n"
        "function main() { runApp(new A()); }",
        max_tree_depth=2,
    )
    assert result.widget_tree.max_depth() == 2
    truncated = [n for n in result.widget_tree.iter_nodes() if n.truncated]
    assert [n.widget for n in truncated] == ["C"]
    assert [e.type for e in result.errors] == ["widget-tree-truncated"]


def _diamond(levels):
    classes = "\n".join(
        f"class W{i} extends StatelessWidget {{ build(c) {{ "
        f"return new Column({{ children: [new W{i + 1}(), new W{i + 1}()] }}); }} }}"
        for i in range(levels)
    )
    return f"{classes}\nclass W{levels} extends StatelessWidget {{}}\nfunction main() {{ runApp(new W0()); }}"


def test_node_budget_bounds_diamond_chains():
    result = _analyze(_diamond(16), max_tree_depth=100, max_tree_nodes=200)
    nodes = list(result.widget_tree.iter_nodes())
    assert 200 <= len(nodes) <= 300
    assert result.summary.tree_nodes == len(nodes)
    assert any(n.truncated for n in nodes)
    assert not any(n.recursive for n in nodes)
    truncation = [e for e in result.errors if e.type == "widget-tree-truncated"]
    assert len(truncation) == 1
    assert "200 nodes" in truncation[0].message


def test_small_diamond_fits_the_default_budget():
    result = _analyze(_diamond(3))
    # W0..W3 plus a Column under each of the seven expanded classes
    assert result.summary.tree_nodes == 15 + 7
    assert result.errors == []

def test_duplicate_class_keeps_last_declaration():
    result = _analyze(
        "class A extends StatelessWidget {}\n"
        "class A extends StatefulWidget {}\n"
    )
    assert len(result.widgets) == 1
    assert result.widgets[0].kind == WidgetKind.STATEFUL
    assert "duplicate-class" in [e.type for e in result.errors]


def test_imports_and_external_dependencies(provider_source):
    result = _analyze(provider_source)
    assert [i.source for i in result.imports] == ["@flutterjs/material", "provider"]
    assert result.imports[0].items == ["StatelessWidget", "Text"]
    assert result.external_dependencies == ["@flutterjs/material", "provider"]
