"""
Tests for the State Analyzer — fields, update calls, lifecycle hooks and handlers.
"""

from widgetlens.core.lexer import tokenize
from widgetlens.core.parser import parse
from widgetlens.core.state_analyzer import StateAnalyzer
from widgetlens.core.widget_analyzer import WidgetAnalyzer
from widgetlens.models.issue_models import Severity


def _analyze(source):
    tokens, _ = tokenize(source)
    program, _ = parse(tokens)
    widgets = WidgetAnalyzer(program).analyze()
    return StateAnalyzer(program, widgets).analyze()


def _types(result, severity=None):
    return [
        r.type for r in result.validation_results
        if severity is None or r.severity == severity
    ]


def _state_class(body, widget="W"):
    return (
        f"class {widget} extends StatefulWidget {{\n"
        f"  createState() {{ return new _{widget}State(); }}\n"
        f"}}\n"
        f"class _{widget}State extends State<{widget}> {{\n{body}\n}}\n"
    )


def test_counter_scenario(counter_source):
    result = _analyze(counter_source)
    assert len(result.state_classes) == 1
    state = result.state_classes[0]
    assert state.name == "_CounterState"
    assert state.managed_widget == "Counter"

    assert [f.name for f in state.state_fields] == ["count"]
    count = state.state_fields[0]
    assert count.type == "number"
    assert count.initial_value == 0
    assert count.used_in_methods == ["increment"]
    assert len(count.mutations) == 1
    assert count.mutations[0].wrapped_in_state_update
    assert count.mutations[0].mutation.operator == "++"

    assert len(state.state_update_calls) == 1
    call = state.state_update_calls[0]
    assert call.updates == ["count"]
    assert call.method == "increment"
    assert call.is_valid

    assert state.lifecycle_methods == []
    assert not any(r.type.startswith("lifecycle") for r in result.validation_results)
    assert _types(result) == ["missing-create-state"]

    summary = result.summary
    assert summary.state_classes == 1
    assert summary.state_fields == 1
    assert summary.set_state_calls == 1
    assert summary.errors == 0
    assert summary.warnings == 1
    assert summary.complexity_score == 15
    assert summary.health_score == 98


def test_teardown_without_super_is_one_error(lifecycle_source):
    result = _analyze(lifecycle_source)
    errors = [r for r in result.validation_results if r.severity == Severity.ERROR]
    assert len(errors) == 1
    assert errors[0].type == "lifecycle-missing-super"
    assert errors[0].affected_item == "dispose"

    hooks = {h.name: h for h in result.state_classes[0].lifecycle_methods}
    assert set(hooks) == {"initState", "dispose", "build"}
    assert hooks["initState"].calls_super
    assert hooks["initState"].has_side_effects
    assert not hooks["dispose"].calls_super
    assert hooks["dispose"].issues == ["missing super.dispose()"]
    assert not hooks["build"].should_call_super


def test_update_hook_without_super_is_a_warning():
    result = _analyze(_state_class("  didUpdateWidget(old) { }\n  build(c) { return null; }"))
    assert _types(result, Severity.WARNING) == ["lifecycle-missing-super"]
    assert _types(result, Severity.ERROR) == []


def test_event_handler_bound_to_method(lifecycle_source):
    state = _analyze(lifecycle_source).state_classes[0]
    assert len(state.event_handlers) == 1
    handler = state.event_handlers[0]
    assert handler.event == "onTap"
    assert handler.handler == "tick"
    assert handler.component == "Text"
    assert handler.method == "build"
    assert handler.triggers_set_state
    assert handler.is_valid
    assert state.dependency_graph.event_to_state == {"onTap": ["ticks"]}


def test_merged_graph_uses_qualified_keys(lifecycle_source):
    result = _analyze(lifecycle_source)
    graph = result.dependency_graph
    assert graph.event_to_state == {"_TickerState.onTap": ["_TickerState.ticks"]}
    assert "_TickerState.ticks" in graph.state_to_methods


def test_missing_event_handler():
    result = _analyze(_state_class(
        "  build(c) { return new Button({ onPressed: this.nope }); }"
    ))
    assert _types(result, Severity.ERROR) == ["missing-event-handler"]
    handler = result.state_classes[0].event_handlers[0]
    assert not handler.is_valid
    assert not handler.triggers_set_state


def test_inline_handler_triggering_update():
    result = _analyze(_state_class(
        "  on = false;\n"
        "  build(c) {\n"
        "    return new Switch({ value: this.on, onChanged: (v) => this.setState(() => { this.on = v; }) });\n"
        "  }"
    ))
    state = result.state_classes[0]
    assert _types(result, Severity.ERROR) == []
    assert not state.state_update_calls[0].called_during_build
    handler = state.event_handlers[0]
    assert handler.handler == "<inline>"
    assert handler.triggers_set_state
    assert state.dependency_graph.event_to_state == {"onChanged": ["on"]}


def test_set_state_during_build():
    result = _analyze(_state_class(
        "  n = 0;\n"
        "  build(c) {\n"
        "    this.setState(() => { this.n = 1; });\n"
        "    return new Text(this.n);\n"
        "  }"
    ))
    assert _types(result, Severity.ERROR) == ["set-state-during-build"]
    call = result.state_classes[0].state_update_calls[0]
    assert call.called_during_build
    assert not call.is_valid


def test_mutation_outside_set_state():
    result = _analyze(_state_class(
        "  n = 0;\n"
        "  reset() { this.n = 0; }\n"
        "  build(c) { return new Text(this.n); }"
    ))
    assert _types(result, Severity.ERROR) == ["mutation-outside-set-state"]
    field = result.state_classes[0].field("n")
    assert field.mutated_in_methods == ["reset"]
    assert not field.mutations[0].wrapped_in_state_update


def test_object_form_update_with_unknown_field():
    result = _analyze(_state_class(
        "  n = 0;\n"
        "  bump() { this.setState({ missing: 1 }); }\n"
        "  build(c) { return new Text(this.n); }"
    ))
    assert _types(result, Severity.ERROR) == ["unknown-state-field"]


def test_empty_update_and_unused_field():
    result = _analyze(_state_class(
        "  idle = 'x';\n"
        "  poke() { this.setState(() => {}); }"
    ))
    assert sorted(_types(result, Severity.WARNING)) == ["empty-state-update", "unused-state-field"]


def test_constructor_fields_are_declared():
    state = _analyze(_state_class(
        "  constructor(props) { super(props); this.items = []; }\n"
        "  build(c) { return new Text(this.items); }"
    )).state_classes[0]
    items = state.field("items")
    assert items is not None
    assert items.type == "array"
    assert items.used_in_build


def test_invalid_state_class():
    result = _analyze(
        "class W extends StatefulWidget { createState() { return new Label(); } }\n"
        "class Label extends StatelessWidget {}\n"
    )
    assert _types(result, Severity.ERROR) == ["invalid-state-class"]
    assert result.state_classes == []


def test_unlinked_state_class():
    result = _analyze("class Orphan extends State {}")
    assert _types(result) == ["unlinked-state-class"]
    assert result.state_classes[0].managed_widget is None


def test_handler_reaching_update_through_helper():
    state = _analyze(_state_class(
        "  n = 0;\n"
        "  inc() { this.apply(); }\n"
        "  apply() { this.setState(() => { this.n++; }); }\n"
        "  build(c) { return new Button({ onPressed: this.inc, label: this.n }); }"
    )).state_classes[0]
    handler = state.event_handlers[0]
    assert handler.triggers_set_state
    assert state.dependency_graph.method_to_methods == {"inc": ["apply"]}
    assert state.dependency_graph.event_to_state == {"onPressed": ["n"]}


def test_setup_hook_without_super_is_one_error():
    result = _analyze(_state_class(
        "  n = 0;\n"
        "  initState() { this.n = 1; }\n"
        "  build(c) { return new Text(this.n); }"
    ))
    errors = [r for r in result.validation_results if r.severity == Severity.ERROR]
    assert [(e.type, e.affected_item) for e in errors] == [("lifecycle-missing-super", "initState")]
    hook = result.state_classes[0].lifecycle_methods[0]
    assert hook.name == "initState"
    assert hook.issues == ["missing super.initState()"]
    assert result.summary.health_score == 90


def test_complexity_caps_and_health_penalty():
    fields = "\n".join(f"  a{i} = 0;" for i in range(5))
    updates = "\n".join(
        f"  i{i}() {{ this.setState(() => {{ this.a{i % 5}++; }}); }}" for i in range(6)
    )
    buttons = ", ".join(
        f"new Button({{ onPressed: this.i{k % 6}, label: this.a{k % 5} }})" for k in range(10)
    )
    result = _analyze(_state_class(
        f"{fields}\n{updates}\n  build(c) {{ return new Column({{ children: [{buttons}] }}); }}"
    ))
    summary = result.summary
    assert summary.state_fields == 5
    assert summary.set_state_calls == 6
    assert summary.event_handlers == 10
    assert summary.complexity_score == 90
    expected = 100 - 10 * summary.errors - 2 * summary.warnings - 10
    assert summary.health_score == max(0, expected)


def test_render_path_calls():
    result = _analyze(_state_class(
        "  seed = Math.random();\n"
        "  roll = () => Math.random();\n"
        "  initState() { super.initState(); setInterval(() => Date.now(), 10); }\n"
        "  build(c) { const t = new Date(); return new Text(t); }"
    ))
    calls = [(c.call, c.category, c.widget, c.method) for c in result.render_path_calls]
    assert calls == [
        ("Math.random", "nondeterministic", "W", "<field>"),
        ("setInterval", "timer", "W", "initState"),
        ("new Date", "nondeterministic", "W", "build"),
    ]
