"""
Tests for the Analysis Pipeline — end-to-end runs and stage failure handling.
"""

import json

import pytest

from widgetlens.audit.logger import DiagnosticSink
from widgetlens.core.import_resolver import ResolverConfig
from widgetlens.engine.pipeline import AnalysisPipeline, AnalysisStageError
from widgetlens.models.widget_models import WidgetKind


def test_counter_end_to_end(counter_source):
    result = AnalysisPipeline().analyze_source(counter_source, "counter.fjs")

    assert result.file_path == "counter.fjs"
    assert result.parse_errors == []
    assert result.lexer_warnings == []
    assert result.token_count > 0
    assert result.ast_node_count > 0

    stateful = result.widgets.of_kind(WidgetKind.STATEFUL)
    assert [w.name for w in stateful] == ["Counter"]
    assert len(result.state.state_classes) == 1
    state = result.state.state_classes[0]
    assert [f.name for f in state.state_fields] == ["count"]
    assert state.state_update_calls[0].updates == ["count"]
    assert [r.type for r in result.state.validation_results] == ["missing-create-state"]
    assert result.ssr.summary.score == 100
    assert result.duration_ms >= 0


def test_result_serializes(provider_source):
    result = AnalysisPipeline().analyze_source(provider_source, "app.fjs")
    data = json.loads(result.model_dump_json())
    assert data["widgets"]["root_widget"] == "App"
    assert data["imports"]["summary"]["total"] == 2
    assert data["ssr"]["summary"]["compatibility"] == "full"
    assert data["context"]["summary"]["providers"] == 3
    tree = data["widgets"]["widget_tree"]
    assert tree["children"][0]["parent"] == "App"


def test_imports_use_configured_aliases(provider_source):
    config = ResolverConfig.create(package_aliases={"@flutterjs/material": "fx/material.js"})
    result = AnalysisPipeline(resolver_config=config).analyze_source(provider_source)
    assert [r.source for r in result.imports.resolved] == ["@flutterjs/material"]
    assert [r.source for r in result.imports.unresolved] == ["provider"]


def test_strict_imports_fail_the_imports_stage(provider_source):
    pipeline = AnalysisPipeline(resolver_config=ResolverConfig.create(strict=True))
    with pytest.raises(AnalysisStageError) as exc:
        pipeline.analyze_source(provider_source, "app.fjs")
    assert exc.value.stage == "imports"
    assert exc.value.file_path == "app.fjs"


def test_malformed_source_still_completes(malformed_source):
    result = AnalysisPipeline().analyze_source(malformed_source, "broken.fjs")
    assert len(result.parse_errors) >= 2
    assert result.widgets.widget("Fine") is not None


def test_analyze_file(tmp_path, counter_source):
    path = tmp_path / "counter.fjs"
    path.write_text(counter_source, encoding="utf-8")
    result = AnalysisPipeline().analyze_file(path)
    assert result.file_path == path.as_posix()
    assert result.state.summary.set_state_calls == 1


def test_unreadable_file_fails_in_read_stage(tmp_path):
    with pytest.raises(AnalysisStageError) as exc:
        AnalysisPipeline().analyze_file(tmp_path / "missing.fjs")
    assert exc.value.stage == "read"
    assert isinstance(exc.value.cause, OSError)


def test_diagnostics_are_recorded(tmp_path, malformed_source):
    sink = DiagnosticSink(tmp_path / "diagnostics.jsonl")
    AnalysisPipeline(sink=sink).analyze_source(malformed_source + " ¤", "broken.fjs")
    records = sink.read_recent()
    stages = {r["stage"] for r in records}
    assert stages == {"lex", "parse"}
    assert all(r["file"] == "broken.fjs" for r in records)


def test_stage_failure_is_recorded(tmp_path, provider_source):
    sink = DiagnosticSink(tmp_path / "diagnostics.jsonl")
    pipeline = AnalysisPipeline(resolver_config=ResolverConfig.create(strict=True), sink=sink)
    with pytest.raises(AnalysisStageError):
        pipeline.analyze_source(provider_source, "app.fjs")
    last = sink.read_recent()[-1]
    assert last["stage"] == "imports"
    assert last["level"] == "error"


def test_stage_durations_are_reported(counter_source):
    result = AnalysisPipeline().analyze_source(counter_source)
    assert list(result.stage_durations) == [
        "lex", "parse", "widgets", "imports", "state", "context", "ssr",
    ]
    assert all(ms >= 0 for ms in result.stage_durations.values())
    assert sum(result.stage_durations.values()) <= result.duration_ms + 1


def test_long_member_chain_is_analyzed():
    source = "function main() { app" + ".x" * 3000 + "(); runApp(new App()); }\n" \
             "class App extends StatelessWidget {}\n"
    result = AnalysisPipeline().analyze_source(source, "chain.fjs")
    assert result.parse_errors == []
    assert result.widgets.summary.root_widget == "App"


def test_node_budget_is_applied(tmp_path):
    classes = "\n".join(
        f"class W{i} extends StatelessWidget {{ build(c) {{ "
        f"return new Row({{ children: [new W{i + 1}(), new W{i + 1}(), new W{i + 1}()] }}); }} }}"
        for i in range(12)
    )
    source = f"{classes}\nfunction main() {{ runApp(new W0()); }}"
    result = AnalysisPipeline(max_tree_nodes=500).analyze_source(source)
    assert result.widgets.summary.tree_nodes <= 600
    assert "widget-tree-truncated" in [e.type for e in result.widgets.errors]
