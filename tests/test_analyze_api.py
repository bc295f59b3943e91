"""
Tests for the FastAPI analysis API — health, single-file and batch endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from widgetlens.api.dependencies import get_pipeline
from widgetlens.config import settings
from widgetlens.engine.pipeline import AnalysisPipeline, AnalysisStageError
from widgetlens.main import app

client = TestClient(app)


def test_health_check():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == "1.0.0"
    assert data["strict_imports"] is False
    assert data["ssr_patterns"] == 14


def test_analyze_counter(counter_source):
    response = client.post("/analyze", json={"source": counter_source, "file_path": "counter.fjs"})
    assert response.status_code == 200
    data = response.json()
    assert data["file_path"] == "counter.fjs"
    assert data["ssr"]["summary"]["score"] == 100
    assert data["state"]["summary"]["set_state_calls"] == 1
    assert [w["name"] for w in data["widgets"]["widgets"]] == ["Counter", "_CounterState"]


def test_analyze_resolves_framework_imports(provider_source):
    response = client.post("/analyze", json={"source": provider_source})
    assert response.status_code == 200
    data = response.json()
    assert data["file_path"] == "<source>"
    resolved = [r["source"] for r in data["imports"]["resolved"]]
    assert resolved == ["@flutterjs/material"]


def test_analyze_missing_source_is_rejected():
    response = client.post("/analyze", json={"file_path": "x.fjs"})
    assert response.status_code == 422


def test_oversized_source_is_rejected(monkeypatch):
    monkeypatch.setattr(settings, "max_source_bytes", 10)
    response = client.post("/analyze", json={"source": "class A extends StatelessWidget {}"})
    assert response.status_code == 400
    assert "maximum" in response.json()["detail"]


def test_stage_failure_maps_to_422():
    class FailingPipeline(AnalysisPipeline):
        def analyze_source(self, source, file_path="<source>"):
            raise AnalysisStageError("state", file_path, RuntimeError("boom"))

    app.dependency_overrides[get_pipeline] = lambda: FailingPipeline()
    try:
        response = client.post("/analyze", json={"source": "x", "file_path": "x.fjs"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["stage"] == "state"
    assert detail["file_path"] == "x.fjs"
    assert "boom" in detail["message"]


def test_batch(counter_source, malformed_source):
    response = client.post("/analyze/batch", json={
        "files": [
            {"path": "counter.fjs", "source": counter_source},
            {"path": "broken.fjs", "source": malformed_source},
        ]
    })
    assert response.status_code == 200
    data = response.json()
    assert [r["file_path"] for r in data["results"]] == ["counter.fjs", "broken.fjs"]
    assert data["failures"] == []
    assert data["skipped"] == []
    assert len(data["results"][1]["parse_errors"]) >= 2


@pytest.mark.parametrize("body", [{}, {"files": [{"path": "a.fjs"}]}])
def test_batch_validation(body):
    response = client.post("/analyze/batch", json=body)
    expected = 200 if body == {} else 422
    assert response.status_code == expected
