from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from plot_analytics.adapters.sqlite_plot_store import SQLitePlotStore
from plot_analytics.api.app import create_app
from plot_analytics.domain.models import PlotStructure, ResearchItem


@pytest.fixture
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.delenv("PLOT_ANALYTICS_ANALYSIS_BACKEND", raising=False)
    monkeypatch.delenv("PLOT_ANALYTICS_ARC_DIMENSIONS", raising=False)
    return TestClient(create_app(db_path=tmp_path / "plots.db"))


def _generate(client: TestClient, project_id: str = "p1", **body: object) -> dict[str, object]:
    response = client.post(f"/api/v1/projects/{project_id}/plot/generate", json=body)
    assert response.status_code == 201
    return response.json()


def test_health_and_root_endpoints(client: TestClient) -> None:
    health = client.get("/healthz")
    assert health.status_code == 200
    assert health.json() == {
        "status": "ok",
        "service": "plot_analytics",
        "analysis_backend": "none",
    }
    root = client.get("/api/v1")
    assert "/api/v1/analysis/text" in root.json()["endpoints"]


def test_templates_and_prompts(client: TestClient) -> None:
    templates = client.get("/api/v1/beat-sheets/templates").json()["templates"]
    assert templates[0] == "default"
    assert {"romance", "mystery", "thriller"} <= set(templates)

    prompt = client.get(
        "/api/v1/beat-sheets/prompts",
        params={"beat_name": "Finale", "genre": "mystery"},
    ).json()
    assert prompt["beat_name"] == "Finale"
    assert prompt["prompt"].startswith("Write the climactic confrontation and resolution")
    assert "in a mystery story" in prompt["prompt"]


def test_generate_read_and_delete_plot(client: TestClient) -> None:
    assert client.get("/api/v1/projects/p1/plot").status_code == 404

    plot = _generate(client, target_word_count=50000)
    assert plot["id"] == "plot-p1"
    assert plot["target_word_count"] == 50000
    beats = plot["beats"]
    assert isinstance(beats, list)
    assert len(beats) == 15
    assert beats[-1]["word_count"] == 50000

    assert client.get("/api/v1/projects/p1/plot").json()["id"] == "plot-p1"
    assert client.delete("/api/v1/projects/p1/plot").status_code == 204
    assert client.delete("/api/v1/projects/p1/plot").status_code == 404


def test_generate_without_persist_does_not_store(client: TestClient) -> None:
    plot = _generate(client, template="romance", persist=False)
    assert plot["id"] == "plot-p1-romance"
    assert client.get("/api/v1/projects/p1/plot").status_code == 404


def test_retarget_word_count(client: TestClient) -> None:
    _generate(client)
    response = client.put(
        "/api/v1/projects/p1/plot/target-word-count", json={"target_word_count": 1000}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["target_word_count"] == 1000
    assert [beat["word_count"] for beat in body["beats"]][:3] == [0, 50, 100]
    invalid = client.put(
        "/api/v1/projects/p1/plot/target-word-count", json={"target_word_count": 0}
    )
    assert invalid.status_code == 422


def test_beat_update_and_progress(client: TestClient) -> None:
    _generate(client)
    updated = client.patch(
        "/api/v1/projects/p1/plot/beats/beat-p1-0",
        json={"is_completed": True, "content": "Dawn over the harbor."},
    )
    assert updated.status_code == 200
    assert updated.json()["beats"][0]["is_completed"] is True

    indented = client.patch(
        "/api/v1/projects/p1/plot/beats/beat-p1-1",
        json={"content": "    Indented prose.\n\nSecond para.\n"},
    )
    assert indented.json()["beats"][1]["content"] == "    Indented prose.\n\nSecond para.\n"

    missing = client.patch("/api/v1/projects/p1/plot/beats/nope", json={"is_completed": True})
    assert missing.status_code == 404
    invalid = client.patch("/api/v1/projects/p1/plot/beats/beat-p1-0", json={"word_count": -1})
    assert invalid.status_code == 422

    client.put(
        "/api/v1/projects/p1/characters/ch1",
        json={"id": "ch1", "name": "Mara", "arc": [{"beat_id": "beat-p1-0"}]},
    )
    progress = client.get("/api/v1/projects/p1/progress").json()
    assert progress["overall_percent"] == 7
    assert [(act["act"], act["total"], act["percent"]) for act in progress["acts"]] == [
        ("act_one", 6, 17),
        ("act_two", 7, 0),
        ("act_three", 2, 0),
    ]
    assert progress["characters"] == [
        {"character_id": "ch1", "name": "Mara", "arc_completion_percent": 7}
    ]


def test_conflicts_and_curves(client: TestClient) -> None:
    _generate(client)
    conflict = {"id": "c1", "type": "external", "intensity": 10}
    assert client.put("/api/v1/projects/p1/conflicts/c1", json=conflict).status_code == 200
    mismatch = client.put("/api/v1/projects/p1/conflicts/c2", json=conflict)
    assert mismatch.status_code == 422

    curves = client.get("/api/v1/projects/p1/conflicts/curves").json()
    assert len(curves) == 1
    points = curves[0]["points"]
    assert len(points) == 15
    assert points[0] == {"percentage": 0.0, "intensity": 2.0}
    assert points[13] == {"percentage": 85.0, "intensity": 13.0}

    assert client.delete("/api/v1/projects/p1/conflicts/c1").status_code == 204
    assert client.get("/api/v1/projects/p1/conflicts").json() == []


def test_theme_bubbles_from_scenes_and_documents(client: TestClient) -> None:
    theme = {"id": "t1", "name": "Trust", "scene_ids": ["s1", "s2"], "intensity": {"s1": 8}}
    assert client.put("/api/v1/projects/p1/themes/t1", json=theme).status_code == 200

    from_scenes = client.post(
        "/api/v1/projects/p1/themes/bubbles",
        json={"scenes": [{"id": "s1", "percentage": 40}]},
    ).json()
    assert from_scenes == [
        {"theme_id": "t1", "scene_id": "s1", "intensity": 8, "x": 40.0, "y": 0, "radius": 29}
    ]

    from_documents = client.post(
        "/api/v1/projects/p1/themes/bubbles", json={"document_ids": ["s1", "s2"]}
    ).json()
    assert [(bubble["scene_id"], bubble["x"], bubble["radius"]) for bubble in from_documents] == [
        ("s1", 0.0, 29),
        ("s2", 50.0, 20),
    ]

    assert client.delete("/api/v1/projects/p1/themes/t1").status_code == 204
    assert client.delete("/api/v1/projects/p1/themes/t1").status_code == 404


def test_invalid_theme_intensity_is_rejected(client: TestClient) -> None:
    theme = {"id": "t1", "name": "Trust", "scene_ids": ["s1"], "intensity": {"s1": 11}}
    assert client.put("/api/v1/projects/p1/themes/t1", json=theme).status_code == 422


def test_arc_radar(client: TestClient) -> None:
    assert client.get("/api/v1/projects/p1/characters/ch1/arc/radar").status_code == 404
    client.put(
        "/api/v1/projects/p1/characters/ch1",
        json={
            "id": "ch1",
            "name": "Mara",
            "arc": [{"beat_id": "beat-p1-0", "emotional_state": {"Fear": 7}}],
        },
    )
    without_plot = client.get("/api/v1/projects/p1/characters/ch1/arc/radar").json()
    assert without_plot["series"] == []
    assert without_plot["arc_completion_percent"] == 0

    _generate(client)
    radar = client.get("/api/v1/projects/p1/characters/ch1/arc/radar").json()
    assert radar["dimensions"][:2] == ["Confidence", "Fear"]
    assert radar["arc_completion_percent"] == 7
    assert len(radar["series"]) == 15
    assert radar["series"][0]["values"][:2] == [0.0, 7.0]
    assert radar["series"][1]["values"] == [0.0] * 8


def test_b_stories_and_research_analytics(client: TestClient) -> None:
    b_story = {"id": "bs1", "character_id": "ch1", "name": "Old debt"}
    assert client.put("/api/v1/projects/p1/b-stories/bs1", json=b_story).status_code == 200
    assert client.get("/api/v1/projects/p1/b-stories").json()[0]["name"] == "Old debt"

    item = {
        "id": "r1",
        "title": "Harbor records",
        "source": "Archive",
        "reliability_score": 8,
        "tags": ["historical"],
    }
    fact = {"id": "f1", "statement": "The harbor froze.", "verification_status": "verified"}
    assert client.put("/api/v1/projects/p1/research/items/r1", json=item).status_code == 200
    assert client.put("/api/v1/projects/p1/research/facts/f1", json=fact).status_code == 200

    analytics = client.get("/api/v1/projects/p1/research/analytics").json()
    assert analytics["source"] == "heuristic"
    assert analytics["total_research_items"] == 1
    assert analytics["fact_verification_rate"] == 100.0


def test_plot_analytics_endpoint(client: TestClient) -> None:
    assert client.get("/api/v1/projects/p1/analytics/plot").status_code == 404
    _generate(client)
    analytics = client.get("/api/v1/projects/p1/analytics/plot").json()
    assert analytics["kind"] == "plot"
    assert analytics["total_beats"] == 15
    assert analytics["completed_beats"] == 0


def test_analysis_endpoints_use_local_fallback(client: TestClient) -> None:
    text = client.post("/api/v1/analysis/text", json={"text": "Rain fell. She waited."}).json()
    assert text["word_count"] == 4
    assert text["source"] == "heuristic"

    advanced = client.post("/api/v1/analysis/advanced-text", json={"text": "A b. C d."}).json()
    assert len(advanced["narrative_structure"]["tension_curve"]) == 6

    patterns = client.post(
        "/api/v1/analysis/narrative-patterns",
        json={"text": "Suddenly the letter arrived.", "pattern_type": "story_structure"},
    ).json()
    assert patterns["pattern_counts"]["inciting_incident"] == 1

    style = client.post(
        "/api/v1/analysis/style-consistency",
        json={"texts": ["One two.", "One two."], "author_id": "a1"},
    ).json()
    assert style["consistency_score"] == 100.0

    suggestions = client.post(
        "/api/v1/analysis/writing-suggestions", json={"text": "Go. Run. Stop."}
    ).json()
    assert suggestions["suggestions"][0]["category"] == "pacing"

    optimized = client.post(
        "/api/v1/analysis/optimize-text",
        json={"text": "in order to win", "optimization_target": "conciseness"},
    ).json()
    assert optimized["optimized_text"] == "to win"

    collaboration = client.post(
        "/api/v1/analysis/collaboration",
        json={"edits": [{"user_id": "u1", "section_id": "s1", "timestamp": "t1"}]},
    ).json()
    assert collaboration["active_collaborators"] == 1

    network = client.post(
        "/api/v1/analysis/characters",
        json={
            "characters": [{"id": "a", "name": "Ada"}, {"id": "b", "name": "Bram"}],
            "relationships": [{"from_id": "a", "to_id": "b", "type": "ally"}],
        },
    ).json()
    assert network["character_network_density"] == 100.0

    world = client.post(
        "/api/v1/analysis/world",
        json={"events": [{"id": "e1", "name": "Flood", "importance": 9}], "locations_count": 2},
    ).json()
    assert world["major_events_count"] == 1
    assert world["world_consistency_score"] == 50.0


def test_storage_failure_returns_503(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PLOT_ANALYTICS_ANALYSIS_BACKEND", raising=False)
    db_path = tmp_path / "plots.db"
    client = TestClient(create_app(db_path=db_path))
    db_path.unlink()
    response = client.get("/api/v1/projects/p1/plot")
    assert response.status_code == 503
    assert response.json() == {"detail": "Storage unavailable"}


def test_async_analytics_read_the_store_off_the_event_loop(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    _generate(client)
    on_loop: list[bool] = []

    def _record() -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            on_loop.append(False)
        else:
            on_loop.append(True)

    get_plot = SQLitePlotStore.get_plot_structure
    list_items = SQLitePlotStore.list_research_items

    def recording_get_plot(self: SQLitePlotStore, *, project_id: str) -> PlotStructure | None:
        _record()
        return get_plot(self, project_id=project_id)

    def recording_list_items(self: SQLitePlotStore, *, project_id: str) -> list[ResearchItem]:
        _record()
        return list_items(self, project_id=project_id)

    monkeypatch.setattr(SQLitePlotStore, "get_plot_structure", recording_get_plot)
    monkeypatch.setattr(SQLitePlotStore, "list_research_items", recording_list_items)

    assert client.get("/api/v1/projects/p1/analytics/plot").status_code == 200
    assert client.get("/api/v1/projects/p1/research/analytics").status_code == 200
    assert on_loop == [False, False]
