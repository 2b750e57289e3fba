from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from plot_analytics.adapters.sqlite_plot_store import SQLitePlotStore
from plot_analytics.api.contracts import load_plot_json
from plot_analytics.cli import api as api_cli
from plot_analytics.cli import beat_sheet, text_analysis


@pytest.fixture(autouse=True)
def _quiet_runtime(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    log_path = tmp_path / "logs" / "cli.log"
    for module in ("plot_analytics.cli.api", "plot_analytics.cli.text_analysis"):
        monkeypatch.setattr(f"{module}.configure_runtime_logging", lambda: log_path)
    monkeypatch.delenv("PLOT_ANALYTICS_ANALYSIS_BACKEND", raising=False)


def test_api_cli_calls_uvicorn(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, object]] = []

    def fake_run(app: str, host: str, port: int, reload: bool) -> None:
        calls.append({"app": app, "host": host, "port": port, "reload": reload})

    monkeypatch.setattr("plot_analytics.cli.api.uvicorn.run", fake_run)
    api_cli.main(["--host", "0.0.0.0", "--port", "9000", "--reload"])

    assert calls == [
        {
            "app": "plot_analytics.api.app:app",
            "host": "0.0.0.0",
            "port": 9000,
            "reload": True,
        }
    ]


def test_api_cli_sets_db_path_and_backend_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PLOT_ANALYTICS_DB_PATH", raising=False)
    monkeypatch.setattr("plot_analytics.cli.api.uvicorn.run", lambda *args, **kwargs: None)
    api_cli.main(["--db-path", "work/local/custom.db", "--analysis-backend", "native"])
    assert os.environ["PLOT_ANALYTICS_DB_PATH"] == "work/local/custom.db"
    assert os.environ["PLOT_ANALYTICS_ANALYSIS_BACKEND"] == "native"


def test_beat_sheet_cli_lists_templates(capsys: pytest.CaptureFixture[str]) -> None:
    beat_sheet.main(["--list-templates"])
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "default"
    assert "romance" in lines


def test_beat_sheet_cli_requires_project_id() -> None:
    with pytest.raises(SystemExit, match="--project-id is required"):
        beat_sheet.main([])


def test_beat_sheet_cli_writes_and_persists(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    output = tmp_path / "plot.json"
    db_path = tmp_path / "plots.db"
    beat_sheet.main(
        [
            "--project-id",
            "p9",
            "--template",
            "thriller",
            "--target-word-count",
            "70000",
            "--output",
            str(output),
            "--db-path",
            str(db_path),
        ]
    )
    captured = capsys.readouterr().out
    assert "Plot id: plot-p9-thriller" in captured
    assert f"Written: {output}" in captured
    assert load_plot_json(output).target_word_count == 70000
    stored = SQLitePlotStore(db_path=db_path).get_plot_structure(project_id="p9")
    assert stored is not None
    assert stored.id == "plot-p9-thriller"


def test_beat_sheet_cli_prints_json_without_output(capsys: pytest.CaptureFixture[str]) -> None:
    beat_sheet.main(["--project-id", "p1"])
    payload = json.loads(capsys.readouterr().out)
    assert payload["id"] == "plot-p1"
    assert len(payload["beats"]) == 15


def test_text_cli_prints_fallback_envelope(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    manuscript = tmp_path / "chapter.txt"
    manuscript.write_text("Rain fell. She waited.", encoding="utf-8")
    text_analysis.main([str(manuscript)])
    envelope = json.loads(capsys.readouterr().out)
    assert envelope["kind"] == "text"
    assert envelope["backend"] == "none"
    assert envelope["fallback_used"] is True
    assert envelope["error"] is None
    assert envelope["result"]["word_count"] == 4


def test_text_cli_style_consistency_reads_every_file(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    first = tmp_path / "one.txt"
    second = tmp_path / "two.txt"
    first.write_text("One two. Three four.", encoding="utf-8")
    second.write_text("One two three four five six.", encoding="utf-8")
    text_analysis.main(
        [str(first), str(second), "--kind", "style_consistency", "--author-id", "ana"]
    )
    result = json.loads(capsys.readouterr().out)["result"]
    assert result["author_id"] == "ana"
    assert result["consistency_score"] == 95.0


def test_text_cli_rejects_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SystemExit, match="Input file not found"):
        text_analysis.main([str(tmp_path / "missing.txt")])
