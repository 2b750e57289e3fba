from __future__ import annotations

import asyncio
import json
import subprocess
from pathlib import Path
from typing import Any

import httpx
import pytest

from plot_analytics.adapters.analysis_backends import (
    AnalysisBackendError,
    HttpAnalysisBackend,
    NativeAnalysisBackend,
    create_analysis_backend,
    resolve_native_analyzer_binary,
)


def test_native_backend_sends_command_envelope(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def fake_run(
        command: list[str],
        *,
        input: str,
        text: bool,
        capture_output: bool,
        check: bool,
        timeout: float,
    ) -> subprocess.CompletedProcess[str]:
        del text, capture_output, check
        captured["command"] = command
        captured["input"] = json.loads(input)
        captured["timeout"] = timeout
        return subprocess.CompletedProcess(
            args=command,
            returncode=0,
            stdout='{"word_count": 3}',
            stderr="",
        )

    monkeypatch.setattr("plot_analytics.adapters.analysis_backends.subprocess.run", fake_run)
    backend = NativeAnalysisBackend(executable=Path("plot_analyzer"), timeout_seconds=2.5)
    reply = asyncio.run(backend.invoke("analyze_text", {"text": "a b c"}))
    assert reply == {"word_count": 3}
    assert captured["command"] == ["plot_analyzer"]
    assert captured["input"] == {"command": "analyze_text", "payload": {"text": "a b c"}}
    assert captured["timeout"] == 2.5


def test_native_backend_raises_on_nonzero_exit(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(
        command: list[str],
        *,
        input: str,
        text: bool,
        capture_output: bool,
        check: bool,
        timeout: float,
    ) -> subprocess.CompletedProcess[str]:
        del input, text, capture_output, check, timeout
        return subprocess.CompletedProcess(args=command, returncode=3, stdout="", stderr="boom")

    monkeypatch.setattr("plot_analytics.adapters.analysis_backends.subprocess.run", fake_run)
    backend = NativeAnalysisBackend(executable=Path("plot_analyzer"))
    with pytest.raises(AnalysisBackendError, match="exit code 3"):
        asyncio.run(backend.invoke("analyze_text", {"text": ""}))


def test_native_backend_raises_on_invalid_json(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(
        command: list[str],
        *,
        input: str,
        text: bool,
        capture_output: bool,
        check: bool,
        timeout: float,
    ) -> subprocess.CompletedProcess[str]:
        del input, text, capture_output, check, timeout
        return subprocess.CompletedProcess(args=command, returncode=0, stdout="not json", stderr="")

    monkeypatch.setattr("plot_analytics.adapters.analysis_backends.subprocess.run", fake_run)
    backend = NativeAnalysisBackend(executable=Path("plot_analyzer"))
    with pytest.raises(AnalysisBackendError, match="invalid JSON"):
        asyncio.run(backend.invoke("analyze_text", {"text": ""}))


def test_native_backend_raises_on_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        raise subprocess.TimeoutExpired(cmd=command, timeout=kwargs["timeout"])

    monkeypatch.setattr("plot_analytics.adapters.analysis_backends.subprocess.run", fake_run)
    backend = NativeAnalysisBackend(executable=Path("plot_analyzer"), timeout_seconds=0.5)
    with pytest.raises(AnalysisBackendError, match="timed out"):
        asyncio.run(backend.invoke("analyze_text", {"text": ""}))


def test_native_backend_raises_when_binary_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "plot_analytics.adapters.analysis_backends.resolve_native_analyzer_binary",
        lambda: None,
    )
    with pytest.raises(AnalysisBackendError, match="not found"):
        asyncio.run(NativeAnalysisBackend().invoke("analyze_text", {"text": ""}))


def test_resolve_binary_prefers_env_override(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    binary = tmp_path / "plot_analyzer"
    binary.write_text("", encoding="utf-8")
    monkeypatch.setenv("PLOT_ANALYTICS_NATIVE_ANALYZER_BIN", str(binary))
    assert resolve_native_analyzer_binary() == binary


def test_http_backend_posts_payload_to_command_path() -> None:
    seen: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"word_count": 2})

    backend = HttpAnalysisBackend(
        base_url="http://analyzer.local/api/",
        transport=httpx.MockTransport(handler),
    )
    reply = asyncio.run(backend.invoke("analyze_text", {"text": "a b"}))
    assert reply == {"word_count": 2}
    assert seen["url"] == "http://analyzer.local/api/analyze_text"
    assert seen["body"] == {"text": "a b"}


def test_http_backend_raises_on_error_status() -> None:
    backend = HttpAnalysisBackend(
        base_url="http://analyzer.local",
        transport=httpx.MockTransport(lambda request: httpx.Response(500, text="down")),
    )
    with pytest.raises(AnalysisBackendError, match="500"):
        asyncio.run(backend.invoke("analyze_text", {"text": ""}))


def test_http_backend_raises_on_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    backend = HttpAnalysisBackend(
        base_url="http://analyzer.local",
        transport=httpx.MockTransport(handler),
    )
    with pytest.raises(AnalysisBackendError, match="request failed"):
        asyncio.run(backend.invoke("analyze_text", {"text": ""}))


def test_create_analysis_backend_defaults_to_none(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PLOT_ANALYTICS_ANALYSIS_BACKEND", raising=False)
    assert create_analysis_backend() is None


def test_create_analysis_backend_builds_http_with_clamped_timeout(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("PLOT_ANALYTICS_ANALYSIS_BACKEND", "HTTP")
    monkeypatch.setenv("PLOT_ANALYTICS_ANALYSIS_URL", "http://analyzer.local/")
    monkeypatch.setenv("PLOT_ANALYTICS_ANALYSIS_TIMEOUT_MS", "5")
    backend = create_analysis_backend()
    assert isinstance(backend, HttpAnalysisBackend)
    assert backend.base_url == "http://analyzer.local"
    assert backend._timeout_seconds == 0.1


def test_create_analysis_backend_http_without_url_is_none(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("PLOT_ANALYTICS_ANALYSIS_BACKEND", "http")
    monkeypatch.delenv("PLOT_ANALYTICS_ANALYSIS_URL", raising=False)
    assert create_analysis_backend() is None


def test_create_analysis_backend_native_and_unknown(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLOT_ANALYTICS_ANALYSIS_BACKEND", "native")
    assert isinstance(create_analysis_backend(), NativeAnalysisBackend)
    monkeypatch.setenv("PLOT_ANALYTICS_ANALYSIS_BACKEND", "quantum")
    assert create_analysis_backend() is None
