"""Adapters for the deep text analysis collaborator (native subprocess or HTTP)."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Any

import httpx

from plot_analytics.domain.ports import AnalysisBackend

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 10_000
BACKEND_KINDS = ("none", "native", "http")


class AnalysisBackendError(RuntimeError):
    """Raised when the analysis collaborator cannot produce a usable reply."""


def _int_env(name: str, default: int, *, minimum: int, maximum: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(minimum, min(maximum, value))


def _exe_name(base: str) -> str:
    if sys.platform.startswith("win"):
        return f"{base}.exe"
    return base


def _candidate_binary_paths() -> list[Path]:
    base_name = _exe_name("plot_analyzer")
    return [
        Path("build/native") / base_name,
        Path("build/native/Release") / base_name,
        Path("target/release") / base_name,
    ]


def resolve_native_analyzer_binary() -> Path | None:
    """Resolve the analyzer executable from env, local build output, or PATH."""
    from_env = os.environ.get("PLOT_ANALYTICS_NATIVE_ANALYZER_BIN", "").strip()
    if from_env:
        candidate = Path(from_env)
        if candidate.is_file():
            return candidate

    for candidate in _candidate_binary_paths():
        if candidate.is_file():
            return candidate

    from_path = shutil.which("plot_analyzer")
    if from_path:
        return Path(from_path)
    return None


class NativeAnalysisBackend:
    """Run the analyzer executable once per command, exchanging JSON over stdio."""

    name = "native"

    def __init__(self, *, executable: Path | None = None, timeout_seconds: float = 10.0) -> None:
        self._executable = executable
        self._timeout_seconds = timeout_seconds

    async def invoke(self, command: str, payload: dict[str, Any]) -> Any:
        return await asyncio.to_thread(self._run, command, payload)

    def _run(self, command: str, payload: dict[str, Any]) -> Any:
        resolved = self._executable or resolve_native_analyzer_binary()
        if resolved is None:
            raise AnalysisBackendError(
                "plot_analyzer executable not found; build native tools or set "
                "PLOT_ANALYTICS_NATIVE_ANALYZER_BIN."
            )
        request = json.dumps({"command": command, "payload": payload})
        try:
            completed = subprocess.run(
                [str(resolved)],
                input=request,
                text=True,
                capture_output=True,
                check=False,
                timeout=self._timeout_seconds,
            )
        except OSError as exc:
            raise AnalysisBackendError(f"failed to execute analyzer: {exc}") from exc
        except subprocess.TimeoutExpired as exc:
            raise AnalysisBackendError(
                f"analyzer timed out after {self._timeout_seconds:.1f}s"
            ) from exc

        if completed.returncode != 0:
            stderr = completed.stderr.strip()
            raise AnalysisBackendError(
                f"analyzer failed with exit code {completed.returncode}: {stderr}"
            )
        try:
            return json.loads(completed.stdout)
        except json.JSONDecodeError as exc:
            raise AnalysisBackendError("analyzer returned invalid JSON output") from exc


class HttpAnalysisBackend:
    """POST each command to ``{base_url}/{command}`` and return the JSON body."""

    name = "http"

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def invoke(self, command: str, payload: dict[str, Any]) -> Any:
        url = f"{self.base_url}/{command}"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(url, json=payload)
        except httpx.HTTPError as exc:
            raise AnalysisBackendError(f"analysis request failed: {exc}") from exc
        if response.status_code >= 400:
            raise AnalysisBackendError(
                f"analysis service returned {response.status_code} for {command}"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise AnalysisBackendError("analysis service returned invalid JSON") from exc


def create_analysis_backend() -> AnalysisBackend | None:
    """Build the configured collaborator; ``None`` means local heuristics only."""
    kind = os.environ.get("PLOT_ANALYTICS_ANALYSIS_BACKEND", "none").strip().lower() or "none"
    timeout_seconds = (
        _int_env(
            "PLOT_ANALYTICS_ANALYSIS_TIMEOUT_MS",
            DEFAULT_TIMEOUT_MS,
            minimum=100,
            maximum=120_000,
        )
        / 1000.0
    )
    if kind == "native":
        return NativeAnalysisBackend(timeout_seconds=timeout_seconds)
    if kind == "http":
        base_url = os.environ.get("PLOT_ANALYTICS_ANALYSIS_URL", "").strip()
        if not base_url:
            logger.warning("analysis.backend http requested without PLOT_ANALYTICS_ANALYSIS_URL")
            return None
        return HttpAnalysisBackend(base_url=base_url, timeout_seconds=timeout_seconds)
    if kind != "none":
        logger.warning("analysis.backend unknown kind=%s; using local heuristics", kind)
    return None
