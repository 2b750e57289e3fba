"""Python-first client for the plot analytics HTTP API."""

from __future__ import annotations

from typing import Any

import httpx

from plot_analytics.api.contracts import (
    ArcRadarResponse,
    BeatSheetGenerateRequest,
    BeatUpdateRequest,
    ConflictCurveResponse,
    ProgressResponse,
    ThemeBubbleRequest,
    ThemeBubbleResponse,
)
from plot_analytics.core.analytics_schema import (
    ResearchAnalytics,
    TextAnalytics,
    WritingSuggestionsResult,
)
from plot_analytics.domain.models import PlotStructure, SceneRef


class PlotAnalyticsClient:
    """Tiny typed API client for Python users."""

    def __init__(
        self,
        api_base_url: str = "http://127.0.0.1:8000",
        *,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._api_base_url = api_base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    @property
    def api_base_url(self) -> str:
        """Return normalized API base URL."""
        return self._api_base_url

    def _project_url(self, project_id: str, suffix: str) -> str:
        return f"{self._api_base_url}/api/v1/projects/{project_id}/{suffix}"

    def _get(self, url: str) -> Any:
        response = httpx.get(url, timeout=self._timeout_seconds)
        response.raise_for_status()
        return response.json()

    def _send(self, method: str, url: str, payload: dict[str, Any]) -> Any:
        response = httpx.request(method, url, json=payload, timeout=self._timeout_seconds)
        response.raise_for_status()
        return response.json()

    def list_templates(self) -> list[str]:
        payload = self._get(f"{self._api_base_url}/api/v1/beat-sheets/templates")
        return [str(name) for name in payload["templates"]]

    def generate_plot(
        self,
        *,
        project_id: str,
        template: str = "default",
        target_word_count: int = 80_000,
        persist: bool = True,
    ) -> PlotStructure:
        """Generate a beat sheet on the server and return the new plot structure."""
        request = BeatSheetGenerateRequest(
            template=template, target_word_count=target_word_count, persist=persist
        )
        payload = self._send(
            "POST", self._project_url(project_id, "plot/generate"), request.model_dump()
        )
        return PlotStructure.model_validate(payload)

    def get_plot(self, *, project_id: str) -> PlotStructure:
        return PlotStructure.model_validate(self._get(self._project_url(project_id, "plot")))

    def update_beat(
        self,
        *,
        project_id: str,
        beat_id: str,
        update: BeatUpdateRequest,
    ) -> PlotStructure:
        """Apply a partial beat update and return the stored plot."""
        payload = self._send(
            "PATCH",
            self._project_url(project_id, f"plot/beats/{beat_id}"),
            update.model_dump(exclude_none=True),
        )
        return PlotStructure.model_validate(payload)

    def get_progress(self, *, project_id: str) -> ProgressResponse:
        return ProgressResponse.model_validate(self._get(self._project_url(project_id, "progress")))

    def get_conflict_curves(self, *, project_id: str) -> list[ConflictCurveResponse]:
        payload = self._get(self._project_url(project_id, "conflicts/curves"))
        return [ConflictCurveResponse.model_validate(item) for item in payload]

    def get_theme_bubbles(
        self,
        *,
        project_id: str,
        scenes: list[SceneRef] | None = None,
        document_ids: list[str] | None = None,
    ) -> list[ThemeBubbleResponse]:
        request = ThemeBubbleRequest(scenes=scenes, document_ids=document_ids)
        payload = self._send(
            "POST",
            self._project_url(project_id, "themes/bubbles"),
            request.model_dump(mode="json"),
        )
        return [ThemeBubbleResponse.model_validate(item) for item in payload]

    def get_arc_radar(self, *, project_id: str, character_id: str) -> ArcRadarResponse:
        payload = self._get(self._project_url(project_id, f"characters/{character_id}/arc/radar"))
        return ArcRadarResponse.model_validate(payload)

    def get_research_analytics(self, *, project_id: str) -> ResearchAnalytics:
        payload = self._get(self._project_url(project_id, "research/analytics"))
        return ResearchAnalytics.model_validate(payload)

    def analyze_text(self, text: str) -> TextAnalytics:
        payload = self._send("POST", f"{self._api_base_url}/api/v1/analysis/text", {"text": text})
        return TextAnalytics.model_validate(payload)

    def writing_suggestions(
        self,
        text: str,
        *,
        target_style: str = "general",
        focus_areas: list[str] | None = None,
    ) -> WritingSuggestionsResult:
        payload = self._send(
            "POST",
            f"{self._api_base_url}/api/v1/analysis/writing-suggestions",
            {
                "text": text,
                "target_style": target_style,
                "focus_areas": focus_areas if focus_areas is not None else ["pacing", "clarity"],
            },
        )
        return WritingSuggestionsResult.model_validate(payload)
