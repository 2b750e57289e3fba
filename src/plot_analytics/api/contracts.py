"""Typed request and response contracts shared by API handlers and the Python client."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from plot_analytics.domain.models import (
    Character,
    EditEvent,
    PlotStructure,
    Relationship,
    SceneRef,
    WorldEvent,
)


class ContractModel(BaseModel):
    """Base model config used by all API contracts."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class ProseContractModel(ContractModel):
    """Contract carrying manuscript text; strings keep their whitespace."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=False)


class BeatSheetGenerateRequest(ContractModel):
    """Generate (or regenerate) the project's beat sheet from a template."""

    template: str = Field(default="default", max_length=80)
    target_word_count: int = 80_000
    persist: bool = True


class BeatUpdateRequest(ProseContractModel):
    """Partial beat update; omitted fields keep their stored values."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    content: str | None = None
    word_count: int | None = Field(default=None, ge=0)
    scene_ids: list[str] | None = None
    is_completed: bool | None = None


class TargetWordCountRequest(ContractModel):
    target_word_count: int = Field(gt=0)


class TemplateListResponse(ContractModel):
    templates: list[str]


class BeatPromptResponse(ContractModel):
    beat_name: str
    prompt: str


class ActProgressResponse(ContractModel):
    act: Literal["act_one", "act_two", "act_three"]
    completed: int
    total: int
    percent: int


class CharacterArcProgressResponse(ContractModel):
    character_id: str
    name: str
    arc_completion_percent: int


class ProgressResponse(ContractModel):
    """Completion view for one project's plot and character arcs."""

    project_id: str
    overall_percent: int
    acts: list[ActProgressResponse]
    characters: list[CharacterArcProgressResponse] = Field(default_factory=list)


class CurvePointResponse(ContractModel):
    percentage: float
    intensity: float


class ConflictCurveResponse(ContractModel):
    conflict_id: str
    conflict_type: Literal["internal", "external"]
    points: list[CurvePointResponse]


class ThemeBubbleRequest(ContractModel):
    """Scene positions for bubble projection; document ids are spaced evenly."""

    scenes: list[SceneRef] | None = None
    document_ids: list[str] | None = None


class ThemeBubbleResponse(ContractModel):
    theme_id: str
    scene_id: str
    intensity: int
    x: float
    y: int
    radius: int


class ArcRadarPointResponse(ContractModel):
    beat_id: str
    values: list[float]


class ArcRadarResponse(ContractModel):
    character_id: str
    dimensions: list[str]
    arc_completion_percent: int
    series: list[ArcRadarPointResponse]


class TextAnalysisRequest(ProseContractModel):
    text: str = Field(max_length=2_000_000)


class AdvancedTextAnalysisRequest(TextAnalysisRequest):
    characters: list[Character] = Field(default_factory=list)


class NarrativePatternRequest(TextAnalysisRequest):
    pattern_type: str = Field(default="story_structure", min_length=1, max_length=80)


class StyleConsistencyRequest(ProseContractModel):
    texts: list[str] = Field(default_factory=list)
    author_id: str = Field(min_length=1, max_length=200)


class WritingSuggestionsRequest(TextAnalysisRequest):
    target_style: str = Field(default="general", min_length=1, max_length=80)
    focus_areas: list[str] = Field(default_factory=lambda: ["pacing", "clarity"])


class TextOptimizationRequest(TextAnalysisRequest):
    optimization_target: str = Field(default="readability", min_length=1, max_length=80)


class CollaborationRequest(ContractModel):
    edits: list[EditEvent] = Field(default_factory=list)


class CharacterNetworkRequest(ContractModel):
    characters: list[Character] = Field(default_factory=list)
    relationships: list[Relationship] = Field(default_factory=list)


class WorldAnalysisRequest(ContractModel):
    events: list[WorldEvent] = Field(default_factory=list)
    locations_count: int = Field(default=0, ge=0)


def load_plot_json(path: Path) -> PlotStructure:
    """Load and validate a plot structure JSON file."""
    return PlotStructure.model_validate_json(path.read_text(encoding="utf-8"))


def save_plot_json(path: Path, plot: PlotStructure) -> None:
    """Write a plot structure JSON file with stable formatting."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(plot.model_dump_json(indent=2) + "\n", encoding="utf-8")
