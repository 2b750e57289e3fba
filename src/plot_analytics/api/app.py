"""FastAPI application exposing plot analytics to the presentation layer."""

from __future__ import annotations

import logging
import os
import sqlite3
from pathlib import Path
from typing import Literal

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from plot_analytics.adapters.analysis_backends import create_analysis_backend
from plot_analytics.adapters.sqlite_plot_store import SQLitePlotStore
from plot_analytics.api.contracts import (
    ActProgressResponse,
    AdvancedTextAnalysisRequest,
    ArcRadarPointResponse,
    ArcRadarResponse,
    BeatPromptResponse,
    BeatSheetGenerateRequest,
    BeatUpdateRequest,
    CharacterArcProgressResponse,
    CharacterNetworkRequest,
    CollaborationRequest,
    ConflictCurveResponse,
    CurvePointResponse,
    NarrativePatternRequest,
    ProgressResponse,
    StyleConsistencyRequest,
    TargetWordCountRequest,
    TemplateListResponse,
    TextAnalysisRequest,
    TextOptimizationRequest,
    ThemeBubbleRequest,
    ThemeBubbleResponse,
    WorldAnalysisRequest,
    WritingSuggestionsRequest,
)
from plot_analytics.application.analysis_service import AnalysisService
from plot_analytics.core.analytics_schema import (
    AdvancedTextAnalytics,
    CharacterAnalytics,
    CollaborationMetrics,
    NarrativePatternReport,
    PlotAnalytics,
    ResearchAnalytics,
    StyleConsistencyReport,
    TextAnalytics,
    TextOptimizationResult,
    WorldAnalytics,
    WritingSuggestionsResult,
)
from plot_analytics.core.beat_sheet import (
    available_templates,
    beat_writing_prompt,
    generate_beat_sheet,
    recompute_word_counts,
)
from plot_analytics.core.conflict_curve import conflict_curves_for_beats
from plot_analytics.core.progress import (
    act_progress,
    arc_completion_percent,
    beat_completion_percent,
)
from plot_analytics.core.theme_arc import (
    arc_radar_series,
    resolve_arc_dimensions,
    scenes_from_documents,
    theme_bubble_data,
)
from plot_analytics.domain.models import (
    BStory,
    Character,
    Conflict,
    FactCheck,
    PlotStructure,
    ResearchItem,
    Theme,
    apply_beat_update,
    replace_beat,
)
from plot_analytics.domain.ports import AnalysisBackend

DEFAULT_DB_PATH = Path("work/local/plot_analytics.db")

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Simple health payload used by probes."""

    status: Literal["ok"] = "ok"
    service: str = "plot_analytics"
    analysis_backend: str = "none"


class ApiRootResponse(BaseModel):
    """Lists the available API capabilities."""

    name: str = "plot_analytics"
    persistence: Literal["sqlite"] = "sqlite"
    endpoints: list[str] = Field(
        default_factory=lambda: [
            "/healthz",
            "/api/v1",
            "/api/v1/beat-sheets/templates",
            "/api/v1/beat-sheets/prompts",
            "/api/v1/projects/{project_id}/plot",
            "/api/v1/projects/{project_id}/plot/generate",
            "/api/v1/projects/{project_id}/plot/target-word-count",
            "/api/v1/projects/{project_id}/plot/beats/{beat_id}",
            "/api/v1/projects/{project_id}/progress",
            "/api/v1/projects/{project_id}/conflicts",
            "/api/v1/projects/{project_id}/conflicts/curves",
            "/api/v1/projects/{project_id}/themes",
            "/api/v1/projects/{project_id}/themes/bubbles",
            "/api/v1/projects/{project_id}/b-stories",
            "/api/v1/projects/{project_id}/characters",
            "/api/v1/projects/{project_id}/characters/{character_id}/arc/radar",
            "/api/v1/projects/{project_id}/research/items",
            "/api/v1/projects/{project_id}/research/facts",
            "/api/v1/projects/{project_id}/research/analytics",
            "/api/v1/projects/{project_id}/analytics/plot",
            "/api/v1/analysis/characters",
            "/api/v1/analysis/world",
            "/api/v1/analysis/text",
            "/api/v1/analysis/advanced-text",
            "/api/v1/analysis/collaboration",
            "/api/v1/analysis/narrative-patterns",
            "/api/v1/analysis/style-consistency",
            "/api/v1/analysis/writing-suggestions",
            "/api/v1/analysis/optimize-text",
        ]
    )


def _resolve_db_path(db_path: Path | None) -> Path:
    """Resolve DB path from explicit arg, env var, then default path."""
    if db_path is not None:
        return db_path
    env_value = os.environ.get("PLOT_ANALYTICS_DB_PATH", "").strip()
    if env_value:
        return Path(env_value)
    return DEFAULT_DB_PATH


def _cors_origins() -> list[str]:
    raw = os.environ.get("PLOT_ANALYTICS_CORS_ORIGINS", "").strip()
    if raw:
        return [origin.strip() for origin in raw.split(",") if origin.strip()]
    return ["http://127.0.0.1:5173", "http://localhost:5173"]


def create_app(db_path: Path | None = None, backend: AnalysisBackend | None = None) -> FastAPI:
    """Create the API application."""
    effective_db_path = _resolve_db_path(db_path)
    store = SQLitePlotStore(db_path=effective_db_path)
    service = AnalysisService(backend if backend is not None else create_analysis_backend())

    app = FastAPI(
        title="plot_analytics API",
        version="0.1.0",
        description="Beat sheets, progress, conflict curves, theme/arc views, and text analytics.",
        openapi_tags=[
            {"name": "system", "description": "Service health and runtime metadata."},
            {"name": "beat-sheets", "description": "Templates and per-beat prompts."},
            {"name": "plot", "description": "Plot structure generation, reads, and updates."},
            {"name": "entities", "description": "Themes, conflicts, characters, and research."},
            {"name": "views", "description": "Progress, curves, bubbles, and radar read models."},
            {"name": "analysis", "description": "Text and network analytics with local fallback."},
        ],
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info(
        "api.start db_path=%s analysis_backend=%s", effective_db_path, service.backend_name
    )

    @app.exception_handler(sqlite3.Error)
    async def _storage_error(request: Request, exc: sqlite3.Error) -> JSONResponse:
        logger.warning("storage.error path=%s error=%s", request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})

    def require_plot(project_id: str) -> PlotStructure:
        plot = store.get_plot_structure(project_id=project_id)
        if plot is None:
            raise HTTPException(status_code=404, detail="Plot structure not found")
        return plot

    def research_inputs(project_id: str) -> tuple[list[ResearchItem], list[FactCheck]]:
        return (
            store.list_research_items(project_id=project_id),
            store.list_fact_checks(project_id=project_id),
        )

    @app.get("/healthz", response_model=HealthResponse, tags=["system"])
    def healthz() -> HealthResponse:
        return HealthResponse(analysis_backend=service.backend_name)

    @app.get("/api/v1", response_model=ApiRootResponse, tags=["system"])
    def api_root() -> ApiRootResponse:
        return ApiRootResponse()

    @app.get(
        "/api/v1/beat-sheets/templates",
        response_model=TemplateListResponse,
        tags=["beat-sheets"],
    )
    def list_templates() -> TemplateListResponse:
        return TemplateListResponse(templates=available_templates())

    @app.get("/api/v1/beat-sheets/prompts", response_model=BeatPromptResponse, tags=["beat-sheets"])
    def get_beat_prompt(
        beat_name: str = Query(min_length=1, max_length=200),
        genre: str | None = Query(default=None, max_length=80),
        character_name: str | None = Query(default=None, max_length=200),
    ) -> BeatPromptResponse:
        return BeatPromptResponse(
            beat_name=beat_name,
            prompt=beat_writing_prompt(beat_name, genre=genre, character_name=character_name),
        )

    @app.post(
        "/api/v1/projects/{project_id}/plot/generate",
        response_model=PlotStructure,
        tags=["plot"],
        status_code=201,
    )
    def generate_plot(project_id: str, payload: BeatSheetGenerateRequest) -> PlotStructure:
        plot = generate_beat_sheet(payload.template, project_id, payload.target_word_count)
        if payload.persist:
            store.save_plot_structure(project_id=project_id, plot=plot)
        logger.info(
            "plot.generate project_id=%s template=%s beats=%s",
            project_id,
            payload.template,
            len(plot.beats),
        )
        return plot

    @app.get("/api/v1/projects/{project_id}/plot", response_model=PlotStructure, tags=["plot"])
    def get_plot(project_id: str) -> PlotStructure:
        return require_plot(project_id)

    @app.delete("/api/v1/projects/{project_id}/plot", status_code=204, tags=["plot"])
    def delete_plot(project_id: str) -> None:
        if not store.delete_plot_structure(project_id=project_id):
            raise HTTPException(status_code=404, detail="Plot structure not found")

    @app.put(
        "/api/v1/projects/{project_id}/plot/target-word-count",
        response_model=PlotStructure,
        tags=["plot"],
    )
    def retarget_plot(project_id: str, payload: TargetWordCountRequest) -> PlotStructure:
        plot = recompute_word_counts(require_plot(project_id), payload.target_word_count)
        store.save_plot_structure(project_id=project_id, plot=plot)
        return plot

    @app.patch(
        "/api/v1/projects/{project_id}/plot/beats/{beat_id}",
        response_model=PlotStructure,
        tags=["plot"],
    )
    def update_beat(project_id: str, beat_id: str, payload: BeatUpdateRequest) -> PlotStructure:
        plot = require_plot(project_id)
        beat = plot.beat(beat_id)
        if beat is None:
            raise HTTPException(status_code=404, detail="Beat not found")
        changes = payload.model_dump(exclude_none=True)
        try:
            updated = replace_beat(plot, apply_beat_update(beat, **changes))
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        store.save_plot_structure(project_id=project_id, plot=updated)
        return updated

    @app.get(
        "/api/v1/projects/{project_id}/progress",
        response_model=ProgressResponse,
        tags=["views"],
    )
    def get_progress(project_id: str) -> ProgressResponse:
        plot = require_plot(project_id)
        acts = act_progress(plot.beats)
        beat_ids = [beat.id for beat in plot.beats]
        return ProgressResponse(
            project_id=project_id,
            overall_percent=beat_completion_percent(plot.beats),
            acts=[
                ActProgressResponse(
                    act=progress.act,
                    completed=progress.completed,
                    total=progress.total,
                    percent=progress.percent,
                )
                for progress in acts
            ],
            characters=[
                CharacterArcProgressResponse(
                    character_id=character.id,
                    name=character.name,
                    arc_completion_percent=arc_completion_percent(
                        character.arc_by_beat_id(), beat_ids
                    ),
                )
                for character in store.list_characters(project_id=project_id)
            ],
        )

    @app.get(
        "/api/v1/projects/{project_id}/conflicts",
        response_model=list[Conflict],
        tags=["entities"],
    )
    def list_conflicts(project_id: str) -> list[Conflict]:
        return store.list_conflicts(project_id=project_id)

    @app.put(
        "/api/v1/projects/{project_id}/conflicts/{conflict_id}",
        response_model=Conflict,
        tags=["entities"],
    )
    def put_conflict(project_id: str, conflict_id: str, conflict: Conflict) -> Conflict:
        if conflict.id != conflict_id:
            raise HTTPException(status_code=422, detail="Path and body ids differ")
        store.save_conflict(project_id=project_id, conflict=conflict)
        return conflict

    @app.delete(
        "/api/v1/projects/{project_id}/conflicts/{conflict_id}",
        status_code=204,
        tags=["entities"],
    )
    def delete_conflict(project_id: str, conflict_id: str) -> None:
        if not store.delete_conflict(project_id=project_id, conflict_id=conflict_id):
            raise HTTPException(status_code=404, detail="Conflict not found")

    @app.get(
        "/api/v1/projects/{project_id}/conflicts/curves",
        response_model=list[ConflictCurveResponse],
        tags=["views"],
    )
    def get_conflict_curves(project_id: str) -> list[ConflictCurveResponse]:
        plot = require_plot(project_id)
        curves = conflict_curves_for_beats(store.list_conflicts(project_id=project_id), plot.beats)
        return [
            ConflictCurveResponse(
                conflict_id=curve.conflict_id,
                conflict_type=curve.conflict_type,
                points=[
                    CurvePointResponse(percentage=point.percentage, intensity=point.intensity)
                    for point in curve.points
                ],
            )
            for curve in curves
        ]

    @app.get("/api/v1/projects/{project_id}/themes", response_model=list[Theme], tags=["entities"])
    def list_themes(project_id: str) -> list[Theme]:
        return store.list_themes(project_id=project_id)

    @app.put(
        "/api/v1/projects/{project_id}/themes/{theme_id}",
        response_model=Theme,
        tags=["entities"],
    )
    def put_theme(project_id: str, theme_id: str, theme: Theme) -> Theme:
        if theme.id != theme_id:
            raise HTTPException(status_code=422, detail="Path and body ids differ")
        store.save_theme(project_id=project_id, theme=theme)
        return theme

    @app.delete(
        "/api/v1/projects/{project_id}/themes/{theme_id}",
        status_code=204,
        tags=["entities"],
    )
    def delete_theme(project_id: str, theme_id: str) -> None:
        if not store.delete_theme(project_id=project_id, theme_id=theme_id):
            raise HTTPException(status_code=404, detail="Theme not found")

    @app.post(
        "/api/v1/projects/{project_id}/themes/bubbles",
        response_model=list[ThemeBubbleResponse],
        tags=["views"],
    )
    def get_theme_bubbles(
        project_id: str, payload: ThemeBubbleRequest
    ) -> list[ThemeBubbleResponse]:
        if payload.scenes is not None:
            scenes = payload.scenes
        else:
            scenes = scenes_from_documents(payload.document_ids or [])
        bubbles = theme_bubble_data(store.list_themes(project_id=project_id), scenes)
        return [
            ThemeBubbleResponse(
                theme_id=bubble.theme_id,
                scene_id=bubble.scene_id,
                intensity=bubble.intensity,
                x=bubble.x,
                y=bubble.y,
                radius=bubble.radius,
            )
            for bubble in bubbles
        ]

    @app.get(
        "/api/v1/projects/{project_id}/b-stories",
        response_model=list[BStory],
        tags=["entities"],
    )
    def list_b_stories(project_id: str) -> list[BStory]:
        return store.list_b_stories(project_id=project_id)

    @app.put(
        "/api/v1/projects/{project_id}/b-stories/{b_story_id}",
        response_model=BStory,
        tags=["entities"],
    )
    def put_b_story(project_id: str, b_story_id: str, b_story: BStory) -> BStory:
        if b_story.id != b_story_id:
            raise HTTPException(status_code=422, detail="Path and body ids differ")
        store.save_b_story(project_id=project_id, b_story=b_story)
        return b_story

    @app.get(
        "/api/v1/projects/{project_id}/characters",
        response_model=list[Character],
        tags=["entities"],
    )
    def list_characters(project_id: str) -> list[Character]:
        return store.list_characters(project_id=project_id)

    @app.put(
        "/api/v1/projects/{project_id}/characters/{character_id}",
        response_model=Character,
        tags=["entities"],
    )
    def put_character(project_id: str, character_id: str, character: Character) -> Character:
        if character.id != character_id:
            raise HTTPException(status_code=422, detail="Path and body ids differ")
        store.save_character(project_id=project_id, character=character)
        return character

    @app.get(
        "/api/v1/projects/{project_id}/characters/{character_id}/arc/radar",
        response_model=ArcRadarResponse,
        tags=["views"],
    )
    def get_arc_radar(project_id: str, character_id: str) -> ArcRadarResponse:
        character = store.get_character(project_id=project_id, character_id=character_id)
        if character is None:
            raise HTTPException(status_code=404, detail="Character not found")
        plot = store.get_plot_structure(project_id=project_id)
        beat_ids = [beat.id for beat in plot.beats] if plot is not None else []
        dimensions = resolve_arc_dimensions()
        arc_map = character.arc_by_beat_id()
        return ArcRadarResponse(
            character_id=character.id,
            dimensions=list(dimensions),
            arc_completion_percent=arc_completion_percent(arc_map, beat_ids),
            series=[
                ArcRadarPointResponse(beat_id=beat_id, values=values)
                for beat_id, values in arc_radar_series(arc_map, beat_ids, dimensions)
            ],
        )

    @app.get(
        "/api/v1/projects/{project_id}/research/items",
        response_model=list[ResearchItem],
        tags=["entities"],
    )
    def list_research_items(project_id: str) -> list[ResearchItem]:
        return store.list_research_items(project_id=project_id)

    @app.put(
        "/api/v1/projects/{project_id}/research/items/{item_id}",
        response_model=ResearchItem,
        tags=["entities"],
    )
    def put_research_item(project_id: str, item_id: str, item: ResearchItem) -> ResearchItem:
        if item.id != item_id:
            raise HTTPException(status_code=422, detail="Path and body ids differ")
        store.save_research_item(project_id=project_id, item=item)
        return item

    @app.get(
        "/api/v1/projects/{project_id}/research/facts",
        response_model=list[FactCheck],
        tags=["entities"],
    )
    def list_fact_checks(project_id: str) -> list[FactCheck]:
        return store.list_fact_checks(project_id=project_id)

    @app.put(
        "/api/v1/projects/{project_id}/research/facts/{fact_id}",
        response_model=FactCheck,
        tags=["entities"],
    )
    def put_fact_check(project_id: str, fact_id: str, fact: FactCheck) -> FactCheck:
        if fact.id != fact_id:
            raise HTTPException(status_code=422, detail="Path and body ids differ")
        store.save_fact_check(project_id=project_id, fact=fact)
        return fact

    @app.get(
        "/api/v1/projects/{project_id}/research/analytics",
        response_model=ResearchAnalytics,
        tags=["analysis"],
    )
    async def get_research_analytics(
        inputs: tuple[list[ResearchItem], list[FactCheck]] = Depends(research_inputs),
    ) -> ResearchAnalytics:
        # Store reads run in sync dependencies, off the event loop.
        items, facts = inputs
        return await service.analyze_research(items, facts)

    @app.get(
        "/api/v1/projects/{project_id}/analytics/plot",
        response_model=PlotAnalytics,
        tags=["analysis"],
    )
    async def get_plot_analytics(plot: PlotStructure = Depends(require_plot)) -> PlotAnalytics:
        return await service.analyze_plot(plot.beats)

    @app.post("/api/v1/analysis/characters", response_model=CharacterAnalytics, tags=["analysis"])
    async def analyze_characters(payload: CharacterNetworkRequest) -> CharacterAnalytics:
        return await service.analyze_characters(payload.characters, payload.relationships)

    @app.post("/api/v1/analysis/world", response_model=WorldAnalytics, tags=["analysis"])
    async def analyze_world(payload: WorldAnalysisRequest) -> WorldAnalytics:
        return await service.analyze_world(payload.events, payload.locations_count)

    @app.post("/api/v1/analysis/text", response_model=TextAnalytics, tags=["analysis"])
    async def analyze_text(payload: TextAnalysisRequest) -> TextAnalytics:
        return await service.analyze_text(payload.text)

    @app.post(
        "/api/v1/analysis/advanced-text",
        response_model=AdvancedTextAnalytics,
        tags=["analysis"],
    )
    async def analyze_advanced_text(payload: AdvancedTextAnalysisRequest) -> AdvancedTextAnalytics:
        return await service.analyze_advanced_text(payload.text, payload.characters)

    @app.post(
        "/api/v1/analysis/collaboration",
        response_model=CollaborationMetrics,
        tags=["analysis"],
    )
    async def analyze_collaboration(payload: CollaborationRequest) -> CollaborationMetrics:
        return await service.analyze_collaboration_metrics(payload.edits)

    @app.post(
        "/api/v1/analysis/narrative-patterns",
        response_model=NarrativePatternReport,
        tags=["analysis"],
    )
    async def detect_patterns(payload: NarrativePatternRequest) -> NarrativePatternReport:
        return await service.detect_narrative_patterns(payload.text, payload.pattern_type)

    @app.post(
        "/api/v1/analysis/style-consistency",
        response_model=StyleConsistencyReport,
        tags=["analysis"],
    )
    async def analyze_style(payload: StyleConsistencyRequest) -> StyleConsistencyReport:
        return await service.analyze_writing_style_consistency(payload.texts, payload.author_id)

    @app.post(
        "/api/v1/analysis/writing-suggestions",
        response_model=WritingSuggestionsResult,
        tags=["analysis"],
    )
    async def writing_suggestions(payload: WritingSuggestionsRequest) -> WritingSuggestionsResult:
        return await service.generate_writing_suggestions(
            payload.text, payload.target_style, payload.focus_areas
        )

    @app.post(
        "/api/v1/analysis/optimize-text",
        response_model=TextOptimizationResult,
        tags=["analysis"],
    )
    async def optimize_text(payload: TextOptimizationRequest) -> TextOptimizationResult:
        return await service.optimize_text(payload.text, payload.optimization_target)

    return app


app = create_app()
