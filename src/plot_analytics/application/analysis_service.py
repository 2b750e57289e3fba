"""Remote-then-fallback orchestration for every analytics kind.

Each call sends exactly one request to the configured analysis backend. Any
failure (unreachable backend, timeout, malformed reply, schema mismatch) or a
missing backend produces the local heuristic result instead. There is no
retry and no state carried between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from plot_analytics.core import network_analytics, research_analytics, text_heuristics
from plot_analytics.core.analytics_schema import (
    AdvancedTextAnalytics,
    AnalyticsResult,
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
from plot_analytics.core.progress import summarize_plot
from plot_analytics.domain.models import (
    Beat,
    Character,
    EditEvent,
    FactCheck,
    Relationship,
    ResearchItem,
    WorldEvent,
)
from plot_analytics.domain.ports import AnalysisBackend

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=AnalyticsResult)


@dataclass(frozen=True)
class AnalysisOutcome(Generic[ResultT]):
    """Result plus whether the local tier produced it and why."""

    result: ResultT
    fallback_used: bool
    error: str | None = None


@dataclass(frozen=True)
class _AnalysisRequest(Generic[ResultT]):
    kind: str
    command: str
    payload: dict[str, Any]
    model: type[ResultT]
    local: Callable[[], ResultT]


def _dump_all(records: Sequence[BaseModel]) -> list[dict[str, Any]]:
    return [record.model_dump(mode="json") for record in records]


class AnalysisService:
    """Analytics entry points shared by the HTTP layer, CLI, and Python callers."""

    def __init__(self, backend: AnalysisBackend | None = None) -> None:
        self._backend = backend
        self._builders: dict[str, Callable[..., _AnalysisRequest[Any]]] = {
            "characters": self._characters_request,
            "world": self._world_request,
            "plot": self._plot_request,
            "text": self._text_request,
            "advanced_text": self._advanced_text_request,
            "research": self._research_request,
            "collaboration": self._collaboration_request,
            "narrative_patterns": self._narrative_patterns_request,
            "style_consistency": self._style_consistency_request,
            "writing_suggestions": self._writing_suggestions_request,
            "text_optimization": self._text_optimization_request,
        }

    @property
    def backend_name(self) -> str:
        return self._backend.name if self._backend is not None else "none"

    def kinds(self) -> list[str]:
        return sorted(self._builders)

    async def run_analysis(self, kind: str, **arguments: Any) -> AnalysisOutcome[Any]:
        """Run one analytics kind by name and report whether it degraded."""
        builder = self._builders.get(kind)
        if builder is None:
            raise ValueError(f"Unknown analysis kind '{kind}'. Expected one of: {self.kinds()}")
        return await self._execute(builder(**arguments))

    async def _execute(self, request: _AnalysisRequest[ResultT]) -> AnalysisOutcome[ResultT]:
        if self._backend is None:
            return AnalysisOutcome(result=request.local(), fallback_used=True)
        try:
            reply = await self._backend.invoke(request.command, request.payload)
            result = request.model.model_validate(reply).model_copy(update={"source": "remote"})
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "analysis.fallback kind=%s backend=%s error=%s",
                request.kind,
                self._backend.name,
                exc,
            )
            return AnalysisOutcome(result=request.local(), fallback_used=True, error=str(exc))
        logger.debug("analysis.remote kind=%s backend=%s", request.kind, self._backend.name)
        return AnalysisOutcome(result=result, fallback_used=False)

    async def analyze_characters(
        self,
        characters: Sequence[Character],
        relationships: Sequence[Relationship],
    ) -> CharacterAnalytics:
        return (await self._execute(self._characters_request(characters, relationships))).result

    async def analyze_world(
        self, events: Sequence[WorldEvent], locations_count: int
    ) -> WorldAnalytics:
        return (await self._execute(self._world_request(events, locations_count))).result

    async def analyze_plot(self, beats: Sequence[Beat]) -> PlotAnalytics:
        return (await self._execute(self._plot_request(beats))).result

    async def analyze_text(self, text: str) -> TextAnalytics:
        return (await self._execute(self._text_request(text))).result

    async def analyze_advanced_text(
        self, text: str, characters: Sequence[Character] = ()
    ) -> AdvancedTextAnalytics:
        return (await self._execute(self._advanced_text_request(text, characters))).result

    async def analyze_research(
        self, items: Sequence[ResearchItem], facts: Sequence[FactCheck]
    ) -> ResearchAnalytics:
        return (await self._execute(self._research_request(items, facts))).result

    async def analyze_collaboration_metrics(
        self, edits: Sequence[EditEvent]
    ) -> CollaborationMetrics:
        return (await self._execute(self._collaboration_request(edits))).result

    async def detect_narrative_patterns(
        self, text: str, pattern_type: str
    ) -> NarrativePatternReport:
        return (await self._execute(self._narrative_patterns_request(text, pattern_type))).result

    async def analyze_writing_style_consistency(
        self, texts: Sequence[str], author_id: str
    ) -> StyleConsistencyReport:
        return (await self._execute(self._style_consistency_request(texts, author_id))).result

    async def generate_writing_suggestions(
        self,
        text: str,
        target_style: str = "general",
        focus_areas: Sequence[str] = ("pacing", "clarity"),
    ) -> WritingSuggestionsResult:
        request = self._writing_suggestions_request(text, target_style, focus_areas)
        return (await self._execute(request)).result

    async def optimize_text(self, text: str, optimization_target: str) -> TextOptimizationResult:
        request = self._text_optimization_request(text, optimization_target)
        return (await self._execute(request)).result

    def _characters_request(
        self,
        characters: Sequence[Character],
        relationships: Sequence[Relationship],
    ) -> _AnalysisRequest[CharacterAnalytics]:
        return _AnalysisRequest(
            kind="characters",
            command="analyze_characters",
            payload={
                "characters": _dump_all(characters),
                "relationships": _dump_all(relationships),
            },
            model=CharacterAnalytics,
            local=lambda: network_analytics.analyze_characters(characters, relationships),
        )

    def _world_request(
        self, events: Sequence[WorldEvent], locations_count: int
    ) -> _AnalysisRequest[WorldAnalytics]:
        return _AnalysisRequest(
            kind="world",
            command="analyze_world",
            payload={"events": _dump_all(events), "locations_count": locations_count},
            model=WorldAnalytics,
            local=lambda: network_analytics.analyze_world(events, locations_count),
        )

    def _plot_request(self, beats: Sequence[Beat]) -> _AnalysisRequest[PlotAnalytics]:
        return _AnalysisRequest(
            kind="plot",
            command="analyze_plot",
            payload={"beats": _dump_all(beats)},
            model=PlotAnalytics,
            local=lambda: summarize_plot(beats),
        )

    def _text_request(self, text: str) -> _AnalysisRequest[TextAnalytics]:
        return _AnalysisRequest(
            kind="text",
            command="analyze_text",
            payload={"text": text},
            model=TextAnalytics,
            local=lambda: text_heuristics.analyze_text(text),
        )

    def _advanced_text_request(
        self, text: str, characters: Sequence[Character] = ()
    ) -> _AnalysisRequest[AdvancedTextAnalytics]:
        return _AnalysisRequest(
            kind="advanced_text",
            command="analyze_advanced_text",
            payload={"text": text, "characters": _dump_all(characters)},
            model=AdvancedTextAnalytics,
            local=lambda: text_heuristics.fallback_advanced_text_analysis(text),
        )

    def _research_request(
        self, items: Sequence[ResearchItem], facts: Sequence[FactCheck]
    ) -> _AnalysisRequest[ResearchAnalytics]:
        return _AnalysisRequest(
            kind="research",
            command="analyze_research",
            payload={"research_items": _dump_all(items), "fact_checks": _dump_all(facts)},
            model=ResearchAnalytics,
            local=lambda: research_analytics.analyze_research(items, facts),
        )

    def _collaboration_request(
        self, edits: Sequence[EditEvent]
    ) -> _AnalysisRequest[CollaborationMetrics]:
        return _AnalysisRequest(
            kind="collaboration",
            command="analyze_collaboration_metrics",
            payload={"edit_history": _dump_all(edits)},
            model=CollaborationMetrics,
            local=lambda: text_heuristics.fallback_collaboration_metrics(edits),
        )

    def _narrative_patterns_request(
        self, text: str, pattern_type: str
    ) -> _AnalysisRequest[NarrativePatternReport]:
        return _AnalysisRequest(
            kind="narrative_patterns",
            command="detect_narrative_patterns",
            payload={"text": text, "pattern_type": pattern_type},
            model=NarrativePatternReport,
            local=lambda: text_heuristics.detect_narrative_patterns(text, pattern_type),
        )

    def _style_consistency_request(
        self, texts: Sequence[str], author_id: str
    ) -> _AnalysisRequest[StyleConsistencyReport]:
        return _AnalysisRequest(
            kind="style_consistency",
            command="analyze_writing_style_consistency",
            payload={"texts": list(texts), "author_id": author_id},
            model=StyleConsistencyReport,
            local=lambda: text_heuristics.analyze_writing_style_consistency(texts, author_id),
        )

    def _writing_suggestions_request(
        self,
        text: str,
        target_style: str = "general",
        focus_areas: Sequence[str] = ("pacing", "clarity"),
    ) -> _AnalysisRequest[WritingSuggestionsResult]:
        return _AnalysisRequest(
            kind="writing_suggestions",
            command="generate_writing_suggestions",
            payload={
                "text": text,
                "target_style": target_style,
                "focus_areas": list(focus_areas),
            },
            model=WritingSuggestionsResult,
            local=lambda: text_heuristics.generate_writing_suggestions(
                text, target_style, focus_areas
            ),
        )

    def _text_optimization_request(
        self, text: str, optimization_target: str
    ) -> _AnalysisRequest[TextOptimizationResult]:
        return _AnalysisRequest(
            kind="text_optimization",
            command="optimize_text_performance",
            payload={"text": text, "optimization_target": optimization_target},
            model=TextOptimizationResult,
            local=lambda: text_heuristics.optimize_text(text, optimization_target),
        )
