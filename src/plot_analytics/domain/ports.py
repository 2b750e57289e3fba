"""Ports for persistence and the remote analysis collaborator."""

from __future__ import annotations

from typing import Any, Protocol

from plot_analytics.domain.models import (
    BStory,
    Character,
    Conflict,
    FactCheck,
    PlotStructure,
    ResearchItem,
    Theme,
)


class PlotRepository(Protocol):
    """Loads and saves plot entities keyed by project id."""

    def get_plot_structure(self, *, project_id: str) -> PlotStructure | None: ...

    def save_plot_structure(self, *, project_id: str, plot: PlotStructure) -> None: ...

    def delete_plot_structure(self, *, project_id: str) -> bool: ...

    def list_themes(self, *, project_id: str) -> list[Theme]: ...

    def save_theme(self, *, project_id: str, theme: Theme) -> None: ...

    def delete_theme(self, *, project_id: str, theme_id: str) -> bool: ...

    def list_conflicts(self, *, project_id: str) -> list[Conflict]: ...

    def save_conflict(self, *, project_id: str, conflict: Conflict) -> None: ...

    def delete_conflict(self, *, project_id: str, conflict_id: str) -> bool: ...

    def list_b_stories(self, *, project_id: str) -> list[BStory]: ...

    def save_b_story(self, *, project_id: str, b_story: BStory) -> None: ...

    def delete_b_story(self, *, project_id: str, b_story_id: str) -> bool: ...

    def get_character(self, *, project_id: str, character_id: str) -> Character | None: ...

    def list_characters(self, *, project_id: str) -> list[Character]: ...

    def save_character(self, *, project_id: str, character: Character) -> None: ...

    def delete_character(self, *, project_id: str, character_id: str) -> bool: ...

    def list_research_items(self, *, project_id: str) -> list[ResearchItem]: ...

    def save_research_item(self, *, project_id: str, item: ResearchItem) -> None: ...

    def delete_research_item(self, *, project_id: str, item_id: str) -> bool: ...

    def list_fact_checks(self, *, project_id: str) -> list[FactCheck]: ...

    def save_fact_check(self, *, project_id: str, fact: FactCheck) -> None: ...

    def delete_fact_check(self, *, project_id: str, fact_id: str) -> bool: ...


class AnalysisBackend(Protocol):
    """Deep analysis collaborator reachable through one request per call."""

    name: str

    async def invoke(self, command: str, payload: dict[str, Any]) -> Any:
        """Send one analysis command and return the decoded JSON reply."""
        ...
