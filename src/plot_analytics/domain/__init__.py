"""Plot entity models and collaborator ports."""

from plot_analytics.domain.models import (
    Beat,
    BStory,
    Character,
    CharacterArcPoint,
    Conflict,
    EditEvent,
    FactCheck,
    PlotStructure,
    Relationship,
    ResearchItem,
    SceneRef,
    Theme,
    WorldEvent,
)
from plot_analytics.domain.ports import AnalysisBackend, PlotRepository

__all__ = [
    "AnalysisBackend",
    "BStory",
    "Beat",
    "Character",
    "CharacterArcPoint",
    "Conflict",
    "EditEvent",
    "FactCheck",
    "PlotRepository",
    "PlotStructure",
    "Relationship",
    "ResearchItem",
    "SceneRef",
    "Theme",
    "WorldEvent",
]
