"""Chart-ready projections of theme links and character emotional arcs."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Final

from plot_analytics.domain.models import CharacterArcPoint, SceneRef, Theme

DEFAULT_THEME_INTENSITY: Final = 5
DEFAULT_EMOTIONAL_DIMENSIONS: Final[tuple[str, ...]] = (
    "Confidence",
    "Fear",
    "Hope",
    "Courage",
    "Selflessness",
    "Trust",
    "Determination",
    "Wisdom",
)


@dataclass(frozen=True)
class ThemeBubble:
    """One theme-scene bubble for the theme intensity map."""

    theme_id: str
    scene_id: str
    intensity: int
    x: float
    y: int
    radius: int


def resolve_arc_dimensions() -> tuple[str, ...]:
    """Configured emotional dimension vocabulary, defaulting to the built-in eight."""
    raw = os.environ.get("PLOT_ANALYTICS_ARC_DIMENSIONS", "").strip()
    if not raw:
        return DEFAULT_EMOTIONAL_DIMENSIONS
    dimensions = tuple(dict.fromkeys(item.strip() for item in raw.split(",") if item.strip()))
    return dimensions or DEFAULT_EMOTIONAL_DIMENSIONS


def theme_bubble_data(themes: Sequence[Theme], scenes: Iterable[SceneRef]) -> list[ThemeBubble]:
    """Project theme-scene links onto bubble coordinates.

    Themes are visited in order and each theme's scene ids in link order. Linked
    scenes without a known position are skipped.
    """
    scene_positions = {scene.id: scene.percentage for scene in scenes}
    bubbles: list[ThemeBubble] = []
    for theme_index, theme in enumerate(themes):
        for scene_id in theme.scene_ids:
            position = scene_positions.get(scene_id)
            if position is None:
                continue
            intensity = theme.intensity.get(scene_id, DEFAULT_THEME_INTENSITY)
            bubbles.append(
                ThemeBubble(
                    theme_id=theme.id,
                    scene_id=scene_id,
                    intensity=intensity,
                    x=position,
                    y=theme_index,
                    radius=intensity * 3 + 5,
                )
            )
    return bubbles


def scenes_from_documents(document_ids: Sequence[str]) -> list[SceneRef]:
    """Spread an ordered document list evenly across the story."""
    total = len(document_ids)
    return [
        SceneRef(id=document_id, percentage=(200 * index + total) // (2 * total))
        for index, document_id in enumerate(document_ids)
    ]


def radar_vector(
    arc_point: CharacterArcPoint | None,
    dimension_order: Sequence[str] | None = None,
) -> list[float]:
    """Emotional values in axis order; missing dimensions and points read as zero."""
    dimensions = resolve_arc_dimensions() if dimension_order is None else dimension_order
    if arc_point is None:
        return [0.0] * len(dimensions)
    return [float(arc_point.emotional_state.get(name, 0)) for name in dimensions]


def arc_radar_series(
    arc_points_by_beat_id: Mapping[str, CharacterArcPoint],
    beat_ids: Iterable[str],
    dimension_order: Sequence[str] | None = None,
) -> list[tuple[str, list[float]]]:
    """One radar vector per beat, aligned even where arc entry is incomplete."""
    dimensions = resolve_arc_dimensions() if dimension_order is None else dimension_order
    return [
        (beat_id, radar_vector(arc_points_by_beat_id.get(beat_id), dimensions))
        for beat_id in beat_ids
    ]
