"""Conflict escalation curves sampled along story percentage."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Final

from plot_analytics.domain.models import Beat, Conflict, ConflictType

DEFAULT_BASELINE_INTENSITY: Final = 5

# (exclusive upper percentage, multiplier); the trailing None band is the resolution drop.
_MULTIPLIER_BANDS: Final[dict[ConflictType, tuple[tuple[float | None, float], ...]]] = {
    "internal": (
        (20.0, 0.3),
        (50.0, 0.6),
        (75.0, 0.9),
        (85.0, 1.2),
        (None, 0.4),
    ),
    "external": (
        (10.0, 0.2),
        (25.0, 0.5),
        (50.0, 0.7),
        (75.0, 1.0),
        (90.0, 1.3),
        (None, 0.3),
    ),
}


@dataclass(frozen=True)
class CurvePoint:
    """Intensity sampled at one story position."""

    percentage: float
    intensity: float


@dataclass(frozen=True)
class ConflictCurve:
    """Escalation curve for one conflict."""

    conflict_id: str
    conflict_type: ConflictType
    points: tuple[CurvePoint, ...]


def intensity_multiplier(conflict_type: ConflictType, story_percentage: float) -> float:
    return next(
        multiplier
        for upper, multiplier in _MULTIPLIER_BANDS[conflict_type]
        if upper is None or story_percentage < upper
    )


def conflict_intensity_at(conflict: Conflict, story_percentage: float) -> float:
    """Baseline intensity scaled by the type's piecewise multiplier.

    Values are not clamped; an external conflict at baseline 10 reaches 13
    during the finale band.
    """
    baseline = conflict.intensity or DEFAULT_BASELINE_INTENSITY
    return baseline * intensity_multiplier(conflict.type, story_percentage)


def conflict_curve(conflict: Conflict, positions: Iterable[float]) -> ConflictCurve:
    points = tuple(
        CurvePoint(percentage=position, intensity=conflict_intensity_at(conflict, position))
        for position in positions
    )
    return ConflictCurve(conflict_id=conflict.id, conflict_type=conflict.type, points=points)


def conflict_curves_for_beats(
    conflicts: Iterable[Conflict],
    beats: Sequence[Beat],
) -> list[ConflictCurve]:
    """Sample every conflict at each beat position, keeping duplicate positions."""
    positions = [beat.percentage for beat in beats]
    return [conflict_curve(conflict, positions) for conflict in conflicts]
