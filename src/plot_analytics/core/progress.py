"""Completion ratios for beats, acts, and character arcs."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Literal

from plot_analytics.core.analytics_schema import PlotAnalytics
from plot_analytics.domain.models import Beat, CharacterArcPoint

ActName = Literal["act_one", "act_two", "act_three"]
ACT_ORDER: tuple[ActName, ...] = ("act_one", "act_two", "act_three")


@dataclass(frozen=True)
class ActBounds:
    """Inclusive upper percentages for Act I and Act II."""

    act_one_end: float = 20.0
    act_two_end: float = 80.0


DEFAULT_ACT_BOUNDS = ActBounds()


@dataclass(frozen=True)
class ActProgress:
    """Completed versus total beats inside one act."""

    act: ActName
    completed: int
    total: int
    percent: int


def percent_of(part: int, whole: int) -> int:
    """Half-up rounded percentage; zero when the whole is empty."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def beat_completion_percent(beats: Sequence[Beat]) -> int:
    completed = sum(1 for beat in beats if beat.is_completed)
    return percent_of(completed, len(beats))


def act_for_percentage(percentage: float, bounds: ActBounds = DEFAULT_ACT_BOUNDS) -> ActName:
    if percentage <= bounds.act_one_end:
        return "act_one"
    if percentage <= bounds.act_two_end:
        return "act_two"
    return "act_three"


def act_progress(
    beats: Iterable[Beat],
    bounds: ActBounds = DEFAULT_ACT_BOUNDS,
) -> list[ActProgress]:
    """Count completed beats per act band ``[0,20]``, ``(20,80]``, ``(80,100]``."""
    totals: dict[ActName, int] = {act: 0 for act in ACT_ORDER}
    completed: dict[ActName, int] = {act: 0 for act in ACT_ORDER}
    for beat in beats:
        act = act_for_percentage(beat.percentage, bounds)
        totals[act] += 1
        if beat.is_completed:
            completed[act] += 1
    return [
        ActProgress(
            act=act,
            completed=completed[act],
            total=totals[act],
            percent=percent_of(completed[act], totals[act]),
        )
        for act in ACT_ORDER
    ]


def arc_completion_percent(
    arc_points_by_beat_id: Mapping[str, CharacterArcPoint],
    expected_beat_ids: Iterable[str],
) -> int:
    """Share of expected beats that have an arc point, regardless of its values."""
    expected = set(expected_beat_ids)
    present = expected.intersection(arc_points_by_beat_id)
    return percent_of(len(present), len(expected))


def summarize_plot(beats: Sequence[Beat], bounds: ActBounds = DEFAULT_ACT_BOUNDS) -> PlotAnalytics:
    """Local plot analytics summary."""
    acts = {progress.act: progress for progress in act_progress(beats, bounds)}
    return PlotAnalytics(
        act_one_progress=acts["act_one"].percent,
        act_two_progress=acts["act_two"].percent,
        act_three_progress=acts["act_three"].percent,
        overall_progress=beat_completion_percent(beats),
        completed_beats=sum(1 for beat in beats if beat.is_completed),
        total_beats=len(beats),
        word_count_distribution=[(beat.name, beat.word_count) for beat in beats],
        beat_completion_timeline=[(beat.name, beat.is_completed) for beat in beats],
    )
