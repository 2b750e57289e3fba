from __future__ import annotations

import pytest

from plot_analytics.core.progress import (
    ActBounds,
    act_for_percentage,
    act_progress,
    arc_completion_percent,
    beat_completion_percent,
    percent_of,
    summarize_plot,
)
from plot_analytics.domain.models import Beat, CharacterArcPoint


def _beat(index: int, percentage: float, *, done: bool = False) -> Beat:
    return Beat(id=f"b{index}", name=f"Beat {index}", percentage=percentage, is_completed=done)


def test_beat_completion_of_empty_list_is_zero() -> None:
    assert beat_completion_percent([]) == 0


@pytest.mark.parametrize("total", [1, 3, 7, 8])
def test_beat_completion_matches_half_up_rounding(total: int) -> None:
    for completed in range(total + 1):
        beats = [_beat(i, 0, done=i < completed) for i in range(total)]
        expected = int(100 * completed / total + 0.5)
        assert beat_completion_percent(beats) == expected


def test_percent_of_rounds_half_up() -> None:
    assert percent_of(1, 8) == 13
    assert percent_of(1, 40) == 3
    assert percent_of(3, 0) == 0


def test_act_boundaries_are_inclusive_at_twenty_and_eighty() -> None:
    assert act_for_percentage(20) == "act_one"
    assert act_for_percentage(20.5) == "act_two"
    assert act_for_percentage(80) == "act_two"
    assert act_for_percentage(80.1) == "act_three"


def test_act_progress_counts_per_band() -> None:
    beats = [
        _beat(0, 0, done=True),
        _beat(1, 20),
        _beat(2, 50, done=True),
        _beat(3, 80, done=True),
        _beat(4, 100),
    ]
    progress = act_progress(beats)
    assert [(item.act, item.completed, item.total, item.percent) for item in progress] == [
        ("act_one", 1, 2, 50),
        ("act_two", 2, 2, 100),
        ("act_three", 0, 1, 0),
    ]


def test_act_progress_accepts_custom_bounds() -> None:
    beats = [_beat(0, 25, done=True), _beat(1, 70)]
    progress = act_progress(beats, ActBounds(act_one_end=25.0, act_two_end=60.0))
    assert [item.total for item in progress] == [1, 0, 1]
    assert progress[1].percent == 0


def test_arc_completion_counts_present_points_even_when_all_zero() -> None:
    arc = {
        "b0": CharacterArcPoint(beat_id="b0", emotional_state={}),
        "other": CharacterArcPoint(beat_id="other", emotional_state={"Fear": 3}),
    }
    assert arc_completion_percent(arc, ["b0", "b1", "b2"]) == 33
    assert arc_completion_percent(arc, []) == 0


def test_summarize_plot_reports_distribution_and_timeline() -> None:
    beats = [
        _beat(0, 0, done=True).model_copy(update={"word_count": 10}),
        _beat(1, 90).model_copy(update={"word_count": 20}),
    ]
    summary = summarize_plot(beats)
    assert summary.kind == "plot"
    assert summary.source == "heuristic"
    assert summary.overall_progress == 50
    assert summary.act_one_progress == 100
    assert summary.act_three_progress == 0
    assert summary.word_count_distribution == [("Beat 0", 10), ("Beat 1", 20)]
    assert summary.beat_completion_timeline == [("Beat 0", True), ("Beat 1", False)]
