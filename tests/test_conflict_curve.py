from __future__ import annotations

import pytest

from plot_analytics.core.conflict_curve import (
    conflict_curve,
    conflict_curves_for_beats,
    conflict_intensity_at,
    intensity_multiplier,
)
from plot_analytics.domain.models import Beat, Conflict

INTERNAL_EXPECTED = {0: 0.3, 10: 0.3, 50: 0.9, 75: 1.2, 100: 0.4}
EXTERNAL_EXPECTED = {0: 0.2, 10: 0.5, 50: 1.0, 75: 1.3, 100: 0.3}


@pytest.mark.parametrize("percentage", sorted(INTERNAL_EXPECTED))
def test_internal_conflict_table(percentage: int) -> None:
    conflict = Conflict(id="c", type="internal", intensity=6)
    assert conflict_intensity_at(conflict, percentage) == pytest.approx(
        6 * INTERNAL_EXPECTED[percentage]
    )


@pytest.mark.parametrize("percentage", sorted(EXTERNAL_EXPECTED))
def test_external_conflict_table(percentage: int) -> None:
    conflict = Conflict(id="c", type="external", intensity=4)
    assert conflict_intensity_at(conflict, percentage) == pytest.approx(
        4 * EXTERNAL_EXPECTED[percentage]
    )


def test_unset_intensity_uses_baseline_five() -> None:
    conflict = Conflict(id="c", type="internal")
    assert conflict_intensity_at(conflict, 80) == pytest.approx(6.0)


def test_intensity_is_not_clamped() -> None:
    conflict = Conflict(id="c", type="external", intensity=10)
    assert conflict_intensity_at(conflict, 85) == pytest.approx(13.0)


def test_band_edges_are_exclusive_upper_bounds() -> None:
    assert intensity_multiplier("internal", 19.99) == 0.3
    assert intensity_multiplier("internal", 20) == 0.6
    assert intensity_multiplier("external", 89.99) == 1.3
    assert intensity_multiplier("external", 90) == 0.3


def test_curve_is_deterministic_for_identical_inputs() -> None:
    conflict = Conflict(id="c", type="external", intensity=7)
    positions = [0, 12.5, 40, 95]
    assert conflict_curve(conflict, positions) == conflict_curve(conflict, positions)


def test_curves_for_beats_keep_duplicate_positions() -> None:
    beats = [
        Beat(id="b0", name="Setup", percentage=10),
        Beat(id="b1", name="Catalyst", percentage=10),
        Beat(id="b2", name="Finale", percentage=85),
    ]
    curves = conflict_curves_for_beats(
        [Conflict(id="inner", type="internal"), Conflict(id="outer", type="external")], beats
    )
    assert [curve.conflict_id for curve in curves] == ["inner", "outer"]
    assert [point.percentage for point in curves[0].points] == [10, 10, 85]
    assert curves[1].points[2].intensity == pytest.approx(6.5)


def test_positions_past_the_last_bound_use_the_resolution_band() -> None:
    assert intensity_multiplier("internal", 250) == 0.4
    assert intensity_multiplier("external", 250) == 0.3
    assert intensity_multiplier("external", -5) == 0.2
