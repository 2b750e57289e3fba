from __future__ import annotations

from plot_analytics.core.research_analytics import analyze_research
from plot_analytics.domain.models import FactCheck, ResearchItem


def _item(item_id: str, source: str, score: float, tags: list[str]) -> ResearchItem:
    return ResearchItem(
        id=item_id, title=f"Note {item_id}", source=source, reliability_score=score, tags=tags
    )


def test_empty_inputs_return_zeroed_counts() -> None:
    result = analyze_research([], [])
    assert result.total_research_items == 0
    assert result.verified_facts_count == 0
    assert result.average_reliability_score == 0.0
    assert result.fact_verification_rate == 0.0
    assert result.source_diversity_score == 0.0
    assert "Many facts need verification" not in result.research_gaps


def test_counts_rates_and_per_source_reliability() -> None:
    items = [
        _item("r1", "Archive", 8, ["historical", "technical"]),
        _item("r2", "Archive", 6, ["historical"]),
        _item("r3", "Museum", 9, ["historical", "technical"]),
    ]
    facts = [
        FactCheck(id="f1", statement="The bridge opened in 1901.", verification_status="verified"),
        FactCheck(id="f2", statement="The mayor resigned.", verification_status="disputed"),
        FactCheck(id="f3", statement="The river froze.", verification_status="verified"),
        FactCheck(id="f4", statement="The mill burned."),
    ]
    result = analyze_research(items, facts)
    assert result.total_research_items == 3
    assert result.verified_facts_count == 2
    assert result.disputed_facts_count == 1
    assert result.unknown_facts_count == 1
    assert result.fact_verification_rate == 50.0
    assert result.average_reliability_score == 7.667
    assert result.research_by_tag == {"historical": 3, "technical": 2}
    assert result.sources_by_reliability == {"Archive": 7.0, "Museum": 9.0}
    assert result.source_diversity_score == 66.667
    assert result.research_gaps == []


def test_gaps_flag_thin_research_and_low_reliability() -> None:
    items = [_item("r1", "Blog", 2, ["folklore"])]
    facts = [
        FactCheck(id="f1", statement="A ghost lives here."),
        FactCheck(id="f2", statement="The tower leans.", verification_status="verified"),
        FactCheck(id="f3", statement="The well is cursed.", verification_status="disputed"),
        FactCheck(id="f4", statement="The bell rang at dawn."),
    ]
    gaps = analyze_research(items, facts).research_gaps
    assert gaps == [
        "Need more historical research",
        "Technical details need more sources",
        "Many facts need verification",
        "Average source reliability is low; look for stronger sources",
    ]


def test_verification_gap_uses_whole_fact_half() -> None:
    items = [
        _item(f"r{index}", f"Source {index}", 8, ["historical", "technical"])
        for index in range(3)
    ]
    one_of_three = [
        FactCheck(id="f1", statement="The tower leans.", verification_status="verified"),
        FactCheck(id="f2", statement="A ghost lives here."),
        FactCheck(id="f3", statement="The well is cursed."),
    ]
    assert analyze_research(items, one_of_three).research_gaps == []

    one_of_four = [*one_of_three, FactCheck(id="f4", statement="The bell rang at dawn.")]
    assert analyze_research(items, one_of_four).research_gaps == ["Many facts need verification"]
