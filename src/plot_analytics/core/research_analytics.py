"""Reliability, verification, and diversity statistics for research notes."""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Sequence

from plot_analytics.core.analytics_schema import ResearchAnalytics
from plot_analytics.domain.models import FactCheck, ResearchItem

_HISTORICAL_TAG_MINIMUM = 3
_TECHNICAL_TAG_MINIMUM = 2
_RELIABILITY_FLOOR = 5.0


def analyze_research(
    items: Sequence[ResearchItem],
    facts: Sequence[FactCheck],
) -> ResearchAnalytics:
    """Summarize research quality.

    ``source_diversity_score`` and ``research_gaps`` are heuristics: the score is
    the share of distinct sources among items, and the gaps are advisory strings
    that do not claim to be exhaustive.
    """
    status_counts = Counter(fact.verification_status for fact in facts)
    verified = status_counts.get("verified", 0)

    average_reliability = (
        sum(item.reliability_score for item in items) / len(items) if items else 0.0
    )
    tag_counts: Counter[str] = Counter()
    for item in items:
        tag_counts.update(item.tags)

    reliability_by_source: dict[str, list[float]] = defaultdict(list)
    for item in items:
        if item.source:
            reliability_by_source[item.source].append(item.reliability_score)
    sources_by_reliability = {
        source: round(sum(scores) / len(scores), 3)
        for source, scores in sorted(reliability_by_source.items())
    }

    return ResearchAnalytics(
        total_research_items=len(items),
        verified_facts_count=verified,
        disputed_facts_count=status_counts.get("disputed", 0),
        unknown_facts_count=status_counts.get("unknown", 0),
        average_reliability_score=round(average_reliability, 3),
        research_by_tag=dict(sorted(tag_counts.items())),
        sources_by_reliability=sources_by_reliability,
        fact_verification_rate=round(100.0 * verified / len(facts), 3) if facts else 0.0,
        research_gaps=_research_gaps(
            tag_counts=tag_counts,
            verified=verified,
            total_facts=len(facts),
            average_reliability=average_reliability,
            has_items=bool(items),
        ),
        source_diversity_score=_source_diversity(items),
    )


def _source_diversity(items: Sequence[ResearchItem]) -> float:
    if not items:
        return 0.0
    distinct = len({item.source.strip().lower() for item in items})
    return round(min(100.0, max(0.0, 100.0 * distinct / len(items))), 3)


def _research_gaps(
    *,
    tag_counts: Counter[str],
    verified: int,
    total_facts: int,
    average_reliability: float,
    has_items: bool,
) -> list[str]:
    gaps: list[str] = []
    if tag_counts.get("historical", 0) < _HISTORICAL_TAG_MINIMUM:
        gaps.append("Need more historical research")
    if tag_counts.get("technical", 0) < _TECHNICAL_TAG_MINIMUM:
        gaps.append("Technical details need more sources")
    # Half is taken in whole facts: 1 of 3 verified is not flagged.
    if verified < total_facts // 2:
        gaps.append("Many facts need verification")
    if has_items and average_reliability < _RELIABILITY_FLOOR:
        gaps.append("Average source reliability is low; look for stronger sources")
    return gaps
