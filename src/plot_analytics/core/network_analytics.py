"""Character relationship network and world event statistics."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from plot_analytics.core.analytics_schema import CharacterAnalytics, WorldAnalytics
from plot_analytics.domain.models import Character, Relationship, WorldEvent

STRONG_RELATIONSHIP_THRESHOLD = 70.0
MAJOR_EVENT_IMPORTANCE = 8
POSITIVE_RELATIONSHIP_TYPES = frozenset({"ally", "friend", "lover", "family", "mentor"})


def analyze_characters(
    characters: Sequence[Character],
    relationships: Sequence[Relationship],
) -> CharacterAnalytics:
    """Density treats relationships as undirected edges over ``n(n-1)/2`` pairs."""
    total_characters = len(characters)
    total_relationships = len(relationships)

    strong = sum(1 for rel in relationships if rel.strength > STRONG_RELATIONSHIP_THRESHOLD)
    positive = sum(
        1 for rel in relationships if rel.type.lower() in POSITIVE_RELATIONSHIP_TYPES
    )
    max_pairs = total_characters * (total_characters - 1) // 2 if total_characters > 1 else 1

    connections: Counter[str] = Counter()
    for rel in relationships:
        connections[rel.from_id] += 1
        connections[rel.to_id] += 1
    names = {character.id: character.name for character in characters}
    most_connected: str | None = None
    if connections:
        # Ties resolve to the lexicographically smallest id.
        top_id = min(connections, key=lambda cid: (-connections[cid], cid))
        most_connected = names.get(top_id, top_id)

    return CharacterAnalytics(
        total_characters=total_characters,
        total_relationships=total_relationships,
        strong_relationships_percentage=(
            100.0 * strong / total_relationships if total_relationships else 0.0
        ),
        avg_connections_per_character=(
            total_relationships * 2 / total_characters if total_characters else 0.0
        ),
        positive_relationships_percentage=(
            100.0 * positive / total_relationships if total_relationships else 0.0
        ),
        character_network_density=100.0 * total_relationships / max_pairs,
        most_connected_character=most_connected,
        relationship_type_distribution=dict(Counter(rel.type for rel in relationships)),
        isolated_characters=[
            character.name for character in characters if character.id not in connections
        ],
    )


def analyze_world(events: Sequence[WorldEvent], locations_count: int) -> WorldAnalytics:
    total_events = len(events)
    consistency = (
        min(100.0, 100.0 * total_events / locations_count) if locations_count > 0 else 0.0
    )
    dated = sum(1 for event in events if event.date.strip())
    return WorldAnalytics(
        total_events=total_events,
        major_events_count=sum(1 for event in events if event.importance >= MAJOR_EVENT_IMPORTANCE),
        world_consistency_score=consistency,
        events_by_type=dict(Counter(event.type for event in events)),
        events_by_importance=dict(sorted(Counter(event.importance for event in events).items())),
        timeline_coverage=100.0 * dated / total_events if total_events else 0.0,
    )
