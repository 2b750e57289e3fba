"""Typed analytics results exchanged with the presentation layer and remote analyzer."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

AnalysisSource = Literal["remote", "heuristic"]
Pace = Literal["fast", "medium", "slow"]
SuggestionPriority = Literal["low", "medium", "high"]


class SchemaModel(BaseModel):
    """Base config for analytics payloads; unknown remote keys are dropped."""

    model_config = ConfigDict(extra="ignore")


class AnalyticsResult(SchemaModel):
    """Top-level result tagged with the tier that produced it."""

    source: AnalysisSource = "heuristic"


class PlotAnalytics(AnalyticsResult):
    kind: Literal["plot"] = "plot"
    act_one_progress: int = Field(ge=0, le=100)
    act_two_progress: int = Field(ge=0, le=100)
    act_three_progress: int = Field(ge=0, le=100)
    overall_progress: int = Field(ge=0, le=100)
    completed_beats: int = Field(ge=0)
    total_beats: int = Field(ge=0)
    word_count_distribution: list[tuple[str, int]] = Field(default_factory=list)
    beat_completion_timeline: list[tuple[str, bool]] = Field(default_factory=list)


class CharacterAnalytics(AnalyticsResult):
    kind: Literal["characters"] = "characters"
    total_characters: int = Field(ge=0)
    total_relationships: int = Field(ge=0)
    strong_relationships_percentage: float = Field(ge=0.0, le=100.0)
    avg_connections_per_character: float = Field(ge=0.0)
    positive_relationships_percentage: float = Field(ge=0.0, le=100.0)
    character_network_density: float = Field(ge=0.0)
    most_connected_character: str | None = None
    relationship_type_distribution: dict[str, int] = Field(default_factory=dict)
    isolated_characters: list[str] = Field(default_factory=list)


class WorldAnalytics(AnalyticsResult):
    kind: Literal["world"] = "world"
    total_events: int = Field(ge=0)
    major_events_count: int = Field(ge=0)
    world_consistency_score: float = Field(ge=0.0, le=100.0)
    events_by_type: dict[str, int] = Field(default_factory=dict)
    events_by_importance: dict[int, int] = Field(default_factory=dict)
    timeline_coverage: float = Field(ge=0.0, le=100.0)


class TextAnalytics(AnalyticsResult):
    kind: Literal["text"] = "text"
    word_count: int = Field(ge=0)
    character_count: int = Field(ge=0)
    character_count_no_spaces: int = Field(ge=0)
    sentence_count: int = Field(ge=0)
    paragraph_count: int = Field(ge=0)
    reading_time_minutes: float = Field(ge=0.0)
    average_words_per_sentence: float = Field(ge=0.0)
    average_sentences_per_paragraph: float = Field(ge=0.0)
    readability_score: float = Field(ge=0.0, le=100.0)
    most_common_words: list[tuple[str, int]] = Field(default_factory=list)


class ResearchAnalytics(AnalyticsResult):
    kind: Literal["research"] = "research"
    total_research_items: int = Field(ge=0)
    verified_facts_count: int = Field(ge=0)
    disputed_facts_count: int = Field(ge=0)
    unknown_facts_count: int = Field(default=0, ge=0)
    average_reliability_score: float = Field(ge=0.0, le=10.0)
    research_by_tag: dict[str, int] = Field(default_factory=dict)
    sources_by_reliability: dict[str, float] = Field(default_factory=dict)
    fact_verification_rate: float = Field(ge=0.0, le=100.0)
    research_gaps: list[str] = Field(default_factory=list)
    source_diversity_score: float = Field(ge=0.0, le=100.0)


class EmotionalPeak(SchemaModel):
    position: float
    emotion: str
    intensity: float
    context: str = ""


class SentimentAnalysis(SchemaModel):
    overall_sentiment: float = Field(ge=-1.0, le=1.0)
    emotion_scores: dict[str, float] = Field(default_factory=dict)
    sentiment_progression: list[float] = Field(default_factory=list)
    emotional_peaks: list[EmotionalPeak] = Field(default_factory=list)


class DetectedBeat(SchemaModel):
    beat_type: str
    position: float
    strength: float
    description: str = ""


class PaceChange(SchemaModel):
    position: float
    from_pace: str
    to_pace: str
    reason: str = ""


class PacingAnalysis(SchemaModel):
    overall_pace: Pace = "medium"
    pace_changes: list[PaceChange] = Field(default_factory=list)
    dialogue_ratio: float = Field(ge=0.0, le=1.0)
    action_ratio: float = Field(ge=0.0, le=1.0)
    description_ratio: float = Field(ge=0.0, le=1.0)


class CharacterPresence(SchemaModel):
    start_position: float
    end_position: float
    prominence: float


class NarrativeStructure(SchemaModel):
    story_beats: list[DetectedBeat] = Field(default_factory=list)
    pacing_analysis: PacingAnalysis
    tension_curve: list[float] = Field(default_factory=list)
    character_presence: dict[str, list[CharacterPresence]] = Field(default_factory=dict)


class LinguisticComplexity(SchemaModel):
    avg_sentence_length: float = Field(ge=0.0)
    sentence_length_variance: float = Field(ge=0.0)
    vocabulary_diversity: float = Field(ge=0.0, le=1.0)
    rare_words_percentage: float = Field(ge=0.0, le=100.0)
    passive_voice_percentage: float = Field(ge=0.0, le=100.0)
    subordinate_clauses_ratio: float = Field(ge=0.0, le=1.0)


class TenseSwitch(SchemaModel):
    position: float
    from_tense: str
    to_tense: str
    is_intentional: bool = False


class TenseConsistency(SchemaModel):
    primary_tense: str
    consistency_score: float = Field(ge=0.0, le=1.0)
    tense_switches: list[TenseSwitch] = Field(default_factory=list)


class PovSwitch(SchemaModel):
    position: float
    from_pov: str
    to_pov: str
    character: str | None = None


class PovConsistency(SchemaModel):
    primary_pov: str
    consistency_score: float = Field(ge=0.0, le=1.0)
    pov_switches: list[PovSwitch] = Field(default_factory=list)


class DialogueStyle(SchemaModel):
    dialogue_percentage: float = Field(ge=0.0, le=100.0)
    avg_dialogue_length: float = Field(ge=0.0)
    character_voice_distinction: float = Field(ge=0.0, le=1.0)
    dialogue_tags_ratio: float = Field(ge=0.0, le=1.0)


class IntentionalRepetition(SchemaModel):
    text: str
    count: int = Field(ge=0)
    positions: list[int] = Field(default_factory=list)
    literary_device: str = ""


class RepetitionAnalysis(SchemaModel):
    word_repetitions: dict[str, int] = Field(default_factory=dict)
    phrase_repetitions: dict[str, int] = Field(default_factory=dict)
    intentional_repetitions: list[IntentionalRepetition] = Field(default_factory=list)


class StyleAnalysis(SchemaModel):
    author_voice_consistency: float = Field(ge=0.0, le=1.0)
    tense_consistency: TenseConsistency
    pov_consistency: PovConsistency
    dialogue_style: DialogueStyle
    repetition_analysis: RepetitionAnalysis


class Inconsistency(SchemaModel):
    description: str
    severity: float
    position1: float
    position2: float | None = None
    suggestion: str = ""


class CharacterConsistency(SchemaModel):
    character_id: str
    inconsistencies: list[Inconsistency] = Field(default_factory=list)
    consistency_score: float = Field(ge=0.0, le=1.0)


class WorldConsistency(SchemaModel):
    element_type: str
    element_id: str
    inconsistencies: list[Inconsistency] = Field(default_factory=list)
    consistency_score: float = Field(ge=0.0, le=1.0)


class PlotConsistency(SchemaModel):
    plot_thread: str
    inconsistencies: list[Inconsistency] = Field(default_factory=list)
    consistency_score: float = Field(ge=0.0, le=1.0)


class TimelineInconsistency(SchemaModel):
    event1: str
    event2: str
    inconsistency_type: str
    description: str = ""
    severity: float = 0.0


class ConsistencyChecks(SchemaModel):
    character_consistency: list[CharacterConsistency] = Field(default_factory=list)
    world_consistency: list[WorldConsistency] = Field(default_factory=list)
    plot_consistency: list[PlotConsistency] = Field(default_factory=list)
    timeline_consistency: list[TimelineInconsistency] = Field(default_factory=list)


class AdvancedTextAnalytics(AnalyticsResult):
    kind: Literal["advanced_text"] = "advanced_text"
    sentiment_analysis: SentimentAnalysis
    narrative_structure: NarrativeStructure
    linguistic_complexity: LinguisticComplexity
    style_analysis: StyleAnalysis
    consistency_checks: ConsistencyChecks


class EditedSection(SchemaModel):
    section_id: str
    edit_count: int = Field(ge=0)
    last_edited: str
    editors: list[str] = Field(default_factory=list)


class CollaborationMetrics(AnalyticsResult):
    kind: Literal["collaboration"] = "collaboration"
    active_collaborators: int = Field(ge=0)
    edit_frequency: dict[str, int] = Field(default_factory=dict)
    conflict_resolution_time: float = Field(ge=0.0)
    simultaneous_edits: int = Field(ge=0)
    most_edited_sections: list[EditedSection] = Field(default_factory=list)
    collaboration_efficiency: float = Field(ge=0.0)


class NarrativePatternReport(AnalyticsResult):
    kind: Literal["narrative_patterns"] = "narrative_patterns"
    pattern_type: str
    pattern_counts: dict[str, int] = Field(default_factory=dict)
    detected: list[DetectedBeat] = Field(default_factory=list)


class StyleConsistencyReport(AnalyticsResult):
    kind: Literal["style_consistency"] = "style_consistency"
    author_id: str
    consistency_score: float = Field(ge=0.0, le=100.0)
    avg_sentence_lengths: list[float] = Field(default_factory=list)
    vocabulary_sizes: list[int] = Field(default_factory=list)
    sentence_length_variance: float = Field(ge=0.0)
    vocabulary_variance: float = Field(ge=0.0)


class WritingSuggestion(SchemaModel):
    category: str
    issue: str
    suggestion: str
    priority: SuggestionPriority = "low"
    example: str = ""


class WritingSuggestionsResult(AnalyticsResult):
    kind: Literal["writing_suggestions"] = "writing_suggestions"
    suggestions: list[WritingSuggestion] = Field(default_factory=list)
    analytics_summary: dict[str, float] = Field(default_factory=dict)


class TextOptimizationResult(AnalyticsResult):
    kind: Literal["text_optimization"] = "text_optimization"
    optimization_target: str
    optimized_text: str
    changes_applied: int = Field(default=0, ge=0)
