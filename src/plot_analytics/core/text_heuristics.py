"""Local text analytics used when the deep analyzer is unavailable.

Counts come from whitespace and punctuation splitting. Sentiment, tension,
pacing, style, and consistency fields in the advanced result are fixed
illustrative defaults, not genuine analysis; callers get a well-formed payload
without blocking on the remote analyzer.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Sequence
from typing import Final

from plot_analytics.core.analytics_schema import (
    AdvancedTextAnalytics,
    CollaborationMetrics,
    ConsistencyChecks,
    DetectedBeat,
    DialogueStyle,
    EditedSection,
    LinguisticComplexity,
    NarrativePatternReport,
    NarrativeStructure,
    PacingAnalysis,
    PovConsistency,
    RepetitionAnalysis,
    SentimentAnalysis,
    StyleAnalysis,
    StyleConsistencyReport,
    TenseConsistency,
    TextAnalytics,
    TextOptimizationResult,
    WritingSuggestion,
    WritingSuggestionsResult,
)
from plot_analytics.domain.models import EditEvent

WORDS_PER_MINUTE: Final = 200
FALLBACK_TENSION_CURVE: Final[tuple[float, ...]] = (0.3, 0.4, 0.6, 0.8, 0.9, 0.4)
FALLBACK_SENTIMENT_PROGRESSION: Final[tuple[float, ...]] = (0.0, 0.1, 0.0, -0.1, 0.2)
FALLBACK_CONFLICT_RESOLUTION_MINUTES: Final = 5.2
FALLBACK_COLLABORATION_EFFICIENCY: Final = 0.8

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_SENTENCE_CHUNK = re.compile(r"[^.!?]+[.!?]*")
_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
_WORD_TOKEN = re.compile(r"[A-Za-z']+")
_QUOTED = re.compile(r"\"[^\"]*\"|“[^”]*”")

_ACTION_WORDS: Final[frozenset[str]] = frozenset(
    {"ran", "jumped", "fought", "moved", "rushed", "grabbed", "struck", "fled"}
)
_DESCRIPTIVE_WORDS: Final[frozenset[str]] = frozenset(
    {"beautiful", "dark", "bright", "cold", "warm", "large", "small", "quiet"}
)
_EMOTION_WORDS: Final[frozenset[str]] = frozenset(
    {"afraid", "angry", "fear", "grief", "hope", "joy", "love", "sad", "tears", "trembled"}
)
_FILLER_WORDS: Final[tuple[str, ...]] = ("very", "really", "quite", "just", "that")
_REDUNDANT_PHRASES: Final[tuple[tuple[str, str], ...]] = (
    ("in order to", "to"),
    ("due to the fact that", "because"),
    ("at this point in time", "now"),
    ("for the purpose of", "for"),
)
_PATTERN_CUES: Final[dict[str, dict[str, frozenset[str]]]] = {
    "story_structure": {
        "setup": frozenset({"arrives", "begins", "introduces", "ordinary", "home"}),
        "inciting_incident": frozenset({"suddenly", "discovers", "letter", "summons", "news"}),
        "climax": frozenset({"confronts", "battle", "reveals", "final", "showdown"}),
        "resolution": frozenset({"peace", "returns", "heals", "reconciles", "after"}),
    },
    "hero_journey": {
        "call_to_adventure": frozenset({"call", "quest", "summons", "invitation"}),
        "refusal": frozenset({"refuses", "hesitates", "afraid", "doubt"}),
        "mentor": frozenset({"mentor", "teacher", "guide", "advice"}),
        "ordeal": frozenset({"ordeal", "trial", "abyss", "death"}),
        "return": frozenset({"returns", "home", "elixir", "changed"}),
    },
    "conflict_patterns": {
        "confrontation": frozenset({"fight", "argue", "attack", "confronts", "battle"}),
        "betrayal": frozenset({"betray", "betrayed", "lies", "deceived"}),
        "resolution": frozenset({"forgives", "resolves", "truce", "peace", "accepts"}),
    },
}
_STYLE_SENTENCE_LIMITS: Final[dict[str, tuple[int, int]]] = {
    "literary": (8, 30),
    "commercial": (6, 20),
    "academic": (10, 35),
    "general": (8, 25),
}


def _words(text: str) -> list[str]:
    return text.split()


def _sentences(text: str) -> list[str]:
    return [chunk.strip() for chunk in _SENTENCE_SPLIT.split(text) if chunk.strip()]


def _paragraphs(text: str) -> list[str]:
    return [chunk for chunk in _PARAGRAPH_SPLIT.split(text) if chunk.strip()]


def _tokens(text: str) -> list[str]:
    return [token.lower().strip("'") for token in _WORD_TOKEN.findall(text) if token.strip("'")]


def _average_sentence_length(text: str) -> float:
    sentences = _sentences(text)
    if not sentences:
        return 0.0
    return len(_words(text)) / len(sentences)


def _variance(values: Sequence[float]) -> float:
    if len(values) < 2:
        return 0.0
    mean = sum(values) / len(values)
    return sum((mean - value) ** 2 for value in values) / len(values)


def _dialogue_ratio(text: str) -> float:
    total = len(_words(text))
    if total == 0:
        return 0.0
    quoted = sum(len(match.split()) for match in _QUOTED.findall(text))
    return min(1.0, quoted / total)


def fallback_advanced_text_analysis(text: str) -> AdvancedTextAnalytics:
    """Declared-approximate advanced analytics built from counts and fixed defaults."""
    return AdvancedTextAnalytics(
        sentiment_analysis=SentimentAnalysis(
            overall_sentiment=0.1,
            emotion_scores={"neutral": 0.8, "positive": 0.1, "negative": 0.1},
            sentiment_progression=list(FALLBACK_SENTIMENT_PROGRESSION),
            emotional_peaks=[],
        ),
        narrative_structure=NarrativeStructure(
            story_beats=[],
            pacing_analysis=PacingAnalysis(
                overall_pace="medium",
                pace_changes=[],
                dialogue_ratio=0.3,
                action_ratio=0.2,
                description_ratio=0.5,
            ),
            tension_curve=list(FALLBACK_TENSION_CURVE),
            character_presence={},
        ),
        linguistic_complexity=LinguisticComplexity(
            avg_sentence_length=round(_average_sentence_length(text), 3),
            sentence_length_variance=12.5,
            vocabulary_diversity=0.6,
            rare_words_percentage=8.2,
            passive_voice_percentage=15.0,
            subordinate_clauses_ratio=0.3,
        ),
        style_analysis=StyleAnalysis(
            author_voice_consistency=0.75,
            tense_consistency=TenseConsistency(primary_tense="past", consistency_score=0.85),
            pov_consistency=PovConsistency(primary_pov="third_person", consistency_score=0.9),
            dialogue_style=DialogueStyle(
                dialogue_percentage=30.0,
                avg_dialogue_length=25.0,
                character_voice_distinction=0.7,
                dialogue_tags_ratio=0.8,
            ),
            repetition_analysis=RepetitionAnalysis(),
        ),
        consistency_checks=ConsistencyChecks(),
    )


def analyze_text(text: str) -> TextAnalytics:
    """Counts, averages, a Flesch-style readability clamp, and top words."""
    words = _words(text)
    sentences = _sentences(text)
    paragraphs = _paragraphs(text)
    word_count = len(words)
    avg_words_per_sentence = word_count / len(sentences) if sentences else 0.0
    readability = min(100.0, max(0.0, 206.835 - 1.015 * avg_words_per_sentence))

    frequencies: Counter[str] = Counter()
    for word in words:
        cleaned = "".join(char for char in word.lower() if char.isalpha())
        if cleaned:
            frequencies[cleaned] += 1
    top_words = sorted(frequencies.items(), key=lambda pair: (-pair[1], pair[0]))[:10]

    return TextAnalytics(
        word_count=word_count,
        character_count=len(text),
        character_count_no_spaces=sum(1 for char in text if not char.isspace()),
        sentence_count=len(sentences),
        paragraph_count=len(paragraphs),
        reading_time_minutes=round(word_count / WORDS_PER_MINUTE, 2),
        average_words_per_sentence=round(avg_words_per_sentence, 3),
        average_sentences_per_paragraph=(
            round(len(sentences) / len(paragraphs), 3) if paragraphs else 0.0
        ),
        readability_score=round(readability, 3),
        most_common_words=top_words,
    )


def fallback_collaboration_metrics(edits: Sequence[EditEvent]) -> CollaborationMetrics:
    """Edit counts per collaborator and per section from the local edit log."""
    edit_frequency: Counter[str] = Counter()
    sections: dict[str, EditedSection] = {}
    editors_at: dict[tuple[str, str], set[str]] = {}
    for edit in edits:
        edit_frequency[edit.user_id] += 1
        section = sections.get(edit.section_id)
        if section is None:
            section = EditedSection(
                section_id=edit.section_id, edit_count=0, last_edited=edit.timestamp
            )
        editors = section.editors if edit.user_id in section.editors else [
            *section.editors,
            edit.user_id,
        ]
        sections[edit.section_id] = section.model_copy(
            update={
                "edit_count": section.edit_count + 1,
                "last_edited": max(section.last_edited, edit.timestamp),
                "editors": editors,
            }
        )
        editors_at.setdefault((edit.section_id, edit.timestamp), set()).add(edit.user_id)

    ranked = sorted(sections.values(), key=lambda item: (-item.edit_count, item.section_id))
    return CollaborationMetrics(
        active_collaborators=len(edit_frequency),
        edit_frequency=dict(edit_frequency),
        conflict_resolution_time=FALLBACK_CONFLICT_RESOLUTION_MINUTES,
        simultaneous_edits=sum(1 for users in editors_at.values() if len(users) > 1),
        most_edited_sections=ranked,
        collaboration_efficiency=FALLBACK_COLLABORATION_EFFICIENCY,
    )


def detect_narrative_patterns(text: str, pattern_type: str) -> NarrativePatternReport:
    """Cue-word scan per sentence, positioned by sentence index along the text."""
    lowered = text.lower()
    tokens = Counter(_tokens(text))
    pattern_counts = {
        "dialogue_segments": len(_QUOTED.findall(text)),
        "action_sequences": sum(tokens[word] for word in _ACTION_WORDS),
        "descriptive_passages": sum(tokens[word] for word in _DESCRIPTIVE_WORDS),
    }
    cues = _PATTERN_CUES.get(pattern_type)
    if cues is None:
        pattern_counts[f"{pattern_type}_patterns"] = 0
        return NarrativePatternReport(pattern_type=pattern_type, pattern_counts=pattern_counts)

    sentences = _sentences(lowered)
    detected: list[DetectedBeat] = []
    for index, sentence in enumerate(sentences):
        sentence_tokens = set(_tokens(sentence))
        if not sentence_tokens:
            continue
        position = round(100.0 * index / max(len(sentences) - 1, 1), 2)
        for beat_type, words in cues.items():
            hits = sentence_tokens.intersection(words)
            if not hits:
                continue
            detected.append(
                DetectedBeat(
                    beat_type=beat_type,
                    position=position,
                    strength=round(min(1.0, 0.4 + 0.2 * len(hits)), 3),
                    description=f"Cue words: {', '.join(sorted(hits))}",
                )
            )
    for beat_type in cues:
        pattern_counts[beat_type] = sum(1 for beat in detected if beat.beat_type == beat_type)
    return NarrativePatternReport(
        pattern_type=pattern_type,
        pattern_counts=pattern_counts,
        detected=detected,
    )


def analyze_writing_style_consistency(
    texts: Sequence[str],
    author_id: str,
) -> StyleConsistencyReport:
    """Variance of sentence length and vocabulary size across samples."""
    if not texts:
        return StyleConsistencyReport(
            author_id=author_id,
            consistency_score=0.0,
            sentence_length_variance=0.0,
            vocabulary_variance=0.0,
        )
    sentence_lengths = [round(_average_sentence_length(text), 3) for text in texts]
    vocabulary_sizes = [len(set(_tokens(text))) for text in texts]
    sentence_variance = _variance(sentence_lengths)
    vocabulary_variance = _variance([float(size) for size in vocabulary_sizes])
    return StyleConsistencyReport(
        author_id=author_id,
        consistency_score=round(100.0 - min(100.0, sentence_variance + vocabulary_variance), 3),
        avg_sentence_lengths=sentence_lengths,
        vocabulary_sizes=vocabulary_sizes,
        sentence_length_variance=round(sentence_variance, 3),
        vocabulary_variance=round(vocabulary_variance, 3),
    )


def generate_writing_suggestions(
    text: str,
    target_style: str,
    focus_areas: Sequence[str],
) -> WritingSuggestionsResult:
    """Rule-based suggestions for the requested focus areas."""
    low, high = _STYLE_SENTENCE_LIMITS.get(target_style, _STYLE_SENTENCE_LIMITS["general"])
    avg_length = _average_sentence_length(text)
    tokens = _tokens(text)
    token_counts = Counter(tokens)
    dialogue_ratio = _dialogue_ratio(text)
    suggestions: list[WritingSuggestion] = []

    for area in dict.fromkeys(focus_areas):
        if area == "pacing":
            if tokens and avg_length < low:
                suggestions.append(
                    WritingSuggestion(
                        category="pacing",
                        issue="Sentences are short on average",
                        suggestion="Combine related ideas into longer sentences to vary rhythm.",
                        priority="medium",
                        example="She waited. He came. -> She waited until, at last, he came.",
                    )
                )
            elif avg_length > high:
                suggestions.append(
                    WritingSuggestion(
                        category="pacing",
                        issue="Sentences are long on average",
                        suggestion="Break complex sentences into shorter, more digestible ones.",
                        priority="high",
                        example="Split at conjunctions such as 'and' or 'but'.",
                    )
                )
        elif area == "clarity":
            overused = [word for word in _FILLER_WORDS if token_counts[word] > 5]
            if overused:
                suggestions.append(
                    WritingSuggestion(
                        category="clarity",
                        issue=f"Frequent filler words: {', '.join(overused)}",
                        suggestion="Replace fillers with more specific wording.",
                        priority="medium",
                        example="very tired -> exhausted",
                    )
                )
        elif area == "emotion":
            emotional = sum(token_counts[word] for word in _EMOTION_WORDS)
            if tokens and emotional / len(tokens) < 0.005:
                suggestions.append(
                    WritingSuggestion(
                        category="emotion",
                        issue="Little explicit emotional language",
                        suggestion="Show characters' feelings through reactions and sensations.",
                        priority="low",
                        example="Her hands trembled as she read the letter.",
                    )
                )
        elif area == "voice":
            dialogue_count = len(_QUOTED.findall(text))
            said_count = token_counts["said"]
            if dialogue_count and said_count / dialogue_count > 0.7:
                suggestions.append(
                    WritingSuggestion(
                        category="voice",
                        issue="Dialogue tags rely heavily on 'said'",
                        suggestion="Let action beats or occasional alternatives carry some lines.",
                        priority="low",
                        example='"Wait," she whispered, reaching for his arm.',
                    )
                )

    if not suggestions:
        suggestions.append(
            WritingSuggestion(
                category="general",
                issue="No issues detected",
                suggestion="Your writing looks good. Keep going.",
                priority="low",
            )
        )
    return WritingSuggestionsResult(
        suggestions=suggestions,
        analytics_summary={
            "word_count": float(len(_words(text))),
            "avg_sentence_length": round(avg_length, 3),
            "dialogue_ratio": round(dialogue_ratio, 3),
        },
    )


def optimize_text(text: str, optimization_target: str) -> TextOptimizationResult:
    """Apply simple rewrite rules; unknown targets return the text unchanged."""
    optimized = text
    changes = 0
    if optimization_target == "readability":
        chunks: list[str] = []
        for chunk in _SENTENCE_CHUNK.findall(text):
            words = chunk.split()
            if len(words) > 20:
                middle = len(words) // 2
                second = " ".join(words[middle:])
                chunks.append(f"{' '.join(words[:middle])}. {second[:1].upper()}{second[1:]}")
                changes += 1
            else:
                chunks.append(chunk.strip())
        optimized = " ".join(chunk for chunk in chunks if chunk)
    elif optimization_target in {"conciseness", "clarity"}:
        for long_form, short_form in _REDUNDANT_PHRASES:
            changes += optimized.count(long_form)
            optimized = optimized.replace(long_form, short_form)
        if optimization_target == "clarity":
            for filler in ("very ", "really "):
                pattern = re.compile(rf"\b{filler}", re.IGNORECASE)
                optimized, count = pattern.subn("", optimized)
                changes += count
    return TextOptimizationResult(
        optimization_target=optimization_target,
        optimized_text=optimized if changes else text,
        changes_applied=changes,
    )
