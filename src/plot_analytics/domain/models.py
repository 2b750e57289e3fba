"""Plot structure entities shared by generators, calculators, and adapters."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Annotated, Any, Literal, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
    model_validator,
)

ConflictType = Literal["internal", "external"]
VerificationStatus = Literal["verified", "disputed", "unknown"]

# Identifiers and labels are trimmed; prose fields keep their whitespace.
Label = Annotated[str, StringConstraints(strip_whitespace=True)]

_ModelT = TypeVar("_ModelT", bound="EntityModel")


def utc_now() -> datetime:
    """Return the current UTC timestamp."""
    return datetime.now(UTC)


def _dedupe_ordered(values: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    deduped: list[str] = []
    for value in values:
        item = str(value).strip()
        if not item or item in seen:
            continue
        seen.add(item)
        deduped.append(item)
    return tuple(deduped)


class EntityModel(BaseModel):
    """Immutable record configuration for plot entities."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class Beat(EntityModel):
    """A named structural point positioned by story percentage."""

    id: Label = Field(min_length=1)
    name: Label = Field(min_length=1, max_length=200)
    percentage: float = Field(ge=0.0, le=100.0)
    description: str = ""
    content: str = ""
    word_count: int = Field(default=0, ge=0)
    scene_ids: tuple[str, ...] = ()
    is_completed: bool = False

    @field_validator("scene_ids", mode="before")
    @classmethod
    def _normalize_scene_ids(cls, values: Iterable[str]) -> tuple[str, ...]:
        return _dedupe_ordered(values)


class Theme(EntityModel):
    """A theme linked to scenes with per-scene intensity."""

    id: Label = Field(min_length=1)
    name: Label = Field(min_length=1, max_length=200)
    description: str = ""
    scene_ids: tuple[str, ...] = ()
    intensity: dict[str, int] = Field(default_factory=dict)

    @field_validator("scene_ids", mode="before")
    @classmethod
    def _normalize_scene_ids(cls, values: Iterable[str]) -> tuple[str, ...]:
        return _dedupe_ordered(values)

    @field_validator("intensity")
    @classmethod
    def _validate_intensity_range(cls, values: dict[str, int]) -> dict[str, int]:
        for scene_id, value in values.items():
            if not 1 <= value <= 10:
                raise ValueError(f"Theme intensity for scene '{scene_id}' must be within 1..10.")
        return values

    @model_validator(mode="after")
    def _intensity_keys_are_linked(self) -> Theme:
        dangling = sorted(set(self.intensity) - set(self.scene_ids))
        if dangling:
            raise ValueError(f"Theme intensity references unlinked scenes: {dangling}.")
        return self


class Conflict(EntityModel):
    """Internal or external conflict with a baseline intensity."""

    id: Label = Field(min_length=1)
    type: ConflictType
    description: str = ""
    intensity: int | None = Field(default=None, ge=1, le=10)
    scene_ids: tuple[str, ...] = ()

    @field_validator("scene_ids", mode="before")
    @classmethod
    def _normalize_scene_ids(cls, values: Iterable[str]) -> tuple[str, ...]:
        return _dedupe_ordered(values)


class BStory(EntityModel):
    """Subplot carried by one character."""

    id: Label = Field(min_length=1)
    character_id: Label = Field(min_length=1)
    name: Label = Field(min_length=1, max_length=200)
    description: str = ""
    scene_ids: tuple[str, ...] = ()
    thematic_impact: dict[str, Any] = Field(default_factory=dict)

    @field_validator("scene_ids", mode="before")
    @classmethod
    def _normalize_scene_ids(cls, values: Iterable[str]) -> tuple[str, ...]:
        return _dedupe_ordered(values)


class PlotStructure(EntityModel):
    """Beat sheet plus the themes, conflicts, and subplots of one project."""

    id: Label = Field(min_length=1)
    target_word_count: int = Field(gt=0)
    beats: tuple[Beat, ...] = ()
    themes: tuple[Theme, ...] = ()
    conflicts: tuple[Conflict, ...] = ()
    b_stories: tuple[BStory, ...] = ()
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def beat(self, beat_id: str) -> Beat | None:
        return next((beat for beat in self.beats if beat.id == beat_id), None)

    def theme(self, theme_id: str) -> Theme | None:
        return next((theme for theme in self.themes if theme.id == theme_id), None)


class CharacterArcPoint(EntityModel):
    """Emotional state of one character at one beat."""

    beat_id: Label = Field(min_length=1)
    emotional_state: dict[str, int] = Field(default_factory=dict)
    notes: str | None = None

    @field_validator("emotional_state")
    @classmethod
    def _validate_emotion_range(cls, values: dict[str, int]) -> dict[str, int]:
        for dimension, value in values.items():
            if not 0 <= value <= 10:
                raise ValueError(f"Emotional value for '{dimension}' must be within 0..10.")
        return values


class Character(EntityModel):
    """Story character with its arc points."""

    id: Label = Field(min_length=1)
    name: Label = Field(min_length=1, max_length=200)
    description: str = ""
    traits: tuple[str, ...] = ()
    arc: tuple[CharacterArcPoint, ...] = ()

    def arc_by_beat_id(self) -> dict[str, CharacterArcPoint]:
        # Later points for the same beat win, matching an editor that overwrites.
        return {point.beat_id: point for point in self.arc}


class Relationship(EntityModel):
    """Directed relationship between two characters."""

    from_id: Label = Field(min_length=1)
    to_id: Label = Field(min_length=1)
    type: Label = Field(min_length=1, max_length=80)
    strength: float = Field(default=50.0, ge=0.0, le=100.0)


class WorldEvent(EntityModel):
    """Event on the story-world timeline."""

    id: Label = Field(min_length=1)
    name: Label = Field(min_length=1, max_length=300)
    date: str = ""
    type: str = "general"
    importance: int = Field(default=5, ge=1, le=10)
    location_ids: tuple[str, ...] = ()
    character_ids: tuple[str, ...] = ()
    description: str | None = None


class ResearchItem(EntityModel):
    """Collected research note with a reliability score."""

    id: Label = Field(min_length=1)
    title: Label = Field(min_length=1, max_length=500)
    source: str = ""
    content: str = ""
    tags: tuple[str, ...] = ()
    reliability_score: float = Field(ge=1.0, le=10.0)
    date_added: datetime = Field(default_factory=utc_now)
    related_characters: tuple[str, ...] = ()
    related_locations: tuple[str, ...] = ()

    @field_validator("tags", "related_characters", "related_locations", mode="before")
    @classmethod
    def _normalize_sets(cls, values: Iterable[str]) -> tuple[str, ...]:
        return _dedupe_ordered(values)


class FactCheck(EntityModel):
    """Verification record for one factual statement."""

    id: Label = Field(min_length=1)
    statement: Label = Field(min_length=1)
    verification_status: VerificationStatus = "unknown"
    sources: tuple[str, ...] = ()
    confidence_score: float = Field(default=0.0, ge=0.0, le=1.0)
    related_research_ids: tuple[str, ...] = ()

    @field_validator("related_research_ids", mode="before")
    @classmethod
    def _normalize_research_ids(cls, values: Iterable[str]) -> tuple[str, ...]:
        return _dedupe_ordered(values)


class EditEvent(EntityModel):
    """One edit made by a collaborator to a manuscript section."""

    user_id: Label = Field(min_length=1)
    section_id: Label = Field(min_length=1)
    timestamp: Label = Field(min_length=1)
    edit_type: str = "update"


class SceneRef(EntityModel):
    """Scene identity and its position along the story."""

    id: Label = Field(min_length=1)
    percentage: float = Field(ge=0.0, le=100.0)


def _apply_update(record: _ModelT, changes: dict[str, Any]) -> _ModelT:
    unknown = sorted(set(changes) - set(type(record).model_fields))
    if unknown:
        raise ValueError(f"Unknown {type(record).__name__} fields: {unknown}.")
    payload = record.model_dump()
    payload.update(changes)
    return type(record).model_validate(payload)


def apply_beat_update(beat: Beat, **changes: Any) -> Beat:
    """Return a new beat with the given fields replaced."""
    return _apply_update(beat, changes)


def apply_theme_update(theme: Theme, **changes: Any) -> Theme:
    """Return a new theme with the given fields replaced."""
    return _apply_update(theme, changes)


def apply_conflict_update(conflict: Conflict, **changes: Any) -> Conflict:
    """Return a new conflict with the given fields replaced."""
    return _apply_update(conflict, changes)


def apply_bstory_update(b_story: BStory, **changes: Any) -> BStory:
    """Return a new b-story with the given fields replaced."""
    return _apply_update(b_story, changes)


def apply_plot_update(plot: PlotStructure, **changes: Any) -> PlotStructure:
    """Return a new plot structure with the given fields replaced and a fresh timestamp."""
    changes.setdefault("updated_at", utc_now())
    return _apply_update(plot, changes)


def link_theme_scene(theme: Theme, scene_id: str, intensity: int = 5) -> Theme:
    """Link a scene to a theme and record its intensity."""
    scene_ids = theme.scene_ids if scene_id in theme.scene_ids else (*theme.scene_ids, scene_id)
    return apply_theme_update(
        theme,
        scene_ids=scene_ids,
        intensity={**theme.intensity, scene_id: intensity},
    )


def unlink_theme_scene(theme: Theme, scene_id: str) -> Theme:
    """Remove a scene from a theme together with its intensity entry."""
    if scene_id not in theme.scene_ids:
        return theme
    return apply_theme_update(
        theme,
        scene_ids=tuple(item for item in theme.scene_ids if item != scene_id),
        intensity={key: value for key, value in theme.intensity.items() if key != scene_id},
    )


def set_theme_scene_intensity(theme: Theme, scene_id: str, intensity: int) -> Theme:
    """Change the intensity of an already linked scene; unlinked scenes are ignored."""
    if scene_id not in theme.scene_ids:
        return theme
    return apply_theme_update(theme, intensity={**theme.intensity, scene_id: intensity})


def replace_beat(plot: PlotStructure, beat: Beat) -> PlotStructure:
    """Swap one beat by id; unknown ids leave the plot unchanged."""
    if plot.beat(beat.id) is None:
        return plot
    beats = tuple(beat if item.id == beat.id else item for item in plot.beats)
    return apply_plot_update(plot, beats=beats)


def replace_theme(plot: PlotStructure, theme: Theme) -> PlotStructure:
    """Swap one theme by id, or append it when new."""
    if plot.theme(theme.id) is None:
        return apply_plot_update(plot, themes=(*plot.themes, theme))
    themes = tuple(theme if item.id == theme.id else item for item in plot.themes)
    return apply_plot_update(plot, themes=themes)


def replace_conflict(plot: PlotStructure, conflict: Conflict) -> PlotStructure:
    """Swap one conflict by id, or append it when new."""
    if all(item.id != conflict.id for item in plot.conflicts):
        return apply_plot_update(plot, conflicts=(*plot.conflicts, conflict))
    conflicts = tuple(conflict if item.id == conflict.id else item for item in plot.conflicts)
    return apply_plot_update(plot, conflicts=conflicts)


def replace_bstory(plot: PlotStructure, b_story: BStory) -> PlotStructure:
    """Swap one b-story by id, or append it when new."""
    if all(item.id != b_story.id for item in plot.b_stories):
        return apply_plot_update(plot, b_stories=(*plot.b_stories, b_story))
    b_stories = tuple(b_story if item.id == b_story.id else item for item in plot.b_stories)
    return apply_plot_update(plot, b_stories=b_stories)
