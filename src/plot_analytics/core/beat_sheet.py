"""Beat sheet templates and plot structure generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from plot_analytics.domain.models import Beat, PlotStructure, apply_plot_update

DEFAULT_TEMPLATE: Final = "default"
DEFAULT_TARGET_WORD_COUNT: Final = 80_000


@dataclass(frozen=True)
class BeatTemplate:
    """One beat definition inside a template."""

    name: str
    percentage: float
    description: str
    details: str = ""
    examples: tuple[str, ...] = ()


@dataclass(frozen=True)
class GenreTemplate:
    """Named genre beat list."""

    key: str
    label: str
    beats: tuple[BeatTemplate, ...]


# Ties at 10% and 20% and 80% are intentional; charts must tolerate duplicate x values.
SAVE_THE_CAT_BEATS: Final[tuple[BeatTemplate, ...]] = (
    BeatTemplate(
        "Opening Image",
        0,
        "A snapshot of your hero's \"before\" world",
        "Sets the tone and mood of your story. Should contrast with the Final Image.",
        ("Luke Skywalker staring at twin suns", "Katniss hunting in District 12"),
    ),
    BeatTemplate(
        "Theme Stated",
        5,
        "A statement that hints at what your story is about",
        "Usually delivered by a character other than the hero. The moral of the story.",
        (
            '"With great power comes great responsibility"',
            '"The needs of the many outweigh the needs of the few"',
        ),
    ),
    BeatTemplate(
        "Setup",
        10,
        "Introduce your hero and their ordinary world",
        "Show the hero's status quo, their want, need, and the story's stakes.",
        ("Harry Potter at the Dursleys", "Neo in his mundane programmer life"),
    ),
    BeatTemplate(
        "Catalyst",
        10,
        "Life-changing event that starts the adventure",
        "The inciting incident that sets the story in motion. Can be physical or emotional.",
        ("Hagrid tells Harry he's a wizard", "Morpheus offers Neo the red pill"),
    ),
    BeatTemplate(
        "Debate",
        20,
        "Should the hero accept the challenge?",
        "The hero hesitates. Internal conflict about entering the new world.",
        ("Harry hesitant about Hogwarts", "Neo questioning reality"),
    ),
    BeatTemplate(
        "Break into Two",
        20,
        "Hero commits to the adventure",
        "The point of no return. Hero leaves the familiar world behind.",
        ("Harry boards the Hogwarts Express", "Neo takes the red pill"),
    ),
    BeatTemplate(
        "B Story",
        22,
        "Introduction of love interest or helper",
        "Secondary plot that reinforces the theme. Often romantic or mentor relationship.",
        ("Han Solo and Princess Leia", "Hermione and Ron for Harry"),
    ),
    BeatTemplate(
        "Fun and Games",
        30,
        "The promise of the premise delivered",
        "What the audience came to see. Hero explores the new world.",
        ("Harry learning magic at Hogwarts", "Neo training in the Matrix"),
    ),
    BeatTemplate(
        "Midpoint",
        50,
        "False victory or false defeat",
        "Major plot point that changes everything. Stakes are raised.",
        ("Death Star plans stolen", "Harry faces Voldemort in graveyard"),
    ),
    BeatTemplate(
        "Bad Guys Close In",
        60,
        "Forces of opposition regroup",
        "External and internal pressure mounts. Hero's flaws cause problems.",
        ("Empire strikes back", "Voldemort returns to power"),
    ),
    BeatTemplate(
        "All Is Lost",
        75,
        "Hero's lowest point",
        "The dark moment. Hero appears defeated. Often involves a death.",
        ("Obi-Wan dies", "Cedric Diggory killed"),
    ),
    BeatTemplate(
        "Dark Night of the Soul",
        80,
        "Hero wallows in hopelessness",
        "Brief moment of despair before the hero finds their strength.",
        ("Luke mourning Obi-Wan", "Harry grieving Cedric"),
    ),
    BeatTemplate(
        "Break into Three",
        80,
        "Hero finds the solution",
        'The "aha!" moment. Hero discovers what they need to succeed.',
        ("Luke trusts the Force", "Harry understands love's power"),
    ),
    BeatTemplate(
        "Finale",
        85,
        "Climax and resolution",
        "Final confrontation. Hero uses lessons learned to triumph.",
        ("Death Star destroyed", "Voldemort temporarily defeated"),
    ),
    BeatTemplate(
        "Final Image",
        100,
        "Snapshot of the hero's \"after\" world",
        "Shows how the hero has changed. Should contrast with Opening Image.",
        ("Luke as Jedi hero", "Harry returning to Hogwarts triumphant"),
    ),
)

GENRE_TEMPLATES: Final[dict[str, GenreTemplate]] = {
    "romance": GenreTemplate(
        key="romance",
        label="Romance",
        beats=(
            BeatTemplate("Meet Cute", 10, "First meeting between love interests"),
            BeatTemplate("Conflict Introduced", 25, "What keeps them apart"),
            BeatTemplate("First Kiss", 50, "Romantic midpoint"),
            BeatTemplate("Black Moment", 75, "Relationship seems doomed"),
            BeatTemplate("Grand Gesture", 90, "One proves their love"),
            BeatTemplate("Happily Ever After", 100, "Couple united"),
        ),
    ),
    "mystery": GenreTemplate(
        key="mystery",
        label="Mystery",
        beats=(
            BeatTemplate("Crime Committed", 5, "The inciting incident"),
            BeatTemplate("Detective on Case", 15, "Protagonist takes the case"),
            BeatTemplate("First Clue", 25, "Investigation begins"),
            BeatTemplate("Red Herring", 50, "False lead at midpoint"),
            BeatTemplate("Truth Revealed", 85, "Real culprit exposed"),
            BeatTemplate("Justice Served", 100, "Resolution and consequences"),
        ),
    ),
    "thriller": GenreTemplate(
        key="thriller",
        label="Thriller",
        beats=(
            BeatTemplate("Ordinary World", 0, "Hero's normal life"),
            BeatTemplate("Inciting Incident", 10, "Threat introduced"),
            BeatTemplate("First Attack", 25, "Hero targeted"),
            BeatTemplate("Point of No Return", 50, "Stakes escalate dramatically"),
            BeatTemplate("Final Confrontation", 85, "Hero vs. antagonist"),
            BeatTemplate("New Normal", 100, "Aftermath and resolution"),
        ),
    ),
}

BEAT_PROMPTS: Final[dict[str, str]] = {
    "Opening Image": (
        "Create an opening scene that establishes the tone and shows the "
        "protagonist's world before change"
    ),
    "Theme Stated": (
        "Write dialogue where a character hints at the story's main theme or moral lesson"
    ),
    "Setup": "Describe the protagonist's ordinary world, their daily routine, and what they want",
    "Catalyst": "Create the inciting incident that disrupts the protagonist's normal life",
    "Debate": (
        "Show the protagonist's internal struggle about whether to accept the call to adventure"
    ),
    "Break into Two": "Write the moment when the protagonist commits to the journey",
    "B Story": "Introduce a secondary character who will help the protagonist learn the theme",
    "Fun and Games": (
        "Show the protagonist exploring their new world and facing initial challenges"
    ),
    "Midpoint": "Create a major revelation or event that raises the stakes significantly",
    "Bad Guys Close In": "Increase pressure on the protagonist from external and internal forces",
    "All Is Lost": "Write the darkest moment when the protagonist seems defeated",
    "Dark Night of the Soul": "Show the protagonist's moment of despair and self-reflection",
    "Break into Three": "Create the moment when the protagonist finds their solution",
    "Finale": "Write the climactic confrontation and resolution",
    "Final Image": "Show how the protagonist's world has changed since the opening",
}


def available_templates() -> list[str]:
    """Return template names accepted by the generator."""
    return [DEFAULT_TEMPLATE, *sorted(GENRE_TEMPLATES)]


def beat_word_count(target_word_count: int, percentage: float) -> int:
    """Word budget at a story percentage, rounded half up."""
    return int(target_word_count * percentage / 100 + 0.5)


def generate_beat_sheet(
    template_name: str,
    project_id: str,
    target_word_count: int = DEFAULT_TARGET_WORD_COUNT,
) -> PlotStructure:
    """Build a fresh plot structure from a named template.

    Unknown template names fall back to the default 15-beat sheet. Beat ids are
    derived from the project, template, and beat index so regenerating keeps
    identities stable while resetting content and completion.
    """
    if target_word_count <= 0:
        target_word_count = DEFAULT_TARGET_WORD_COUNT
    genre = GENRE_TEMPLATES.get(template_name.strip().lower())
    if genre is None:
        templates = SAVE_THE_CAT_BEATS
        plot_id = f"plot-{project_id}"
        beat_prefix = f"beat-{project_id}"
    else:
        templates = genre.beats
        plot_id = f"plot-{project_id}-{genre.key}"
        beat_prefix = f"beat-{project_id}-{genre.key}"

    beats = tuple(
        Beat(
            id=f"{beat_prefix}-{index}",
            name=template.name,
            percentage=template.percentage,
            description=template.description,
            content="",
            word_count=beat_word_count(target_word_count, template.percentage),
            scene_ids=(),
            is_completed=False,
        )
        for index, template in enumerate(templates)
    )
    return PlotStructure(id=plot_id, target_word_count=target_word_count, beats=beats)


def recompute_word_counts(plot: PlotStructure, target_word_count: int) -> PlotStructure:
    """Retarget a plot and refresh every beat's word budget."""
    if target_word_count <= 0:
        target_word_count = DEFAULT_TARGET_WORD_COUNT
    beats = tuple(
        beat.model_copy(update={"word_count": beat_word_count(target_word_count, beat.percentage)})
        for beat in plot.beats
    )
    return apply_plot_update(plot, target_word_count=target_word_count, beats=beats)


def beat_writing_prompt(
    beat_name: str,
    *,
    genre: str | None = None,
    character_name: str | None = None,
) -> str:
    """Drafting prompt for one beat, personalized by genre and character."""
    prompt = BEAT_PROMPTS.get(beat_name, f"Create a scene for the {beat_name} beat")
    if character_name:
        if "the protagonist" in prompt:
            prompt = prompt.replace("the protagonist", character_name, 1)
        else:
            prompt = prompt.replace("protagonist", character_name, 1)
    if genre:
        prompt += f" in a {genre} story"
    return prompt + ". Keep it concise and focused on the essential story elements."
