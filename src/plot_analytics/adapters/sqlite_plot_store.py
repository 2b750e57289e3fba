"""SQLite-backed persistence for plot structures and project entities."""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel

from plot_analytics.domain.models import (
    BStory,
    Character,
    Conflict,
    FactCheck,
    PlotStructure,
    ResearchItem,
    Theme,
)

_EntityT = TypeVar("_EntityT", bound=BaseModel)


class SQLitePlotStore:
    """Persist plot records as validated JSON payloads keyed by project and entity id."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(str(self._db_path))
        connection.row_factory = sqlite3.Row
        return connection

    def _initialize_schema(self) -> None:
        with self._connect() as connection:
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS plot_structures (
                    project_id TEXT PRIMARY KEY,
                    plot_id TEXT NOT NULL,
                    payload_json TEXT NOT NULL,
                    updated_at_utc TEXT NOT NULL
                )
                """
            )
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS project_entities (
                    project_id TEXT NOT NULL,
                    entity_kind TEXT NOT NULL,
                    entity_id TEXT NOT NULL,
                    payload_json TEXT NOT NULL,
                    created_at_utc TEXT NOT NULL,
                    updated_at_utc TEXT NOT NULL,
                    PRIMARY KEY (project_id, entity_kind, entity_id)
                )
                """
            )
            connection.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_project_entities_kind
                ON project_entities(project_id, entity_kind)
                """
            )

    def get_plot_structure(self, *, project_id: str) -> PlotStructure | None:
        with self._connect() as connection:
            row = connection.execute(
                "SELECT payload_json FROM plot_structures WHERE project_id = ?",
                (project_id,),
            ).fetchone()
        if row is None:
            return None
        return PlotStructure.model_validate_json(str(row["payload_json"]))

    def save_plot_structure(self, *, project_id: str, plot: PlotStructure) -> None:
        now = datetime.now(UTC).isoformat()
        with self._connect() as connection:
            connection.execute(
                """
                INSERT INTO plot_structures (project_id, plot_id, payload_json, updated_at_utc)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(project_id) DO UPDATE SET
                    plot_id = excluded.plot_id,
                    payload_json = excluded.payload_json,
                    updated_at_utc = excluded.updated_at_utc
                """,
                (project_id, plot.id, plot.model_dump_json(), now),
            )

    def delete_plot_structure(self, *, project_id: str) -> bool:
        with self._connect() as connection:
            cursor = connection.execute(
                "DELETE FROM plot_structures WHERE project_id = ?",
                (project_id,),
            )
        return cursor.rowcount > 0

    def list_themes(self, *, project_id: str) -> list[Theme]:
        return self._list_entities(project_id=project_id, kind="theme", model=Theme)

    def save_theme(self, *, project_id: str, theme: Theme) -> None:
        self._save_entity(project_id=project_id, kind="theme", entity_id=theme.id, record=theme)

    def delete_theme(self, *, project_id: str, theme_id: str) -> bool:
        return self._delete_entity(project_id=project_id, kind="theme", entity_id=theme_id)

    def list_conflicts(self, *, project_id: str) -> list[Conflict]:
        return self._list_entities(project_id=project_id, kind="conflict", model=Conflict)

    def save_conflict(self, *, project_id: str, conflict: Conflict) -> None:
        self._save_entity(
            project_id=project_id, kind="conflict", entity_id=conflict.id, record=conflict
        )

    def delete_conflict(self, *, project_id: str, conflict_id: str) -> bool:
        return self._delete_entity(project_id=project_id, kind="conflict", entity_id=conflict_id)

    def list_b_stories(self, *, project_id: str) -> list[BStory]:
        return self._list_entities(project_id=project_id, kind="b_story", model=BStory)

    def save_b_story(self, *, project_id: str, b_story: BStory) -> None:
        self._save_entity(
            project_id=project_id, kind="b_story", entity_id=b_story.id, record=b_story
        )

    def delete_b_story(self, *, project_id: str, b_story_id: str) -> bool:
        return self._delete_entity(project_id=project_id, kind="b_story", entity_id=b_story_id)

    def get_character(self, *, project_id: str, character_id: str) -> Character | None:
        with self._connect() as connection:
            row = connection.execute(
                """
                SELECT payload_json
                FROM project_entities
                WHERE project_id = ? AND entity_kind = 'character' AND entity_id = ?
                """,
                (project_id, character_id),
            ).fetchone()
        if row is None:
            return None
        return Character.model_validate_json(str(row["payload_json"]))

    def list_characters(self, *, project_id: str) -> list[Character]:
        return self._list_entities(project_id=project_id, kind="character", model=Character)

    def save_character(self, *, project_id: str, character: Character) -> None:
        self._save_entity(
            project_id=project_id, kind="character", entity_id=character.id, record=character
        )

    def delete_character(self, *, project_id: str, character_id: str) -> bool:
        return self._delete_entity(
            project_id=project_id, kind="character", entity_id=character_id
        )

    def list_research_items(self, *, project_id: str) -> list[ResearchItem]:
        return self._list_entities(project_id=project_id, kind="research_item", model=ResearchItem)

    def save_research_item(self, *, project_id: str, item: ResearchItem) -> None:
        self._save_entity(
            project_id=project_id, kind="research_item", entity_id=item.id, record=item
        )

    def delete_research_item(self, *, project_id: str, item_id: str) -> bool:
        return self._delete_entity(project_id=project_id, kind="research_item", entity_id=item_id)

    def list_fact_checks(self, *, project_id: str) -> list[FactCheck]:
        return self._list_entities(project_id=project_id, kind="fact_check", model=FactCheck)

    def save_fact_check(self, *, project_id: str, fact: FactCheck) -> None:
        self._save_entity(project_id=project_id, kind="fact_check", entity_id=fact.id, record=fact)

    def delete_fact_check(self, *, project_id: str, fact_id: str) -> bool:
        return self._delete_entity(project_id=project_id, kind="fact_check", entity_id=fact_id)

    def _save_entity(
        self, *, project_id: str, kind: str, entity_id: str, record: BaseModel
    ) -> None:
        now = datetime.now(UTC).isoformat()
        with self._connect() as connection:
            connection.execute(
                """
                INSERT INTO project_entities (
                    project_id, entity_kind, entity_id, payload_json, created_at_utc, updated_at_utc
                )
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(project_id, entity_kind, entity_id) DO UPDATE SET
                    payload_json = excluded.payload_json,
                    updated_at_utc = excluded.updated_at_utc
                """,
                (project_id, kind, entity_id, record.model_dump_json(), now, now),
            )

    def _list_entities(
        self, *, project_id: str, kind: str, model: type[_EntityT]
    ) -> list[_EntityT]:
        with self._connect() as connection:
            rows = connection.execute(
                """
                SELECT payload_json
                FROM project_entities
                WHERE project_id = ? AND entity_kind = ?
                ORDER BY rowid ASC
                """,
                (project_id, kind),
            ).fetchall()
        return [model.model_validate_json(str(row["payload_json"])) for row in rows]

    def _delete_entity(self, *, project_id: str, kind: str, entity_id: str) -> bool:
        with self._connect() as connection:
            cursor = connection.execute(
                """
                DELETE FROM project_entities
                WHERE project_id = ? AND entity_kind = ? AND entity_id = ?
                """,
                (project_id, kind, entity_id),
            )
        return cursor.rowcount > 0
