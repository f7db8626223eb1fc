"""
Backend-native entity models.

These mirror what the kanban backend returns: integer ids and integer
nanosecond timestamps. JSON payloads use camelCase keys; Python code
uses the snake_case attribute names.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from kanban_snapshot.constants import DEFAULT_TAG_COLOR


class BackendModel(BaseModel):
    """Base model for backend payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class User(BackendModel):
    """A global user. Credential hashes are never modeled."""

    id: int
    name: str
    is_admin: bool = False
    is_master_admin: bool = False


class Column(BackendModel):
    """A board column with its ordered card ids."""

    id: int
    name: str
    card_ids: list[int] = Field(default_factory=list)
    project_id: Optional[int] = None


class Card(BackendModel):
    """A card as stored by the backend."""

    id: int
    title: str
    description: Optional[str] = None
    assigned_user_id: Optional[int] = None
    column_id: int
    tags: list[int] = Field(default_factory=list)
    due_date: Optional[int] = None
    created_at: int = 0
    project_id: Optional[int] = None


class Tag(BackendModel):
    """A project-scoped tag."""

    id: int
    name: str
    color: str = DEFAULT_TAG_COLOR
    project_id: Optional[int] = None


class Comment(BackendModel):
    """A comment on a card."""

    id: int
    card_id: Optional[int] = None
    author_id: int
    author_name: str = ""
    text: str = ""
    timestamp: int = 0


class Revision(BackendModel):
    """A revision-log entry. Project-level entries have no card id."""

    id: int
    actor_name: str = ""
    revision_type: str = ""
    description: str = ""
    timestamp: int = 0
    card_id: Optional[int] = None


class FilterPreset(BackendModel):
    """A saved board filter."""

    id: int
    name: str
    created_by_user_id: int
    assignee_id: Optional[int] = None
    tag_ids: list[int] = Field(default_factory=list)
    unassigned_only: bool = False
    text_search: str = ""
    date_field: Optional[str] = None
    date_from: str = ""
    date_to: str = ""
    project_id: Optional[int] = None
