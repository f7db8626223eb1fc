"""
Snapshot document models.

The document is the portable serialization of one project. All ids in it
are strings in the document's own id space and all timestamps are ISO-8601
strings. Reading is tolerant: nulls count as missing, missing fields get
defaults, values of the wrong shape fall back to the field default,
non-object entries in node lists are skipped, and unknown fields are
ignored. Only a ``project`` that is not an object fails validation.

Serialize with ``document.model_dump(by_alias=True, mode="json")`` to get
the camelCase wire form.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from kanban_snapshot.constants import (
    DEFAULT_CARD_TITLE,
    DEFAULT_COLUMN_NAME,
    DEFAULT_PRESET_NAME,
    DEFAULT_TAG_COLOR,
    DEFAULT_TAG_NAME,
    DEFAULT_USER_NAME,
    SCHEMA_VERSION,
)


def _as_text(value: Any) -> Any:
    # Hand-edited documents sometimes carry numeric ids
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def _as_list(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _as_id_list(value: Any) -> list:
    """Keep only entries usable as id references."""
    return [
        item
        for item in _as_list(value)
        if isinstance(item, (str, int, float)) and not isinstance(item, bool)
    ]


def _as_node_list(value: Any) -> list:
    """Keep only object entries; anything else is not a document node."""
    return [item for item in _as_list(value) if isinstance(item, Mapping)]


def coerce_schema_version(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


DocumentId = Annotated[str, BeforeValidator(_as_text)]
DocumentText = Annotated[str, BeforeValidator(_as_text)]


class DocumentModel(BaseModel):
    """Base model for document nodes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator("*", mode="wrap")
    @classmethod
    def _default_when_unusable(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        """Replace a value of the wrong shape with the field default. Required fields still fail."""
        try:
            return handler(value)
        except ValidationError:
            field = cls.model_fields[info.field_name]
            if field.is_required():
                raise
            return field.get_default(call_default_factory=True)


class ExportedUser(DocumentModel):
    id: DocumentId = ""
    name: DocumentText = DEFAULT_USER_NAME
    is_admin: bool = False
    is_master_admin: bool = False


class ExportedComment(DocumentModel):
    id: DocumentId = ""
    author_id: DocumentId = ""
    author_name: DocumentText = ""
    text: DocumentText = ""
    timestamp: DocumentText = ""


class ExportedRevision(DocumentModel):
    id: DocumentId = ""
    actor_name: DocumentText = ""
    revision_type: DocumentText = ""
    description: DocumentText = ""
    timestamp: DocumentText = ""


class ExportedCard(DocumentModel):
    """A card; ``order`` is the source of truth for its position in the column."""

    id: DocumentId = ""
    title: DocumentText = DEFAULT_CARD_TITLE
    description: Optional[DocumentText] = None
    # Fractional orders from hand-edited files still sort between their neighbours
    order: Union[int, float] = 0
    assigned_user_id: Optional[DocumentId] = None
    tags: Annotated[list[DocumentId], BeforeValidator(_as_id_list)] = Field(default_factory=list)
    due_date: Optional[DocumentText] = None
    created_at: DocumentText = ""
    comments: Annotated[list[ExportedComment], BeforeValidator(_as_node_list)] = Field(
        default_factory=list
    )
    history: Annotated[list[ExportedRevision], BeforeValidator(_as_node_list)] = Field(
        default_factory=list
    )


class ExportedColumn(DocumentModel):
    id: DocumentId = ""
    name: DocumentText = DEFAULT_COLUMN_NAME
    cards: Annotated[list[ExportedCard], BeforeValidator(_as_node_list)] = Field(default_factory=list)


class ExportedTag(DocumentModel):
    id: DocumentId = ""
    name: DocumentText = DEFAULT_TAG_NAME
    color: DocumentText = DEFAULT_TAG_COLOR


class ExportedFilterPreset(DocumentModel):
    """A saved filter. Date bounds are calendar-date strings, passed through as-is."""

    id: DocumentId = ""
    name: DocumentText = DEFAULT_PRESET_NAME
    created_by_user_id: DocumentId = ""
    assignee_id: Optional[DocumentId] = None
    tag_ids: Annotated[list[DocumentId], BeforeValidator(_as_id_list)] = Field(default_factory=list)
    unassigned_only: bool = False
    text_search: DocumentText = ""
    date_field: Optional[DocumentText] = None
    date_from: DocumentText = ""
    date_to: DocumentText = ""


class ExportedProject(DocumentModel):
    id: DocumentId = ""
    name: DocumentText = ""
    columns: Annotated[list[ExportedColumn], BeforeValidator(_as_node_list)] = Field(
        default_factory=list
    )
    tags: Annotated[list[ExportedTag], BeforeValidator(_as_node_list)] = Field(default_factory=list)
    activity: Annotated[list[ExportedRevision], BeforeValidator(_as_node_list)] = Field(
        default_factory=list
    )
    filter_presets: Annotated[list[ExportedFilterPreset], BeforeValidator(_as_node_list)] = Field(
        default_factory=list
    )

    @property
    def card_count(self) -> int:
        return sum(len(column.cards) for column in self.columns)


class KanbanExport(DocumentModel):
    """Root of a snapshot document."""

    notes: dict[str, str] = Field(default_factory=dict, alias="_comment")
    schema_version: Annotated[Optional[int], BeforeValidator(coerce_schema_version)] = None
    exported_at: DocumentText = ""
    users: Annotated[list[ExportedUser], BeforeValidator(_as_node_list)] = Field(default_factory=list)
    project: ExportedProject


# Field-by-field explanation embedded in every exported document for human readers
DOCUMENT_NOTES: dict[str, str] = {
    "purpose": (
        "This file is a complete snapshot of a Kanban project. "
        "You can import it to restore or transfer your data."
    ),
    "schemaVersion": (
        f"Tells the importer how to read this file. Current version is {SCHEMA_VERSION}."
    ),
    "users": (
        "Global user list (name and role only; PINs are never exported). "
        "Imported users will need to set a new PIN on first login."
    ),
    "project.columns": "Columns in order. Each column contains its cards.",
    "project.cards.order": "0-based position of the card within its column.",
    "project.cards.assignedUserId": "References a user ID from the users array.",
    "project.cards.tags": "Array of tag IDs referencing the project.tags array.",
    "timestamps": "ISO-8601 UTC strings with millisecond precision.",
    "omittingFields": (
        "Most fields are optional on import. Missing fields get defaults "
        "(empty string, empty list, null, false)."
    ),
    "unknownFields": "Unknown or extra fields are ignored on import.",
    "importModes": (
        "'replace' wipes this project and replaces all data. "
        "'merge' adds new items and reuses existing users, tags and columns by name."
    ),
    "pinHandling": (
        "PINs are never exported. Imported users are created with no PIN; "
        "an admin must set their PIN before they can log in."
    ),
    "badColumnRef": (
        "Cards whose column cannot be resolved are not created. "
        "The import result lists them by title so they can be recreated manually."
    ),
    "activity": "Project-level activity log. Informational; not replayed on import.",
    "filterPresets": "Optional. Saved filter configurations for this project.",
}
