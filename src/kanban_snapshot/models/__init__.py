"""
Kanban Snapshot Data Models.

This package provides the Pydantic models shared by the exporter and the
importer.

Models:
    - Backend entities: User, Column, Card, Tag, Comment, Revision, FilterPreset
    - Document nodes: KanbanExport and its Exported* children
    - Import report: ImportResult, ImportCounts
"""

from kanban_snapshot.models.backend import (
    Card,
    Column,
    Comment,
    FilterPreset,
    Revision,
    Tag,
    User,
)
from kanban_snapshot.models.document import (
    DOCUMENT_NOTES,
    ExportedCard,
    ExportedColumn,
    ExportedComment,
    ExportedFilterPreset,
    ExportedProject,
    ExportedRevision,
    ExportedTag,
    ExportedUser,
    KanbanExport,
)
from kanban_snapshot.models.result import ImportCounts, ImportResult

__all__ = [
    "Card",
    "Column",
    "Comment",
    "FilterPreset",
    "Revision",
    "Tag",
    "User",
    "DOCUMENT_NOTES",
    "ExportedCard",
    "ExportedColumn",
    "ExportedComment",
    "ExportedFilterPreset",
    "ExportedProject",
    "ExportedRevision",
    "ExportedTag",
    "ExportedUser",
    "KanbanExport",
    "ImportCounts",
    "ImportResult",
]
