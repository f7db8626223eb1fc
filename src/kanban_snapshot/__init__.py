"""
Kanban Snapshot - project export/import engine for kanban boards.

This package serializes a project's full state (columns, cards, tags,
comments, history, filter presets, users) into a portable document and
rebuilds projects from such documents against a live backend that
assigns its own ids.

Architecture:
    MCP Tools Layer (server.py)
         │
         ▼
    Snapshot Engine
    ┌────┴─────┐
    ▼          ▼
  Exporter   Importer ── IdMap / NameIndex
    │          │
    └────┬─────┘
         ▼
    KanbanBackend protocol
         │
         ▼
    HttpKanbanBackend (REST)
"""

__version__ = "0.1.0"
__author__ = "Kanban Snapshot Contributors"

from kanban_snapshot.exceptions import (
    KanbanSnapshotError,
    KanbanConfigurationError,
    KanbanBackendError,
    KanbanNotFoundError,
    DocumentError,
    ExportError,
    ImportAbortedError,
)

__all__ = [
    "__version__",
    "KanbanSnapshotError",
    "KanbanConfigurationError",
    "KanbanBackendError",
    "KanbanNotFoundError",
    "DocumentError",
    "ExportError",
    "ImportAbortedError",
]
