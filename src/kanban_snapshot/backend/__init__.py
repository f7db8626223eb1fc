"""
Kanban backend access.

KanbanBackend is the contract the snapshot engine consumes;
HttpKanbanBackend implements it against the board's REST API.
"""

from kanban_snapshot.backend.http import HttpKanbanBackend
from kanban_snapshot.backend.protocol import KanbanBackend

__all__ = ["KanbanBackend", "HttpKanbanBackend"]
