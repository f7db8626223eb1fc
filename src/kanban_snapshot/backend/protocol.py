"""
Kanban backend contract.

The exporter and importer talk to the backend only through this protocol.
Every call is independently atomic and signals failure by raising; no
multi-call transaction is assumed. Ids are backend-assigned integers and
timestamps are integer nanoseconds.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from kanban_snapshot.models.backend import (
    Card,
    Column,
    Comment,
    FilterPreset,
    Revision,
    Tag,
    User,
)


@runtime_checkable
class KanbanBackend(Protocol):
    """Async operations the snapshot engine consumes."""

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_columns(self, project_id: int) -> list[Column]: ...

    async def get_cards(self, project_id: int) -> list[Card]: ...

    async def get_users(self) -> list[User]: ...

    async def get_project_tags(self, project_id: int) -> list[Tag]: ...

    async def get_revisions(self, project_id: int) -> list[Revision]: ...

    async def get_filter_presets(self, project_id: int) -> list[FilterPreset]: ...

    async def get_card_comments(self, card_id: int) -> list[Comment]: ...

    async def get_card_revisions(self, card_id: int) -> list[Revision]: ...

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    async def create_user(self, name: str, pin_hash: str) -> int: ...

    async def create_tag(
        self, project_id: int, name: str, color: str, actor_user_id: int
    ) -> int: ...

    async def create_column(self, name: str, actor_user_id: int, project_id: int) -> int: ...

    async def create_card(
        self,
        title: str,
        description: Optional[str],
        column_id: int,
        actor_user_id: int,
        project_id: int,
    ) -> int: ...

    async def add_comment(self, card_id: int, text: str, actor_user_id: int) -> int: ...

    async def save_filter_preset(
        self,
        project_id: int,
        actor_user_id: int,
        name: str,
        assignee_id: Optional[int],
        tag_ids: list[int],
        unassigned_only: bool,
        text_search: str,
        date_field: Optional[str],
        date_from: str,
        date_to: str,
    ) -> int: ...

    # -------------------------------------------------------------------------
    # Card updates
    # -------------------------------------------------------------------------

    async def assign_card(
        self, card_id: int, user_id: Optional[int], actor_user_id: int
    ) -> None: ...

    async def update_card_tags(
        self, card_id: int, tag_ids: list[int], actor_user_id: int
    ) -> None: ...

    async def update_card_due_date(
        self, card_id: int, due_date: Optional[int], actor_user_id: int
    ) -> None: ...

    # -------------------------------------------------------------------------
    # Deletion (deleting a column removes its cards)
    # -------------------------------------------------------------------------

    async def delete_column(self, column_id: int, actor_user_id: int) -> None: ...

    async def delete_tag(self, tag_id: int, actor_user_id: int) -> None: ...

    async def delete_filter_preset(self, preset_id: int, actor_user_id: int) -> None: ...
