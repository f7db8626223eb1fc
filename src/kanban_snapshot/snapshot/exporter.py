"""
Project snapshot exporter.

Reads a project's full state from the backend and projects it into a
KanbanExport document. The six bulk reads must all succeed; per-card
comment and history reads are best-effort.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from kanban_snapshot.backend.protocol import KanbanBackend
from kanban_snapshot.constants import SCHEMA_VERSION
from kanban_snapshot.exceptions import ExportError
from kanban_snapshot.models.backend import Card, Column, Comment, Revision
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
from kanban_snapshot.snapshot.fanout import failures, settle
from kanban_snapshot.snapshot.timestamps import nanos_to_iso, utc_now_iso

logger = logging.getLogger(__name__)

_BULK_READS = (
    "get_columns",
    "get_cards",
    "get_users",
    "get_project_tags",
    "get_revisions",
    "get_filter_presets",
)


def _timestamp(nanos: Optional[int], owner: str, fallback: Optional[str] = "") -> Optional[str]:
    """Document form of a backend timestamp; ``fallback`` when absent or out of range."""
    if nanos is None:
        return fallback
    try:
        return nanos_to_iso(nanos)
    except ValueError:
        logger.warning("Unrepresentable timestamp %s on %s, exported as %r", nanos, owner, fallback)
        return fallback


def _revision(revision: Revision) -> ExportedRevision:
    return ExportedRevision(
        id=str(revision.id),
        actor_name=revision.actor_name,
        revision_type=revision.revision_type,
        description=revision.description,
        timestamp=_timestamp(revision.timestamp, f"revision {revision.id}"),
    )


def _comment(comment: Comment) -> ExportedComment:
    return ExportedComment(
        id=str(comment.id),
        author_id=str(comment.author_id),
        author_name=comment.author_name,
        text=comment.text,
        timestamp=_timestamp(comment.timestamp, f"comment {comment.id}"),
    )


class SnapshotExporter:
    """
    Builds snapshot documents from a live backend.

    Usage:
        exporter = SnapshotExporter(backend)
        document = await exporter.export_project(42, "Roadmap")
    """

    def __init__(self, backend: KanbanBackend) -> None:
        self._backend = backend

    async def export_project(self, project_id: int, project_name: str = "") -> KanbanExport:
        """
        Export one project.

        Args:
            project_id: Backend id of the project
            project_name: Display name written into the document

        Returns:
            The assembled document

        Raises:
            ExportError: If any of the bulk reads fails
        """
        backend = self._backend
        logger.info("Exporting project %s", project_id)

        bulk = await settle(
            [
                backend.get_columns(project_id),
                backend.get_cards(project_id),
                backend.get_users(),
                backend.get_project_tags(project_id),
                backend.get_revisions(project_id),
                backend.get_filter_presets(project_id),
            ]
        )
        failed = failures(bulk)
        if failed:
            index, error = failed[0]
            raise ExportError(
                f"Could not read project {project_id}: {_BULK_READS[index]} failed: {error}",
                operation=_BULK_READS[index],
            ) from error

        columns, cards, users, tags, revisions, presets = bulk

        card_map: dict[int, Card] = {card.id: card for card in cards}
        card_data = await self._fetch_card_data(cards)

        exported_columns = [self._export_column(col, card_map, card_data) for col in columns]

        # Card-level revisions are already carried in each card's history
        activity = [_revision(r) for r in revisions if r.card_id is None]

        document = KanbanExport(
            notes=dict(DOCUMENT_NOTES),
            schema_version=SCHEMA_VERSION,
            exported_at=utc_now_iso(),
            users=[
                ExportedUser(
                    id=str(u.id),
                    name=u.name,
                    is_admin=u.is_admin,
                    is_master_admin=u.is_master_admin,
                )
                for u in users
            ],
            project=ExportedProject(
                id=str(project_id),
                name=project_name or f"Project {project_id}",
                columns=exported_columns,
                tags=[ExportedTag(id=str(t.id), name=t.name, color=t.color) for t in tags],
                activity=activity,
                filter_presets=[
                    ExportedFilterPreset(
                        id=str(p.id),
                        name=p.name,
                        created_by_user_id=str(p.created_by_user_id),
                        assignee_id=str(p.assignee_id) if p.assignee_id is not None else None,
                        tag_ids=[str(t) for t in p.tag_ids],
                        unassigned_only=p.unassigned_only,
                        text_search=p.text_search,
                        date_field=p.date_field,
                        date_from=p.date_from,
                        date_to=p.date_to,
                    )
                    for p in presets
                ],
            ),
        )

        logger.info(
            "Exported project %s: %d columns, %d cards, %d tags",
            project_id,
            len(exported_columns),
            document.project.card_count,
            len(tags),
        )
        return document

    async def _fetch_card_data(
        self, cards: list[Card]
    ) -> dict[int, tuple[list[ExportedComment], list[ExportedRevision]]]:
        """
        Fetch comments and history for every card concurrently.

        A failed read is logged and replaced by an empty list; the same
        policy applies to both fields.
        """
        backend = self._backend
        comment_results = settle(backend.get_card_comments(card.id) for card in cards)
        history_results = settle(backend.get_card_revisions(card.id) for card in cards)
        comments_by_card, history_by_card = await settle([comment_results, history_results])

        data = {}
        for card, comments, history in zip(cards, comments_by_card, history_by_card):
            data[card.id] = (
                self._best_effort(card, "comments", comments, _comment),
                self._best_effort(card, "history", history, _revision),
            )
        return data

    @staticmethod
    def _best_effort(card: Card, field: str, outcome: Any, convert: Any) -> list:
        if isinstance(outcome, Exception):
            logger.warning("Could not read %s for card %s, exporting none: %s", field, card.id, outcome)
            return []
        return [convert(item) for item in outcome]

    @staticmethod
    def _export_column(
        column: Column,
        card_map: dict[int, Card],
        card_data: dict[int, tuple[list[ExportedComment], list[ExportedRevision]]],
    ) -> ExportedColumn:
        exported_cards: list[ExportedCard] = []
        for card_id in column.card_ids:
            card = card_map.get(card_id)
            if card is None:
                logger.debug("Column %s lists unknown card %s, skipping", column.id, card_id)
                continue
            comments, history = card_data.get(card.id, ([], []))
            exported_cards.append(
                ExportedCard(
                    id=str(card.id),
                    title=card.title,
                    description=card.description,
                    order=len(exported_cards),
                    assigned_user_id=(
                        str(card.assigned_user_id) if card.assigned_user_id is not None else None
                    ),
                    tags=[str(t) for t in card.tags],
                    due_date=_timestamp(card.due_date, f"card {card.id}", None),
                    created_at=_timestamp(card.created_at, f"card {card.id}"),
                    comments=comments,
                    history=history,
                )
            )
        return ExportedColumn(id=str(column.id), name=column.name, cards=exported_cards)
