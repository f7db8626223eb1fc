"""
Project snapshot importer.

Recreates a project from a snapshot document against a live backend.
The backend assigns fresh ids to everything, so each stage records
document id -> backend id in an IdMap that later stages resolve
references through. Stages run strictly in dependency order:

    schema check -> wipe (replace only) -> users -> tags -> columns
    -> cards -> comments -> filter presets -> final accounting

Nothing escapes ``import_document``: per-entity failures become report
entries, and fatal conditions end the run with a single error.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from operator import attrgetter
from typing import Any, Union

from pydantic import ValidationError

from kanban_snapshot.backend.protocol import KanbanBackend
from kanban_snapshot.constants import PIN_NOT_SET, SCHEMA_VERSION, EntityType, ImportMode
from kanban_snapshot.exceptions import DocumentError, ImportAbortedError
from kanban_snapshot.models.document import (
    ExportedCard,
    ExportedColumn,
    ExportedFilterPreset,
    ExportedTag,
    ExportedUser,
    KanbanExport,
    coerce_schema_version,
)
from kanban_snapshot.models.result import ImportResult
from kanban_snapshot.snapshot.fanout import settle
from kanban_snapshot.snapshot.idmap import IdMap, NameIndex
from kanban_snapshot.snapshot.timestamps import iso_to_nanos

logger = logging.getLogger(__name__)

DocumentInput = Union[KanbanExport, Mapping[str, Any]]


class ImportRun:
    """
    State of a single import invocation.

    Attributes:
        ids: Document id -> backend id, per entity type
        result: Report accumulated across every stage
    """

    def __init__(
        self,
        backend: KanbanBackend,
        project_id: int,
        acting_user_id: int,
        mode: ImportMode | str,
    ) -> None:
        self.backend = backend
        self.project_id = project_id
        self.acting_user_id = acting_user_id
        self.mode = mode
        self.ids = IdMap()
        self.result = ImportResult()

    @property
    def merging(self) -> bool:
        return self.mode is ImportMode.MERGE

    def _warn(self, message: str) -> None:
        logger.warning("Import into project %s: %s", self.project_id, message)
        self.result.add_warning(message)

    def _error(self, message: str) -> None:
        logger.error("Import into project %s: %s", self.project_id, message)
        self.result.add_error(message)

    # =========================================================================
    # Driver
    # =========================================================================

    async def execute(self, raw: DocumentInput) -> ImportResult:
        """Run every stage and return the finalized report."""
        try:
            try:
                self.mode = ImportMode(self.mode)
            except ValueError:
                raise DocumentError(
                    f"Unknown import mode {self.mode!r}; expected 'replace' or 'merge'."
                ) from None

            document = self._read_document(raw)
            logger.info(
                "Importing project %r into project %s (%s mode)",
                document.project.name,
                self.project_id,
                self.mode.value,
            )

            if self.mode is ImportMode.REPLACE:
                await self._wipe_project()

            project = document.project
            await self._import_users(document.users)
            await self._import_tags(project.tags)
            await self._import_columns(project.columns)
            await self._import_cards(project.columns)
            await self._import_comments(project.columns)
            await self._import_filter_presets(project.filter_presets)
            self._report_unassigned()
        except (DocumentError, ImportAbortedError) as e:
            self._error(str(e))
        except Exception as e:
            logger.exception("Unexpected failure importing into project %s", self.project_id)
            self._error(f"Unexpected import error: {e}")

        result = self.result.finalize()
        logger.debug("Id remap for project %s: %r", self.project_id, self.ids)
        logger.info(
            "Import into project %s finished: success=%s, %d created, %d error(s), %d warning(s)",
            self.project_id,
            result.success,
            result.counts.total,
            len(result.errors),
            len(result.warnings),
        )
        return result

    # =========================================================================
    # Stage 0: document and schema version
    # =========================================================================

    def _read_document(self, raw: DocumentInput) -> KanbanExport:
        if isinstance(raw, KanbanExport):
            self._check_schema_version(raw.schema_version)
            return raw

        if not isinstance(raw, Mapping):
            raise DocumentError("Import file must contain a JSON object.")

        self._check_schema_version(coerce_schema_version(raw.get("schemaVersion")))

        if raw.get("project") is None:
            raise DocumentError("Import file is missing the 'project' field.")

        try:
            return KanbanExport.model_validate(dict(raw))
        except ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise DocumentError(
                f"Import file is not a valid project snapshot: {location}: {first['msg']}"
            ) from e

    def _check_schema_version(self, version: int | None) -> None:
        if version is None or version < SCHEMA_VERSION:
            self._warn(
                f"schemaVersion is missing or older than {SCHEMA_VERSION}; "
                "attempting import with defaults."
            )
        elif version > SCHEMA_VERSION:
            self._warn(
                f"schemaVersion is {version} (newer than expected {SCHEMA_VERSION}); "
                "unknown fields will be ignored."
            )

    # =========================================================================
    # Stage 1: wipe (replace mode)
    # =========================================================================

    async def _wipe_project(self) -> None:
        backend, project_id, actor = self.backend, self.project_id, self.acting_user_id
        logger.info("Wiping columns, tags and presets of project %s", project_id)

        listings = await settle(
            [
                backend.get_columns(project_id),
                backend.get_project_tags(project_id),
                backend.get_filter_presets(project_id),
            ]
        )
        for outcome in listings:
            if isinstance(outcome, Exception):
                raise ImportAbortedError(f"Failed to wipe existing project data: {outcome}")
        columns, tags, presets = listings

        # Column deletion cascades to the column's cards
        outcomes = await settle(backend.delete_column(c.id, actor) for c in columns)
        for column, outcome in zip(columns, outcomes):
            if isinstance(outcome, Exception):
                self._warn(f'Could not delete column "{column.name}": {outcome}')

        outcomes = await settle(backend.delete_tag(t.id, actor) for t in tags)
        for tag, outcome in zip(tags, outcomes):
            if isinstance(outcome, Exception):
                self._warn(f'Could not delete tag "{tag.name}": {outcome}')

        outcomes = await settle(backend.delete_filter_preset(p.id, actor) for p in presets)
        for preset, outcome in zip(presets, outcomes):
            if isinstance(outcome, Exception):
                self._warn(f'Could not delete preset "{preset.name}": {outcome}')

    # =========================================================================
    # Stage 2: users (always deduplicated by name, in both modes)
    # =========================================================================

    async def _import_users(self, users: list[ExportedUser]) -> None:
        if not users:
            return
        logger.info("Importing %d user(s)", len(users))

        existing_users = NameIndex(self.backend.get_users, "users")
        await existing_users.refresh()

        for user in users:
            try:
                existing = existing_users.find(user.name)
                if existing is not None:
                    self._warn(f'User "{user.name}" already exists; skipped, using existing ID.')
                    self.ids.set(EntityType.USER, user.id, existing.id)
                    continue

                new_id = await self.backend.create_user(user.name, PIN_NOT_SET)
                self.ids.set(EntityType.USER, user.id, new_id)
                self.result.counts.users_imported += 1
                self._warn(
                    f'User "{user.name}" imported with PIN not set; '
                    "an admin must set their PIN before they can log in."
                )
                await existing_users.refresh()
            except Exception as e:
                self._error(f'Failed to import user "{user.name}": {e}')

    # =========================================================================
    # Stage 3: tags
    # =========================================================================

    async def _import_tags(self, tags: list[ExportedTag]) -> None:
        if not tags:
            return
        logger.info("Importing %d tag(s)", len(tags))

        existing_tags = NameIndex(
            lambda: self.backend.get_project_tags(self.project_id), "tags"
        )
        if self.merging:
            await existing_tags.refresh()

        for tag in tags:
            try:
                if self.merging:
                    existing = existing_tags.find(tag.name)
                    if existing is not None:
                        self._warn(f'Tag "{tag.name}" already exists; using existing.')
                        self.ids.set(EntityType.TAG, tag.id, existing.id)
                        continue

                new_id = await self.backend.create_tag(
                    self.project_id, tag.name, tag.color, self.acting_user_id
                )
                self.ids.set(EntityType.TAG, tag.id, new_id)
                self.result.counts.tags_imported += 1

                if self.merging:
                    await existing_tags.refresh()
            except Exception as e:
                self._error(f'Failed to import tag "{tag.name}": {e}')

    # =========================================================================
    # Stage 4: columns
    # =========================================================================

    async def _import_columns(self, columns: list[ExportedColumn]) -> None:
        if not columns:
            return
        logger.info("Importing %d column(s)", len(columns))

        existing_columns = NameIndex(
            lambda: self.backend.get_columns(self.project_id), "columns"
        )

        for column in columns:
            try:
                if self.merging:
                    await existing_columns.refresh()
                    existing = existing_columns.find(column.name)
                    if existing is not None:
                        self._warn(f'Column "{column.name}" already exists; using existing.')
                        self.ids.set(EntityType.COLUMN, column.id, existing.id)
                        continue

                new_id = await self.backend.create_column(
                    column.name, self.acting_user_id, self.project_id
                )
                self.ids.set(EntityType.COLUMN, column.id, new_id)
                self.result.counts.columns_imported += 1
            except Exception as e:
                self._error(f'Failed to import column "{column.name}": {e}')

    # =========================================================================
    # Stage 5: cards
    # =========================================================================

    async def _import_cards(self, columns: list[ExportedColumn]) -> None:
        for column in columns:
            target_column_id = self.ids.get(EntityType.COLUMN, column.id)

            # Stable: equal orders keep document sequence
            for card in sorted(column.cards, key=attrgetter("order")):
                if target_column_id is None:
                    self.result.quarantine_card(card.title)
                    continue

                try:
                    new_card_id = await self.backend.create_card(
                        card.title,
                        card.description,
                        target_column_id,
                        self.acting_user_id,
                        self.project_id,
                    )
                except Exception as e:
                    self._error(f'Failed to import card "{card.title}": {e}')
                    continue

                self.ids.set(EntityType.CARD, card.id, new_card_id)
                self.result.counts.cards_imported += 1
                await self._enrich_card(card, new_card_id)

    async def _enrich_card(self, card: ExportedCard, new_card_id: int) -> None:
        """Apply assignee, tags and due date. Failures here are warnings only."""
        backend, actor = self.backend, self.acting_user_id

        if card.assigned_user_id:
            user_id = self.ids.get(EntityType.USER, card.assigned_user_id)
            if user_id is None:
                self._warn(
                    f'Card "{card.title}": assigned user ID "{card.assigned_user_id}" '
                    "not found; left unassigned."
                )
            else:
                try:
                    await backend.assign_card(new_card_id, user_id, actor)
                except Exception as e:
                    self._warn(f'Could not assign card "{card.title}": {e}')

        if card.tags:
            # Unresolved tag references are dropped without a warning
            tag_ids = self.ids.resolve_many(EntityType.TAG, card.tags)
            if tag_ids:
                try:
                    await backend.update_card_tags(new_card_id, tag_ids, actor)
                except Exception as e:
                    self._warn(f'Could not apply tags to card "{card.title}": {e}')

        if card.due_date:
            try:
                due_date = iso_to_nanos(card.due_date)
            except ValueError:
                self._warn(
                    f'Card "{card.title}": invalid dueDate "{card.due_date}"; due date left unset.'
                )
            else:
                try:
                    await backend.update_card_due_date(new_card_id, due_date, actor)
                except Exception as e:
                    self._warn(f'Could not set due date on card "{card.title}": {e}')

    # =========================================================================
    # Stage 6: comments
    # =========================================================================

    async def _import_comments(self, columns: list[ExportedColumn]) -> None:
        counts = self.result.counts

        for column in columns:
            for card in column.cards:
                new_card_id = self.ids.get(EntityType.CARD, card.id)
                if new_card_id is None:
                    continue

                for comment in card.comments:
                    try:
                        await self.backend.add_comment(new_card_id, comment.text, self.acting_user_id)
                        counts.comments_imported += 1
                    except Exception as e:
                        self._error(f'Failed to import comment on card "{card.title}": {e}')

        if counts.comments_imported:
            self._warn(
                f"{counts.comments_imported} comment(s) were imported under the importing user "
                "(original authors cannot be restored)."
            )

    # =========================================================================
    # Stage 7: filter presets
    # =========================================================================

    async def _import_filter_presets(self, presets: list[ExportedFilterPreset]) -> None:
        if not presets:
            return
        logger.info("Importing %d filter preset(s)", len(presets))

        for preset in presets:
            try:
                await self.backend.save_filter_preset(
                    self.project_id,
                    self.acting_user_id,
                    preset.name,
                    self.ids.get(EntityType.USER, preset.assignee_id),
                    self.ids.resolve_many(EntityType.TAG, preset.tag_ids),
                    preset.unassigned_only,
                    preset.text_search,
                    preset.date_field,
                    preset.date_from,
                    preset.date_to,
                )
                self.result.counts.filter_presets_imported += 1
            except Exception as e:
                self._error(f'Failed to import filter preset "{preset.name}": {e}')

    # =========================================================================
    # Stage 8: final accounting
    # =========================================================================

    def _report_unassigned(self) -> None:
        count = self.result.unassigned_card_count
        if count:
            self._warn(
                f"{count} card(s) could not be placed because their column reference was not "
                "found. Fix the column in your JSON and re-import, or create them manually."
            )


class SnapshotImporter:
    """
    Imports snapshot documents into a live backend.

    Usage:
        importer = SnapshotImporter(backend)
        result = await importer.import_document(document, 7, 1, ImportMode.MERGE)
        if not result.success:
            ...
    """

    def __init__(self, backend: KanbanBackend) -> None:
        self._backend = backend

    async def import_document(
        self,
        document: DocumentInput,
        project_id: int,
        acting_user_id: int,
        mode: ImportMode | str = ImportMode.MERGE,
    ) -> ImportResult:
        """
        Import a document into ``project_id``.

        Args:
            document: Parsed JSON mapping or a KanbanExport
            project_id: Target project
            acting_user_id: User recorded as actor and as author of every comment
            mode: 'replace' or 'merge'

        Returns:
            The import report. Never raises for bad input or backend failures.
        """
        run = ImportRun(self._backend, project_id, acting_user_id, mode)
        return await run.execute(document)
