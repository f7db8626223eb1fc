"""
Import report models.

One ImportResult accumulates everything that happens during an import
run. It is always returned, never raised; callers are expected to look at
warnings and the unassigned card list, not just ``success``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from kanban_snapshot.constants import UNTITLED_PLACEHOLDER


class ReportModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )


class ImportCounts(ReportModel):
    """Per-entity tallies of successful creations."""

    users_imported: int = 0
    columns_imported: int = 0
    cards_imported: int = 0
    tags_imported: int = 0
    comments_imported: int = 0
    filter_presets_imported: int = 0

    @property
    def total(self) -> int:
        return (
            self.users_imported
            + self.columns_imported
            + self.cards_imported
            + self.tags_imported
            + self.comments_imported
            + self.filter_presets_imported
        )


class ImportResult(ReportModel):
    """
    Outcome of an import run.

    Attributes:
        success: True when no errors were recorded (warnings do not count)
        errors: Entities that were not created, or a single fatal message
        warnings: Non-fatal anomalies (reuse, unresolved references, notices)
        unassigned_card_count: Cards skipped because their column did not resolve
        unassigned_card_titles: Titles of those cards, in import order
        counts: Successful creations per entity type
    """

    success: bool = False
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    unassigned_card_count: int = 0
    unassigned_card_titles: list[str] = Field(default_factory=list)
    counts: ImportCounts = Field(default_factory=ImportCounts)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def quarantine_card(self, title: str | None) -> None:
        """Record a card that could not be placed in any column."""
        self.unassigned_card_count += 1
        self.unassigned_card_titles.append(title or UNTITLED_PLACEHOLDER)

    def finalize(self) -> ImportResult:
        self.success = not self.errors
        return self

    def to_dict(self) -> dict:
        """camelCase dictionary form, matching the document conventions."""
        return self.model_dump(by_alias=True)
