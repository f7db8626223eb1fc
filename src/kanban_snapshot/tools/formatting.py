"""
Response formatting for Kanban Snapshot MCP tools.

Renders import reports and export summaries as Markdown for people or
JSON for programs.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from kanban_snapshot.models.document import KanbanExport
from kanban_snapshot.models.result import ImportResult

_COUNT_LABELS = (
    ("users_imported", "Users"),
    ("tags_imported", "Tags"),
    ("columns_imported", "Columns"),
    ("cards_imported", "Cards"),
    ("comments_imported", "Comments"),
    ("filter_presets_imported", "Filter presets"),
)


def success_message(message: str) -> str:
    return f"✅ {message}"


def error_message(message: str, hint: Optional[str] = None) -> str:
    text = f"❌ **Error**: {message}"
    if hint:
        text += f"\n\n💡 {hint}"
    return text


# =============================================================================
# Import Reports
# =============================================================================


def format_import_result_markdown(result: ImportResult) -> str:
    """Full import report. Warnings and unassigned cards are always listed."""
    if result.success:
        heading = "# Import Completed"
    else:
        heading = "# Import Completed With Errors"

    lines = [heading, "", "## Created", ""]
    for attr, label in _COUNT_LABELS:
        lines.append(f"- **{label}**: {getattr(result.counts, attr)}")

    if result.errors:
        lines.extend(["", f"## Errors ({len(result.errors)})", ""])
        lines.extend(f"- {e}" for e in result.errors)

    if result.unassigned_card_count:
        lines.extend(
            [
                "",
                f"## Unplaced Cards ({result.unassigned_card_count})",
                "",
                "These cards were not created because their column could not be resolved:",
                "",
            ]
        )
        lines.extend(f"- {title}" for title in result.unassigned_card_titles)

    if result.warnings:
        lines.extend(["", f"## Warnings ({len(result.warnings)})", ""])
        lines.extend(f"- {w}" for w in result.warnings)

    return "\n".join(lines)


def format_import_result_json(result: ImportResult) -> str:
    return json.dumps(result.to_dict(), indent=2)


# =============================================================================
# Export Summaries
# =============================================================================


def export_summary(document: KanbanExport, saved_to: Optional[Path] = None) -> dict[str, Any]:
    project = document.project
    summary: dict[str, Any] = {
        "project_id": project.id,
        "project_name": project.name,
        "schema_version": document.schema_version,
        "exported_at": document.exported_at,
        "column_count": len(project.columns),
        "card_count": project.card_count,
        "tag_count": len(project.tags),
        "user_count": len(document.users),
        "filter_preset_count": len(project.filter_presets),
        "comment_count": sum(len(card.comments) for col in project.columns for card in col.cards),
    }
    if saved_to is not None:
        summary["saved_to"] = str(saved_to)
    return summary


def format_export_markdown(document: KanbanExport, saved_to: Optional[Path] = None) -> str:
    summary = export_summary(document, saved_to)
    lines = [
        f"# Exported: {summary['project_name']}",
        "",
        f"- **Exported at**: {summary['exported_at']}",
        f"- **Columns**: {summary['column_count']}",
        f"- **Cards**: {summary['card_count']}",
        f"- **Comments**: {summary['comment_count']}",
        f"- **Tags**: {summary['tag_count']}",
        f"- **Users**: {summary['user_count']}",
        f"- **Filter presets**: {summary['filter_preset_count']}",
    ]
    if document.project.columns:
        lines.extend(["", "## Columns", ""])
        for column in document.project.columns:
            lines.append(f"- {column.name} ({len(column.cards)} cards)")
    if saved_to is not None:
        lines.extend(["", success_message(f"Saved to `{saved_to}`")])
    return "\n".join(lines)
