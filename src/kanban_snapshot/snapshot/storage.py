"""
Snapshot document storage.

Writes exported documents to disk and reads them back as raw mappings
for the importer. The importer does its own tolerant validation, so
loading only checks that the file holds a JSON object.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date
from pathlib import Path
from typing import Any

from kanban_snapshot.exceptions import DocumentError
from kanban_snapshot.models.document import KanbanExport

logger = logging.getLogger(__name__)


def export_filename(project_name: str, on: date | None = None) -> str:
    """``<name-slug>-export-<YYYY-MM-DD>.json`` with every non-alphanumeric character as '-'."""
    slug = re.sub(r"[^a-z0-9]", "-", project_name, flags=re.IGNORECASE) or "project"
    return f"{slug}-export-{(on or date.today()).isoformat()}.json"


def dump_document(document: KanbanExport) -> str:
    """Pretty-printed wire form of a document."""
    return json.dumps(document.model_dump(by_alias=True, mode="json"), indent=2)


def write_document(document: KanbanExport, directory: Path | str) -> Path:
    """
    Write a document into ``directory``.

    Returns:
        Path of the written file
    """
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / export_filename(document.project.name)
    path.write_text(dump_document(document), encoding="utf-8")
    logger.info("Wrote snapshot of project %r to %s", document.project.name, path)
    return path


def parse_document(text: str) -> dict[str, Any]:
    """
    Parse document text into a raw mapping.

    Raises:
        DocumentError: If the text is not JSON or its root is not an object
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentError(f"Invalid JSON file; could not parse: {e}") from e
    if not isinstance(data, dict):
        raise DocumentError("Import file must contain a JSON object.")
    return data


def load_document(path: Path | str) -> dict[str, Any]:
    """
    Read a document file into a raw mapping.

    Raises:
        DocumentError: If the file cannot be read or does not hold a JSON object
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentError(f"Could not read import file {path}: {e}") from e
    return parse_document(text)
