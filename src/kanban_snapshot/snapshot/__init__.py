"""
Project snapshot engine.

SnapshotExporter turns a live project into a KanbanExport document;
SnapshotImporter rebuilds a project from one.
"""

from kanban_snapshot.snapshot.exporter import SnapshotExporter
from kanban_snapshot.snapshot.idmap import IdMap, NameIndex
from kanban_snapshot.snapshot.importer import ImportRun, SnapshotImporter
from kanban_snapshot.snapshot.storage import (
    dump_document,
    load_document,
    parse_document,
    write_document,
)

__all__ = [
    "SnapshotExporter",
    "SnapshotImporter",
    "ImportRun",
    "IdMap",
    "NameIndex",
    "dump_document",
    "load_document",
    "parse_document",
    "write_document",
]
