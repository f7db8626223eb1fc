"""
Kanban Snapshot Constants.

Shared values for the document format, import modes and the
backend timestamp representation.
"""

from __future__ import annotations

from enum import Enum

# Document format version written by the exporter and expected by the importer
SCHEMA_VERSION = 1

# Backend timestamps are integer nanoseconds; documents carry millisecond ISO strings
NANOS_PER_MILLI = 1_000_000

# Marker stored instead of a credential hash for users created by an import
PIN_NOT_SET = "PIN_NOT_SET"

DEFAULT_TAG_COLOR = "#94a3b8"
DEFAULT_CARD_TITLE = "Untitled Card"
DEFAULT_COLUMN_NAME = "Unnamed Column"
DEFAULT_TAG_NAME = "Unnamed Tag"
DEFAULT_PRESET_NAME = "Imported Preset"
DEFAULT_USER_NAME = "Unnamed User"
UNTITLED_PLACEHOLDER = "(untitled)"


class ImportMode(str, Enum):
    """Write strategy for an import run."""

    REPLACE = "replace"
    MERGE = "merge"


class EntityType(str, Enum):
    """Entity types whose ids are remapped during an import."""

    USER = "user"
    TAG = "tag"
    COLUMN = "column"
    CARD = "card"
