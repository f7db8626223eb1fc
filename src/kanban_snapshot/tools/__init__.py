"""
Kanban Snapshot MCP Tools Package.

Input models and response formatting for the export and import tools.
"""

from kanban_snapshot.tools.inputs import (
    ResponseFormat,
    ProjectExportInput,
    ProjectImportInput,
)

__all__ = [
    "ResponseFormat",
    "ProjectExportInput",
    "ProjectImportInput",
]
