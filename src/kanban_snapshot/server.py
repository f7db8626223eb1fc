#!/usr/bin/env python3
"""
Kanban Snapshot MCP Server.

This server exposes project snapshot export and import as MCP tools,
backed by the kanban board's REST API.

Features:
    - Export a project (columns, cards, tags, comments, history,
      filter presets, users) into a portable JSON document
    - Import a document into a project in 'replace' or 'merge' mode,
      with a full report of errors, warnings and unplaced cards

Environment Variables:
    KANBAN_BACKEND_URL
    KANBAN_API_TOKEN
    KANBAN_EXPORT_DIR
    KANBAN_DEFAULT_IMPORT_MODE
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from mcp.server.fastmcp import FastMCP, Context

from kanban_snapshot.backend.http import HttpKanbanBackend
from kanban_snapshot.backend.protocol import KanbanBackend
from kanban_snapshot.exceptions import KanbanConfigurationError
from kanban_snapshot.settings import get_settings
from kanban_snapshot.snapshot.exporter import SnapshotExporter
from kanban_snapshot.snapshot.importer import SnapshotImporter
from kanban_snapshot.snapshot.storage import load_document, write_document
from kanban_snapshot.tools.formatting import (
    error_message,
    export_summary,
    format_export_markdown,
    format_import_result_json,
    format_import_result_markdown,
)
from kanban_snapshot.tools.inputs import (
    ProjectExportInput,
    ProjectImportInput,
    ResponseFormat,
)

# Configure logging
logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Management
# =============================================================================


@asynccontextmanager
async def lifespan(mcp: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """
    Manage the backend client lifecycle.

    Opens the HTTP backend on startup and closes it on shutdown. A bad
    backend setting does not stop the server; every tool call reports it.
    """
    logger.info("Initializing Kanban Snapshot MCP Server...")

    try:
        backend = HttpKanbanBackend.from_settings()
    except KanbanConfigurationError as e:
        logger.error("Kanban backend not configured: %s", e)
        yield {"backend": None, "startup_error": e}
        return

    try:
        yield {"backend": backend}
    finally:
        await backend.close()
        logger.info("Kanban backend client closed")


# Initialize FastMCP server
mcp = FastMCP(
    "kanban_snapshot",
    lifespan=lifespan,
)


def get_backend(ctx: Context) -> KanbanBackend:
    """Get the kanban backend from context."""
    state = ctx.request_context.lifespan_context
    backend = state.get("backend")
    if backend is None:
        raise state.get("startup_error") or KanbanConfigurationError(
            "Kanban backend is not initialized"
        )
    return backend


# =============================================================================
# Error Handling
# =============================================================================


def handle_error(e: Exception, operation: str) -> str:
    """Handle exceptions and return user-friendly error messages."""
    logger.exception("Error in %s: %s", operation, e)

    error_type = type(e).__name__

    if "NotFound" in error_type:
        return error_message(
            f"Resource not found: {e}",
            "Verify the project ID is correct and the project exists.",
        )
    elif "Document" in error_type:
        return error_message(
            f"Unusable snapshot document: {e}",
            "Check that the file is a project export in JSON format.",
        )
    elif "Export" in error_type or "Backend" in error_type:
        return error_message(
            f"Backend request failed: {e}",
            "Check KANBAN_BACKEND_URL and KANBAN_API_TOKEN.",
        )
    elif "Configuration" in error_type:
        return error_message(
            f"Configuration error: {e}",
            "Check your environment variables and settings.",
        )
    else:
        return error_message(f"Unexpected error: {e}")


# =============================================================================
# Snapshot Tools
# =============================================================================


@mcp.tool(
    name="kanban_export_project",
    annotations={
        "title": "Export Project Snapshot",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True,
    },
)
async def kanban_export_project(params: ProjectExportInput, ctx: Context) -> str:
    """
    Export a project as a portable snapshot document.

    Reads columns, cards, tags, comments, card history, project activity,
    filter presets and users, and assembles them into a versioned JSON
    document that kanban_import_project can restore.

    Args:
        params: Export parameters including:
            - project_id (int): Project to export (required)
            - project_name (str): Name written into the document
            - save_to_file (bool): Also write the document to the export directory

    Returns:
        Markdown summary, or the full document when response_format is 'json'.
    """
    try:
        backend = get_backend(ctx)
        document = await SnapshotExporter(backend).export_project(
            params.project_id, params.project_name or ""
        )

        saved_to = None
        if params.save_to_file:
            saved_to = write_document(document, get_settings().export_dir)

        if params.response_format == ResponseFormat.MARKDOWN:
            return format_export_markdown(document, saved_to)
        else:
            payload = document.model_dump(by_alias=True, mode="json")
            if saved_to is not None:
                return json.dumps(
                    {"summary": export_summary(document, saved_to), "document": payload},
                    indent=2,
                )
            return json.dumps(payload, indent=2)

    except Exception as e:
        return handle_error(e, "export_project")


@mcp.tool(
    name="kanban_import_project",
    annotations={
        "title": "Import Project Snapshot",
        "readOnlyHint": False,
        "destructiveHint": True,
        "idempotentHint": False,
        "openWorldHint": True,
    },
)
async def kanban_import_project(params: ProjectImportInput, ctx: Context) -> str:
    """
    Import a snapshot document into a project.

    In 'replace' mode the project's columns (with their cards), tags and
    filter presets are deleted first. In 'merge' mode users, tags and
    columns with matching names are reused; cards, comments and presets
    are always added. Users are matched by name in both modes.

    Args:
        params: Import parameters including:
            - project_id (int): Target project (required)
            - acting_user_id (int): Importing user (required)
            - mode (str): 'replace' or 'merge'
            - document (object) or file_path (str): The snapshot to import

    Returns:
        Import report listing counts, errors, warnings and any cards that
        could not be placed. Always review warnings, not only the status.
    """
    try:
        backend = get_backend(ctx)
        document = params.document if params.document is not None else load_document(params.file_path)
        mode = params.mode or get_settings().default_import_mode

        result = await SnapshotImporter(backend).import_document(
            document,
            params.project_id,
            params.acting_user_id,
            mode,
        )

        if params.response_format == ResponseFormat.MARKDOWN:
            return format_import_result_markdown(result)
        else:
            return format_import_result_json(result)

    except Exception as e:
        return handle_error(e, "import_project")


# =============================================================================
# Main Entry Point
# =============================================================================


def main():
    """Main entry point for the Kanban Snapshot MCP server."""
    mcp.run()


if __name__ == "__main__":
    main()
