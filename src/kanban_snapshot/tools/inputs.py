"""
Pydantic Input Models for Kanban Snapshot MCP Tools.

This module defines the input validation models used by the export and
import tools. Each model includes field constraints and descriptions.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from kanban_snapshot.constants import ImportMode


class ResponseFormat(str, Enum):
    """Output format for tool responses."""

    MARKDOWN = "markdown"
    JSON = "json"


class BaseMCPInput(BaseModel):
    """Base input model with common configuration."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        extra="forbid",
    )


# =============================================================================
# Export Input Models
# =============================================================================


class ProjectExportInput(BaseMCPInput):
    """Input for exporting a project snapshot."""

    project_id: int = Field(
        ...,
        description="Backend id of the project to export",
        ge=0,
    )
    project_name: Optional[str] = Field(
        default=None,
        description="Project name written into the document (e.g., 'Roadmap')",
        max_length=200,
    )
    save_to_file: bool = Field(
        default=False,
        description="Also write the document into the configured export directory",
    )
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="'markdown' for a summary, 'json' for the full document",
    )


# =============================================================================
# Import Input Models
# =============================================================================


class ProjectImportInput(BaseMCPInput):
    """Input for importing a project snapshot."""

    project_id: int = Field(
        ...,
        description="Backend id of the project to import into",
        ge=0,
    )
    acting_user_id: int = Field(
        ...,
        description="User performing the import; imported comments are attributed to them",
        ge=0,
    )
    mode: Optional[ImportMode] = Field(
        default=None,
        description=(
            "'replace' wipes the project's columns, tags and presets first; "
            "'merge' reuses same-named users, tags and columns. Defaults to the configured mode."
        ),
    )
    document: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Snapshot document as a JSON object",
    )
    file_path: Optional[str] = Field(
        default=None,
        description="Path of a snapshot file to read instead of passing the document inline",
        min_length=1,
    )
    response_format: ResponseFormat = Field(
        default=ResponseFormat.MARKDOWN,
        description="Output format for the import report",
    )

    @field_validator("mode", mode="before")
    @classmethod
    def normalize_mode(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @model_validator(mode="after")
    def require_one_source(self) -> ProjectImportInput:
        if (self.document is None) == (self.file_path is None):
            raise ValueError("Provide exactly one of 'document' or 'file_path'")
        return self
