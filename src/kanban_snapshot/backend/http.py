"""
HTTP Kanban Backend.

This module provides HttpKanbanBackend, an implementation of the
KanbanBackend protocol over the board's JSON REST API.

Usage:
    async with HttpKanbanBackend("https://board.example.com/api", token="...") as backend:
        columns = await backend.get_columns(1)
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Optional, TypeVar

import httpx

from kanban_snapshot.exceptions import (
    KanbanBackendError,
    KanbanConfigurationError,
    KanbanNotFoundError,
)
from kanban_snapshot.models.backend import (
    Card,
    Column,
    Comment,
    FilterPreset,
    Revision,
    Tag,
    User,
)
from kanban_snapshot.settings import Settings, get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="HttpKanbanBackend")


class HttpKanbanBackend:
    """
    Async REST client for the kanban backend.

    Creation endpoints answer ``{"id": <int>}``; list endpoints answer a
    JSON array of camelCase objects.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> HttpKanbanBackend:
        """
        Build a backend from environment settings.

        Raises:
            KanbanConfigurationError: If the backend URL is not an http(s) URL
        """
        settings = settings or get_settings()
        if not settings.backend_url.startswith(("http://", "https://")):
            raise KanbanConfigurationError(
                f"KANBAN_BACKEND_URL must be an http(s) URL, got {settings.backend_url!r}",
                {"backend_url": settings.backend_url},
            )
        return cls(
            settings.backend_url,
            token=settings.api_token,
            timeout=settings.timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self: T) -> T:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    # =========================================================================
    # Transport
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            logger.error("Backend request %s %s failed: %s", method, path, e)
            raise KanbanBackendError(
                f"{operation} failed: {e}",
                operation=operation,
            ) from e

        if response.status_code == 404:
            raise KanbanNotFoundError(
                f"{operation}: resource not found ({path})",
                operation=operation,
                status_code=404,
            )
        if response.is_error:
            raise KanbanBackendError(
                f"{operation} failed: HTTP {response.status_code}: {response.text[:500]}",
                operation=operation,
                status_code=response.status_code,
            )

        if not response.content:
            return None
        return response.json()

    async def _create(self, path: str, operation: str, body: dict[str, Any]) -> int:
        data = await self._request("POST", path, operation, json=body)
        try:
            return int(data["id"])
        except (TypeError, KeyError, ValueError) as e:
            raise KanbanBackendError(
                f"{operation}: response did not contain a new id",
                operation=operation,
            ) from e

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_columns(self, project_id: int) -> list[Column]:
        data = await self._request("GET", f"/projects/{project_id}/columns", "get_columns")
        return [Column.model_validate(c) for c in data or []]

    async def get_cards(self, project_id: int) -> list[Card]:
        data = await self._request("GET", f"/projects/{project_id}/cards", "get_cards")
        return [Card.model_validate(c) for c in data or []]

    async def get_users(self) -> list[User]:
        data = await self._request("GET", "/users", "get_users")
        return [User.model_validate(u) for u in data or []]

    async def get_project_tags(self, project_id: int) -> list[Tag]:
        data = await self._request("GET", f"/projects/{project_id}/tags", "get_project_tags")
        return [Tag.model_validate(t) for t in data or []]

    async def get_revisions(self, project_id: int) -> list[Revision]:
        data = await self._request("GET", f"/projects/{project_id}/revisions", "get_revisions")
        return [Revision.model_validate(r) for r in data or []]

    async def get_filter_presets(self, project_id: int) -> list[FilterPreset]:
        data = await self._request(
            "GET", f"/projects/{project_id}/filter-presets", "get_filter_presets"
        )
        return [FilterPreset.model_validate(p) for p in data or []]

    async def get_card_comments(self, card_id: int) -> list[Comment]:
        data = await self._request("GET", f"/cards/{card_id}/comments", "get_card_comments")
        return [Comment.model_validate(c) for c in data or []]

    async def get_card_revisions(self, card_id: int) -> list[Revision]:
        data = await self._request("GET", f"/cards/{card_id}/revisions", "get_card_revisions")
        return [Revision.model_validate(r) for r in data or []]

    # =========================================================================
    # Creation
    # =========================================================================

    async def create_user(self, name: str, pin_hash: str) -> int:
        return await self._create("/users", "create_user", {"name": name, "pinHash": pin_hash})

    async def create_tag(self, project_id: int, name: str, color: str, actor_user_id: int) -> int:
        return await self._create(
            f"/projects/{project_id}/tags",
            "create_tag",
            {"name": name, "color": color, "actorUserId": actor_user_id},
        )

    async def create_column(self, name: str, actor_user_id: int, project_id: int) -> int:
        return await self._create(
            f"/projects/{project_id}/columns",
            "create_column",
            {"name": name, "actorUserId": actor_user_id},
        )

    async def create_card(
        self,
        title: str,
        description: Optional[str],
        column_id: int,
        actor_user_id: int,
        project_id: int,
    ) -> int:
        return await self._create(
            f"/projects/{project_id}/cards",
            "create_card",
            {
                "title": title,
                "description": description,
                "columnId": column_id,
                "actorUserId": actor_user_id,
            },
        )

    async def add_comment(self, card_id: int, text: str, actor_user_id: int) -> int:
        return await self._create(
            f"/cards/{card_id}/comments",
            "add_comment",
            {"text": text, "actorUserId": actor_user_id},
        )

    async def save_filter_preset(
        self,
        project_id: int,
        actor_user_id: int,
        name: str,
        assignee_id: Optional[int],
        tag_ids: list[int],
        unassigned_only: bool,
        text_search: str,
        date_field: Optional[str],
        date_from: str,
        date_to: str,
    ) -> int:
        return await self._create(
            f"/projects/{project_id}/filter-presets",
            "save_filter_preset",
            {
                "actorUserId": actor_user_id,
                "name": name,
                "assigneeId": assignee_id,
                "tagIds": tag_ids,
                "unassignedOnly": unassigned_only,
                "textSearch": text_search,
                "dateField": date_field,
                "dateFrom": date_from,
                "dateTo": date_to,
            },
        )

    # =========================================================================
    # Card updates
    # =========================================================================

    async def assign_card(self, card_id: int, user_id: Optional[int], actor_user_id: int) -> None:
        await self._request(
            "PUT",
            f"/cards/{card_id}/assignee",
            "assign_card",
            json={"userId": user_id, "actorUserId": actor_user_id},
        )

    async def update_card_tags(self, card_id: int, tag_ids: list[int], actor_user_id: int) -> None:
        await self._request(
            "PUT",
            f"/cards/{card_id}/tags",
            "update_card_tags",
            json={"tagIds": tag_ids, "actorUserId": actor_user_id},
        )

    async def update_card_due_date(
        self, card_id: int, due_date: Optional[int], actor_user_id: int
    ) -> None:
        await self._request(
            "PUT",
            f"/cards/{card_id}/due-date",
            "update_card_due_date",
            json={"dueDate": due_date, "actorUserId": actor_user_id},
        )

    # =========================================================================
    # Deletion
    # =========================================================================

    async def delete_column(self, column_id: int, actor_user_id: int) -> None:
        await self._request(
            "DELETE",
            f"/columns/{column_id}",
            "delete_column",
            params={"actorUserId": actor_user_id},
        )

    async def delete_tag(self, tag_id: int, actor_user_id: int) -> None:
        await self._request(
            "DELETE", f"/tags/{tag_id}", "delete_tag", params={"actorUserId": actor_user_id}
        )

    async def delete_filter_preset(self, preset_id: int, actor_user_id: int) -> None:
        await self._request(
            "DELETE",
            f"/filter-presets/{preset_id}",
            "delete_filter_preset",
            params={"actorUserId": actor_user_id},
        )
